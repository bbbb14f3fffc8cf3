"""
Notes Map
=========

Single-user mind-map notes canvas for stock analysis: a graph of titled
note bubbles around a root, a pan/zoom viewport, automatic layouts, and
local persistence that expires after 24 hours.

Usage:
    from notesmap.editor import build_editor

    editor = build_editor()
    editor.mount(seed="AAPL")
"""

__version__ = "1.0.0"
