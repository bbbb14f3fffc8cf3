"""
Graph Module
============

Immutable graph records (notesmap.graph.models) and the store that applies
edits to them (notesmap.graph.store).
"""

from notesmap.graph.models import Edge, GraphState, Node, Viewport, default_state

__all__ = ['Edge', 'GraphState', 'Node', 'Viewport', 'default_state']
