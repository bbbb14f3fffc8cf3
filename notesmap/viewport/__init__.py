"""
Viewport Module
===============

Screen <-> world transform math and the pointer/wheel gesture controller.
"""

from notesmap.viewport.gestures import InteractionController
from notesmap.viewport.transform import ZOOM_MAX, ZOOM_MIN, screen_to_world, world_to_screen

__all__ = ['InteractionController', 'ZOOM_MAX', 'ZOOM_MIN', 'screen_to_world', 'world_to_screen']
