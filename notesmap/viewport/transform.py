"""
Viewport Transform
==================

Pure screen <-> world math for the canvas. No event handling here; see
notesmap.viewport.gestures for the pointer/wheel glue.

    screen = world * zoom + translation
    world  = (screen - translation) / zoom
"""

from dataclasses import replace
from typing import Tuple

from notesmap.graph.models import CANVAS_CENTER, Viewport

ZOOM_MIN = 0.65
ZOOM_MAX = 1.8
ZOOM_IN_STEP = 1.06
ZOOM_OUT_STEP = 0.94
DEFAULT_GRID = 10.0

Point = Tuple[float, float]
Rect = Tuple[float, float, float, float]   # (left, top, right, bottom)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_zoom(zoom: float) -> float:
    return clamp(zoom, ZOOM_MIN, ZOOM_MAX)


def world_to_screen(viewport: Viewport, wx: float, wy: float) -> Point:
    return (wx * viewport.zoom + viewport.x, wy * viewport.zoom + viewport.y)


def screen_to_world(viewport: Viewport, sx: float, sy: float) -> Point:
    return ((sx - viewport.x) / viewport.zoom, (sy - viewport.y) / viewport.zoom)


def wheel_factor(delta_y: float) -> float:
    """Zoom factor for a wheel event: scrolling up (negative delta) zooms in."""
    if delta_y < 0:
        return ZOOM_IN_STEP
    if delta_y > 0:
        return ZOOM_OUT_STEP
    return 1.0


def zoom_at_cursor(viewport: Viewport, sx: float, sy: float, factor: float) -> Viewport:
    """Scale by factor (clamped) keeping the world point under (sx, sy) fixed."""
    zoom = clamp_zoom(viewport.zoom * factor)
    wx, wy = screen_to_world(viewport, sx, sy)
    return Viewport(x=sx - wx * zoom, y=sy - wy * zoom, zoom=zoom)


def reset_zoom_at(viewport: Viewport, sx: float, sy: float) -> Viewport:
    """Back to 100% around (sx, sy)."""
    return zoom_at_cursor(viewport, sx, sy, 1.0 / viewport.zoom)


def snap_to_grid(value: float, grid: float = DEFAULT_GRID) -> float:
    if grid <= 0:
        return value
    return round(value / grid) * grid


def center_viewport_on(viewport: Viewport, wx: float, wy: float, center: Point = CANVAS_CENTER) -> Viewport:
    """Translation that puts world point (wx, wy) at the canvas center, zoom kept."""
    cx, cy = center
    return replace(viewport, x=cx - wx * viewport.zoom, y=cy - wy * viewport.zoom)


def visible_world_rect(viewport: Viewport, width: float, height: float) -> Rect:
    """World-space rectangle covered by a width x height canvas."""
    left, top = screen_to_world(viewport, 0.0, 0.0)
    right, bottom = screen_to_world(viewport, width, height)
    return (left, top, right, bottom)
