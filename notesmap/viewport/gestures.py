"""
Canvas Gestures
===============

Pointer, wheel and keyboard-zoom handling on top of the pure transform math.

InteractionController keeps only the in-flight gesture (pan or node drag).
The viewport itself lives in GraphState and every handler returns a new
state, so the caller decides where it goes (normally GraphStore.replace via
the editor).

Gestures:
    - pointer down on empty canvas -> pan (translation follows the pointer)
    - pointer down on a node       -> drag (offset captured once, node selected)
    - pointer up / leave           -> ends either gesture
    - wheel                        -> zoom toward cursor, clamped
"""

from dataclasses import dataclass, replace
from typing import Optional

from notesmap.graph.models import CANVAS_CENTER, GraphState, with_node
from notesmap.viewport.transform import (
    DEFAULT_GRID,
    ZOOM_IN_STEP,
    ZOOM_OUT_STEP,
    Point,
    center_viewport_on,
    reset_zoom_at,
    screen_to_world,
    snap_to_grid,
    wheel_factor,
    zoom_at_cursor,
)

PAN = "pan"
DRAG = "drag"


@dataclass(frozen=True)
class Gesture:
    """Gesture captured at pointer-down."""
    mode: str
    start_x: float
    start_y: float
    origin_x: float = 0.0         # pan: viewport translation at start
    origin_y: float = 0.0
    node_id: Optional[str] = None  # drag: node being moved
    offset_x: float = 0.0         # drag: node world pos - world pos under pointer
    offset_y: float = 0.0


class InteractionController:
    """Turns pointer and wheel input into new GraphStates."""

    def __init__(self, grid: float = DEFAULT_GRID, center: Point = CANVAS_CENTER):
        self.grid = grid
        self.center = center
        self.gesture: Optional[Gesture] = None

    @property
    def is_panning(self) -> bool:
        return self.gesture is not None and self.gesture.mode == PAN

    @property
    def dragging_id(self) -> Optional[str]:
        if self.gesture is not None and self.gesture.mode == DRAG:
            return self.gesture.node_id
        return None

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------

    def pointer_down(self, state: GraphState, sx: float, sy: float,
                     node_id: Optional[str] = None) -> GraphState:
        node = state.get_node(node_id)
        if node is None:
            vp = state.viewport
            self.gesture = Gesture(PAN, sx, sy, origin_x=vp.x, origin_y=vp.y)
            return state

        wx, wy = screen_to_world(state.viewport, sx, sy)
        self.gesture = Gesture(
            DRAG, sx, sy,
            node_id=node.id,
            offset_x=node.x - wx,
            offset_y=node.y - wy,
        )
        if state.selected_id == node.id:
            return state
        return replace(state, selected_id=node.id)

    def pointer_move(self, state: GraphState, sx: float, sy: float) -> GraphState:
        g = self.gesture
        if g is None:
            return state

        if g.mode == DRAG:
            wx, wy = screen_to_world(state.viewport, sx, sy)
            x = snap_to_grid(wx + g.offset_x, self.grid)
            y = snap_to_grid(wy + g.offset_y, self.grid)
            return with_node(state, g.node_id, x=x, y=y)

        dx = sx - g.start_x
        dy = sy - g.start_y
        return replace(state, viewport=replace(state.viewport, x=g.origin_x + dx, y=g.origin_y + dy))

    def pointer_up(self) -> None:
        self.gesture = None

    # Leaving the canvas mid-gesture ends it the same way.
    pointer_leave = pointer_up

    # ------------------------------------------------------------------
    # Zoom
    # ------------------------------------------------------------------

    def wheel(self, state: GraphState, sx: float, sy: float, delta_y: float) -> GraphState:
        factor = wheel_factor(delta_y)
        if factor == 1.0:
            return state
        return replace(state, viewport=zoom_at_cursor(state.viewport, sx, sy, factor))

    def zoom_in(self, state: GraphState) -> GraphState:
        cx, cy = self.center
        return replace(state, viewport=zoom_at_cursor(state.viewport, cx, cy, ZOOM_IN_STEP))

    def zoom_out(self, state: GraphState) -> GraphState:
        cx, cy = self.center
        return replace(state, viewport=zoom_at_cursor(state.viewport, cx, cy, ZOOM_OUT_STEP))

    def reset_zoom(self, state: GraphState) -> GraphState:
        cx, cy = self.center
        return replace(state, viewport=reset_zoom_at(state.viewport, cx, cy))

    # ------------------------------------------------------------------
    # Centering
    # ------------------------------------------------------------------

    def center_on(self, state: GraphState, node_id: Optional[str]) -> GraphState:
        """Bring a node to the canvas center and select it."""
        node = state.get_node(node_id)
        if node is None:
            return state
        viewport = center_viewport_on(state.viewport, node.x, node.y, self.center)
        return replace(state, viewport=viewport, selected_id=node.id)
