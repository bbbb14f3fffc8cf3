"""
Minimap Projection
==================

Scales every node position and the visible canvas area into a small fixed
overview box. Read-only: nothing here writes back to the graph or viewport.
"""

from dataclasses import dataclass
from typing import Tuple

from notesmap.graph.models import GraphState
from notesmap.viewport.transform import clamp, visible_world_rect

MINIMAP_WIDTH = 140.0
MINIMAP_HEIGHT = 110.0
MINIMAP_PADDING = 80.0


@dataclass(frozen=True)
class MinimapPoint:
    node_id: str
    x: float
    y: float
    selected: bool


@dataclass(frozen=True)
class MinimapRect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class MinimapView:
    width: float
    height: float
    bounds: Tuple[float, float, float, float]   # world (left, top, right, bottom)
    points: Tuple[MinimapPoint, ...]
    viewport: MinimapRect


def project_minimap(
    state: GraphState,
    canvas_width: float,
    canvas_height: float,
    *,
    width: float = MINIMAP_WIDTH,
    height: float = MINIMAP_HEIGHT,
    padding: float = MINIMAP_PADDING,
) -> MinimapView:
    """Project nodes and the current viewport rectangle into the overview box."""
    xs = [n.x for n in state.nodes] or [0.0]
    ys = [n.y for n in state.nodes] or [0.0]
    left, right = min(xs) - padding, max(xs) + padding
    top, bottom = min(ys) - padding, max(ys) + padding

    # Independent axis scales; the box is always at least 2 * padding wide.
    scale_x = width / max(right - left, 1e-9)
    scale_y = height / max(bottom - top, 1e-9)

    def project(wx: float, wy: float) -> Tuple[float, float]:
        return ((wx - left) * scale_x, (wy - top) * scale_y)

    points = []
    for node in state.nodes:
        px, py = project(node.x, node.y)
        points.append(MinimapPoint(node.id, px, py, node.id == state.selected_id))

    v_left, v_top, v_right, v_bottom = visible_world_rect(state.viewport, canvas_width, canvas_height)
    x0, y0 = project(v_left, v_top)
    x1, y1 = project(v_right, v_bottom)
    x0, x1 = clamp(x0, 0.0, width), clamp(x1, 0.0, width)
    y0, y1 = clamp(y0, 0.0, height), clamp(y1, 0.0, height)

    return MinimapView(
        width=width,
        height=height,
        bounds=(left, top, right, bottom),
        points=tuple(points),
        viewport=MinimapRect(x=x0, y=y0, width=x1 - x0, height=y1 - y0),
    )
