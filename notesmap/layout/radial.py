"""
Radial Auto-Arrange
===================

Places every non-root node on one of two rings around the root:

- Ring 1 (radius R1): nodes the root links to (edges root -> node)
- Ring 2 (radius R2): everything else

Each ring starts at the top (-90 deg) and steps clockwise by 2*pi / ring size.
Ring 2 is rotated by SECOND_RING_BIAS so its nodes do not line up with
ring 1. The root never moves and node order is preserved, so running the
layout twice gives the same positions.
"""

import math
from dataclasses import replace
from typing import Dict, List, Tuple

from notesmap.graph.models import GraphState, Node


class RadialLayout:
    """Compute ring positions for a graph state."""

    R1 = 200.0               # Radius for nodes linked to the root
    R2 = 360.0               # Radius for the rest
    START_ANGLE = -math.pi / 2
    SECOND_RING_BIAS = 0.35  # radians

    def __init__(self, state: GraphState):
        self.state = state
        self.positions: Dict[str, Tuple[float, float]] = {}

    def rings(self) -> Tuple[List[Node], List[Node]]:
        """Split non-root nodes into (first ring, second ring), order kept."""
        root = self.state.root
        linked = {e.target for e in self.state.edges if e.source == root.id}

        others = self.state.nodes[1:]
        first = [n for n in others if n.id in linked]
        second = [n for n in others if n.id not in linked]
        return first, second

    def _place_ring(self, ring: List[Node], radius: float, start_angle: float) -> None:
        root = self.state.root
        step = 2 * math.pi / max(len(ring), 1)
        for i, node in enumerate(ring):
            angle = start_angle + i * step
            self.positions[node.id] = (
                root.x + math.cos(angle) * radius,
                root.y + math.sin(angle) * radius,
            )

    def compute(self) -> Dict[str, Tuple[float, float]]:
        """Positions for every non-root node, keyed by id."""
        self.positions = {}
        if self.state.root is None:
            return self.positions

        first, second = self.rings()
        self._place_ring(first, self.R1, self.START_ANGLE)
        self._place_ring(second, self.R2, self.START_ANGLE + self.SECOND_RING_BIAS)
        return self.positions


def auto_arrange(state: GraphState, *, now_ms: int) -> GraphState:
    """Return state with non-root nodes moved onto the two rings."""
    if len(state.nodes) <= 1:
        return state

    positions = RadialLayout(state).compute()
    nodes = []
    for node in state.nodes:
        if node.id in positions:
            x, y = positions[node.id]
            node = replace(node, x=x, y=y, updated_at=now_ms)
        nodes.append(node)
    return replace(state, nodes=tuple(nodes))
