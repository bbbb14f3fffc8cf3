"""
Analysis Template
=================

Adds the six standard analysis bubbles around a root, each linked
root -> block, evenly spaced on one ring starting at the top. Additive:
existing nodes and edges are left alone.
"""

import math
from dataclasses import dataclass, replace
from typing import Callable, Optional, Tuple

from notesmap.graph.models import Edge, GraphState, Node, new_id, sanitize_title


@dataclass(frozen=True)
class TemplateBlock:
    title: str
    body: str
    tone: str


TEMPLATE_BLOCKS: Tuple[TemplateBlock, ...] = (
    TemplateBlock("Thesis", "Why it is interesting (or not) in 5 lines.", "none"),
    TemplateBlock("Risks", "3 concrete risks (debt, margins, cycle, competition, regulation...).", "bad"),
    TemplateBlock("Catalysts", "What could move the price (earnings, guidance, product, macro...).", "good"),
    TemplateBlock("Valuation", "P/E, growth, margin, sector comparison. Simple conclusion.", "mid"),
    TemplateBlock("Technicals", "Trend, levels, zones, momentum. What invalidates or confirms.", "mid"),
    TemplateBlock("News", "1-3 items worth remembering and their impact on the thesis.", "none"),
)

TEMPLATE_RADIUS = 230.0
TEMPLATE_START_ANGLE = -math.pi / 2


def build_template_around(
    state: GraphState,
    root_id: str,
    anchor_title: Optional[str] = None,
    *,
    now_ms: int,
    id_factory: Callable[[str], str] = new_id,
) -> GraphState:
    """Append the six template blocks around root_id.

    anchor_title, when given, also renames that root. Unknown root_id is a
    no-op.
    """
    root = state.get_node(root_id)
    if root is None:
        return state

    count = len(TEMPLATE_BLOCKS)
    new_nodes = []
    new_edges = []
    for i, block in enumerate(TEMPLATE_BLOCKS):
        angle = TEMPLATE_START_ANGLE + i * (2 * math.pi / count)
        node = Node(
            id=id_factory("n"),
            title=block.title,
            body=block.body,
            tone=block.tone,
            x=root.x + math.cos(angle) * TEMPLATE_RADIUS,
            y=root.y + math.sin(angle) * TEMPLATE_RADIUS,
            created_at=now_ms,
            updated_at=now_ms,
        )
        new_nodes.append(node)
        new_edges.append(Edge(id=id_factory("e"), source=root.id, target=node.id))

    nodes = state.nodes
    if anchor_title:
        nodes = tuple(
            replace(n, title=sanitize_title(anchor_title), updated_at=now_ms) if n.id == root.id else n
            for n in nodes
        )

    return replace(state, nodes=nodes + tuple(new_nodes), edges=state.edges + tuple(new_edges))
