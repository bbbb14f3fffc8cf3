"""
Display helpers derived from a GraphState: connector segments in screen
space, tone labels, body previews and the expiry countdown.
"""

from dataclasses import dataclass
from typing import Dict, List

from notesmap.graph.models import GraphState
from notesmap.graph.store import live_edges
from notesmap.persistence.ttl import time_left_ms
from notesmap.viewport.transform import world_to_screen

TONE_LABELS = {
    'good': 'Positive',
    'mid': 'Mixed',
    'bad': 'Negative',
    'none': 'Neutral',
}

TONE_COLORS = {
    'good': '#22c55e',
    'mid': '#f59e0b',
    'bad': '#ef4444',
    'none': 'rgba(255,255,255,0.25)',
}

CARD_PREVIEW_CHARS = 76
EMPTY_BODY_HINT = "Click to write..."


@dataclass(frozen=True)
class EdgeSegment:
    """A connector in screen coordinates."""
    edge_id: str
    x1: float
    y1: float
    x2: float
    y2: float
    highlighted: bool


def tone_label(tone: str) -> str:
    return TONE_LABELS.get(tone, TONE_LABELS['none'])


def edge_segments(state: GraphState) -> List[EdgeSegment]:
    """Screen-space connectors; edges with a missing endpoint are skipped.

    A connector is highlighted when either end is the selected node.
    """
    by_id: Dict = {n.id: n for n in state.nodes}
    segments = []
    for edge in live_edges(state):
        a = by_id[edge.source]
        b = by_id[edge.target]
        x1, y1 = world_to_screen(state.viewport, a.x, a.y)
        x2, y2 = world_to_screen(state.viewport, b.x, b.y)
        highlighted = state.selected_id in (a.id, b.id)
        segments.append(EdgeSegment(edge.id, x1, y1, x2, y2, highlighted))
    return segments


def body_preview(body: str, limit: int = CARD_PREVIEW_CHARS) -> str:
    text = (body or "").strip()
    if not text:
        return EMPTY_BODY_HINT
    if len(text) > limit:
        return text[:limit] + "…"
    return text


def time_left_label(state: GraphState, now_ms: int) -> str:
    """'3 h 12 min', or just '12 min' in the last hour."""
    ms = time_left_ms(state, now_ms)
    hours = ms // 3_600_000
    minutes = (ms % 3_600_000) // 60_000
    if hours <= 0:
        return f"{minutes} min"
    return f"{hours} h {minutes} min"


def zoom_percent(state: GraphState) -> int:
    return round(state.viewport.zoom * 100)
