"""
Graph Data Model
================

Immutable records for the notes canvas: nodes, edges, the viewport and the
whole graph state. Every change produces a new GraphState (see
notesmap.graph.store); nothing here mutates in place.

Serialized field names are camelCase so the exported document matches the
format the notes page has always written:

    { version, createdAt, updatedAt, expiresAt,
      nodes: [{id, title, body, tone, x, y, createdAt, updatedAt}],
      edges: [{id, from, to}],
      selectedId?, viewport: {x, y, zoom} }
"""

import re
import secrets
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple


# ============================================================
# CONSTANTS
# ============================================================

SCHEMA_VERSION = 1
TTL_MS = 24 * 60 * 60 * 1000

TONES = ("good", "mid", "bad", "none")

MAX_TITLE_LENGTH = 60
DEFAULT_ROOT_TITLE = "New note"
DEFAULT_NODE_TITLE = "New idea"
SEED_TITLE_PREFIX = "Notes: "

# Logical canvas center used for the root node and for centering.
CANVAS_CENTER = (520.0, 320.0)

_WHITESPACE = re.compile(r"\s+")


def sanitize_title(value: str) -> str:
    """Collapse whitespace, strip, and cap at MAX_TITLE_LENGTH characters."""
    return _WHITESPACE.sub(" ", value or "").strip()[:MAX_TITLE_LENGTH]


def new_id(prefix: str = "n") -> str:
    """Opaque random identifier, e.g. 'n_3f9a0c1d2e4b'."""
    return f"{prefix}_{secrets.token_hex(6)}"


# ============================================================
# RECORDS
# ============================================================

@dataclass(frozen=True)
class Node:
    """A single bubble on the canvas."""
    id: str
    title: str
    body: str = ""
    tone: str = "none"
    x: float = 0.0
    y: float = 0.0
    created_at: int = 0
    updated_at: int = 0

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "tone": self.tone,
            "x": self.x,
            "y": self.y,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class Edge:
    """A connector between two nodes (directed, drawn undirected)."""
    id: str
    source: str
    target: str

    def to_dict(self) -> Dict:
        return {"id": self.id, "from": self.source, "to": self.target}


@dataclass(frozen=True)
class Viewport:
    """Pan translation (pixels) and zoom factor."""
    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0

    def to_dict(self) -> Dict:
        return {"x": self.x, "y": self.y, "zoom": self.zoom}


@dataclass(frozen=True)
class GraphState:
    """
    Canonical graph state.

    nodes[0] is the root. Edges are kept in insertion order so exports are
    stable, but their identity is the edge id.
    """
    created_at: int
    updated_at: int
    expires_at: int
    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...] = ()
    selected_id: Optional[str] = None
    viewport: Viewport = field(default_factory=Viewport)
    version: int = SCHEMA_VERSION

    @property
    def root(self) -> Optional[Node]:
        return self.nodes[0] if self.nodes else None

    @property
    def selected(self) -> Optional[Node]:
        return self.get_node(self.selected_id)

    def get_node(self, node_id: Optional[str]) -> Optional[Node]:
        if not node_id:
            return None
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: Optional[str]) -> bool:
        return self.get_node(node_id) is not None

    def node_ids(self) -> Tuple[str, ...]:
        return tuple(n.id for n in self.nodes)

    def to_dict(self) -> Dict:
        data = {
            "version": self.version,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "expiresAt": self.expires_at,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "viewport": self.viewport.to_dict(),
        }
        if self.selected_id is not None:
            data["selectedId"] = self.selected_id
        return data


# ============================================================
# FACTORIES
# ============================================================

def seed_title(symbol: str) -> str:
    """Root title used when the page is opened for a ticker."""
    return sanitize_title(f"{SEED_TITLE_PREFIX}{symbol}")


def is_default_root_title(title: str) -> bool:
    """True while the root still carries a generated title."""
    return title == DEFAULT_ROOT_TITLE or title.startswith(SEED_TITLE_PREFIX.strip())


def default_state(now_ms: int, title: Optional[str] = None, ttl_ms: int = TTL_MS) -> GraphState:
    """Fresh graph: a single selected root at the canvas center."""
    center_x, center_y = CANVAS_CENTER
    root = Node(
        id=new_id("root"),
        title=sanitize_title(title) if title else DEFAULT_ROOT_TITLE,
        x=center_x,
        y=center_y,
        created_at=now_ms,
        updated_at=now_ms,
    )
    return GraphState(
        created_at=now_ms,
        updated_at=now_ms,
        expires_at=now_ms + ttl_ms,
        nodes=(root,),
        edges=(),
        selected_id=root.id,
        viewport=Viewport(),
    )


def with_node(state: GraphState, node_id: str, **changes) -> GraphState:
    """Replace one node's fields; returns the state unchanged for unknown ids."""
    if not state.has_node(node_id):
        return state
    nodes = tuple(replace(n, **changes) if n.id == node_id else n for n in state.nodes)
    return replace(state, nodes=nodes)
