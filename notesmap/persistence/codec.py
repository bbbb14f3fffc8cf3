"""
State Codec
===========

Canonical JSON export and schema-validated import of a GraphState.

Import fails closed: any parse or schema problem yields a failed
ImportResult and the caller keeps its current state untouched. Nothing is
ever half-imported.

Accepted document (same shape export_text writes):

    {
      "version": 1,
      "createdAt": 1767225600000, "updatedAt": ..., "expiresAt": ...,
      "nodes": [{"id", "title", "body", "tone", "x", "y", "createdAt", "updatedAt"}],
      "edges": [{"id", "from", "to"}],
      "selectedId": "n_...",            (optional)
      "viewport": {"x": 0, "y": 0, "zoom": 1}
    }
"""

import json
from dataclasses import dataclass, replace
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from notesmap.graph.models import (
    SCHEMA_VERSION,
    TTL_MS,
    Edge,
    GraphState,
    Node,
    Viewport,
    sanitize_title,
)
from notesmap.viewport.transform import clamp_zoom


# ============================================================
# SCHEMA
# ============================================================

class NodeDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    title: str = ""
    body: str = ""
    tone: Literal["good", "mid", "bad", "none"] = "none"
    x: float = Field(allow_inf_nan=False)
    y: float = Field(allow_inf_nan=False)
    created_at: Optional[int] = Field(default=None, alias="createdAt")
    updated_at: Optional[int] = Field(default=None, alias="updatedAt")


class EdgeDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    source: str = Field(alias="from")
    target: str = Field(alias="to")


class ViewportDocument(BaseModel):
    x: float = Field(default=0.0, allow_inf_nan=False)
    y: float = Field(default=0.0, allow_inf_nan=False)
    zoom: float = Field(default=1.0, gt=0, allow_inf_nan=False)


class StateDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: Optional[int] = None
    created_at: Optional[int] = Field(default=None, alias="createdAt")
    updated_at: Optional[int] = Field(default=None, alias="updatedAt")
    expires_at: Optional[int] = Field(default=None, alias="expiresAt")
    nodes: List[NodeDocument]
    edges: List[EdgeDocument]
    selected_id: Optional[str] = Field(default=None, alias="selectedId")
    viewport: Optional[ViewportDocument] = None

    @model_validator(mode="after")
    def check_identity(self):
        if not self.nodes:
            raise ValueError("nodes must contain at least the root node")
        node_ids = [n.id for n in self.nodes]
        if len(set(node_ids)) != len(node_ids):
            raise ValueError("duplicate node id")
        edge_ids = [e.id for e in self.edges]
        if len(set(edge_ids)) != len(edge_ids):
            raise ValueError("duplicate edge id")
        return self


# ============================================================
# RESULT
# ============================================================

@dataclass(frozen=True)
class ImportResult:
    """Either a state or an error reason, never both."""
    state: Optional[GraphState] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.state is not None

    @staticmethod
    def success(state: GraphState) -> "ImportResult":
        return ImportResult(state=state)

    @staticmethod
    def failure(reason: str) -> "ImportResult":
        return ImportResult(error=reason)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "document"
    return f"{location}: {first.get('msg', 'invalid')}"


# ============================================================
# EXPORT / IMPORT
# ============================================================

def export_text(state: GraphState) -> str:
    """Canonical textual form, accepted back by import_text.

    Edges with a missing endpoint are left out.
    """
    ids = set(state.node_ids())
    edges = tuple(e for e in state.edges if e.source in ids and e.target in ids)
    if len(edges) != len(state.edges):
        state = replace(state, edges=edges)
    return json.dumps(state.to_dict(), indent=2, ensure_ascii=False)


def _build_state(doc: StateDocument, now_ms: int) -> GraphState:
    created_at = doc.created_at or 0
    fallback_ts = created_at or now_ms

    nodes = tuple(
        Node(
            id=n.id,
            title=sanitize_title(n.title),
            body=n.body,
            tone=n.tone,
            x=n.x,
            y=n.y,
            created_at=n.created_at if n.created_at is not None else fallback_ts,
            updated_at=n.updated_at if n.updated_at is not None else fallback_ts,
        )
        for n in doc.nodes
    )

    # Drop edges pointing at missing nodes and repeated (from, to) pairs.
    node_ids = {n.id for n in nodes}
    seen_pairs = set()
    edges = []
    for e in doc.edges:
        pair = (e.source, e.target)
        if e.source not in node_ids or e.target not in node_ids or pair in seen_pairs:
            continue
        seen_pairs.add(pair)
        edges.append(Edge(id=e.id, source=e.source, target=e.target))

    vp = doc.viewport or ViewportDocument()
    selected_id = doc.selected_id if doc.selected_id in node_ids else None

    return GraphState(
        version=SCHEMA_VERSION,
        created_at=created_at,
        updated_at=doc.updated_at or created_at,
        expires_at=doc.expires_at or 0,
        nodes=nodes,
        edges=tuple(edges),
        selected_id=selected_id,
        viewport=Viewport(x=vp.x, y=vp.y, zoom=clamp_zoom(vp.zoom)),
    )


def decode_state(text: Optional[str], *, now_ms: int) -> ImportResult:
    """Validate a stored document, keeping its own timestamps."""
    if text is None or not text.strip():
        return ImportResult.failure("empty document")
    try:
        doc = StateDocument.model_validate_json(text)
    except ValidationError as e:
        return ImportResult.failure(_describe(e))
    return ImportResult.success(_build_state(doc, now_ms))


def import_text(text: Optional[str], *, now_ms: int, ttl_ms: int = TTL_MS) -> ImportResult:
    """Validate user-supplied text; on success the TTL window starts now."""
    result = decode_state(text, now_ms=now_ms)
    if not result.ok:
        return result
    state = replace(
        result.state,
        created_at=now_ms,
        updated_at=now_ms,
        expires_at=now_ms + ttl_ms,
    )
    return ImportResult.success(state)
