"""
Graph Store
===========

Pure graph operations, a reducer that applies them as actions, and the
GraphStore object that owns the current state.

Operations take a GraphState and return a new one. Unknown ids are no-ops,
never errors. The reducer stamps every effective change with updated_at and
recomputes expires_at from the existing created_at, so edits never extend
the TTL window.

Usage:
    from notesmap.graph.store import GraphStore, CreateNode

    store = GraphStore(default_state(clock.now_ms()), clock=clock)
    node = store.create_node(parent_id=store.state.root.id)
    store.dispatch(CreateNode(parent_id=None, title="Debt"))
"""

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Tuple

from notesmap.automation.clock import Clock, SystemClock
from notesmap.graph.models import (
    CANVAS_CENTER,
    DEFAULT_NODE_TITLE,
    TONES,
    TTL_MS,
    Edge,
    GraphState,
    Node,
    Viewport,
    new_id,
    sanitize_title,
    with_node,
)
from notesmap.layout.radial import auto_arrange
from notesmap.layout.template import build_template_around
from notesmap.persistence.ttl import touch
from notesmap.viewport.transform import clamp_zoom

logger = logging.getLogger(__name__)

IdFactory = Callable[[str], str]
Listener = Callable[[GraphState, GraphState], None]

# Offset of a new node from its anchor, before jitter.
CHILD_OFFSET_X = 220.0
JITTER_X = 20.0
JITTER_Y = 60.0

UPDATABLE_FIELDS = ("title", "body", "tone", "x", "y")


# ============================================================
# PURE OPERATIONS
# ============================================================

def create_node(
    state: GraphState,
    parent_id: Optional[str] = None,
    title: Optional[str] = None,
    *,
    now_ms: int,
    rng: random.Random,
    id_factory: IdFactory = new_id,
) -> GraphState:
    """Add a node near its parent (or the root) and select it.

    A resolvable parent_id also gets a parent -> child edge. An unknown
    parent_id falls back to the root as anchor and adds no edge.
    """
    parent = state.get_node(parent_id)
    anchor = parent or state.root
    base_x, base_y = (anchor.x, anchor.y) if anchor else CANVAS_CENTER

    node = Node(
        id=id_factory("n"),
        title=sanitize_title(title or "") or DEFAULT_NODE_TITLE,
        x=base_x + CHILD_OFFSET_X + rng.uniform(-JITTER_X, JITTER_X),
        y=base_y + rng.uniform(-JITTER_Y, JITTER_Y),
        created_at=now_ms,
        updated_at=now_ms,
    )
    edges = state.edges
    if parent is not None:
        edges = edges + (Edge(id=id_factory("e"), source=parent.id, target=node.id),)

    return replace(state, nodes=state.nodes + (node,), edges=edges, selected_id=node.id)


def delete_node(state: GraphState, node_id: str) -> GraphState:
    """Remove a node and every edge touching it.

    Refused while the graph holds a single node, whichever node is targeted.
    Selection falls back to the new first node if the root was removed,
    otherwise to the root.
    """
    if len(state.nodes) <= 1 or not state.has_node(node_id):
        return state

    root_id = state.root.id
    nodes = tuple(n for n in state.nodes if n.id != node_id)
    edges = tuple(e for e in state.edges if node_id not in (e.source, e.target))
    selected_id = nodes[0].id if node_id == root_id else root_id
    return replace(state, nodes=nodes, edges=edges, selected_id=selected_id)


def update_node(state: GraphState, node_id: str, now_ms: int, **changes) -> GraphState:
    """Merge editable fields into a node. Unknown ids and fields are ignored."""
    if not state.has_node(node_id):
        return state

    patch = {}
    for key, value in changes.items():
        if key not in UPDATABLE_FIELDS:
            logger.debug("Ignoring non-editable node field %r", key)
            continue
        if key == "title":
            value = sanitize_title(value)
        elif key == "body":
            value = value or ""
        elif key == "tone" and value not in TONES:
            logger.warning("Ignoring unknown tone %r for node %s", value, node_id)
            continue
        elif key in ("x", "y"):
            value = float(value)
        patch[key] = value

    if not patch:
        return state
    return with_node(state, node_id, updated_at=now_ms, **patch)


def move_node(state: GraphState, node_id: str, x: float, y: float, now_ms: int) -> GraphState:
    return with_node(state, node_id, x=float(x), y=float(y), updated_at=now_ms)


def connect_edge(
    state: GraphState,
    source: str,
    target: str,
    *,
    id_factory: IdFactory = new_id,
) -> GraphState:
    """Link source -> target once. Unknown endpoints and self-links are no-ops."""
    if source == target or not state.has_node(source) or not state.has_node(target):
        return state
    if any(e.source == source and e.target == target for e in state.edges):
        return state
    edge = Edge(id=id_factory("e"), source=source, target=target)
    return replace(state, edges=state.edges + (edge,))


def select(state: GraphState, node_id: Optional[str]) -> GraphState:
    """Set the selection as given; existence is the caller's concern."""
    if node_id == state.selected_id:
        return state
    return replace(state, selected_id=node_id)


def connect_to_root(state: GraphState, node_id: str, *, id_factory: IdFactory = new_id) -> GraphState:
    if state.root is None:
        return state
    return connect_edge(state, state.root.id, node_id, id_factory=id_factory)


def rename_root(state: GraphState, title: str, now_ms: int) -> GraphState:
    if state.root is None:
        return state
    return with_node(state, state.root.id, title=sanitize_title(title), updated_at=now_ms)


def set_viewport(state: GraphState, viewport: Viewport) -> GraphState:
    return replace(state, viewport=replace(viewport, zoom=clamp_zoom(viewport.zoom)))


def search(state: GraphState, query: str) -> Tuple[Node, ...]:
    """Nodes whose title or body contains query (case-insensitive). Display only."""
    q = (query or "").strip().lower()
    if not q:
        return state.nodes
    return tuple(n for n in state.nodes if q in n.title.lower() or q in n.body.lower())


def live_edges(state: GraphState) -> Tuple[Edge, ...]:
    """Edges whose endpoints both resolve to nodes."""
    ids = set(state.node_ids())
    return tuple(e for e in state.edges if e.source in ids and e.target in ids)


# ============================================================
# ACTIONS + REDUCER
# ============================================================

@dataclass(frozen=True)
class CreateNode:
    parent_id: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class DeleteNode:
    node_id: str


@dataclass(frozen=True)
class UpdateNode:
    node_id: str
    changes: Dict = field(default_factory=dict)


@dataclass(frozen=True)
class MoveNode:
    node_id: str
    x: float
    y: float


@dataclass(frozen=True)
class ConnectEdge:
    source: str
    target: str


@dataclass(frozen=True)
class Select:
    node_id: Optional[str]


@dataclass(frozen=True)
class RenameRoot:
    title: str


@dataclass(frozen=True)
class SetViewport:
    viewport: Viewport


@dataclass(frozen=True)
class Arrange:
    pass


@dataclass(frozen=True)
class ApplyTemplate:
    root_id: str
    anchor_title: Optional[str] = None


@dataclass(frozen=True)
class ReplaceState:
    """Swap in a whole state.

    Prepared states (fresh default, import) go in as-is; gesture results
    pass stamp=True to get the usual updated_at/expires_at treatment.
    """
    state: GraphState
    stamp: bool = False


def apply(
    state: GraphState,
    action,
    *,
    now_ms: int,
    rng: Optional[random.Random] = None,
    id_factory: IdFactory = new_id,
    ttl_ms: int = TTL_MS,
) -> GraphState:
    """Reducer: (state, action) -> state."""
    if isinstance(action, ReplaceState):
        if not action.stamp or action.state is state:
            return action.state
        nxt = action.state
    elif isinstance(action, CreateNode):
        nxt = create_node(state, action.parent_id, action.title,
                          now_ms=now_ms, rng=rng or random.Random(), id_factory=id_factory)
    elif isinstance(action, DeleteNode):
        nxt = delete_node(state, action.node_id)
    elif isinstance(action, UpdateNode):
        nxt = update_node(state, action.node_id, now_ms, **action.changes)
    elif isinstance(action, MoveNode):
        nxt = move_node(state, action.node_id, action.x, action.y, now_ms)
    elif isinstance(action, ConnectEdge):
        nxt = connect_edge(state, action.source, action.target, id_factory=id_factory)
    elif isinstance(action, Select):
        nxt = select(state, action.node_id)
    elif isinstance(action, RenameRoot):
        nxt = rename_root(state, action.title, now_ms)
    elif isinstance(action, SetViewport):
        nxt = set_viewport(state, action.viewport)
    elif isinstance(action, Arrange):
        nxt = auto_arrange(state, now_ms=now_ms)
    elif isinstance(action, ApplyTemplate):
        nxt = build_template_around(state, action.root_id, action.anchor_title,
                                    now_ms=now_ms, id_factory=id_factory)
    else:
        raise TypeError(f"Unknown graph action: {action!r}")

    if nxt is state:
        return state
    return touch(nxt, now_ms, ttl_ms)


# ============================================================
# STORE
# ============================================================

class GraphStore:
    """Owns the current GraphState and notifies subscribers on change.

    Every dispatch replaces the whole state object, so a subscriber (the
    persistence debounce) always reads a consistent snapshot.
    """

    def __init__(
        self,
        state: GraphState,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
        id_factory: IdFactory = new_id,
        ttl_ms: int = TTL_MS,
    ):
        self._state = state
        self.clock = clock or SystemClock()
        self.rng = rng or random.Random()
        self.id_factory = id_factory
        self.ttl_ms = ttl_ms
        self._listeners: List[Listener] = []

    @property
    def state(self) -> GraphState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener(old, new); returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action) -> GraphState:
        previous = self._state
        nxt = apply(previous, action, now_ms=self.clock.now_ms(), rng=self.rng,
                    id_factory=self.id_factory, ttl_ms=self.ttl_ms)
        if nxt is previous:
            return previous
        self._state = nxt
        for listener in list(self._listeners):
            listener(previous, nxt)
        return nxt

    # -- convenience wrappers -------------------------------------------

    def create_node(self, parent_id: Optional[str] = None, title: Optional[str] = None) -> Node:
        """Create a node and return it (it is also the new selection)."""
        state = self.dispatch(CreateNode(parent_id=parent_id, title=title))
        return state.nodes[-1]

    def delete_node(self, node_id: str) -> GraphState:
        return self.dispatch(DeleteNode(node_id))

    def update_node(self, node_id: str, **changes) -> GraphState:
        return self.dispatch(UpdateNode(node_id, dict(changes)))

    def move_node(self, node_id: str, x: float, y: float) -> GraphState:
        return self.dispatch(MoveNode(node_id, x, y))

    def connect_edge(self, source: str, target: str) -> GraphState:
        return self.dispatch(ConnectEdge(source, target))

    def connect_to_root(self, node_id: str) -> GraphState:
        root = self._state.root
        if root is None:
            return self._state
        return self.connect_edge(root.id, node_id)

    def select(self, node_id: Optional[str]) -> GraphState:
        return self.dispatch(Select(node_id))

    def rename_root(self, title: str) -> GraphState:
        return self.dispatch(RenameRoot(title))

    def set_viewport(self, viewport: Viewport) -> GraphState:
        return self.dispatch(SetViewport(viewport))

    def auto_arrange(self) -> GraphState:
        return self.dispatch(Arrange())

    def apply_template(self, root_id: str, anchor_title: Optional[str] = None) -> GraphState:
        return self.dispatch(ApplyTemplate(root_id, anchor_title))

    def replace(self, state: GraphState, stamp: bool = False) -> GraphState:
        return self.dispatch(ReplaceState(state, stamp=stamp))

    def search(self, query: str) -> Tuple[Node, ...]:
        return search(self._state, query)
