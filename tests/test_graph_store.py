"""
Tests for the graph store: pure operations, the reducer and GraphStore.

Tests cover:
    - Node creation, anchoring and auto-edges
    - Deletion rules (root survives, edges pruned, selection repaired)
    - Field updates and sanitizing
    - Edge idempotence
    - Invariants over random edit sequences
    - Subscriber notification
"""

import random
from dataclasses import replace

import pytest

from notesmap.graph.models import (
    DEFAULT_NODE_TITLE,
    DEFAULT_ROOT_TITLE,
    MAX_TITLE_LENGTH,
    TTL_MS,
    Viewport,
    default_state,
    sanitize_title,
)
from notesmap.graph.store import (
    CHILD_OFFSET_X,
    CreateNode,
    DeleteNode,
    GraphStore,
    MoveNode,
    ReplaceState,
    Select,
    SetViewport,
    apply,
    connect_edge,
    connect_to_root,
    create_node,
    live_edges,
)


def assert_consistent(state):
    """Structural invariants every state must satisfy."""
    assert len(state.nodes) >= 1
    ids = state.node_ids()
    assert len(set(ids)) == len(ids)
    for edge in state.edges:
        assert edge.source in ids
        assert edge.target in ids
    assert state.selected_id is None or state.selected_id in ids
    assert state.expires_at == state.created_at + TTL_MS


# ============================================================
# MODEL HELPERS
# ============================================================

class TestModels:
    """Tests for the record helpers."""

    def test_default_state_single_selected_root(self):
        state = default_state(1000)
        assert len(state.nodes) == 1
        assert state.edges == ()
        assert state.selected_id == state.root.id
        assert state.root.title == DEFAULT_ROOT_TITLE
        assert state.expires_at == 1000 + TTL_MS

    def test_default_state_with_title(self):
        state = default_state(1000, "Notes: AAPL")
        assert state.root.title == "Notes: AAPL"

    def test_sanitize_title_collapses_whitespace(self):
        assert sanitize_title("  Debt \n\t  load  ") == "Debt load"

    def test_sanitize_title_caps_length(self):
        assert len(sanitize_title("x" * 200)) == MAX_TITLE_LENGTH

    def test_to_dict_omits_missing_selection(self):
        state = replace(default_state(1000), selected_id=None)
        assert "selectedId" not in state.to_dict()


# ============================================================
# CREATE
# ============================================================

class TestCreateNode:
    """Tests for adding nodes."""

    def test_add_without_parent_adds_no_edges(self, store):
        """Two parentless adds: 3 nodes, 0 edges, last one selected."""
        store.create_node()
        last = store.create_node()
        state = store.state
        assert len(state.nodes) == 3
        assert len(state.edges) == 0
        assert state.selected_id == last.id

    def test_add_under_root_links_from_root(self, store):
        """Each add under the root adds exactly one root -> child edge."""
        root_id = store.state.root.id
        first = store.create_node(root_id)
        assert len(store.state.edges) == 1

        second = store.create_node(root_id)
        edges = store.state.edges
        assert len(edges) == 2
        assert all(e.source == root_id for e in edges)
        assert {e.target for e in edges} == {first.id, second.id}
        assert first.id != second.id

    def test_unknown_parent_anchors_at_root_without_edge(self, store):
        root = store.state.root
        node = store.create_node("missing")
        assert store.state.edges == ()
        assert root.x + CHILD_OFFSET_X - 20 <= node.x <= root.x + CHILD_OFFSET_X + 20
        assert root.y - 60 <= node.y <= root.y + 60

    def test_position_offset_from_parent(self, store):
        root_id = store.state.root.id
        parent = store.create_node(root_id)
        child = store.create_node(parent.id)
        assert parent.x + CHILD_OFFSET_X - 20 <= child.x <= parent.x + CHILD_OFFSET_X + 20

    def test_default_and_sanitized_titles(self, store):
        assert store.create_node().title == DEFAULT_NODE_TITLE
        assert store.create_node(title="   ").title == DEFAULT_NODE_TITLE
        assert store.create_node(title=" Margin   risk ").title == "Margin risk"

    def test_same_seed_same_positions(self, clock, id_factory):
        """Jitter comes from the injected random source only."""
        base = default_state(clock.now_ms())
        a = create_node(base, None, now_ms=1, rng=random.Random(7), id_factory=id_factory)
        b = create_node(base, None, now_ms=1, rng=random.Random(7), id_factory=id_factory)
        assert (a.nodes[-1].x, a.nodes[-1].y) == (b.nodes[-1].x, b.nodes[-1].y)

    def test_edit_stamps_updated_at_but_keeps_window(self, store, clock):
        created = store.state.created_at
        clock.advance(60_000)
        store.create_node()
        state = store.state
        assert state.updated_at == clock.now_ms()
        assert state.created_at == created
        assert state.expires_at == created + TTL_MS


# ============================================================
# DELETE
# ============================================================

class TestDeleteNode:
    """Tests for node removal."""

    def test_delete_removes_incident_edges(self, store):
        root_id = store.state.root.id
        a = store.create_node(root_id)
        b = store.create_node(a.id)
        store.delete_node(a.id)
        state = store.state
        assert not state.has_node(a.id)
        assert state.has_node(b.id)
        assert state.edges == ()

    def test_delete_selects_root(self, store):
        a = store.create_node()
        store.delete_node(a.id)
        assert store.state.selected_id == store.state.root.id

    def test_last_node_cannot_be_deleted(self, store):
        before = store.state
        after = store.delete_node(before.root.id)
        assert after is before

    def test_deleting_root_promotes_next_node(self, store):
        old_root = store.state.root
        a = store.create_node()
        store.delete_node(old_root.id)
        assert store.state.root.id == a.id
        assert store.state.selected_id == a.id

    def test_unknown_id_is_noop(self, store):
        before = store.state
        assert store.delete_node("nope") is before


# ============================================================
# UPDATE
# ============================================================

class TestUpdateNode:
    """Tests for merging node fields."""

    def test_update_title_body_tone(self, store):
        node = store.create_node()
        store.update_node(node.id, title="  Debt   load ", body="Net debt 2x", tone="bad")
        updated = store.state.get_node(node.id)
        assert updated.title == "Debt load"
        assert updated.body == "Net debt 2x"
        assert updated.tone == "bad"

    def test_unknown_tone_ignored(self, store):
        node = store.create_node()
        store.update_node(node.id, tone="purple", body="kept")
        updated = store.state.get_node(node.id)
        assert updated.tone == "none"
        assert updated.body == "kept"

    def test_non_editable_fields_ignored(self, store):
        node = store.create_node()
        before = store.state
        after = store.update_node(node.id, id="hijack", created_at=0)
        assert after is before

    def test_unknown_node_is_noop(self, store):
        before = store.state
        assert store.update_node("ghost", title="x") is before

    def test_node_updated_at_stamped(self, store, clock):
        node = store.create_node()
        clock.advance(5000)
        store.update_node(node.id, body="later")
        assert store.state.get_node(node.id).updated_at == clock.now_ms()


# ============================================================
# EDGES
# ============================================================

class TestConnectEdge:
    """Tests for linking nodes."""

    def test_connect_is_idempotent(self, store):
        root_id = store.state.root.id
        node = store.create_node()
        store.connect_edge(root_id, node.id)
        once = store.state
        twice = store.connect_edge(root_id, node.id)
        assert twice is once
        assert len(once.edges) == 1

    def test_self_link_ignored(self, store):
        root_id = store.state.root.id
        before = store.state
        assert store.connect_edge(root_id, root_id) is before

    def test_unknown_endpoint_ignored(self, store):
        before = store.state
        assert store.connect_edge(before.root.id, "ghost") is before

    def test_pure_function_does_not_touch_input(self, store, id_factory):
        node = store.create_node()
        state = store.state
        result = connect_edge(state, state.root.id, node.id, id_factory=id_factory)
        assert state.edges == ()
        assert len(result.edges) == 1

    def test_connect_to_root(self, store, id_factory):
        node = store.create_node()
        result = connect_to_root(store.state, node.id, id_factory=id_factory)
        assert [(e.source, e.target) for e in result.edges] == [(store.state.root.id, node.id)]

    def test_live_edges_skip_dangling(self, store):
        node = store.create_node(store.state.root.id)
        state = store.state
        dangling = replace(state, edges=state.edges + (replace(state.edges[0], id="e_x", target="gone"),))
        assert [e.target for e in live_edges(dangling)] == [node.id]


# ============================================================
# SELECTION + SEARCH
# ============================================================

class TestSelection:
    """Tests for selection handling."""

    def test_base_select_is_unchecked(self, store):
        """Existence is checked by the editor, not the base operation."""
        store.select("ghost")
        assert store.state.selected_id == "ghost"

    def test_reselect_is_noop(self, store):
        before = store.state
        assert store.select(before.selected_id) is before

    def test_select_none_clears(self, store):
        store.select(None)
        assert store.state.selected_id is None

    def test_search_matches_title_and_body(self, store):
        store.create_node(title="Valuation")
        n = store.create_node(title="Other")
        store.update_node(n.id, body="cheap on VALUATION multiples")
        assert len(store.search("valuation")) == 2
        assert store.search("") == store.state.nodes


# ============================================================
# REDUCER + INVARIANTS
# ============================================================

class TestReducer:
    """Tests for apply()."""

    def test_unknown_action_raises(self, store):
        with pytest.raises(TypeError):
            apply(store.state, object(), now_ms=0)

    def test_replace_without_stamp_is_verbatim(self, store):
        fresh = default_state(123)
        assert apply(store.state, ReplaceState(fresh), now_ms=999) is fresh

    def test_replace_with_stamp_refreshes(self, store):
        moved = replace(store.state, selected_id=None)
        result = apply(store.state, ReplaceState(moved, stamp=True), now_ms=store.state.created_at + 10)
        assert result.updated_at == store.state.created_at + 10
        assert result.created_at == store.state.created_at

    def test_noop_action_returns_same_object(self, store):
        state = store.state
        assert apply(state, DeleteNode("ghost"), now_ms=5) is state

    def test_move_node_stamps_node_and_state(self, store, clock):
        node = store.create_node()
        clock.advance(2_000)
        store.dispatch(MoveNode(node.id, 640, 300.5))
        moved = store.state.get_node(node.id)
        assert (moved.x, moved.y) == (640.0, 300.5)
        assert moved.updated_at == clock.now_ms()
        assert store.state.updated_at == clock.now_ms()

    def test_move_unknown_node_is_noop(self, store):
        before = store.state
        assert store.move_node("ghost", 1, 2) is before

    def test_set_viewport_clamps_zoom(self, store, clock):
        clock.advance(1_000)
        store.dispatch(SetViewport(Viewport(x=12.0, y=-4.0, zoom=9.0)))
        vp = store.state.viewport
        assert (vp.x, vp.y, vp.zoom) == (12.0, -4.0, 1.8)
        assert store.state.updated_at == clock.now_ms()

        store.set_viewport(Viewport(zoom=0.01))
        assert store.state.viewport.zoom == 0.65

    def test_random_edit_sequences_keep_invariants(self, clock, id_factory):
        """Root survives and edges never dangle, whatever the order of edits."""
        chooser = random.Random(1234)
        for _ in range(20):
            store = GraphStore(default_state(clock.now_ms()), clock=clock,
                               rng=random.Random(chooser.random()), id_factory=id_factory)
            for _ in range(60):
                ids = list(store.state.node_ids())
                op = chooser.choice(["add", "add_child", "delete", "connect", "select", "update"])
                if op == "add":
                    store.dispatch(CreateNode())
                elif op == "add_child":
                    store.dispatch(CreateNode(parent_id=chooser.choice(ids)))
                elif op == "delete":
                    store.dispatch(DeleteNode(chooser.choice(ids + ["ghost"])))
                elif op == "connect":
                    store.connect_edge(chooser.choice(ids), chooser.choice(ids))
                elif op == "select":
                    store.dispatch(Select(chooser.choice(ids + [None])))
                else:
                    store.update_node(chooser.choice(ids), title="t", tone=chooser.choice(["good", "bad", "x"]))
                assert_consistent(store.state)


# ============================================================
# SUBSCRIBERS
# ============================================================

class TestSubscribe:
    """Tests for change notification."""

    def test_listener_receives_old_and_new(self, store):
        calls = []
        store.subscribe(lambda old, new: calls.append((old, new)))
        before = store.state
        store.create_node()
        assert len(calls) == 1
        assert calls[0][0] is before
        assert calls[0][1] is store.state

    def test_noop_does_not_notify(self, store):
        calls = []
        store.subscribe(lambda old, new: calls.append(new))
        store.delete_node("ghost")
        assert calls == []

    def test_unsubscribe(self, store):
        calls = []
        unsubscribe = store.subscribe(lambda old, new: calls.append(new))
        unsubscribe()
        store.create_node()
        assert calls == []
