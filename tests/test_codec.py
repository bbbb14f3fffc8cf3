"""
Tests for JSON export and validated import.

Tests cover:
    - Export document shape (camelCase, from/to edges)
    - Export -> import keeps nodes, edges, selection and viewport
    - Rejections leave nothing half-imported
    - Repair of dangling references and out-of-range zoom
"""

import json

import pytest

from notesmap.graph.models import TTL_MS, default_state
from notesmap.persistence.codec import ImportResult, decode_state, export_text, import_text
from notesmap.persistence.ttl import is_expired

NOW = 1_767_300_000_000


@pytest.fixture
def populated(store):
    """Root with two linked children, one toned, and a panned viewport."""
    root_id = store.state.root.id
    a = store.create_node(root_id, title="Risks")
    store.update_node(a.id, body="Leverage", tone="bad")
    store.create_node(a.id, title="Refinancing")
    store.select(a.id)
    return store.state


def document(**overrides):
    doc = {
        "version": 1,
        "createdAt": 1000,
        "updatedAt": 2000,
        "expiresAt": 1000 + TTL_MS,
        "nodes": [
            {"id": "root", "title": "Notes: AAPL", "body": "", "tone": "none", "x": 520, "y": 320,
             "createdAt": 1000, "updatedAt": 1000},
            {"id": "n1", "title": "Thesis", "body": "b", "tone": "good", "x": 700, "y": 300,
             "createdAt": 1500, "updatedAt": 1600},
        ],
        "edges": [{"id": "e1", "from": "root", "to": "n1"}],
        "selectedId": "n1",
        "viewport": {"x": 10, "y": -5, "zoom": 1.2},
    }
    doc.update(overrides)
    return json.dumps(doc)


# ============================================================
# EXPORT
# ============================================================

class TestExport:
    """Tests for export_text."""

    def test_document_shape(self, populated):
        doc = json.loads(export_text(populated))
        assert set(doc) == {"version", "createdAt", "updatedAt", "expiresAt", "nodes", "edges",
                            "selectedId", "viewport"}
        assert set(doc["nodes"][0]) == {"id", "title", "body", "tone", "x", "y", "createdAt", "updatedAt"}
        assert set(doc["edges"][0]) == {"id", "from", "to"}
        assert doc["version"] == 1

    def test_export_is_indented_and_unicode(self, store):
        store.rename_root("Notes: Hermès")
        text = export_text(store.state)
        assert "Hermès" in text
        assert "\n  " in text


# ============================================================
# IMPORT
# ============================================================

class TestImport:
    """Tests for import_text success paths."""

    def test_export_import_keeps_structure(self, populated):
        result = import_text(export_text(populated), now_ms=NOW)
        assert result.ok
        imported = result.state
        for got, want in zip(imported.nodes, populated.nodes):
            assert (got.id, got.title, got.body, got.tone) == (want.id, want.title, want.body, want.tone)
            assert (got.created_at, got.updated_at) == (want.created_at, want.updated_at)
            assert (got.x, got.y) == pytest.approx((want.x, want.y))
        assert len(imported.nodes) == len(populated.nodes)
        assert imported.edges == populated.edges
        assert imported.selected_id == populated.selected_id
        assert imported.viewport == populated.viewport

    def test_import_starts_new_window(self):
        result = import_text(document(), now_ms=NOW)
        assert result.state.created_at == NOW
        assert result.state.updated_at == NOW
        assert result.state.expires_at == NOW + TTL_MS

    def test_dangling_and_duplicate_edges_dropped(self):
        edges = [
            {"id": "e1", "from": "root", "to": "n1"},
            {"id": "e2", "from": "root", "to": "n1"},
            {"id": "e3", "from": "root", "to": "gone"},
        ]
        result = import_text(document(edges=edges), now_ms=NOW)
        assert [e.id for e in result.state.edges] == ["e1"]

    def test_dangling_selection_cleared(self):
        result = import_text(document(selectedId="gone"), now_ms=NOW)
        assert result.ok
        assert result.state.selected_id is None

    def test_zoom_clamped(self):
        result = import_text(document(viewport={"x": 0, "y": 0, "zoom": 5}), now_ms=NOW)
        assert result.state.viewport.zoom == 1.8

    def test_optional_fields_default(self):
        text = json.dumps({
            "nodes": [{"id": "root", "x": 1, "y": 2}],
            "edges": [],
        })
        result = import_text(text, now_ms=NOW)
        assert result.ok
        root = result.state.root
        assert (root.title, root.body, root.tone) == ("", "", "none")
        assert result.state.viewport.zoom == 1.0


# ============================================================
# REJECTIONS
# ============================================================

class TestImportRejections:
    """Malformed input fails closed with a reason."""

    @pytest.mark.parametrize("text", [
        "",
        "not json at all",
        "[]",
        json.dumps({"nodes": [{"id": "root", "x": 0, "y": 0}]}),            # edges missing
        json.dumps({"edges": []}),                                           # nodes missing
        json.dumps({"nodes": [], "edges": []}),                              # no root
        json.dumps({"nodes": [{"id": "r", "y": 0}], "edges": []}),           # x missing
        json.dumps({"nodes": [{"id": "r", "x": "left", "y": 0}], "edges": []}),
        json.dumps({"nodes": [{"id": "r", "x": 0, "y": 0, "tone": "pink"}], "edges": []}),
        json.dumps({"nodes": [{"id": "r", "x": 0, "y": 0}, {"id": "r", "x": 1, "y": 1}], "edges": []}),
        json.dumps({"nodes": [{"id": "r", "x": 0, "y": 0}],
                    "edges": [{"id": "e", "from": "r", "to": "r"}, {"id": "e", "from": "r", "to": "r"}]}),
        json.dumps({"nodes": [{"id": "r", "x": 0, "y": 0}], "edges": [],
                    "viewport": {"x": 0, "y": 0, "zoom": 0}}),
        json.dumps({"nodes": [{"id": "r", "x": float("nan"), "y": 0}], "edges": []}),
    ])
    def test_rejected(self, text):
        result = import_text(text, now_ms=NOW)
        assert not result.ok
        assert result.state is None
        assert result.error

    def test_none_rejected(self):
        assert not import_text(None, now_ms=NOW).ok


# ============================================================
# STORED DOCUMENTS
# ============================================================

class TestDecodeState:
    """decode_state keeps stored timestamps for hydration."""

    def test_keeps_timestamps(self):
        result = decode_state(document(), now_ms=NOW)
        assert result.state.created_at == 1000
        assert result.state.expires_at == 1000 + TTL_MS
        assert result.state.root.created_at == 1000

    def test_missing_expiry_counts_as_expired(self):
        text = json.dumps({"nodes": [{"id": "r", "x": 0, "y": 0}], "edges": []})
        result = decode_state(text, now_ms=NOW)
        assert result.ok
        assert is_expired(result.state, NOW)


class TestImportResult:
    """Tests for the tagged result."""

    def test_success(self):
        state = default_state(1)
        result = ImportResult.success(state)
        assert result.ok
        assert result.state is state

    def test_failure(self):
        result = ImportResult.failure("bad")
        assert not result.ok
        assert result.error == "bad"
