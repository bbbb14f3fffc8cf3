"""
Notes Editor
============

The command surface the notes page talks to. Wires the graph store, the
gesture controller and the persistence manager together and maps keyboard
shortcuts onto the same commands.

Usage:
    from notesmap.editor import build_editor

    editor = build_editor()
    editor.mount(seed="AAPL")        # restore or start fresh, start the sweep
    editor.add_child()
    editor.apply_template()
    editor.handle_key("a")           # auto-arrange
    text = editor.export_text()
    editor.unmount()
"""

import random
from typing import List, Optional, Tuple

from notesmap.automation.clock import Clock, SystemClock
from notesmap.automation.scheduler import ScheduleTimerQueue, TimerQueue
from notesmap.graph.models import (
    GraphState,
    Node,
    default_state,
    is_default_root_title,
    new_id,
    seed_title,
)
from notesmap.graph.store import GraphStore, IdFactory
from notesmap.persistence.codec import ImportResult
from notesmap.persistence.manager import PersistenceManager
from notesmap.persistence.storage import StorageBackend, create_storage
from notesmap.reporting.mermaid import MermaidGenerator
from notesmap.reporting.minimap import MinimapView, project_minimap
from notesmap.reporting.views import EdgeSegment, edge_segments, time_left_label, zoom_percent
from notesmap.utils.safe_logging import get_safe_logger
from notesmap.viewport.gestures import InteractionController

logger = get_safe_logger(__name__)

# Keyboard shortcuts -> command names
KEY_BINDINGS = {
    'n': 'add_child',
    't': 'apply_template',
    'a': 'auto_arrange',
    'c': 'center_on',
    'Delete': 'remove_selected',
    'Backspace': 'remove_selected',
    '+': 'zoom_in',
    '=': 'zoom_in',
    '-': 'zoom_out',
    '0': 'reset_zoom',
}


class NotesEditor:
    """Single-user notes canvas session."""

    def __init__(self, store: GraphStore, persistence: PersistenceManager,
                 controller: Optional[InteractionController] = None):
        self.store = store
        self.persistence = persistence
        self.controller = controller or InteractionController()
        self.seed: Optional[str] = None
        self.import_open = False
        self.mounted = False

    @property
    def state(self) -> GraphState:
        return self.store.state

    def _now(self) -> int:
        return self.store.clock.now_ms()

    def _seed_title(self) -> Optional[str]:
        return seed_title(self.seed) if self.seed else None

    def _commit(self, new_state: GraphState) -> GraphState:
        """Store a combined viewport + selection change, stamped like any other edit."""
        if new_state is self.store.state:
            return new_state
        return self.store.replace(new_state, stamp=True)

    def _commit_viewport(self, new_state: GraphState) -> GraphState:
        if new_state is self.store.state:
            return new_state
        return self.store.set_viewport(new_state.viewport)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self, seed: Optional[str] = None) -> GraphState:
        """Restore (or create) the graph, start saving and sweeping."""
        self.seed = seed or None
        self.persistence.hydrate(self._seed_title())
        self.persistence.attach()
        self.persistence.start_sweep()
        self.mounted = True
        if self.seed:
            self.apply_seed(self.seed)
        return self.state

    def unmount(self) -> None:
        """Flush a pending save and tear the timers down."""
        if self.persistence.save_pending:
            self.persistence.flush()
        self.persistence.stop()
        self.controller.pointer_up()
        self.mounted = False

    def apply_seed(self, seed: Optional[str]) -> GraphState:
        """Title the root after the page seed, unless the user renamed it."""
        self.seed = seed or None
        if not self.seed:
            return self.state
        root = self.state.root
        title = seed_title(self.seed)
        if root is None or not is_default_root_title(root.title) or root.title == title:
            return self.state
        logger.debug("Applying seed to root title", seed=self.seed)
        return self.store.rename_root(title)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def add_node(self, parent_id: Optional[str] = None, title: Optional[str] = None) -> Node:
        return self.store.create_node(parent_id, title)

    def add_child(self, title: Optional[str] = None) -> Node:
        """New node linked under the selection (or the root)."""
        parent_id = self.state.selected_id if self.state.has_node(self.state.selected_id) else None
        if parent_id is None and self.state.root is not None:
            parent_id = self.state.root.id
        return self.add_node(parent_id, title)

    def apply_template(self) -> GraphState:
        root = self.state.root
        if root is None:
            return self.state
        return self.store.apply_template(root.id, root.title)

    def auto_arrange(self) -> GraphState:
        return self.store.auto_arrange()

    def center_on(self, node_id: Optional[str] = None) -> GraphState:
        if node_id is None:
            node_id = self.state.root.id if self.state.root else None
        return self._commit(self.controller.center_on(self.state, node_id))

    def focus_symbol(self, symbol: str) -> GraphState:
        """Quick-symbol shortcut: retitle the root for a ticker and center on it."""
        root = self.state.root
        if root is None or not symbol:
            return self.state
        self.store.rename_root(seed_title(symbol))
        return self.center_on(root.id)

    def select(self, node_id: Optional[str]) -> GraphState:
        """Select a live node (None clears). Unknown ids are ignored."""
        if node_id is not None and not self.state.has_node(node_id):
            return self.state
        return self.store.select(node_id)

    def update_selected(self, **changes) -> GraphState:
        node_id = self.state.selected_id
        if not node_id:
            return self.state
        return self.store.update_node(node_id, **changes)

    def remove_selected(self) -> GraphState:
        node_id = self.state.selected_id
        if not node_id:
            return self.state
        return self.store.delete_node(node_id)

    def connect_to_root(self, node_id: str) -> GraphState:
        return self.store.connect_to_root(node_id)

    def reset_all(self) -> GraphState:
        logger.info("Resetting graph")
        return self.persistence.reset(self._seed_title())

    def export_text(self) -> str:
        return self.persistence.export_text()

    def import_text(self, text: str) -> ImportResult:
        return self.persistence.import_text(text)

    # ------------------------------------------------------------------
    # Import dialog
    # ------------------------------------------------------------------

    def open_import(self) -> None:
        self.import_open = True

    def close_import(self) -> None:
        self.import_open = False

    def submit_import(self, text: str) -> ImportResult:
        """Import from the dialog; the dialog stays open on failure."""
        result = self.import_text(text)
        if result.ok:
            self.import_open = False
        return result

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def zoom_in(self) -> GraphState:
        return self._commit_viewport(self.controller.zoom_in(self.state))

    def zoom_out(self) -> GraphState:
        return self._commit_viewport(self.controller.zoom_out(self.state))

    def reset_zoom(self) -> GraphState:
        return self._commit_viewport(self.controller.reset_zoom(self.state))

    def handle_key(self, key: str, *, in_text_field: bool = False) -> bool:
        """Run the command bound to key. Returns True if the key was handled.

        Escape only closes the import dialog. Other shortcuts are ignored
        while typing or while the dialog is open.
        """
        if key == 'Escape':
            if self.import_open:
                self.close_import()
                return True
            return False

        if in_text_field or self.import_open:
            return False

        command = KEY_BINDINGS.get(key)
        if command is None and len(key) == 1:
            command = KEY_BINDINGS.get(key.lower())
        if command is None:
            return False
        getattr(self, command)()
        return True

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------

    def pointer_down(self, sx: float, sy: float, node_id: Optional[str] = None) -> GraphState:
        new_state = self.controller.pointer_down(self.state, sx, sy, node_id)
        if new_state.selected_id != self.state.selected_id:
            return self.store.select(new_state.selected_id)
        return self.state

    def pointer_move(self, sx: float, sy: float) -> GraphState:
        """Drags commit as MoveNode, pans as SetViewport."""
        new_state = self.controller.pointer_move(self.state, sx, sy)
        if new_state is self.state:
            return new_state
        node_id = self.controller.dragging_id
        if node_id is None:
            return self.store.set_viewport(new_state.viewport)
        node = new_state.get_node(node_id)
        return self.store.move_node(node_id, node.x, node.y)

    def pointer_up(self) -> None:
        self.controller.pointer_up()

    def pointer_leave(self) -> None:
        self.controller.pointer_leave()

    def wheel(self, sx: float, sy: float, delta_y: float) -> GraphState:
        return self._commit_viewport(self.controller.wheel(self.state, sx, sy, delta_y))

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def search(self, query: str) -> Tuple[Node, ...]:
        return self.store.search(query)

    def minimap(self, canvas_width: float, canvas_height: float) -> MinimapView:
        return project_minimap(self.state, canvas_width, canvas_height)

    def edge_segments(self) -> List[EdgeSegment]:
        return edge_segments(self.state)

    def time_left_label(self) -> str:
        return time_left_label(self.state, self._now())

    def zoom_percent(self) -> int:
        return zoom_percent(self.state)

    def mermaid(self) -> str:
        return MermaidGenerator(self.state).render()


def build_editor(
    settings=None,
    *,
    storage: Optional[StorageBackend] = None,
    timers: Optional[TimerQueue] = None,
    clock: Optional[Clock] = None,
    rng: Optional[random.Random] = None,
    id_factory: IdFactory = new_id,
) -> NotesEditor:
    """Assemble an editor from settings, with optional injected collaborators."""
    if settings is None:
        from notesmap.config import settings

    clock = clock or getattr(timers, 'clock', None) or SystemClock()
    ttl_ms = settings.ttl_ms
    store = GraphStore(default_state(clock.now_ms(), ttl_ms=ttl_ms), clock=clock, rng=rng,
                       id_factory=id_factory, ttl_ms=ttl_ms)
    persistence = PersistenceManager(
        store,
        storage if storage is not None else create_storage(settings),
        timers if timers is not None else ScheduleTimerQueue(),
        debounce_s=settings.SAVE_DEBOUNCE_MS / 1000.0,
        sweep_interval_s=float(settings.SWEEP_INTERVAL_S),
        ttl_ms=ttl_ms,
    )
    controller = InteractionController(grid=float(settings.SNAP_GRID))
    return NotesEditor(store, persistence, controller)
