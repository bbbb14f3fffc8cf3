"""
Persistence Manager
===================

Owns the lifecycle of the stored graph:

- hydrate: load the stored graph, or start fresh if it is missing, invalid
  or past its TTL
- debounced save: every store change (re)arms a short timer; only the last
  state of a burst is written
- expiry sweep: a periodic check that swaps an expired graph for a fresh one
- import / export / reset

Storage failures are logged and swallowed. The in-memory state stays
authoritative for the session; each save attempt is independent, so a
broken backend never causes a retry storm.
"""

from typing import Callable, Optional

from notesmap.automation.scheduler import TimerHandle, TimerQueue
from notesmap.graph.models import TTL_MS, GraphState, default_state
from notesmap.graph.store import GraphStore
from notesmap.persistence.codec import ImportResult, decode_state, export_text, import_text
from notesmap.persistence.storage import StorageBackend, StorageUnavailable
from notesmap.persistence.ttl import is_expired
from notesmap.utils.safe_logging import get_safe_logger

logger = get_safe_logger(__name__)

SAVE_DEBOUNCE_S = 0.12
SWEEP_INTERVAL_S = 15.0


class PersistenceManager:
    """Connects a GraphStore to a storage backend through a timer queue."""

    def __init__(
        self,
        store: GraphStore,
        storage: StorageBackend,
        timers: TimerQueue,
        debounce_s: float = SAVE_DEBOUNCE_S,
        sweep_interval_s: float = SWEEP_INTERVAL_S,
        ttl_ms: int = TTL_MS,
    ):
        self.store = store
        self.storage = storage
        self.timers = timers
        self.debounce_s = debounce_s
        self.sweep_interval_s = sweep_interval_s
        self.ttl_ms = ttl_ms

        self.persistent = True
        self.save_count = 0
        self.failed_saves = 0
        self._pending_save: Optional[TimerHandle] = None
        self._sweep: Optional[TimerHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    def _now(self) -> int:
        return self.store.clock.now_ms()

    def _fresh(self, title: Optional[str] = None) -> GraphState:
        return default_state(self._now(), title, ttl_ms=self.ttl_ms)

    # ------------------------------------------------------------------
    # Hydrate
    # ------------------------------------------------------------------

    def hydrate(self, seed_title: Optional[str] = None) -> GraphState:
        """Load the stored graph into the store, or start a fresh one.

        A stored graph that is unreadable, invalid or expired is replaced by
        a fresh default which is written back immediately.
        """
        now = self._now()
        try:
            raw = self.storage.load()
        except StorageUnavailable as e:
            logger.warning("Storage unavailable, running in memory only", error=str(e))
            self.persistent = False
            return self.store.replace(self._fresh(seed_title))

        self.persistent = True
        if raw is not None:
            result = decode_state(raw, now_ms=now)
            if result.ok and not is_expired(result.state, now):
                logger.info("Restored graph", nodes=len(result.state.nodes),
                            edges=len(result.state.edges))
                return self.store.replace(result.state)
            if result.ok:
                logger.info("Stored graph expired, starting fresh")
            else:
                logger.warning("Stored graph is invalid, starting fresh", reason=result.error)

        state = self.store.replace(self._fresh(seed_title))
        self.flush()
        return state

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def attach(self) -> None:
        """Start observing the store; every change schedules a save."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self._on_change)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_change(self, previous: GraphState, current: GraphState) -> None:
        self.schedule_save()

    def schedule_save(self) -> None:
        """Cancel any pending save and arm a new one."""
        if self._pending_save is not None:
            self._pending_save.cancel()
        self._pending_save = self.timers.call_later(self.debounce_s, self.flush)

    @property
    def save_pending(self) -> bool:
        return self._pending_save is not None and not self._pending_save.cancelled

    def flush(self) -> bool:
        """Write the current state as it is, cancelling any pending save. Returns success."""
        if self._pending_save is not None:
            self._pending_save.cancel()
            self._pending_save = None
        return self._write(self.store.state)

    def _write(self, state: GraphState) -> bool:
        if not self.persistent:
            return False
        try:
            self.storage.save(export_text(state))
        except StorageUnavailable as e:
            self.failed_saves += 1
            logger.warning("Save failed, keeping in-memory state", error=str(e))
            return False
        self.save_count += 1
        logger.debug("Saved graph", nodes=len(state.nodes), edges=len(state.edges))
        return True

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    def start_sweep(self) -> None:
        if self._sweep is None:
            self._sweep = self.timers.call_every(self.sweep_interval_s, self.sweep)

    def sweep(self) -> bool:
        """Replace an expired graph with a fresh default. Returns True if it did."""
        if not is_expired(self.store.state, self._now()):
            return False
        logger.info("Graph expired, resetting")
        self.store.replace(self._fresh())
        self.flush()
        return True

    def stop(self) -> None:
        """Tear down timers and stop observing the store."""
        if self._sweep is not None:
            self._sweep.cancel()
            self._sweep = None
        if self._pending_save is not None:
            self._pending_save.cancel()
            self._pending_save = None
        self.detach()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def export_text(self) -> str:
        return export_text(self.store.state)

    def import_text(self, text: str) -> ImportResult:
        """Replace the graph with an imported one; leaves state untouched on failure."""
        result = import_text(text, now_ms=self._now(), ttl_ms=self.ttl_ms)
        if not result.ok:
            logger.warning("Import rejected", reason=result.error, text=text)
            return result
        self.store.replace(result.state)
        self.flush()
        logger.info("Imported graph", nodes=len(result.state.nodes), edges=len(result.state.edges))
        return result

    def reset(self, seed_title: Optional[str] = None) -> GraphState:
        state = self.store.replace(self._fresh(seed_title))
        self.flush()
        return state
