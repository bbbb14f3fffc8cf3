"""
Pytest configuration and fixtures for the notes map.

This module provides:
- A virtual clock and timer queue (no real sleeping)
- Deterministic random jitter and ids
- In-memory storage
- Ready-to-use store, persistence manager and editor
"""

import itertools
import random
from types import SimpleNamespace

import pytest

from notesmap.automation.clock import ManualClock
from notesmap.automation.scheduler import ManualTimerQueue
from notesmap.editor import build_editor
from notesmap.graph.models import TTL_MS, default_state
from notesmap.graph.store import GraphStore
from notesmap.persistence.manager import PersistenceManager
from notesmap.persistence.storage import MemoryStorage

# 2026-01-01T00:00:00Z
START_MS = 1_767_225_600_000


# ============================================================
# TIME FIXTURES
# ============================================================

@pytest.fixture
def clock():
    """Virtual clock starting at START_MS."""
    return ManualClock(START_MS)


@pytest.fixture
def timers(clock):
    """Timer queue driven by the virtual clock."""
    return ManualTimerQueue(clock)


# ============================================================
# GRAPH FIXTURES
# ============================================================

@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def id_factory():
    """Sequential ids: n_1, e_2, n_3, ..."""
    counter = itertools.count(1)

    def make(prefix="n"):
        return f"{prefix}_{next(counter)}"

    return make


@pytest.fixture
def store(clock, rng, id_factory):
    """Store holding a fresh single-root graph."""
    return GraphStore(default_state(clock.now_ms()), clock=clock, rng=rng, id_factory=id_factory)


# ============================================================
# PERSISTENCE FIXTURES
# ============================================================

@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def manager(store, storage, timers):
    return PersistenceManager(store, storage, timers)


@pytest.fixture
def test_settings(tmp_path):
    """Settings stand-in with production defaults and memory storage."""
    return SimpleNamespace(
        ENV='test',
        STORAGE_BACKEND='memory',
        STORAGE_PATH=str(tmp_path / 'notesmap.json'),
        STORAGE_KEY='financelab_mindmap_v1',
        TTL_HOURS=24,
        SAVE_DEBOUNCE_MS=120,
        SWEEP_INTERVAL_S=15,
        SNAP_GRID=10,
        ttl_ms=TTL_MS,
    )


@pytest.fixture
def editor(test_settings, storage, timers, rng, id_factory):
    """Editor wired to the virtual clock and memory storage, not yet mounted."""
    return build_editor(test_settings, storage=storage, timers=timers, rng=rng, id_factory=id_factory)
