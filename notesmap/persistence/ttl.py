"""
TTL helpers.

A graph lives for TTL_MS after it was created. Edits advance updated_at but
never move created_at, so the window is anchored to creation.
"""

from dataclasses import replace
from typing import Optional

from notesmap.graph.models import GraphState, TTL_MS


def refresh_ttl(state: GraphState, now_ms: int, ttl_ms: int = TTL_MS) -> GraphState:
    """Establish created_at if missing, bump updated_at, recompute expires_at."""
    created_at = state.created_at if state.created_at else now_ms
    return replace(
        state,
        created_at=created_at,
        updated_at=now_ms,
        expires_at=created_at + ttl_ms,
    )


def touch(state: GraphState, now_ms: int, ttl_ms: int = TTL_MS) -> GraphState:
    """Stamp a mutation (the reducer calls this after every effective change)."""
    return refresh_ttl(state, now_ms, ttl_ms)


def is_expired(state: Optional[GraphState], now_ms: int) -> bool:
    if state is None or not state.expires_at:
        return True
    return state.expires_at <= now_ms


def time_left_ms(state: GraphState, now_ms: int) -> int:
    return max(0, state.expires_at - now_ms)
