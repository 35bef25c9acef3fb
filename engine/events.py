"""
Geocoin — engine/events.py
Event Bus: explicit notifications from the board to its consumers.
==================================================================
Stack:       Python 3.11+ | Pydantic v2 | bespoke pub-sub
Status:      Core integration seam.

Architecture notes
------------------
- The bus is injected at construction. There is no global event target.
- Renderers subscribe to the keys they care about; "*" receives everything.
- Handler errors are reported to stderr and emission continues.
- Never use raw strings for event keys. EVT_* constants only.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

# ============================================================
# CANONICAL EVENT KEYS
# ============================================================

EVT_CACHE_MATERIALIZED = "board.cache_materialized"
EVT_CACHE_MUTATED      = "board.cache_mutated"
EVT_SCAN_COMPLETED     = "board.scan_completed"
EVT_PLAYER_MOVED       = "board.player_moved"
EVT_BOARD_RESET        = "board.reset"
EVT_SESSION_SAVED      = "session.saved"
EVT_SESSION_LOADED     = "session.loaded"

WILDCARD = "*"


class BoardEvent(BaseModel):
    """Envelope for every emitted event. data must stay JSON-serializable."""
    event_key: str
    source: str
    data: Dict[str, Any] = Field(default_factory=dict)


HandlerFn = Callable[[BoardEvent], None]


class EventBus:
    """Bespoke pub-sub. Pass an instance at construction, never a singleton."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[HandlerFn]] = {}

    def subscribe(self, event_key: str, handler: HandlerFn) -> None:
        self._subscribers.setdefault(event_key, []).append(handler)

    def unsubscribe(self, event_key: str, handler: HandlerFn) -> None:
        if event_key in self._subscribers:
            self._subscribers[event_key] = [
                h for h in self._subscribers[event_key] if h != handler
            ]

    def emit(self, event: BoardEvent) -> None:
        targets = (
            self._subscribers.get(event.event_key, [])
            + self._subscribers.get(WILDCARD, [])
        )
        for handler in targets:
            try:
                handler(event)
            except Exception as exc:  # noqa: BLE001
                print(
                    f"[EventBus] Handler error on '{event.event_key}': {exc}",
                    file=sys.stderr,
                )


def emit(bus: Optional[EventBus], event_key: str, source: str, **data: Any) -> None:
    """Emit on bus if one is wired; board components run fine without one."""
    if bus is None:
        return
    bus.emit(BoardEvent(event_key=event_key, source=source, data=data))
