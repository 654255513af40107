"""
Geocoin — engine/events.py
Event bus and canonical event keys.
===================================
Version:     0.2
Stack:       Python 3.14.3 | Pydantic v2 | bespoke pub-sub
Status:      Production-ready.

Architecture notes
------------------
- Every state change in GameLoop is announced on the bus after it happens.
- The Journal receives every event via wildcard subscription ("*").
- Subscribers never mutate game state directly; they issue commands.
"""

from __future__ import annotations

import sys
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

# ============================================================
# CANONICAL EVENT KEYS
# Never use raw strings. Add new keys here only.
# ============================================================

EVT_PLAYER_MOVED          = "player.moved"
EVT_CACHE_MATERIALIZED    = "cache.materialized"
EVT_CACHE_EVICTED         = "cache.evicted"
EVT_COIN_COLLECTED        = "cache.coin_collected"
EVT_COIN_DEPOSITED        = "cache.coin_deposited"
EVT_MEMENTO_REJECTED      = "cache.memento_rejected"
EVT_AUTO_POSITIONING      = "player.auto_positioning"
EVT_POSITION_FAILED       = "player.position_failed"
EVT_GAME_RESET            = "game.reset"
EVT_SESSION_SAVED         = "session.saved"


# ============================================================
# EVENT MODEL
# data dict must remain flat + JSON-serializable.
# ============================================================

class GameEvent(BaseModel):
    event_key: str
    source: str
    target: Optional[str] = None
    data: Dict[str, Any] = {}


HandlerFn = Callable[[GameEvent], None]


class EventBus:
    """
    Bespoke pub-sub. Pass instance at construction — no global singleton.

    Wildcard key "*" receives every emitted event (used by the Journal).
    Per-handler errors are swallowed and logged to stderr so emission
    always continues.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[HandlerFn]] = {}

    def subscribe(self, event_key: str, handler: HandlerFn) -> None:
        self._subscribers.setdefault(event_key, []).append(handler)

    def unsubscribe(self, event_key: str, handler: HandlerFn) -> None:
        if event_key in self._subscribers:
            self._subscribers[event_key] = [
                h for h in self._subscribers[event_key] if h != handler
            ]

    def emit(self, event: GameEvent) -> None:
        targets = (
            self._subscribers.get(event.event_key, [])
            + self._subscribers.get("*", [])
        )
        for handler in targets:
            try:
                handler(event)
            except Exception as exc:  # noqa: BLE001
                print(
                    f"[EventBus] Handler error on '{event.event_key}': {exc}",
                    file=sys.stderr,
                )
