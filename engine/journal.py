"""
Geocoin — engine/journal.py
Journal: Append-only JSONL log of game events.
==============================================
Version:     0.2
Stack:       Python 3.14.3 | stdlib json | bespoke EventBus
Status:      Production-ready.

Architecture notes
------------------
- The Journal is a PASSIVE wildcard subscriber. It never emits events.
- Append-only JSONL. Written entries are never rewritten.
- Significance gate (int 1–5): events below JOURNAL_SIGNIFICANCE_MIN are
  discarded silently.
- The turn counter is injected by the owner (GameLoop). The Journal never
  reads the system clock.

Significance Scoring Reference (JOURNAL_SIGNIFICANCE_MIN = 2)
--------------------------------------------------------------
  1 — ambient (EVT_PLAYER_MOVED, EVT_SESSION_SAVED)
  2 — cache churn (EVT_CACHE_MATERIALIZED, EVT_CACHE_EVICTED)
  3 — player actions (EVT_COIN_COLLECTED, EVT_COIN_DEPOSITED, EVT_AUTO_POSITIONING)
  4 — degraded state (EVT_MEMENTO_REJECTED, EVT_POSITION_FAILED)
  5 — EVT_GAME_RESET, session markers
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from engine.events import (
    GameEvent,
    EventBus,
    EVT_PLAYER_MOVED,
    EVT_SESSION_SAVED,
    EVT_CACHE_MATERIALIZED,
    EVT_CACHE_EVICTED,
    EVT_COIN_COLLECTED,
    EVT_COIN_DEPOSITED,
    EVT_AUTO_POSITIONING,
    EVT_MEMENTO_REJECTED,
    EVT_POSITION_FAILED,
    EVT_GAME_RESET,
)

JOURNAL_SIGNIFICANCE_MIN: int = 2

_SIGNIFICANCE_TABLE: Dict[str, int] = {
    EVT_PLAYER_MOVED:        1,
    EVT_SESSION_SAVED:       1,

    EVT_CACHE_MATERIALIZED:  2,
    EVT_CACHE_EVICTED:       2,

    EVT_COIN_COLLECTED:      3,
    EVT_COIN_DEPOSITED:      3,
    EVT_AUTO_POSITIONING:    3,

    EVT_MEMENTO_REJECTED:    4,
    EVT_POSITION_FAILED:     4,

    EVT_GAME_RESET:          5,
}


def score_significance(event: GameEvent) -> int:
    return _SIGNIFICANCE_TABLE.get(event.event_key, 1)


@dataclass(frozen=True)
class JournalEntry:
    event_id: str
    turn: int
    event_key: str
    source: str
    target: Any
    data: Dict[str, Any]
    significance: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id":     self.event_id,
            "turn":         self.turn,
            "event_key":    self.event_key,
            "source":       self.source,
            "target":       self.target,
            "data":         self.data,
            "significance": self.significance,
        }


class Journal:
    """
    Wildcard subscriber that writes qualifying events to a JSONL file.

    Usage:
        bus = EventBus()
        journal = Journal(bus, Path("sessions/journal.jsonl"))
        journal.open_session()
        # ... play ...
        journal.close_session()
    """

    def __init__(
        self,
        bus: EventBus,
        journal_path: Path,
        significance_min: int = JOURNAL_SIGNIFICANCE_MIN,
    ) -> None:
        self.bus = bus
        self.journal_path = journal_path
        self.significance_min = significance_min
        self.turn = 0

        self.journal_path.parent.mkdir(parents=True, exist_ok=True)
        bus.subscribe("*", self._on_event)

    def open_session(self) -> None:
        self._inscribe(GameEvent(event_key="journal.session_opened", source="system"), significance=5)

    def close_session(self) -> None:
        self._inscribe(GameEvent(event_key="journal.session_closed", source="system"), significance=5)

    def _on_event(self, event: GameEvent) -> None:
        significance = score_significance(event)
        if significance < self.significance_min:
            return
        self._inscribe(event, significance)

    def _inscribe(self, event: GameEvent, significance: int) -> JournalEntry:
        entry = JournalEntry(
            event_id=str(uuid.uuid4()),
            turn=self.turn,
            event_key=event.event_key,
            source=event.source,
            target=event.target,
            data=dict(event.data),
            significance=significance,
        )
        with open(self.journal_path, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")
        return entry


class JournalReader:
    """Read-only query interface for a journal.jsonl file."""

    def __init__(self, journal_path: Path) -> None:
        self.journal_path = journal_path

    def all_entries(self) -> List[Dict[str, Any]]:
        if not self.journal_path.exists():
            return []
        entries = []
        with open(self.journal_path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if line:
                    entries.append(json.loads(line))
        return entries

    def by_event_key(self, event_key: str) -> List[Dict[str, Any]]:
        return [e for e in self.all_entries() if e.get("event_key") == event_key]
