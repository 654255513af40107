"""
Geocoin — engine/session.py
SessionStore: durable game state over a string key/value storage.
=================================================================
Version:     0.3  (Phase 4 — Partial-load tolerance)
Stack:       Python 3.14.3 | stdlib json
Status:      Production-ready.

Architecture notes
------------------
- SessionStore is the only caller of the storage backend.
- Every value is stored as a string under a fixed key (see STORAGE KEYS).
- load() never raises. Each key falls back to its default independently
  when missing or unreadable.
- The cache directory is flattened to a JSON list of [cell_key, memento]
  pairs. Mementos are stored verbatim; pairs whose key is not a "row,col"
  cell key are dropped on load.

Storage backends
----------------
  MemoryStorage     — dict-backed; tests and throwaway sessions.
  JsonFileStorage   — one JSON object on disk, rewritten on every set.
Any object with get_item/set_item/clear satisfies the Storage protocol.
"""

from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from world.board import LatLng, parse_cell_key
from world.directory import CacheDirectory
from world.geocache import Coin, MementoError, deserialize_coins, serialize_coins

# ============================================================
# STORAGE KEYS
# ============================================================

KEY_CACHE_DIRECTORY = "geocoin.cacheDirectory"
KEY_PLAYER_LAT = "geocoin.playerLat"
KEY_PLAYER_LNG = "geocoin.playerLng"
KEY_PLAYER_COINS = "geocoin.playerCoins"
KEY_AUTO_POSITIONING = "geocoin.autoPositioning"


class Storage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...
    def set_item(self, key: str, value: str) -> None: ...
    def clear(self) -> None: ...


class MemoryStorage:
    def __init__(self, items: Optional[Dict[str, str]] = None) -> None:
        self.items: Dict[str, str] = dict(items) if items else {}

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def clear(self) -> None:
        self.items.clear()


class JsonFileStorage:
    """
    Key/value storage persisted as a single JSON object.
    An unreadable file is treated as empty and overwritten on the next write.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._items: Optional[Dict[str, str]] = None

    def _load(self) -> Dict[str, str]:
        if self._items is not None:
            return self._items
        self._items = {}
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as fh:
                    data = json.load(fh)
            except (OSError, ValueError, RecursionError):
                # Undecodable bytes, bad JSON or runaway nesting all read as empty.
                data = {}
            if isinstance(data, dict):
                self._items = {str(k): v for k, v in data.items() if isinstance(v, str)}
        return self._items

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(self._load(), fh, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        self._load()[key] = value
        self._flush()

    def clear(self) -> None:
        self._items = {}
        self._flush()


@dataclass
class SessionSnapshot:
    directory: CacheDirectory
    position: LatLng
    coins: List[Coin] = field(default_factory=list)
    auto_positioning: bool = False


class SessionStore:
    def __init__(self, storage: Storage, origin: LatLng) -> None:
        self.storage = storage
        self.origin = origin

    def save(
        self,
        directory: CacheDirectory,
        position: LatLng,
        coins: List[Coin],
        auto_positioning: bool,
    ) -> None:
        self.storage.set_item(KEY_CACHE_DIRECTORY, json.dumps([list(pair) for pair in directory.items()]))
        self.storage.set_item(KEY_PLAYER_LAT, repr(position.lat))
        self.storage.set_item(KEY_PLAYER_LNG, repr(position.lng))
        self.storage.set_item(KEY_PLAYER_COINS, serialize_coins(coins))
        self.storage.set_item(KEY_AUTO_POSITIONING, "true" if auto_positioning else "false")

    def load(self) -> SessionSnapshot:
        return SessionSnapshot(
            directory=self._load_directory(),
            position=self._load_position(),
            coins=self._load_coins(),
            auto_positioning=self.storage.get_item(KEY_AUTO_POSITIONING) == "true",
        )

    def reset(self) -> None:
        self.storage.clear()

    def _load_directory(self) -> CacheDirectory:
        raw = self.storage.get_item(KEY_CACHE_DIRECTORY)
        directory = CacheDirectory()
        if raw is None:
            return directory
        try:
            pairs = json.loads(raw)
        except (ValueError, RecursionError):
            return directory
        if not isinstance(pairs, list):
            return directory

        for pair in pairs:
            # Mementos themselves are validated lazily, on materialization.
            if (isinstance(pair, list) and len(pair) == 2
                    and isinstance(pair[0], str) and isinstance(pair[1], str)
                    and _is_cell_key(pair[0])):
                directory.set(pair[0], pair[1])
        return directory

    def _load_position(self) -> LatLng:
        raw_lat = self.storage.get_item(KEY_PLAYER_LAT)
        raw_lng = self.storage.get_item(KEY_PLAYER_LNG)
        if raw_lat is None or raw_lng is None:
            return self.origin
        try:
            lat, lng = float(raw_lat), float(raw_lng)
        except ValueError:
            return self.origin
        if not (math.isfinite(lat) and math.isfinite(lng)):
            return self.origin
        return LatLng(lat, lng)

    def _load_coins(self) -> List[Coin]:
        raw = self.storage.get_item(KEY_PLAYER_COINS)
        if raw is None:
            return []
        try:
            return deserialize_coins(raw)
        except MementoError:
            return []


def _is_cell_key(key: str) -> bool:
    try:
        parse_cell_key(key)
    except ValueError:
        return False
    return True
