"""
Geocoin — world/geocache.py
Coins, per-cell coin caches, and the memento format that persists them.
========================================================================
Version:     0.2  (Phase 4 — Versioned Mementos)
Stack:       Python 3.14.3 | Pydantic v2
Status:      Production-ready.

Architecture notes
------------------
- Coin is a frozen value. Moving a coin moves the value, never a reference.
- A coin's (row, col) names the minting cell; serial is unique within it.
- Geocache.coins is ordered. collect() always takes the first coin so a
  given sequence always yields the same coin.
- Memento wire format (version 1), a JSON document:
      {"version": 1, "coins": [{"row": 3, "col": -4, "serial": 0}, ...]}
  The same document encodes the player's inventory.
"""

from __future__ import annotations

from typing import Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from engine.luck import initial_coin_count
from world.board import Cell

MEMENTO_VERSION: int = 1


class MementoError(ValueError):
    """A persisted coin sequence could not be decoded."""


class Coin(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    col: int
    serial: int = Field(ge=0)

    @property
    def label(self) -> str:
        """Display form used by the inventory panel, e.g. "369894:-1220628#3"."""
        return f"{self.row}:{self.col}#{self.serial}"

    def minted_by(self, cell: Cell) -> bool:
        return self.row == cell.row and self.col == cell.col


class CoinMemento(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: Literal[1] = MEMENTO_VERSION
    coins: List[Coin] = Field(default_factory=list)


def serialize_coins(coins: Iterable[Coin]) -> str:
    return CoinMemento(coins=list(coins)).model_dump_json()


def deserialize_coins(memento: str) -> List[Coin]:
    """
    Decodes a coin sequence written by serialize_coins().
    Raises MementoError for anything that is not a valid version 1 document.
    """
    if not isinstance(memento, (str, bytes)):
        raise MementoError(f"Memento must be text, got {type(memento).__name__}")
    try:
        return list(CoinMemento.model_validate_json(memento).coins)
    except ValidationError as exc:
        raise MementoError(f"Unreadable coin memento: {exc.error_count()} error(s)") from exc


def mint_coins(cell: Cell, count: int) -> List[Coin]:
    return [Coin(row=cell.row, col=cell.col, serial=i) for i in range(count)]


class Geocache:
    """
    The mutable coin holding of one cell's cache.

    Usage:
        cache = Geocache.generate(cell, min_coins=1, max_coins=10)
        coin = cache.collect()
        memento = cache.to_memento()
        ...
        restored = Geocache.restore(cell, memento)
        assert restored.coins == cache.coins
    """

    def __init__(self, cell: Cell, coins: Optional[Iterable[Coin]] = None) -> None:
        self.cell = cell
        self.coins: List[Coin] = list(coins) if coins is not None else []

    @classmethod
    def generate(cls, cell: Cell, min_coins: int, max_coins: int) -> "Geocache":
        """First-visit contents, drawn from the deterministic oracle."""
        count = initial_coin_count(cell.row, cell.col, min_coins, max_coins)
        return cls(cell, mint_coins(cell, count))

    @classmethod
    def restore(cls, cell: Cell, memento: str) -> "Geocache":
        cache = cls(cell)
        cache.from_memento(memento)
        return cache

    def __len__(self) -> int:
        return len(self.coins)

    def collect(self) -> Optional[Coin]:
        """Removes and returns the first coin, or None when the cache is empty."""
        if not self.coins:
            return None
        return self.coins.pop(0)

    def deposit(self, coin: Coin) -> None:
        self.coins.append(coin)

    def to_memento(self) -> str:
        return serialize_coins(self.coins)

    def from_memento(self, memento: str) -> None:
        # Decode fully before touching self.coins so a bad memento leaves the cache intact.
        self.coins = deserialize_coins(memento)
