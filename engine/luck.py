"""
Geocoin — engine/luck.py
Deterministic oracle: string key -> reproducible float in [0, 1).
=================================================================
Stack:       Python 3.14.3 | stdlib random

Each call builds a throwaway random.Random seeded with the joined key.
String seeds are hashed with SHA-512 by the seeding algorithm, so the
result is identical across processes and interpreter restarts (unlike the
builtin hash(), which is salted per process). No state is kept between calls.
"""

from __future__ import annotations

import math
import random
from typing import Sequence, Union

KeyPart = Union[int, float, str, bool]

# Key namespace for the initial coin-count draw; the spawn draw uses the bare (row, col).
INITIAL_VALUE_KEY: str = "initialValue"


def join_key(parts: Sequence[KeyPart]) -> str:
    """Joins key parts with commas, e.g. [3, -4, "initialValue"] -> "3,-4,initialValue"."""
    return ",".join(_format_part(p) for p in parts)


def _format_part(part: KeyPart) -> str:
    if isinstance(part, bool):
        return "true" if part else "false"
    if isinstance(part, float) and part.is_integer():
        return str(int(part))
    return str(part)


def luck(key: str) -> float:
    return random.Random(key).random()


def sample(parts: Sequence[KeyPart]) -> float:
    """Oracle value for a composite key."""
    return luck(join_key(parts))


def spawns_cache(row: int, col: int, spawn_probability: float) -> bool:
    return sample([row, col]) < spawn_probability


def initial_coin_count(row: int, col: int, min_coins: int, max_coins: int) -> int:
    """Coin count in [min_coins, max_coins) for a freshly generated cache."""
    roll = sample([row, col, INITIAL_VALUE_KEY])
    return math.floor(roll * (max_coins - min_coins) + min_coins)
