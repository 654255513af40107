"""
Geocoin — engine/ecs/components.py
ECS Component Definitions for python-tcod-ecs.
==============================================
Version:     0.2
Stack:       Python 3.14.3 | python-tcod-ecs
Status:      Production-ready.

A live cache is an entity carrying CacheAnchor, CacheStatus and the
world.geocache.Geocache itself as components.
"""

from __future__ import annotations
from dataclasses import dataclass

from world.board import Cell

# Cache lifecycle. UNVISITED and EVICTED caches have no entity; they only
# appear in events and in cache_lifecycle() answers.
CACHE_UNVISITED = "unvisited"
CACHE_FRESH = "fresh"
CACHE_DIRTY = "dirty"
CACHE_EVICTED = "evicted"

@dataclass(frozen=True)
class CacheAnchor:
    cell: Cell

@dataclass
class CacheStatus:
    state: str = CACHE_FRESH                # CACHE_FRESH | CACHE_DIRTY
