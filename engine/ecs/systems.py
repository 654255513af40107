"""
Geocoin — engine/ecs/systems.py
ECS Systems: cache materialization, culling, and coin transfer.
=====================================================================
Version:     0.4  (Phase 4 — Memento Directory)
Stack:       Python 3.14.3 | python-tcod-ecs
Status:      Production-ready.

Architecture notes
------------------
- Systems are plain functions operating on a tcod.ecs.Registry.
- They report every state change via EventBus; they never persist.
  Persistence is triggered by the owner (GameLoop) after a system returns.
- The CacheDirectory is written on every coin transfer and whenever a DIRTY
  cache is culled. FRESH caches never write: regenerating them from the
  oracle yields the same coins.
"""

from __future__ import annotations
from typing import Dict, List, Optional

import tcod.ecs

from engine.ecs.components import CacheAnchor, CacheStatus, CACHE_FRESH, CACHE_DIRTY
from engine.events import (
    EventBus,
    GameEvent,
    EVT_CACHE_MATERIALIZED,
    EVT_CACHE_EVICTED,
    EVT_COIN_COLLECTED,
    EVT_COIN_DEPOSITED,
    EVT_MEMENTO_REJECTED,
)
from world.board import Cell, cell_key
from world.directory import CacheDirectory
from world.geocache import Coin, Geocache, MementoError

# ============================================================
# QUERIES
# ============================================================

def live_caches(registry: tcod.ecs.Registry) -> Dict[Cell, tcod.ecs.Entity]:
    """Maps each materialized cell to its cache entity."""
    return {
        ent.components[CacheAnchor].cell: ent
        for ent in registry.Q.all_of(components=[CacheAnchor, Geocache])
    }

def find_cache(registry: tcod.ecs.Registry, cell: Cell) -> Optional[tcod.ecs.Entity]:
    for ent in registry.Q.all_of(components=[CacheAnchor, Geocache]):
        if ent.components[CacheAnchor].cell == cell:
            return ent
    return None

# ============================================================
# LIFECYCLE SYSTEMS
# ============================================================

def materialize_cache_system(
    registry: tcod.ecs.Registry,
    cell: Cell,
    directory: CacheDirectory,
    min_coins: int,
    max_coins: int,
    bus: EventBus,
) -> tcod.ecs.Entity:
    """
    Creates the live entity for a spawning cell.
    A stored memento wins (EVICTED -> DIRTY); otherwise, or when the memento
    is unreadable, coins are generated fresh (UNVISITED -> FRESH).
    """
    key = cell_key(cell)
    cache: Optional[Geocache] = None
    state = CACHE_FRESH

    memento = directory.get(key)
    if memento is not None:
        try:
            cache = Geocache.restore(cell, memento)
            state = CACHE_DIRTY
        except MementoError as exc:
            bus.emit(GameEvent(
                event_key=EVT_MEMENTO_REJECTED,
                source="MaterializeSystem",
                target=key,
                data={"reason": str(exc)},
            ))

    if cache is None:
        cache = Geocache.generate(cell, min_coins, max_coins)

    entity = registry.new_entity()
    entity.components[CacheAnchor] = CacheAnchor(cell=cell)
    entity.components[CacheStatus] = CacheStatus(state=state)
    entity.components[Geocache] = cache

    bus.emit(GameEvent(
        event_key=EVT_CACHE_MATERIALIZED,
        source="MaterializeSystem",
        target=key,
        data={"state": state, "coins": len(cache)},
    ))
    return entity

def evict_cache_system(
    entity: tcod.ecs.Entity,
    directory: CacheDirectory,
    bus: EventBus,
    write_memento: bool = True,
) -> None:
    """Destroys a live cache, first writing its memento if it is DIRTY."""
    anchor = entity.components[CacheAnchor]
    cache = entity.components[Geocache]
    status = entity.components[CacheStatus]
    key = cell_key(anchor.cell)

    wrote = write_memento and status.state == CACHE_DIRTY
    if wrote:
        directory.set(key, cache.to_memento())

    entity.clear()

    bus.emit(GameEvent(
        event_key=EVT_CACHE_EVICTED,
        source="CullSystem",
        target=key,
        data={"memento_written": wrote, "coins": len(cache)},
    ))

def cull_caches_system(
    registry: tcod.ecs.Registry,
    visible: set,
    directory: CacheDirectory,
    bus: EventBus,
) -> int:
    """Evicts every live cache whose cell is outside visible. Returns the count."""
    evicted = 0
    for cell, entity in live_caches(registry).items():
        if cell not in visible:
            evict_cache_system(entity, directory, bus)
            evicted += 1
    return evicted

# ============================================================
# COIN TRANSFER SYSTEMS
# ============================================================

def _mark_dirty(entity: tcod.ecs.Entity, directory: CacheDirectory) -> None:
    entity.components[CacheStatus].state = CACHE_DIRTY
    cache = entity.components[Geocache]
    directory.set(cell_key(entity.components[CacheAnchor].cell), cache.to_memento())

def collect_coin_system(
    entity: tcod.ecs.Entity,
    inventory: List[Coin],
    directory: CacheDirectory,
    bus: EventBus,
) -> Optional[Coin]:
    """Moves the cache's first coin to the end of inventory. No-op on an empty cache."""
    cache = entity.components[Geocache]
    coin = cache.collect()
    if coin is None:
        return None

    inventory.append(coin)
    _mark_dirty(entity, directory)

    bus.emit(GameEvent(
        event_key=EVT_COIN_COLLECTED,
        source="player",
        target=cell_key(cache.cell),
        data={"coin": coin.label, "cache_coins": len(cache), "inventory": len(inventory)},
    ))
    return coin

def deposit_coin_system(
    entity: tcod.ecs.Entity,
    inventory: List[Coin],
    directory: CacheDirectory,
    bus: EventBus,
) -> Optional[Coin]:
    """Moves the most recently collected coin into the cache. No-op on an empty inventory."""
    if not inventory:
        return None

    cache = entity.components[Geocache]
    coin = inventory.pop()
    cache.deposit(coin)
    _mark_dirty(entity, directory)

    bus.emit(GameEvent(
        event_key=EVT_COIN_DEPOSITED,
        source="player",
        target=cell_key(cache.cell),
        data={"coin": coin.label, "cache_coins": len(cache), "inventory": len(inventory)},
    ))
    return coin
