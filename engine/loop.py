"""
Geocoin — engine/loop.py
Game Loop: Wires Board, cache systems, SessionStore, EventBus and Journal.
========================================================================
Version:     0.4  (Phase 4 — Command Dispatch)
Stack:       Python 3.14.3 | python-tcod-ecs
Status:      Integration entry point.

Architecture notes
------------------
- GameLoop is the single owner of game state: cache directory, player
  position, player inventory, auto-positioning flag, and the registry of
  live caches.
- All mutations go through dispatch() (or the method it routes to) and
  run one at a time on the caller's thread. No locking.
- Every mutation is followed by exactly one SessionStore.save(), except
  reset(), which clears storage instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import tcod.ecs

from engine.commands import (
    Command,
    Move,
    MoveTo,
    CollectCoin,
    DepositCoin,
    SetAutoPositioning,
    ResetGame,
)
from engine.config import GameConfig, get_game_config
from engine.ecs.components import (
    CacheStatus,
    CACHE_UNVISITED,
    CACHE_EVICTED,
)
from engine.ecs.systems import (
    live_caches,
    find_cache,
    materialize_cache_system,
    evict_cache_system,
    cull_caches_system,
    collect_coin_system,
    deposit_coin_system,
)
from engine.events import (
    EventBus,
    GameEvent,
    EVT_PLAYER_MOVED,
    EVT_AUTO_POSITIONING,
    EVT_POSITION_FAILED,
    EVT_GAME_RESET,
    EVT_SESSION_SAVED,
)
from engine.geolocation import PositionSource, PositionWatcher, PositionUnavailable
from engine.journal import Journal
from engine.luck import spawns_cache
from engine.session import JsonFileStorage, MemoryStorage, SessionStore, Storage
from world.board import Board, Cell, LatLng, cell_key
from world.geocache import Coin, Geocache


class GameLoop:
    """
    Core executor for a Geocoin session.

    Usage:
        game = GameLoop(config=GameConfig(), storage=MemoryStorage())
        game.dispatch(Move(d_row=1))
        for cell in game.cache_cells():
            game.dispatch(CollectCoin(row=cell.row, col=cell.col))
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        storage: Optional[Storage] = None,
        journal_path: Optional[Path] = None,
        position_source: Optional[PositionSource] = None,
    ):
        self.config = config if config is not None else get_game_config()

        if storage is None:
            if self.config.storage_path is not None:
                storage = JsonFileStorage(self.config.storage_path)
            else:
                storage = MemoryStorage()

        self.registry = tcod.ecs.Registry()
        self.bus = EventBus()
        self.board = Board(self.config.tile_width, self.config.visibility_radius)
        self.store = SessionStore(storage, self.config.origin.to_latlng())

        if journal_path is None:
            journal_path = self.config.journal_path
        self.journal: Optional[Journal] = None
        if journal_path is not None:
            self.journal = Journal(self.bus, Path(journal_path))
            self.journal.open_session()

        self.watcher: Optional[PositionWatcher] = None
        if position_source is not None:
            self.watcher = PositionWatcher(
                position_source,
                on_position=self._on_position_update,
                on_error=self._on_position_error,
            )

        # Restore
        snapshot = self.store.load()
        self.directory = snapshot.directory
        self.position: LatLng = snapshot.position
        self.inventory: List[Coin] = snapshot.coins
        self.auto_positioning = False

        self.refresh_neighborhood()
        if snapshot.auto_positioning:
            self.set_auto_positioning(True)

    # ----------------------------------------------------------
    # Queries
    # ----------------------------------------------------------

    @property
    def origin(self) -> LatLng:
        return self.store.origin

    @property
    def player_cell(self) -> Cell:
        return self.board.cell_for_point(self.position)

    @property
    def inventory_text(self) -> str:
        return f"{len(self.inventory)} coins in inventory"

    def spawns(self, cell: Cell) -> bool:
        return spawns_cache(cell.row, cell.col, self.config.spawn_probability)

    def visible_cells(self) -> List[Cell]:
        return self.board.cells_near_point(self.position)

    def cache_cells(self) -> List[Cell]:
        """Cells with a live cache, in neighborhood order."""
        live = live_caches(self.registry)
        return [cell for cell in self.visible_cells() if cell in live]

    def cache_at(self, cell: Cell) -> Optional[Geocache]:
        entity = find_cache(self.registry, cell)
        if entity is None:
            return None
        return entity.components[Geocache]

    def cache_lifecycle(self, cell: Cell) -> Optional[str]:
        """Lifecycle state of a cell's cache, or None when the cell never spawns one."""
        if not self.spawns(cell):
            return None
        entity = find_cache(self.registry, cell)
        if entity is not None:
            return entity.components[CacheStatus].state
        if cell_key(cell) in self.directory:
            return CACHE_EVICTED
        return CACHE_UNVISITED

    # ----------------------------------------------------------
    # Update function
    # ----------------------------------------------------------

    def dispatch(self, command: Command) -> bool:
        """Applies one command. Returns True when game state changed."""
        if self.journal is not None:
            self.journal.turn += 1

        if isinstance(command, Move):
            return self.move(command.d_row, command.d_col)
        elif isinstance(command, MoveTo):
            return self.move_to(LatLng(command.lat, command.lng))
        elif isinstance(command, CollectCoin):
            return self.collect(self.board.canonicalize(command.row, command.col)) is not None
        elif isinstance(command, DepositCoin):
            return self.deposit(self.board.canonicalize(command.row, command.col)) is not None
        elif isinstance(command, SetAutoPositioning):
            return self.set_auto_positioning(command.enabled)
        elif isinstance(command, ResetGame):
            self.reset()
            return True
        raise TypeError(f"Unknown command: {type(command).__name__}")

    # ----------------------------------------------------------
    # Movement
    # ----------------------------------------------------------

    def move(self, d_row: int, d_col: int) -> bool:
        """Steps the player by whole cells (scaled by move_step)."""
        if d_row == 0 and d_col == 0:
            return False
        step = self.config.move_step * self.config.tile_width
        return self.move_to(LatLng(
            self.position.lat + d_row * step,
            self.position.lng + d_col * step,
        ))

    def move_to(self, point: LatLng) -> bool:
        previous = self.player_cell
        self.position = point
        self.refresh_neighborhood()

        self.bus.emit(GameEvent(
            event_key=EVT_PLAYER_MOVED,
            source="player",
            target=cell_key(self.player_cell),
            data={"lat": point.lat, "lng": point.lng, "from": cell_key(previous)},
        ))
        self.save()
        return True

    def refresh_neighborhood(self) -> None:
        """Culls caches that left the visibility radius and materializes new ones."""
        visible = self.visible_cells()
        cull_caches_system(self.registry, set(visible), self.directory, self.bus)

        live = live_caches(self.registry)
        for cell in visible:
            if cell in live or not self.spawns(cell):
                continue
            materialize_cache_system(
                self.registry,
                cell,
                self.directory,
                self.config.min_coins,
                self.config.max_coins,
                self.bus,
            )

    # ----------------------------------------------------------
    # Coin transfer
    # ----------------------------------------------------------

    def collect(self, cell: Cell) -> Optional[Coin]:
        entity = find_cache(self.registry, cell)
        if entity is None:
            return None
        coin = collect_coin_system(entity, self.inventory, self.directory, self.bus)
        if coin is not None:
            self.save()
        return coin

    def deposit(self, cell: Cell) -> Optional[Coin]:
        entity = find_cache(self.registry, cell)
        if entity is None:
            return None
        coin = deposit_coin_system(entity, self.inventory, self.directory, self.bus)
        if coin is not None:
            self.save()
        return coin

    # ----------------------------------------------------------
    # Auto-positioning
    # ----------------------------------------------------------

    def set_auto_positioning(self, enabled: bool) -> bool:
        if enabled and self.watcher is None:
            self._on_position_error(PositionUnavailable("No position source attached"))
            return False
        if enabled == self.auto_positioning:
            return False

        self.auto_positioning = enabled
        if self.watcher is not None:
            if enabled:
                self.watcher.start()
                if not self.watcher.active:
                    # Failed inside start(); _on_position_error already saved.
                    return False
            else:
                self.watcher.stop()

        self.bus.emit(GameEvent(
            event_key=EVT_AUTO_POSITIONING,
            source="player",
            data={"enabled": enabled},
        ))
        self.save()
        return True

    def _on_position_update(self, point: LatLng) -> None:
        self.move_to(point)

    def _on_position_error(self, error: Exception) -> None:
        was_enabled = self.auto_positioning
        self.auto_positioning = False
        if self.watcher is not None:
            self.watcher.stop()

        self.bus.emit(GameEvent(
            event_key=EVT_POSITION_FAILED,
            source="PositionWatcher",
            data={"reason": str(error)},
        ))
        if was_enabled:
            self.save()

    # ----------------------------------------------------------
    # Persistence
    # ----------------------------------------------------------

    def save(self) -> None:
        self.store.save(self.directory, self.position, self.inventory, self.auto_positioning)
        self.bus.emit(GameEvent(
            event_key=EVT_SESSION_SAVED,
            source="SessionStore",
            data={"caches": len(self.directory), "inventory": len(self.inventory)},
        ))

    def reset(self) -> None:
        """
        Full restart: discards every memento, the inventory, the position and
        the auto-positioning flag, then clears storage. Caches in view are
        regenerated from the oracle.
        """
        if self.watcher is not None:
            self.watcher.stop()

        for entity in live_caches(self.registry).values():
            evict_cache_system(entity, self.directory, self.bus, write_memento=False)

        self.directory.clear()
        self.inventory.clear()
        self.position = self.origin
        self.auto_positioning = False
        self.store.reset()

        self.bus.emit(GameEvent(event_key=EVT_GAME_RESET, source="player"))
        self.refresh_neighborhood()

    def close(self) -> None:
        if self.watcher is not None:
            self.watcher.stop()
        if self.journal is not None:
            self.journal.close_session()
