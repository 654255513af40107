"""
Geocoin — ui/screens.py
Implementations of the UI Screen States.

The screens only read GameLoop state and issue commands through
GameLoop.dispatch(). They never touch caches or storage directly.
"""
from typing import Dict, List, Tuple

import tcod
from tcod import libtcodpy

from ui.states import BaseState, Engine
from ui.renderer import Renderer, COLOR_TEXT, COLOR_DIM, COLOR_CACHE, COLOR_PLAYER, COLOR_ALERT
from engine.commands import Move, CollectCoin, DepositCoin, SetAutoPositioning, ResetGame
from world.board import Cell

APP_NAME = "Geocoin GO"

# Map layout: each cell is CELL_W characters wide, one row tall.
MAP_X = 2
MAP_Y = 4
CELL_W = 3

MOVE_KEYS: Dict[tcod.event.KeySym, Tuple[int, int]] = {
    tcod.event.KeySym.UP: (1, 0),
    tcod.event.KeySym.W: (1, 0),
    tcod.event.KeySym.DOWN: (-1, 0),
    tcod.event.KeySym.S: (-1, 0),
    tcod.event.KeySym.LEFT: (0, -1),
    tcod.event.KeySym.A: (0, -1),
    tcod.event.KeySym.RIGHT: (0, 1),
    tcod.event.KeySym.D: (0, 1),
}


class MainMenuState(BaseState):
    """The title screen."""

    def on_render(self, renderer: Renderer) -> None:
        cx, cy = renderer.width // 2, renderer.height // 2
        renderer.root_console.print(cx, cy - 5, APP_NAME, fg=COLOR_CACHE, alignment=libtcodpy.CENTER)
        renderer.root_console.print(cx, cy, "[C]ontinue", alignment=libtcodpy.CENTER)
        renderer.root_console.print(cx, cy + 1, "[N]ew Game", alignment=libtcodpy.CENTER)
        renderer.root_console.print(cx, cy + 2, "[Q]uit", alignment=libtcodpy.CENTER)
        renderer.root_console.print(cx, cy + 4, self.game.inventory_text, fg=COLOR_DIM, alignment=libtcodpy.CENTER)

    def ev_keydown(self, event: tcod.event.KeyDown) -> None:
        if event.sym == tcod.event.KeySym.Q:
            self.engine.running = False
        elif event.sym == tcod.event.KeySym.C:
            self.engine.change_state(MapState(self.engine))
        elif event.sym == tcod.event.KeySym.N:
            self.game.dispatch(ResetGame())
            self.engine.change_state(MapState(self.engine))


class MapState(BaseState):
    """The neighborhood around the player, one glyph block per cell."""

    def __init__(self, engine: Engine):
        super().__init__(engine)
        self.confirm_reset = False

    def cell_origin(self, cell: Cell) -> Tuple[int, int]:
        """Screen (x, y) of a cell's block. North is up."""
        center = self.game.player_cell
        radius = self.game.board.tile_visibility_radius
        sx = MAP_X + (cell.col - center.col + radius) * CELL_W
        sy = MAP_Y + (radius - (cell.row - center.row))
        return sx, sy

    def on_render(self, renderer: Renderer) -> None:
        game = self.game
        pos = game.position
        auto = "on" if game.auto_positioning else "off"
        renderer.print_text(1, 0, APP_NAME, fg=COLOR_CACHE)
        renderer.print_text(1, 1, f"({pos.lat:.6f}, {pos.lng:.6f})  auto-positioning: {auto}", fg=COLOR_DIM)
        renderer.print_text(1, 2, game.inventory_text)

        player_cell = game.player_cell
        for cell in game.visible_cells():
            sx, sy = self.cell_origin(cell)
            cache = game.cache_at(cell)
            if cell is player_cell:
                glyph = " @ " if cache is None else f"@{len(cache):<2}"
                renderer.print_text(sx, sy, glyph, fg=COLOR_PLAYER)
            elif cache is not None:
                renderer.print_text(sx, sy, f"{len(cache):>2} ", fg=COLOR_CACHE)
            else:
                renderer.print_text(sx, sy, " . ", fg=COLOR_DIM)

        footer = renderer.height - 2
        if self.message:
            renderer.print_text(1, footer - 1, self.message, fg=COLOR_ALERT)
        renderer.print_text(
            1, footer,
            "[Arrows/WASD] Move  [Enter] Open cache  [G] Auto-position  [R] Reset  [ESC] Menu",
            fg=COLOR_DIM,
        )

    def ev_keydown(self, event: tcod.event.KeyDown) -> None:
        if self.confirm_reset:
            self.confirm_reset = False
            if event.sym == tcod.event.KeySym.Y:
                self.game.dispatch(ResetGame())
                self.message = "Game reset."
            else:
                self.message = ""
            return

        if event.sym == tcod.event.KeySym.ESCAPE:
            self.engine.change_state(MainMenuState(self.engine))
        elif event.sym == tcod.event.KeySym.RETURN:
            self.open_cache()
        elif event.sym == tcod.event.KeySym.G:
            enabled = not self.game.auto_positioning
            self.game.dispatch(SetAutoPositioning(enabled=enabled))
            if enabled and not self.game.auto_positioning:
                self.message = "Geolocation unavailable."
        elif event.sym == tcod.event.KeySym.R:
            self.confirm_reset = True
            self.message = "Erase all progress? [Y]es / any other key to cancel"
        elif event.sym in MOVE_KEYS:
            d_row, d_col = MOVE_KEYS[event.sym]
            self.game.dispatch(Move(d_row=d_row, d_col=d_col))
            self.message = ""

    def open_cache(self) -> None:
        cell = self.game.player_cell
        if self.game.cache_at(cell) is None:
            self.message = "No cache here."
            return
        self.engine.change_state(CachePanelState(self.engine, self, cell))


class CachePanelState(BaseState):
    """Popup over the map for one cache."""

    MAX_LISTED = 12

    def __init__(self, engine: Engine, parent_state: MapState, cell: Cell):
        super().__init__(engine)
        self.parent_state = parent_state
        self.cell = cell

    def coin_lines(self) -> List[str]:
        cache = self.game.cache_at(self.cell)
        if cache is None:
            return []
        lines = [coin.label for coin in cache.coins[: self.MAX_LISTED]]
        if len(cache) > self.MAX_LISTED:
            lines.append(f"... and {len(cache) - self.MAX_LISTED} more")
        return lines

    def on_render(self, renderer: Renderer) -> None:
        self.parent_state.on_render(renderer)

        cache = self.game.cache_at(self.cell)
        count = len(cache) if cache is not None else 0
        x, y, w, h = 10, 8, renderer.width - 20, self.MAX_LISTED + 8
        renderer.draw_panel(x, y, w, h, title=f"Cache ({self.cell.row},{self.cell.col})")
        renderer.print_text(x + 2, y + 2, f"It has {count} coin(s).")

        lines = self.coin_lines()
        if not lines:
            renderer.print_text(x + 2, y + 4, "(Empty)", fg=COLOR_DIM)
        for i, line in enumerate(lines):
            renderer.print_text(x + 2, y + 4 + i, f"- {line}", fg=COLOR_CACHE)

        if self.message:
            renderer.print_text(x + 2, y + h - 3, self.message, fg=COLOR_ALERT)
        renderer.print_text(x + 2, y + h - 2, "[C]ollect  [D]eposit  [ESC] Close", fg=COLOR_TEXT)

    def ev_keydown(self, event: tcod.event.KeyDown) -> None:
        if event.sym == tcod.event.KeySym.ESCAPE:
            self.engine.change_state(self.parent_state)
        elif event.sym == tcod.event.KeySym.C:
            changed = self.game.dispatch(CollectCoin(row=self.cell.row, col=self.cell.col))
            self.message = "" if changed else "This cache is empty."
        elif event.sym == tcod.event.KeySym.D:
            changed = self.game.dispatch(DepositCoin(row=self.cell.row, col=self.cell.col))
            self.message = "" if changed else "You have no coins to deposit."
