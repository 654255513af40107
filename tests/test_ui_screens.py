import tcod.event

from engine.config import GameConfig
from engine.loop import GameLoop
from engine.session import MemoryStorage
from ui.renderer import Renderer
from ui.states import Engine
from ui.screens import MAP_X, MAP_Y, CELL_W, CachePanelState, MainMenuState, MapState
from world.board import LatLng

def _key(sym):
    return tcod.event.KeyDown(sym=sym, scancode=0, mod=tcod.event.Modifier.NONE)

def _center(game, cell):
    bounds = game.board.cell_bounds(cell)
    return LatLng((bounds.sw.lat + bounds.ne.lat) / 2, (bounds.sw.lng + bounds.ne.lng) / 2)

def _setup():
    game = GameLoop(config=GameConfig(journal_path=None), storage=MemoryStorage())
    renderer = Renderer(80, 30)
    engine = Engine(renderer, game, MainMenuState)
    return game, renderer, engine

def test_menu_continue_opens_map():
    game, renderer, engine = _setup()
    engine.active_state.dispatch(_key(tcod.event.KeySym.C))
    assert isinstance(engine.active_state, MapState)
    assert engine.active_state.game is game

def test_menu_quit_stops_engine():
    _, _, engine = _setup()
    engine.active_state.dispatch(_key(tcod.event.KeySym.Q))
    assert engine.running is False

def test_map_draws_player_at_center():
    game, renderer, engine = _setup()
    state = MapState(engine)
    state.on_render(renderer)

    radius = game.board.tile_visibility_radius
    assert state.cell_origin(game.player_cell) == (MAP_X + radius * CELL_W, MAP_Y + radius)
    block = "".join(chr(c) for c in renderer.root_console.ch[MAP_Y + radius, MAP_X + radius * CELL_W:][:CELL_W])
    assert "@" in block

def test_arrow_key_moves_player_north():
    game, renderer, engine = _setup()
    state = MapState(engine)
    start = game.player_cell

    state.dispatch(_key(tcod.event.KeySym.UP))

    assert game.player_cell.row == start.row + game.config.move_step
    assert game.player_cell.col == start.col

def test_enter_on_empty_cell_reports():
    game, renderer, engine = _setup()
    empty = next(c for c in game.visible_cells() if not game.spawns(c))
    game.move_to(_center(game, empty))
    state = MapState(engine)
    engine.change_state(state)

    state.dispatch(_key(tcod.event.KeySym.RETURN))

    assert engine.active_state is state
    assert state.message == "No cache here."

def test_cache_panel_collects_and_closes():
    game, renderer, engine = _setup()
    cell = game.cache_cells()[0]
    game.move_to(_center(game, cell))
    state = MapState(engine)
    engine.change_state(state)

    state.dispatch(_key(tcod.event.KeySym.RETURN))
    panel = engine.active_state
    assert isinstance(panel, CachePanelState)
    assert panel.cell is cell

    before = len(game.cache_at(cell))
    panel.dispatch(_key(tcod.event.KeySym.C))
    assert len(game.cache_at(cell)) == before - 1
    assert len(game.inventory) == 1

    panel.on_render(renderer)
    panel.dispatch(_key(tcod.event.KeySym.ESCAPE))
    assert engine.active_state is state

def test_reset_requires_confirmation():
    game, renderer, engine = _setup()
    state = MapState(engine)
    state.dispatch(_key(tcod.event.KeySym.UP))

    state.dispatch(_key(tcod.event.KeySym.R))
    state.dispatch(_key(tcod.event.KeySym.N))
    assert game.position != game.origin

    state.dispatch(_key(tcod.event.KeySym.R))
    state.dispatch(_key(tcod.event.KeySym.Y))
    assert game.position == game.origin

def test_quit_event_stops_engine_from_any_state():
    game, renderer, engine = _setup()
    engine.change_state(MapState(engine))
    engine.handle(tcod.event.Quit())
    assert engine.running is False

def test_frame_renders_active_state():
    game, renderer, engine = _setup()
    engine.frame()
    text = "".join(chr(c) for c in renderer.root_console.ch.flatten())
    assert "Geocoin GO" in text
    assert game.inventory_text in text

def test_cache_panel_reports_no_op_deposit():
    game, renderer, engine = _setup()
    cell = game.cache_cells()[0]
    game.move_to(_center(game, cell))
    panel = CachePanelState(engine, MapState(engine), cell)

    panel.dispatch(_key(tcod.event.KeySym.D))

    assert panel.message == "You have no coins to deposit."
    panel.dispatch(_key(tcod.event.KeySym.C))
    assert panel.message == ""
