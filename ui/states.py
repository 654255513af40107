"""
Geocoin — ui/states.py
Screen state machine over one GameLoop.

Screens read game state through self.game and change it only through
GameLoop.dispatch(). The Engine owns the GameLoop for the lifetime of the
window and closes it exactly once on the way out.
"""

from __future__ import annotations
from typing import Any, Callable

import tcod

from engine.loop import GameLoop
from ui.renderer import Renderer


class BaseState(tcod.event.EventDispatch[Any]):
    """A screen: renders the game and turns key presses into commands."""

    def __init__(self, engine: "Engine"):
        super().__init__()
        self.engine = engine
        self.message = ""

    @property
    def game(self) -> GameLoop:
        return self.engine.game

    def on_render(self, renderer: Renderer) -> None:
        pass

    def ev_quit(self, event: tcod.event.Quit) -> None:
        self.engine.running = False


StateFactory = Callable[["Engine"], BaseState]


class Engine:
    """
    Drives the window: render the active state, wait for input, dispatch.

    Usage:
        engine = Engine(Renderer(80, 30), GameLoop(), MainMenuState)
        engine.run()
    """

    def __init__(self, renderer: Renderer, game: GameLoop, initial_state: StateFactory):
        self.renderer = renderer
        self.game = game
        self.running = True
        self.active_state: BaseState = initial_state(self)

    def change_state(self, new_state: BaseState) -> None:
        self.active_state = new_state

    def frame(self) -> None:
        self.renderer.clear()
        self.active_state.on_render(self.renderer)

    def handle(self, event: tcod.event.Event) -> None:
        self.active_state.dispatch(event)

    def run(self) -> None:
        try:
            with tcod.context.new_terminal(
                self.renderer.width,
                self.renderer.height,
                title=self.renderer.title,
                vsync=True,
            ) as context:
                self.renderer.context = context
                while self.running:
                    self.frame()
                    self.renderer.present(context)
                    for event in tcod.event.wait():
                        self.handle(context.convert_event(event))
                        if not self.running:
                            break
        finally:
            self.game.close()
