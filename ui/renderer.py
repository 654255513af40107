"""
Geocoin — ui/renderer.py
TCOD Renderer: Terminal UI and view management.
===============================================
Version:     0.2
Stack:       Python 3.14.3 | tcod
Status:      Production-ready.
"""

from __future__ import annotations
from typing import Optional, Tuple
import tcod

Color = Tuple[int, int, int]

COLOR_TEXT: Color = (220, 220, 220)
COLOR_DIM: Color = (110, 110, 110)
COLOR_CACHE: Color = (255, 210, 60)
COLOR_PLAYER: Color = (0, 255, 255)
COLOR_ALERT: Color = (255, 90, 90)

class Renderer:
    """
    Manages the tcod root console and rendering loop.
    """
    def __init__(self, width: int, height: int, title: str = "Geocoin GO"):
        self.width = width
        self.height = height
        self.title = title
        self.root_console = tcod.console.Console(width, height)
        self.context: Optional[tcod.context.Context] = None

    def clear(self) -> None:
        """Clear the console with black."""
        self.root_console.clear()

    def print_text(self, x: int, y: int, text: str, fg: Color = COLOR_TEXT) -> None:
        """Prints text clipped to the console; off-screen rows are ignored."""
        if 0 <= y < self.height and 0 <= x < self.width:
            self.root_console.print(x, y, text[: self.width - x], fg=fg)

    def draw_panel(self, x: int, y: int, width: int, height: int, title: str = "") -> None:
        """A framed, cleared box for popups."""
        self.root_console.draw_frame(x, y, width, height, title=title, clear=True, fg=COLOR_TEXT, bg=(0, 0, 0))

    def present(self, context: tcod.context.Context) -> None:
        """Present the current console to the screen."""
        context.present(self.root_console)
