"""
Geocoin — run.py
Main entry point for the Geocoin GO terminal client.
"""

import sys
from pathlib import Path

# Ensure we can import geocoin packages
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))

from engine.loop import GameLoop
from ui.renderer import Renderer
from ui.states import Engine
from ui.screens import MainMenuState

def main():
    game = GameLoop()
    renderer = Renderer(width=80, height=30, title="Geocoin GO")
    engine = Engine(renderer=renderer, game=game, initial_state=MainMenuState)
    engine.run()

if __name__ == "__main__":
    main()
