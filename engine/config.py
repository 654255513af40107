"""
Geocoin — engine/config.py
Game parameters loaded from TOML and validated by Pydantic.
=============================================================================================
Version:     0.2
Stack:       Python 3.14.3 | Pydantic v2 | tomllib
Status:      Core configuration layer.

Design Variables (defaults; override in data/config.toml)
---------------------------------------------------------
  tile_width          1e-4        — cell side in degrees
  visibility_radius   8           — neighborhood half-width in cells
  spawn_probability   0.1         — chance a cell holds a cache
  min_coins           1           — inclusive lower bound of initial coins
  max_coins           10          — exclusive upper bound of initial coins
  origin              Oakes classroom, UC Santa Cruz
  move_step           1           — cells per directional move
  storage_path        sessions/storage.json   — session save file (None: in memory)
  journal_path        sessions/journal.jsonl  — event journal (None: no journal)
Relative paths resolve against the working directory.
"""

import tomllib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from world.board import LatLng

DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_CONFIG_PATH = DATA_DIR / "config.toml"

# ================================================================================
# SCHEMAS
# ================================================================================

class OriginDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    lat: float = 36.98949379578401
    lng: float = -122.06277128548504

    def to_latlng(self) -> LatLng:
        return LatLng(self.lat, self.lng)


class GameConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    tile_width: float = Field(default=1e-4, gt=0)
    visibility_radius: int = Field(default=8, ge=0)
    spawn_probability: float = Field(default=0.1, ge=0.0, le=1.0)
    min_coins: int = Field(default=1, ge=0)
    max_coins: int = 10
    move_step: int = Field(default=1, ge=1)
    origin: OriginDef = Field(default_factory=OriginDef)
    storage_path: Optional[Path] = Path("sessions/storage.json")
    journal_path: Optional[Path] = Path("sessions/journal.jsonl")

    @model_validator(mode="after")
    def _check_coin_range(self) -> "GameConfig":
        if self.max_coins <= self.min_coins:
            raise ValueError(
                f"max_coins ({self.max_coins}) must exceed min_coins ({self.min_coins})"
            )
        return self

# ================================================================================
# LOADER & CACHE (JIT)
# ================================================================================

_CONFIG_CACHE: Optional[GameConfig] = None


def load_game_config(path: Path) -> GameConfig:
    """Reads and validates one config file. No caching."""
    if not path.exists():
        raise FileNotFoundError(f"Game config not found: {path}")

    with open(path, "rb") as f:
        data = tomllib.load(f)

    return GameConfig(**data.get("game", {}))


def get_game_config() -> GameConfig:
    """Loads data/config.toml once. Built-in defaults apply when the file is absent."""
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    if DEFAULT_CONFIG_PATH.exists():
        _CONFIG_CACHE = load_game_config(DEFAULT_CONFIG_PATH)
    else:
        _CONFIG_CACHE = GameConfig()
    return _CONFIG_CACHE
