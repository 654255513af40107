"""
Geocoin — engine/commands.py
Player intents, processed one at a time by GameLoop.dispatch().
"""

from typing import Union

from pydantic import BaseModel, ConfigDict


class Move(BaseModel):
    """Step the player by whole cells (d_row north, d_col east)."""
    model_config = ConfigDict(frozen=True)
    d_row: int = 0
    d_col: int = 0


class MoveTo(BaseModel):
    model_config = ConfigDict(frozen=True)
    lat: float
    lng: float


class CollectCoin(BaseModel):
    model_config = ConfigDict(frozen=True)
    row: int
    col: int


class DepositCoin(BaseModel):
    model_config = ConfigDict(frozen=True)
    row: int
    col: int


class SetAutoPositioning(BaseModel):
    model_config = ConfigDict(frozen=True)
    enabled: bool


class ResetGame(BaseModel):
    model_config = ConfigDict(frozen=True)


Command = Union[Move, MoveTo, CollectCoin, DepositCoin, SetAutoPositioning, ResetGame]
