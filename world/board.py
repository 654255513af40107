"""
Geocoin — world/board.py
Board: Flyweight factory for grid cells over a continuous lat/lng plane.
=========================================================================
Version:     0.3  (Phase 3 — Neighborhood Culling)
Stack:       Python 3.14.3 | stdlib math
Status:      Production-ready.

Architecture notes
------------------
- Exactly one Cell instance exists per (row, col) for the lifetime of a
  Board. Callers may compare cells with `is`, `==`, or by cell_key().
- A cell's anchor is its south-west corner.
- Rows and columns are derived with floor(), so -0.5 tiles lands in row -1,
  never row 0.
- The registry is never pruned.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Cell:
    row: int
    col: int


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True)
class Bounds:
    sw: LatLng
    ne: LatLng

    def contains(self, point: LatLng) -> bool:
        """Half-open containment: the south and west edges belong to the cell."""
        return (self.sw.lat <= point.lat < self.ne.lat
                and self.sw.lng <= point.lng < self.ne.lng)


def cell_key(cell: Cell) -> str:
    """String identity of a cell, e.g. "369894,-1220628"."""
    return f"{cell.row},{cell.col}"


def parse_cell_key(key: str) -> Tuple[int, int]:
    """Inverse of cell_key(). Raises ValueError on malformed keys."""
    row, col = key.split(",")
    return int(row), int(col)


class Board:
    """
    Canonicalizes grid coordinates into shared Cell instances and maps
    between cells and the continuous plane.
    """

    def __init__(self, tile_width: float, tile_visibility_radius: int):
        self.tile_width = tile_width
        self.tile_visibility_radius = tile_visibility_radius
        self._known_cells: Dict[Tuple[int, int], Cell] = {}

    def canonicalize(self, row: int, col: int) -> Cell:
        """Returns the unique Cell for (row, col), registering it on first request."""
        key = (row, col)
        cell = self._known_cells.get(key)
        if cell is None:
            cell = Cell(row, col)
            self._known_cells[key] = cell
        return cell

    def cell_for_point(self, point: LatLng) -> Cell:
        return self.canonicalize(
            math.floor(point.lat / self.tile_width),
            math.floor(point.lng / self.tile_width),
        )

    def cell_bounds(self, cell: Cell) -> Bounds:
        w = self.tile_width
        return Bounds(
            sw=LatLng(cell.row * w, cell.col * w),
            ne=LatLng((cell.row + 1) * w, (cell.col + 1) * w),
        )

    def cells_within(self, center: Cell, radius: int) -> List[Cell]:
        """
        Square neighborhood of side 2*radius + 1 around center.
        Both ends are inclusive so the block is symmetric about the center.
        """
        cells = []
        for d_row in range(-radius, radius + 1):
            for d_col in range(-radius, radius + 1):
                cells.append(self.canonicalize(center.row + d_row, center.col + d_col))
        return cells

    def cells_near_point(self, point: LatLng) -> List[Cell]:
        """All cells inside the visibility radius of the cell containing point."""
        return self.cells_within(self.cell_for_point(point), self.tile_visibility_radius)

    @property
    def known_cell_count(self) -> int:
        return len(self._known_cells)
