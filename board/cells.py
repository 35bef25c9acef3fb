"""
Geocoin — board/cells.py
CellRegistry: canonical cell identities for an unbounded grid.
==============================================================
Stack:       Python 3.11+ | stdlib
Status:      Core.

Every continuous position is converted to a cell here and nowhere else, so
two callers that land in the same tile always share the same Cell object.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple

CellKey = Tuple[int, int]


@dataclass(frozen=True)
class Cell:
    x: int
    y: int


def cell_key(cell: Cell) -> CellKey:
    """Composite in-memory key for a cell."""
    return (cell.x, cell.y)


def format_cell_key(key: CellKey) -> str:
    """Persisted form of a key: decimal, comma-separated."""
    return f"{key[0]},{key[1]}"


def parse_cell_key(text: str) -> CellKey:
    """Inverse of format_cell_key. Raises ValueError on malformed text."""
    parts = text.split(",")
    if len(parts) != 2:
        raise ValueError(f"Malformed cell key: {text!r}")
    return (int(parts[0]), int(parts[1]))


class CellRegistry:
    """
    Hands out one shared Cell per (x, y).

    Entries live for the registry's lifetime; growth is bounded by the
    area actually visited. clear() is reserved for a hard reset.
    """

    def __init__(self) -> None:
        self._cells: Dict[CellKey, Cell] = {}

    def canonicalize(self, x: int, y: int) -> Cell:
        key = (x, y)
        cell = self._cells.get(key)
        if cell is None:
            cell = Cell(x, y)
            self._cells[key] = cell
        return cell

    def cell_for_point(self, px: float, py: float, tile_width: float) -> Cell:
        """Floor-divides a continuous position by tile_width and canonicalizes."""
        return self.canonicalize(
            math.floor(px / tile_width),
            math.floor(py / tile_width),
        )

    def neighborhood(self, center: Cell, radius: int) -> Iterator[Cell]:
        """
        Yields the canonical cells of the square of Chebyshev radius around
        center, dx outer and dy inner.
        """
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                yield self.canonicalize(center.x + dx, center.y + dy)

    def clear(self) -> None:
        self._cells.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._cells

    def __len__(self) -> int:
        return len(self._cells)


def cell_bounds(cell: Cell, tile_width: float) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Continuous corners (south-west, north-east) of a cell's tile."""
    return (
        (cell.x * tile_width, cell.y * tile_width),
        ((cell.x + 1) * tile_width, (cell.y + 1) * tile_width),
    )
