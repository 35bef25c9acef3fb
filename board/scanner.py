"""
Geocoin — board/scanner.py
VisibilityScanner: which cells around the player host a cache.
==============================================================
Stack:       Python 3.11+ | stdlib
Status:      Core.

Architecture notes
------------------
- Radius is Chebyshev distance: the sweep covers a square, not a disk.
- Sweep order is dx outer, dy inner. The returned order follows it and is
  stable for a given center.
- The store must have an empty visible set before a scan starts
  (release_visible() for the previous center). Otherwise caches from two
  positions would be committed together under stale keys.
"""

from __future__ import annotations

from typing import List, Tuple

from board.cells import Cell
from board.errors import StaleVisibleError
from board.luck import SPAWN_SALT, sample
from board.store import CacheStore
from engine.data_loader import BoardConfig

Point = Tuple[float, float]


def hosts_cache(cell: Cell, spawn_probability: float, spawn_salt: str = SPAWN_SALT) -> bool:
    """Deterministic presence test for a single cell."""
    return sample([cell.x, cell.y], spawn_salt) < spawn_probability


def scan(
    center: Point,
    radius: int,
    spawn_probability: float,
    max_coins: int,
    store: CacheStore,
    *,
    tile_width: float = 1.0,
    spawn_salt: str = SPAWN_SALT,
) -> List[Cell]:
    """
    Materialize every cache within radius cells of center and return their
    cells in sweep order. Commits the store once the sweep is done.
    """
    if store.visible_caches:
        raise StaleVisibleError(
            f"{len(store.visible_caches)} cache(s) still visible; release_visible() before scanning"
        )

    cells = store.cells
    center_cell = cells.cell_for_point(center[0], center[1], tile_width)

    result: List[Cell] = []
    for cell in cells.neighborhood(center_cell, radius):
        if hosts_cache(cell, spawn_probability, spawn_salt):
            result.append(cell)
            store.materialize(cell, max_coins)

    store.commit_visible()
    return result


class VisibilityScanner:
    """scan() with its tuning bound from a BoardConfig."""

    def __init__(self, config: BoardConfig) -> None:
        self.config = config

    def scan(self, center: Point, store: CacheStore) -> List[Cell]:
        return scan(
            center,
            self.config.visibility_radius,
            self.config.spawn_probability,
            self.config.max_coins,
            store,
            tile_width=self.config.tile_width,
            spawn_salt=self.config.spawn_salt,
        )

    def rescan(self, center: Point, store: CacheStore) -> List[Cell]:
        """Release the previous visible set, then scan at center."""
        store.release_visible()
        return self.scan(center, store)
