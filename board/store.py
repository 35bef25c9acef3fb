"""
Geocoin — board/store.py
CacheStore: the known/visible lifecycle of every cache.
=======================================================
Stack:       Python 3.11+ | stdlib logging
Status:      Core.

Architecture notes
------------------
- known_snapshots is the only durable representation of a cache. It is
  what gets written to the persistence gateway.
- visible_caches is a working set for the current scan. It is never
  persisted itself; release_visible() folds it back into known_snapshots.
- A cell seen for the first time gets its snapshot written immediately, so
  an untouched cache reloads identically even if generation ever changes.
- Once a cell is known it is always decoded, never regenerated.

Lifecycle
---------
    unknown --materialize--> visible (+ initial known snapshot)
    known   --materialize--> visible (decoded)
    visible --release------> known   (re-encoded; visible entry dropped)
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from board import momento
from board.cells import Cell, CellKey, CellRegistry, cell_key, format_cell_key, parse_cell_key
from board.errors import DecodeError, NotFoundError
from board.luck import COIN_COUNT_SALT
from board.pieces import Cache, create_cache
from engine.events import EVT_CACHE_MATERIALIZED, EventBus, emit

logger = logging.getLogger(__name__)


class CacheStore:
    def __init__(
        self,
        cells: CellRegistry,
        max_coins: int,
        coin_count_salt: str = COIN_COUNT_SALT,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.cells = cells
        self.max_coins = max_coins
        self.coin_count_salt = coin_count_salt
        self.bus = bus
        self.known_snapshots: Dict[CellKey, str] = {}
        self.visible_caches: Dict[CellKey, Cache] = {}

    # ----------------------------------------------------------
    # Lifecycle
    # ----------------------------------------------------------

    def materialize(self, cell: Cell, max_coins: Optional[int] = None) -> Cache:
        """Make the cache at cell visible, generating or decoding it as needed."""
        key = cell_key(cell)
        cache = self.visible_caches.get(key)
        if cache is not None:
            return cache

        origin = "restored"
        snapshot = self.known_snapshots.get(key)
        if snapshot is not None:
            try:
                cache = momento.decode(snapshot, cell, canonicalize=self.cells.canonicalize)
            except DecodeError as exc:
                # Regenerate; the scan continues.
                logger.warning("Discarding unreadable snapshot for %s: %s", format_cell_key(key), exc)
                cache = None

        if cache is None:
            origin = "generated"
            limit = self.max_coins if max_coins is None else max_coins
            cache = create_cache(cell, limit, self.coin_count_salt)
            self.known_snapshots[key] = momento.encode(cache)

        self.visible_caches[key] = cache
        emit(
            self.bus, EVT_CACHE_MATERIALIZED, "CacheStore",
            cell=[cell.x, cell.y], origin=origin, coins=len(cache.coins),
        )
        return cache

    def update_momento(self, cache: Cache) -> None:
        """Refresh the known snapshot of a single cache after a mutation."""
        self.known_snapshots[cell_key(cache.cell)] = momento.encode(cache)

    def commit_visible(self) -> None:
        """Checkpoint every visible cache into known_snapshots."""
        for key, cache in self.visible_caches.items():
            self.known_snapshots[key] = momento.encode(cache)

    def release_visible(self) -> None:
        """Commit, then forget the visible set. Call before every new scan."""
        self.commit_visible()
        self.visible_caches.clear()

    def discard_visible(self) -> None:
        """Forget the visible set without committing it. Used before loading a save."""
        self.visible_caches.clear()

    def lookup_visible(self, cell: Cell) -> Cache:
        key = cell_key(cell)
        try:
            return self.visible_caches[key]
        except KeyError:
            raise NotFoundError(
                f"Cell {format_cell_key(key)} is not in the current visible set; scan before lookup"
            ) from None

    def reset_all(self) -> None:
        """Hard reset: every cache returns to unknown."""
        self.known_snapshots.clear()
        self.visible_caches.clear()
        self.cells.clear()

    # ----------------------------------------------------------
    # Introspection
    # ----------------------------------------------------------

    def is_known(self, cell: Cell) -> bool:
        return cell_key(cell) in self.known_snapshots

    def is_visible(self, cell: Cell) -> bool:
        return cell_key(cell) in self.visible_caches

    @property
    def visible_cells(self) -> List[Cell]:
        return [cache.cell for cache in self.visible_caches.values()]

    # ----------------------------------------------------------
    # Persistence helpers (string-keyed, see engine/storage.py)
    # ----------------------------------------------------------

    def export_known(self) -> Dict[str, str]:
        return {format_cell_key(key): snap for key, snap in self.known_snapshots.items()}

    def import_known(self, table: Mapping[str, str]) -> int:
        """
        Merge a persisted table into known_snapshots. Entries with malformed
        keys are skipped. Returns the number of entries imported.
        """
        imported = 0
        for text, snapshot in table.items():
            try:
                key = parse_cell_key(text)
            except ValueError:
                logger.warning("Skipping persisted cache with malformed key %r", text)
                continue
            self.known_snapshots[key] = snapshot
            imported += 1
        return imported
