"""
Geocoin — engine/loop.py
GameSession: the application context that owns a board and its player.
======================================================================
Stack:       Python 3.11+ | python-tcod-ecs
Status:      Integration entry point.

Architecture notes
------------------
- There is no ambient board. A GameSession owns the CellRegistry,
  CacheStore, EventBus, storage and the ECS registry holding the player,
  and hands them to the board functions explicitly.
- Every redraw releases the previous visible set before scanning, and every
  save commits visible caches before writing. Both orderings are enforced
  here so renderers cannot get them wrong.
- Renderers subscribe to the bus (EVT_SCAN_COMPLETED, EVT_CACHE_MUTATED,
  ...) and pull caches with cache_at().
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

import tcod.ecs

from board import ledger
from board.cells import Cell, CellRegistry, cell_bounds
from board.pieces import Cache, Coin, coin_label
from board.scanner import VisibilityScanner
from board.store import CacheStore
from engine.components import PLAYER_TAG, CoinPurse, GeoPosition
from engine.data_loader import BoardConfig, get_board_config
from engine.events import (
    EVT_BOARD_RESET,
    EVT_CACHE_MUTATED,
    EVT_PLAYER_MOVED,
    EVT_SCAN_COMPLETED,
    EVT_SESSION_LOADED,
    EVT_SESSION_SAVED,
    EventBus,
    emit,
)
from engine.storage import BoardStorage, FileKeyValueStore

# Unit steps for the four movement buttons, in tiles (lat, lng).
DIRECTIONS: Dict[str, Tuple[int, int]] = {
    "north": (1, 0),
    "south": (-1, 0),
    "west": (0, -1),
    "east": (0, 1),
}

class GameSession:
    def __init__(
        self,
        config: Optional[BoardConfig] = None,
        storage: Optional[BoardStorage] = None,
        bus: Optional[EventBus] = None,
    ) -> None:
        self.config = config if config is not None else get_board_config()
        if storage is None:
            storage = BoardStorage(FileKeyValueStore(Path(self.config.storage_path)))
        self.storage = storage
        self.bus = bus if bus is not None else EventBus()

        self.cells = CellRegistry()
        self.store = CacheStore(
            self.cells,
            max_coins=self.config.max_coins,
            coin_count_salt=self.config.coin_count_salt,
            bus=self.bus,
        )
        self.scanner = VisibilityScanner(self.config)

        self.registry = tcod.ecs.Registry()
        self.player = self.registry.new_entity()
        self.player.tags.add(PLAYER_TAG)
        self.player.components[GeoPosition] = GeoPosition(*self.config.default_position)
        self.player.components[CoinPurse] = CoinPurse()

        self.visible_cells: List[Cell] = []
        self.previous_cell: Optional[Cell] = None  # cell of the last redraw

    # ----------------------------------------------------------
    # Player state
    # ----------------------------------------------------------

    @property
    def position(self) -> Tuple[float, float]:
        return self.player.components[GeoPosition].as_point()

    @property
    def player_coins(self) -> List[Coin]:
        return self.player.components[CoinPurse].coins

    @property
    def current_cell(self) -> Cell:
        lat, lng = self.position
        return self.cells.cell_for_point(lat, lng, self.config.tile_width)

    def set_position(self, lat: float, lng: float) -> None:
        self.player.components[GeoPosition] = GeoPosition(lat, lng)
        emit(self.bus, EVT_PLAYER_MOVED, "GameSession", lat=lat, lng=lng)

    # ----------------------------------------------------------
    # Visibility
    # ----------------------------------------------------------

    def redraw(self) -> List[Cell]:
        """Release the last visible set and scan around the player."""
        self.visible_cells = self.scanner.rescan(self.position, self.store)
        self.previous_cell = self.current_cell
        emit(
            self.bus, EVT_SCAN_COMPLETED, "GameSession",
            cells=[[c.x, c.y] for c in self.visible_cells],
        )
        return self.visible_cells

    def move_player(self, d_lat: float, d_lng: float) -> List[Cell]:
        lat, lng = self.position
        self.set_position(lat + d_lat, lng + d_lng)
        return self.redraw()

    def step(self, direction: str) -> List[Cell]:
        """Move one tile north/south/east/west."""
        try:
            di, dj = DIRECTIONS[direction]
        except KeyError:
            raise ValueError(f"Unknown direction: {direction!r}") from None
        tile = self.config.tile_width
        return self.move_player(di * tile, dj * tile)

    def on_location_found(self, lat: float, lng: float) -> bool:
        """
        Device geolocation update. Redraws only when the player entered a
        different cell. Returns True if it did.
        """
        cell = self.cells.cell_for_point(lat, lng, self.config.tile_width)
        if cell is self.previous_cell:
            return False
        self.set_position(lat, lng)
        self.redraw()
        return True

    def cache_at(self, cell: Cell) -> Cache:
        return self.store.lookup_visible(cell)

    # ----------------------------------------------------------
    # Coin transfer
    # ----------------------------------------------------------

    def collect(self, cell: Cell) -> bool:
        """Take the top coin of the cache at cell."""
        cache = self.cache_at(cell)
        moved = ledger.collect(self.store, cache, self.player_coins)
        if moved:
            self._cache_mutated(cache, "collect")
        return moved

    def deposit(self, cell: Cell) -> bool:
        """Drop the player's most recent coin into the cache at cell."""
        cache = self.cache_at(cell)
        moved = ledger.deposit(self.store, self.player_coins, cache)
        if moved:
            self._cache_mutated(cache, "deposit")
        return moved

    def _cache_mutated(self, cache: Cache, action: str) -> None:
        emit(
            self.bus, EVT_CACHE_MUTATED, "GameSession",
            cell=[cache.cell.x, cache.cell.y],
            action=action,
            cache_coins=len(cache.coins),
            player_coins=len(self.player_coins),
        )

    # ----------------------------------------------------------
    # Renderer helpers
    # ----------------------------------------------------------

    def locate_home(self, coin: Coin) -> Tuple[float, float]:
        """Continuous position of the cell the coin was originally generated in."""
        tile = self.config.tile_width
        return (coin.cell.x * tile, coin.cell.y * tile)

    def cell_bounds(self, cell: Cell) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        return cell_bounds(cell, self.config.tile_width)

    def coin_label(self, coin: Coin) -> str:
        return coin_label(coin, self.config.tile_width)

    # ----------------------------------------------------------
    # Session lifecycle
    # ----------------------------------------------------------

    def save_session(self) -> bool:
        """Commit visible caches, then write everything durable through storage."""
        self.store.commit_visible()
        saved = self.storage.save(self.store, self.player_coins, self.position)
        if saved:
            emit(self.bus, EVT_SESSION_SAVED, "GameSession", known_caches=len(self.store.known_snapshots))
        return saved

    def resume_session(self) -> List[Cell]:
        """Restore position, known caches and coins from storage, then redraw."""
        # Caches scanned before the load are stale; drop them uncommitted.
        self.store.discard_visible()
        self.previous_cell = None
        state = self.storage.load(self.store)
        lat, lng = state.position if state.position is not None else self.config.default_position
        self.set_position(lat, lng)
        self.player_coins[:] = state.coins
        emit(
            self.bus, EVT_SESSION_LOADED, "GameSession",
            known_caches=state.known_caches, player_coins=len(state.coins),
        )
        return self.redraw()

    def reset(self) -> List[Cell]:
        """Player-initiated restart: forget every cache, coin and saved value."""
        self.set_position(*self.config.default_position)
        self.player_coins.clear()
        self.store.reset_all()
        self.storage.clear()
        self.previous_cell = None
        emit(self.bus, EVT_BOARD_RESET, "GameSession")
        return self.redraw()
