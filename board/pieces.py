"""
Geocoin — board/pieces.py
Coins, caches, and the deterministic cache factory.
===================================================
Stack:       Python 3.11+ | stdlib
Status:      Core.

Coins and caches are plain records. Generation is a pure function of
(cell, salt, max_coins); callers only ever persist the current contents,
never the reason a cache started out the way it did.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

from board.cells import Cell
from board.luck import COIN_COUNT_SALT, sample


@dataclass(frozen=True)
class Coin:
    """
    cell is where the coin was first generated. It survives every transfer
    and snapshot, so it is always the coin's "home".
    """
    cell: Cell
    serial: int


@dataclass
class Cache:
    cell: Cell
    coins: List[Coin] = field(default_factory=list)


def create_coin(cell: Cell, serial: int) -> Coin:
    return Coin(cell=cell, serial=serial)


def coin_count(cell: Cell, max_coins: int, salt: str = COIN_COUNT_SALT) -> int:
    """Number of coins a fresh cache at cell starts with."""
    if max_coins < 0:
        raise ValueError(f"max_coins must be >= 0, got {max_coins}")
    return math.floor(sample([cell.x, cell.y], salt) * max_coins)


def create_cache(cell: Cell, max_coins: int, salt: str = COIN_COUNT_SALT) -> Cache:
    """Generate the initial contents of the cache at cell."""
    n = coin_count(cell, max_coins, salt)
    return Cache(cell=cell, coins=[create_coin(cell, i) for i in range(n)])


def coin_label(coin: Coin, tile_width: float) -> str:
    """Human-readable coin id: home position and serial."""
    return f"{coin.cell.x * tile_width:.4f}:{coin.cell.y * tile_width:.4f}, serial:{coin.serial}"
