"""
Geocoin — board/ledger.py
CoinLedger: the single primitive for moving coins.

Collect and deposit are the same stack transfer with the arguments swapped.
Every successful transfer into or out of a cache refreshes that cache's
snapshot right away, so a mutation can never live only in the visible set.
"""

from __future__ import annotations

from typing import List

from board.pieces import Cache, Coin
from board.store import CacheStore


def transfer(source: List[Coin], destination: List[Coin]) -> bool:
    """Move the last coin of source onto the end of destination."""
    if not source:
        return False
    destination.append(source.pop())
    return True


def collect(store: CacheStore, cache: Cache, holdings: List[Coin]) -> bool:
    """Cache -> player."""
    moved = transfer(cache.coins, holdings)
    if moved:
        store.update_momento(cache)
    return moved


def deposit(store: CacheStore, holdings: List[Coin], cache: Cache) -> bool:
    """Player -> cache."""
    moved = transfer(holdings, cache.coins)
    if moved:
        store.update_momento(cache)
    return moved
