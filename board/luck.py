"""
Geocoin — board/luck.py
Deterministic draws for procedural placement.

Python's built-in hash() of strings is salted per process, so draws are
derived from SHA-256 instead to stay stable across restarts.
"""

from __future__ import annotations

import hashlib
from typing import Sequence, Union

# Presence and coin count use separate salts so that whether a cell hosts
# a cache is uncorrelated with how many coins it starts with.
SPAWN_SALT: str = "cacheSpawn"
COIN_COUNT_SALT: str = "initialValue"

# 53 bits fit a double exactly, so the result never rounds up to 1.0.
_UNIT_SCALE = float(1 << 53)


def luck(key: str) -> float:
    """Map a string key to a reproducible float in [0, 1)."""
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return (int.from_bytes(digest[:8], byteorder="big") >> 11) / _UNIT_SCALE


def sample(coordinates: Sequence[Union[int, float, str]], salt: str) -> float:
    """
    Deterministic draw for a coordinate tuple under a salt.

    The key is the comma-joined coordinates followed by the salt, e.g.
    sample([3, 4], "initialValue") hashes "3,4,initialValue".
    """
    key = ",".join(str(c) for c in [*coordinates, salt])
    return luck(key)
