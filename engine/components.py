"""
Geocoin — engine/components.py
ECS component definitions for python-tcod-ecs.
==============================================
Stack:       Python 3.11+ | python-tcod-ecs
Status:      Player state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Tuple

from board.pieces import Coin

PLAYER_TAG = "player"

@dataclass
class GeoPosition:
    lat: float
    lng: float

    def as_point(self) -> Tuple[float, float]:
        return (self.lat, self.lng)

@dataclass
class CoinPurse:
    coins: List[Coin] = field(default_factory=list)
