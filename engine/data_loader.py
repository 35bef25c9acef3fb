"""
Geocoin — engine/data_loader.py
JIT loader for board settings stored as TOML, validated by Pydantic.
====================================================================
Stack:       Python 3.11+ | Pydantic v2 | tomllib
Status:      Configuration layer.

Design Variables (defaults; override in data/board.toml)
---------------------------------------------------------
  tile_width          1e-4      degrees per cell edge
  visibility_radius   8         Chebyshev radius of a scan, in cells
  spawn_probability   0.1       per-cell chance of hosting a cache
  max_coins           100       upper bound (exclusive) on a fresh cache
  spawn_salt          "cacheSpawn"
  coin_count_salt     "initialValue"
  default_position    Oakes College classroom, Santa Cruz
  storage_path        "sessions/board_storage.json"
"""

import tomllib
from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from board.luck import COIN_COUNT_SALT, SPAWN_SALT

# ================================================================================
# SCHEMAS
# ================================================================================

OAKES_CLASSROOM_POSITION: Tuple[float, float] = (36.98949379578401, -122.06277128548504)

class BoardConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    tile_width: float = Field(default=1e-4, gt=0)
    visibility_radius: int = Field(default=8, ge=0)
    spawn_probability: float = Field(default=0.1, ge=0.0, le=1.0)
    max_coins: int = Field(default=100, ge=0)
    spawn_salt: str = SPAWN_SALT
    coin_count_salt: str = COIN_COUNT_SALT
    default_position: Tuple[float, float] = OAKES_CLASSROOM_POSITION
    storage_path: str = "sessions/board_storage.json"

# ================================================================================
# LOADERS & CACHE (JIT)
# ================================================================================

_BOARD_CONFIG_CACHE: Optional[BoardConfig] = None

DATA_DIR = Path(__file__).parent.parent / "data"

def load_board_config(path: Path) -> BoardConfig:
    """Loads board settings from a TOML file. Missing keys fall back to defaults."""
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return BoardConfig(**data.get("board", {}))

def get_board_config() -> BoardConfig:
    """Loads data/board.toml. Cached globally; defaults if the file is absent."""
    global _BOARD_CONFIG_CACHE
    if _BOARD_CONFIG_CACHE is not None:
        return _BOARD_CONFIG_CACHE

    path = DATA_DIR / "board.toml"
    if not path.exists():
        _BOARD_CONFIG_CACHE = BoardConfig()
        return _BOARD_CONFIG_CACHE

    _BOARD_CONFIG_CACHE = load_board_config(path)
    return _BOARD_CONFIG_CACHE
