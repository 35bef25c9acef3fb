"""
Geocoin — engine/storage.py
Persistence gateway: saving and restoring a board between sessions.
===================================================================
Stack:       Python 3.11+ | Pydantic v2 | stdlib json, logging
Status:      Session boundary.

Architecture notes
------------------
- The gateway is a synchronous string key-value surface (get/set/remove).
  MemoryKeyValueStore backs tests; FileKeyValueStore keeps a JSON object on
  disk in the manner of browser localStorage.
- The whole known-snapshot table is one value under KEY_KNOWN_CACHES:
      {"cacheKeys": ["x,y", ...], "caches": ["<momento>", ...]}
  One atomic read and write per session boundary.
- Failures stop here. A failed save is logged and reported as False; a
  failed or corrupt load behaves like a first run.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from board.errors import DecodeError, PersistenceError
from board.momento import decode_coins, encode_coins
from board.pieces import Coin
from board.store import CacheStore

logger = logging.getLogger(__name__)

KEY_KNOWN_CACHES = "playerCaches"
KEY_PLAYER_COINS = "playerCoins"
KEY_CURRENT_POSITION = "currentPosition"

ALL_KEYS = (KEY_KNOWN_CACHES, KEY_PLAYER_COINS, KEY_CURRENT_POSITION)

# ============================================================
# GATEWAYS
# ============================================================

class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-process gateway. Survives as long as the object does."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


class FileKeyValueStore:
    """
    Gateway backed by a single JSON object on disk.
    Every set/remove rewrites the file through a temp file and os.replace.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Cannot read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not hold a key-value object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Cannot write {self.path}: {exc}") from exc

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        if value is not None and not isinstance(value, str):
            raise PersistenceError(f"Value under {key!r} in {self.path} is not a string")
        return value

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

# ============================================================
# SCHEMAS
# ============================================================

class KnownCacheTable(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    cache_keys: List[str] = Field(alias="cacheKeys")
    caches: List[str]

    @model_validator(mode="after")
    def _parallel(self) -> "KnownCacheTable":
        if len(self.cache_keys) != len(self.caches):
            raise ValueError("cacheKeys and caches must be the same length")
        return self


class SavedPosition(BaseModel):
    lat: float
    lng: float


@dataclass
class SavedState:
    """What load() recovered. Empty on a first run."""
    position: Optional[Tuple[float, float]] = None
    coins: List[Coin] = field(default_factory=list)
    known_caches: int = 0

# ============================================================
# BOARD STORAGE
# ============================================================

class BoardStorage:
    def __init__(self, gateway: KeyValueStore) -> None:
        self.gateway = gateway

    def save(self, store: CacheStore, coins: Sequence[Coin], position: Tuple[float, float]) -> bool:
        """
        Write the known table, player coins and position.
        The caller commits visible caches first; visible state is not saved.
        """
        known = store.export_known()
        table = KnownCacheTable(cache_keys=list(known.keys()), caches=list(known.values()))
        try:
            self.gateway.set(KEY_KNOWN_CACHES, table.model_dump_json(by_alias=True))
            self.gateway.set(KEY_PLAYER_COINS, encode_coins(coins))
            self.gateway.set(
                KEY_CURRENT_POSITION,
                SavedPosition(lat=position[0], lng=position[1]).model_dump_json(),
            )
        except PersistenceError as exc:
            logger.error("Error saving board: %s", exc)
            return False
        return True

    def load(self, store: CacheStore) -> SavedState:
        """Merge the saved known table into store and return the rest."""
        state = SavedState()
        try:
            raw_known = self.gateway.get(KEY_KNOWN_CACHES)
            raw_coins = self.gateway.get(KEY_PLAYER_COINS)
            raw_position = self.gateway.get(KEY_CURRENT_POSITION)
        except PersistenceError as exc:
            logger.warning("Saved board unavailable, starting fresh: %s", exc)
            return state

        if raw_known:
            try:
                table = KnownCacheTable.model_validate_json(raw_known)
            except ValidationError as exc:
                logger.warning("Ignoring corrupt cache table: %d error(s)", exc.error_count())
            else:
                state.known_caches = store.import_known(dict(zip(table.cache_keys, table.caches)))

        if raw_coins:
            try:
                state.coins = decode_coins(raw_coins, canonicalize=store.cells.canonicalize)
            except DecodeError as exc:
                logger.warning("Ignoring corrupt player coins: %s", exc)

        if raw_position:
            try:
                saved = SavedPosition.model_validate_json(raw_position)
            except ValidationError as exc:
                logger.warning("Ignoring corrupt player position: %d error(s)", exc.error_count())
            else:
                state.position = (saved.lat, saved.lng)

        return state

    def clear(self) -> bool:
        try:
            for key in ALL_KEYS:
                self.gateway.remove(key)
        except PersistenceError as exc:
            logger.error("Error clearing saved board: %s", exc)
            return False
        return True
