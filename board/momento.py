"""
Geocoin — board/momento.py
MomentoCodec: cache <-> snapshot text.
======================================
Stack:       Python 3.11+ | Pydantic v2
Status:      Core.

Snapshot format
---------------
    {"coins": [{"cell": {"x": int, "y": int}, "serial": int}, ...]}

Order is preserved on decode. A coin record may name a cell other than the
cache that holds it (it was deposited there); decoding keeps the coin's own
cell so "locate home" keeps pointing at its original spawn.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter, ValidationError

from board.cells import Cell
from board.errors import DecodeError
from board.pieces import Cache, Coin

Canonicalizer = Callable[[int, int], Cell]

# ================================================================================
# SCHEMAS
# ================================================================================

class CellRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    x: StrictInt
    y: StrictInt

class CoinRecord(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    cell: CellRecord
    serial: StrictInt = Field(ge=0)

class CacheMomento(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")
    coins: List[CoinRecord]

_COIN_LIST = TypeAdapter(List[CoinRecord])

# ================================================================================
# CONVERSION
# ================================================================================

def _to_record(coin: Coin) -> CoinRecord:
    return CoinRecord(cell=CellRecord(x=coin.cell.x, y=coin.cell.y), serial=coin.serial)

def _from_record(record: CoinRecord, canonicalize: Optional[Canonicalizer]) -> Coin:
    if canonicalize is not None:
        cell = canonicalize(record.cell.x, record.cell.y)
    else:
        cell = Cell(record.cell.x, record.cell.y)
    return Coin(cell=cell, serial=record.serial)

def encode(cache: Cache) -> str:
    """Serialize a cache's coin sequence."""
    return CacheMomento(coins=[_to_record(c) for c in cache.coins]).model_dump_json()

def decode(snapshot: str, owner_cell: Cell, canonicalize: Optional[Canonicalizer] = None) -> Cache:
    """
    Rebuild the cache at owner_cell from a snapshot.

    canonicalize, when given, is used to intern each coin's home cell
    (normally CellRegistry.canonicalize). Raises DecodeError on anything
    that is not a well-formed snapshot.
    """
    if not isinstance(snapshot, (str, bytes)):
        raise DecodeError(f"Snapshot for {owner_cell} is not text: {type(snapshot).__name__}")
    try:
        momento = CacheMomento.model_validate_json(snapshot)
    except ValidationError as exc:
        raise DecodeError(f"Malformed snapshot for {owner_cell}: {exc.error_count()} error(s)") from exc
    return Cache(cell=owner_cell, coins=[_from_record(r, canonicalize) for r in momento.coins])

def encode_coins(coins: Sequence[Coin]) -> str:
    """Serialize a bare coin list (the player's holdings)."""
    return _COIN_LIST.dump_json([_to_record(c) for c in coins]).decode("utf-8")

def decode_coins(text: str, canonicalize: Optional[Canonicalizer] = None) -> List[Coin]:
    if not isinstance(text, (str, bytes)):
        raise DecodeError(f"Coin list is not text: {type(text).__name__}")
    try:
        records = _COIN_LIST.validate_json(text)
    except ValidationError as exc:
        raise DecodeError(f"Malformed coin list: {exc.error_count()} error(s)") from exc
    return [_from_record(r, canonicalize) for r in records]
