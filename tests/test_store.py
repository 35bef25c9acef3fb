import logging
import pytest
from board.cells import CellRegistry
from board.errors import NotFoundError
from board.momento import encode
from board.pieces import Coin, create_cache
from board.store import CacheStore
from engine.events import EVT_CACHE_MATERIALIZED, EventBus

def _store(max_coins=50, bus=None):
    return CacheStore(CellRegistry(), max_coins=max_coins, bus=bus)

def _cell_with_coins(store, minimum=1):
    for x in range(100):
        cell = store.cells.canonicalize(x, 0)
        if len(create_cache(cell, store.max_coins).coins) >= minimum:
            return cell
    raise AssertionError("no cell with enough coins")

def test_materialize_unknown_generates_and_writes_snapshot():
    store = _store()
    cell = store.cells.canonicalize(3, 4)
    assert store.is_known(cell) is False

    cache = store.materialize(cell)

    assert cache.coins == create_cache(cell, 50).coins
    assert store.is_known(cell)
    assert store.is_visible(cell)
    assert store.known_snapshots[(3, 4)] == encode(cache)

def test_materialize_is_idempotent_while_visible():
    store = _store()
    cell = _cell_with_coins(store)
    first = store.materialize(cell)
    first.coins.pop()
    second = store.materialize(cell)
    assert second is first
    assert len(store.visible_caches) == 1

def test_materialize_known_decodes_instead_of_regenerating():
    store = _store()
    cell = _cell_with_coins(store, minimum=2)
    cache = store.materialize(cell)
    original = len(cache.coins)
    cache.coins.pop()
    store.release_visible()

    restored = store.materialize(cell)
    assert restored is not cache
    assert len(restored.coins) == original - 1
    assert restored.coins == cache.coins

def test_max_coins_override():
    store = _store(max_coins=50)
    cell = store.cells.canonicalize(1, 1)
    assert store.materialize(cell, max_coins=0).coins == []

def test_corrupt_snapshot_falls_back_to_generation(caplog):
    store = _store()
    cell = store.cells.canonicalize(5, 6)
    store.known_snapshots[(5, 6)] = "{broken"

    with caplog.at_level(logging.WARNING, logger="board.store"):
        cache = store.materialize(cell)

    assert cache.coins == create_cache(cell, 50).coins
    assert store.known_snapshots[(5, 6)] == encode(cache)
    assert "5,6" in caplog.text

def test_commit_visible_keeps_visible_set():
    store = _store()
    cell = _cell_with_coins(store)
    cache = store.materialize(cell)
    cache.coins.clear()
    store.commit_visible()
    assert store.is_visible(cell)
    assert store.known_snapshots[(cell.x, cell.y)] == '{"coins":[]}'

def test_release_visible_commits_and_clears():
    store = _store()
    cell = _cell_with_coins(store)
    cache = store.materialize(cell)
    cache.coins.append(Coin(store.cells.canonicalize(-9, -9), 0))
    store.release_visible()

    assert store.visible_caches == {}
    assert store.visible_cells == []
    assert store.materialize(cell).coins[-1] == Coin(store.cells.canonicalize(-9, -9), 0)

def test_lookup_visible():
    store = _store()
    cell = store.cells.canonicalize(0, 0)
    cache = store.materialize(cell)
    assert store.lookup_visible(cell) is cache

    store.release_visible()
    with pytest.raises(NotFoundError):
        store.lookup_visible(cell)

def test_lookup_visible_unknown_is_key_error():
    store = _store()
    with pytest.raises(KeyError) as info:
        store.lookup_visible(store.cells.canonicalize(8, 8))
    assert "8,8" in str(info.value)

def test_update_momento_refreshes_single_cache():
    store = _store()
    a = store.materialize(store.cells.canonicalize(0, 0))
    b = store.materialize(store.cells.canonicalize(0, 1))
    before_b = store.known_snapshots[(0, 1)]
    a.coins.append(Coin(store.cells.canonicalize(4, 4), 2))
    b.coins.append(Coin(store.cells.canonicalize(4, 4), 3))

    store.update_momento(a)

    assert store.known_snapshots[(0, 0)] == encode(a)
    assert store.known_snapshots[(0, 1)] == before_b

def test_reset_all_regenerates_from_scratch():
    store = _store()
    cell = _cell_with_coins(store)
    cache = store.materialize(cell)
    cache.coins.clear()
    store.release_visible()

    store.reset_all()
    assert store.known_snapshots == {}
    assert store.visible_caches == {}
    assert len(store.cells) == 0

    fresh_cell = store.cells.canonicalize(cell.x, cell.y)
    fresh = store.materialize(fresh_cell)
    assert fresh.coins == create_cache(fresh_cell, 50).coins
    assert fresh.coins != []

def test_export_import_known():
    store = _store()
    store.materialize(store.cells.canonicalize(-2, 3))
    store.materialize(store.cells.canonicalize(7, 0))
    table = store.export_known()
    assert set(table) == {"-2,3", "7,0"}

    other = _store()
    assert other.import_known(table) == 2
    assert other.known_snapshots == store.known_snapshots

def test_import_known_skips_malformed_keys(caplog):
    store = _store()
    with caplog.at_level(logging.WARNING, logger="board.store"):
        count = store.import_known({"1,2": '{"coins":[]}', "oops": '{"coins":[]}'})
    assert count == 1
    assert list(store.known_snapshots) == [(1, 2)]
    assert "oops" in caplog.text

def test_materialize_emits_origin():
    bus = EventBus()
    seen = []
    bus.subscribe(EVT_CACHE_MATERIALIZED, lambda e: seen.append(e.data["origin"]))
    store = _store(bus=bus)
    cell = store.cells.canonicalize(2, 2)

    store.materialize(cell)
    store.materialize(cell)  # already visible, no event
    store.release_visible()
    store.materialize(cell)

    assert seen == ["generated", "restored"]

def test_discard_visible_does_not_commit():
    store = _store()
    cell = _cell_with_coins(store)
    cache = store.materialize(cell)
    before = store.known_snapshots[(cell.x, cell.y)]
    cache.coins.clear()

    store.discard_visible()

    assert store.visible_caches == {}
    assert store.known_snapshots[(cell.x, cell.y)] == before
