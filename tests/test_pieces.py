import math
import pytest
from board.cells import Cell
from board.luck import COIN_COUNT_SALT, sample
from board.pieces import Cache, Coin, coin_count, coin_label, create_cache

def test_create_cache_count_follows_generator():
    cell = Cell(3, 4)
    cache = create_cache(cell, 5)
    expected = math.floor(sample([3, 4], COIN_COUNT_SALT) * 5)
    assert len(cache.coins) == expected
    assert cache.cell is cell

def test_create_cache_serials_and_home():
    for x in range(10):
        cell = Cell(x, -x)
        cache = create_cache(cell, 20)
        assert [c.serial for c in cache.coins] == list(range(len(cache.coins)))
        assert all(c.cell is cell for c in cache.coins)
        assert len(cache.coins) < 20

def test_create_cache_is_deterministic():
    a = create_cache(Cell(8, 9), 100)
    b = create_cache(Cell(8, 9), 100)
    assert a.coins == b.coins
    assert a.coins is not b.coins

def test_zero_max_coins_gives_empty_cache():
    assert create_cache(Cell(1, 1), 0).coins == []

def test_negative_max_coins_rejected():
    with pytest.raises(ValueError):
        coin_count(Cell(0, 0), -1)

def test_salt_changes_count_source():
    cell = Cell(2, 2)
    assert coin_count(cell, 1000, "one") == math.floor(sample([2, 2], "one") * 1000)
    assert coin_count(cell, 1000, "two") == math.floor(sample([2, 2], "two") * 1000)

def test_coin_equality_is_by_cell_and_serial():
    assert Coin(Cell(1, 2), 0) == Coin(Cell(1, 2), 0)
    assert Coin(Cell(1, 2), 0) != Coin(Cell(1, 2), 1)
    assert Coin(Cell(1, 2), 0) != Coin(Cell(2, 1), 0)
    assert len({Coin(Cell(1, 2), 0), Coin(Cell(1, 2), 0)}) == 1

def test_cache_defaults_to_empty():
    cache = Cache(cell=Cell(0, 0))
    assert cache.coins == []

def test_coin_label():
    coin = Coin(Cell(369894, -1220628), 3)
    assert coin_label(coin, 1e-4) == "36.9894:-122.0628, serial:3"
