import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError
from engine.data_loader import BoardConfig, get_board_config, load_board_config
from board.luck import COIN_COUNT_SALT, SPAWN_SALT

def test_load_shipped_board_config():
    config = get_board_config()
    assert config.tile_width == 1e-4
    assert config.visibility_radius == 8
    assert config.spawn_probability == 0.1
    assert config.max_coins == 100
    assert config.spawn_salt != config.coin_count_salt

def test_board_config_is_cached():
    assert get_board_config() is get_board_config()

def test_defaults_use_independent_salts():
    config = BoardConfig()
    assert config.spawn_salt == SPAWN_SALT
    assert config.coin_count_salt == COIN_COUNT_SALT

def test_partial_file_falls_back_to_defaults():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "board.toml"
        path.write_text("[board]\nmax_coins = 7\n", encoding="utf-8")
        config = load_board_config(path)
        assert config.max_coins == 7
        assert config.tile_width == BoardConfig().tile_width

def test_empty_file_is_all_defaults():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "board.toml"
        path.write_text("", encoding="utf-8")
        assert load_board_config(path) == BoardConfig()

@pytest.mark.parametrize("body", [
    "[board]\nspawn_probability = 1.5\n",
    "[board]\nmax_coins = -1\n",
    "[board]\ntile_width = 0\n",
    "[board]\nunknown_setting = 1\n",
])
def test_invalid_settings_rejected(body):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "board.toml"
        path.write_text(body, encoding="utf-8")
        with pytest.raises(ValidationError):
            load_board_config(path)

def test_config_is_frozen():
    config = BoardConfig()
    with pytest.raises(ValidationError):
        config.max_coins = 3
