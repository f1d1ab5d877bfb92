import pytest

from mcp_dice_notation.config import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_MAX_DICE,
    DEFAULT_MAX_INPUT_LENGTH,
    MAX_DEPTH_LIMIT,
    Settings,
    load_settings,
)
from mcp_dice_notation.errors import DiceError


def test_defaults():
    assert load_settings({}) == Settings(
        max_input_length=DEFAULT_MAX_INPUT_LENGTH,
        max_dice=DEFAULT_MAX_DICE,
        log_level=DEFAULT_LOG_LEVEL,
    )


def test_environment_overrides():
    settings = load_settings(
        {"DICE_MAX_INPUT_LENGTH": "64", "DICE_MAX_DICE": " 100 ", "DICE_LOG_LEVEL": "debug"}
    )
    assert settings == Settings(max_input_length=64, max_dice=100, log_level="DEBUG")


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("DICE_MAX_DICE", "42")
    assert load_settings().max_dice == 42


@pytest.mark.parametrize(
    "env",
    [
        {"DICE_MAX_DICE": "many"},
        {"DICE_MAX_DICE": "0"},
        {"DICE_MAX_INPUT_LENGTH": "-5"},
        {"DICE_MAX_DEPTH": "1000"},
        {"DICE_LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_values(env):
    with pytest.raises(DiceError) as exc:
        load_settings(env)
    assert exc.value.code == "INVALID_CONFIG"


def test_depth_is_capped():
    assert load_settings({"DICE_MAX_DEPTH": str(MAX_DEPTH_LIMIT)}).max_depth == MAX_DEPTH_LIMIT
    assert load_settings({"DICE_MAX_DEPTH": "50"}).max_depth == 50
    with pytest.raises(DiceError) as exc:
        load_settings({"DICE_MAX_DEPTH": str(MAX_DEPTH_LIMIT + 1)})
    assert str(exc.value) == f"[INVALID_CONFIG] DICE_MAX_DEPTH must be at most {MAX_DEPTH_LIMIT}, got {MAX_DEPTH_LIMIT + 1}."
