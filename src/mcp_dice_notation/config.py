"""Configuration and limits.

All values have defaults and can be overridden from the environment:

- ``DICE_MAX_INPUT_LENGTH``: longest expression accepted by the request layer.
- ``DICE_MAX_DICE``: most dice a single evaluation may throw.
- ``DICE_MAX_DEPTH``: deepest syntax tree the request layer accepts, at most
  ``MAX_DEPTH_LIMIT``.
- ``DICE_LOG_LEVEL``: level for the server's stderr log handler.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import DiceError


DEFAULT_MAX_INPUT_LENGTH = 512
DEFAULT_MAX_DICE = 10_000
DEFAULT_MAX_DEPTH = 200
# Deepest tree the recursive visitors walk within the interpreter's default
# recursion limit.
MAX_DEPTH_LIMIT = 200
DEFAULT_LOG_LEVEL = "WARNING"
SERVER_NAME = "mcp-dice-notation"


@dataclass(frozen=True)
class Settings:
    max_input_length: int = DEFAULT_MAX_INPUT_LENGTH
    max_dice: int = DEFAULT_MAX_DICE
    max_depth: int = DEFAULT_MAX_DEPTH
    log_level: str = DEFAULT_LOG_LEVEL


def _positive_int(env: Mapping[str, str], key: str, default: int, upper: int | None = None) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise DiceError(f"{key} must be an integer, got {raw!r}.", code="INVALID_CONFIG") from None
    if value <= 0:
        raise DiceError(f"{key} must be positive, got {value}.", code="INVALID_CONFIG")
    if upper is not None and value > upper:
        raise DiceError(f"{key} must be at most {upper}, got {value}.", code="INVALID_CONFIG")
    return value


def _log_level(env: Mapping[str, str]) -> str:
    level = env.get("DICE_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if level not in logging.getLevelNamesMapping():
        raise DiceError(f"DICE_LOG_LEVEL {level!r} is not a logging level.", code="INVALID_CONFIG")
    return level


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    if env is None:
        env = os.environ
    return Settings(
        max_input_length=_positive_int(env, "DICE_MAX_INPUT_LENGTH", DEFAULT_MAX_INPUT_LENGTH),
        max_dice=_positive_int(env, "DICE_MAX_DICE", DEFAULT_MAX_DICE),
        max_depth=_positive_int(env, "DICE_MAX_DEPTH", DEFAULT_MAX_DEPTH, upper=MAX_DEPTH_LIMIT),
        log_level=_log_level(env),
    )
