"""
Configuration
=============
Game constants and file locations, read from the environment.

Environment variables:
    MORPION_GRID_SIZE (int): grid side length, default 24, between 10 and 100.
    MORPION_LINE_LENGTH (int): points per line, default 5.
    MORPION_VARIANT (str): "5T" (touching) or "5D" (disjoint), default 5T.
    MORPION_SAVE_DIR (str): directory for in-progress game files.
    MORPION_SCORES_DB (str): SQLite file holding finished scores.
    MORPION_RANK_ORDER (str): "higher" or "lower" line counts rank first.
    MORPION_LOG_LEVEL (str): logging level name.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Mapping, Optional

from .board import GRID_SIZE, LINE_LENGTH
from .seed import check_grid_size
from .state import Variant

NICKNAME_LENGTH = 20


class RankOrder(Enum):
    HIGHER_IS_BETTER = "higher"
    LOWER_IS_BETTER = "lower"

    @classmethod
    def parse(cls, value: str) -> 'RankOrder':
        v = value.strip().lower()
        for order in cls:
            if v == order.value:
                return order
        raise ValueError(f"Unknown rank order: {value!r} (expected higher or lower)")


@dataclass(frozen=True)
class GameConfig:
    """Settings fixed before a session starts."""
    grid_size: int = GRID_SIZE
    line_length: int = LINE_LENGTH
    variant: Variant = Variant.TOUCHING
    save_dir: str = "saves"
    scores_db: str = os.path.join("data", "scores.db")
    rank_order: RankOrder = RankOrder.HIGHER_IS_BETTER
    log_level: str = "WARNING"

    def with_overrides(self, **changes) -> 'GameConfig':
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _int_env(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_config(env: Optional[Mapping[str, str]] = None) -> GameConfig:
    """Builds the configuration from environment variables, falling back to defaults."""
    env = os.environ if env is None else env
    defaults = GameConfig()
    return GameConfig(
        grid_size=check_grid_size(_int_env(env, 'MORPION_GRID_SIZE', defaults.grid_size)),
        line_length=_int_env(env, 'MORPION_LINE_LENGTH', defaults.line_length),
        variant=Variant.parse(env.get('MORPION_VARIANT') or defaults.variant.value),
        save_dir=env.get('MORPION_SAVE_DIR') or defaults.save_dir,
        scores_db=env.get('MORPION_SCORES_DB') or defaults.scores_db,
        rank_order=RankOrder.parse(env.get('MORPION_RANK_ORDER') or defaults.rank_order.value),
        log_level=(env.get('MORPION_LOG_LEVEL') or defaults.log_level).upper(),
    )
