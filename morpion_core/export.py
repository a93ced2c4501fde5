from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Dict, Optional

from .board import LINE_LENGTH, Line, line_between, parse_point
from .config import NICKNAME_LENGTH, GameConfig
from .db import db_store_score
from .moves import consume_line, is_playable_line
from .seed import check_grid_size
from .session import GameSession
from .state import GridState, Variant

logger = logging.getLogger(__name__)

SAVE_EXT = ".json"


class GameLoadError(RuntimeError):
    """A game file is missing, unreadable or describes an impossible game."""


def sanitize_nickname(nickname: str) -> str:
    """Keeps letters, digits and underscores; anything else becomes '_'. Truncated to NICKNAME_LENGTH."""
    cleaned = re.sub(r'[^A-Za-z0-9_]', '_', nickname.strip())[:NICKNAME_LENGTH]
    return cleaned or "player"


def available_game_path(save_dir: str, nickname: str) -> str:
    """First unused file name for the nickname: name.json, name_1.json, name_2.json, ..."""
    base = sanitize_nickname(nickname)
    candidate = os.path.join(save_dir, base + SAVE_EXT)
    n = 0
    while os.path.exists(candidate):
        n += 1
        candidate = os.path.join(save_dir, f"{base}_{n}{SAVE_EXT}")
    return candidate


def line_to_json(line: Line) -> list:
    return [[int(x), int(y)] for (x, y) in line]


def grid_to_json(state: GridState) -> Dict[str, Any]:
    return {
        "gridSize": int(state.size),
        "lineLength": int(state.line_length),
        "seed": [[int(x), int(y)] for (x, y) in sorted(state.seed)],
        "lines": [line_to_json(line) for line in state.lines],
    }


def grid_from_json(obj: Dict[str, Any], variant: Variant) -> GridState:
    """
    Rebuilds a grid from its seed and replays every line through the legality check.
    Raises GameLoadError on malformed data or an illegal line.
    """
    try:
        size = int(obj["gridSize"])
        length = int(obj.get("lineLength", LINE_LENGTH))
        if length != LINE_LENGTH:
            raise ValueError(f"lineLength must be {LINE_LENGTH}, got {length}")
        check_grid_size(size)
        seed = [parse_point(p) for p in obj.get("seed", [])]
        lines = [tuple(parse_point(p) for p in raw) for raw in obj.get("lines", [])]
        state = GridState.from_points(seed, size=size, line_length=length)
    except (KeyError, TypeError, ValueError) as e:
        raise GameLoadError(f"bad game data: {e}") from e
    for i, line in enumerate(lines):
        if len(line) != length or line_between(line[0], line[-1], length) != line:
            raise GameLoadError(f"line #{i + 1} {line} is not a straight run of {length} points")
        if not is_playable_line(state, line, variant):
            raise GameLoadError(f"line #{i + 1} {line} is not playable")
        consume_line(state, line)
    return state


def session_to_file_json(session: GameSession) -> Dict[str, Any]:
    data = grid_to_json(session.state)
    data["nickname"] = session.nickname
    data["variant"] = session.variant.value
    return data


def export_game(session: GameSession) -> None:
    """Writes the game to its file path."""
    if not session.filepath:
        raise ValueError("session has no file path")
    directory = os.path.dirname(session.filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp = session.filepath + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(session_to_file_json(session), f)
    os.replace(tmp, session.filepath)
    logger.debug("Saved %d lines to %s", session.lines_count, session.filepath)


def import_game(filepath: str, store: Optional['GameStore'] = None) -> GameSession:
    """Loads a saved game. Raises GameLoadError when the file cannot be used."""
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read game file %s: %s", filepath, e)
        raise GameLoadError(f"could not read {filepath}: {e}") from e
    if not isinstance(data, dict):
        raise GameLoadError(f"{filepath} does not hold a game")
    try:
        variant = Variant.parse(str(data.get("variant", Variant.TOUCHING.value)))
    except ValueError as e:
        raise GameLoadError(str(e)) from e
    state = grid_from_json(data, variant)
    nickname = sanitize_nickname(str(data.get("nickname", "")))
    return GameSession(state, variant=variant, nickname=nickname, filepath=filepath, store=store)


def remove_game(filepath: Optional[str]) -> None:
    if filepath and os.path.exists(filepath):
        os.remove(filepath)
        logger.info("Removed finished game file %s", filepath)


class GameStore:
    """Persists a session: game file after each move, score and cleanup at game over."""

    def __init__(self, config: GameConfig) -> None:
        self.config = config

    def save_game(self, session: GameSession) -> None:
        export_game(session)

    def remove_game(self, session: GameSession) -> None:
        remove_game(session.filepath)

    def save_score(self, session: GameSession) -> int:
        return db_store_score(
            self.config.scores_db,
            session.nickname,
            session.lines_count,
            session.variant,
            session.state.size,
            self.config.rank_order,
        )
