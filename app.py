from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

# Ensure package imports work when executed directly from the repo root
if __package__ in (None, ""):
    sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from morpion_core.board import parse_point
from morpion_core.config import load_config
from morpion_core.db import db_top_scores
from morpion_core.export import (
    GameLoadError,
    GameStore,
    grid_from_json,
    grid_to_json,
    line_to_json,
    sanitize_nickname,
)
from morpion_core.logging_config import setup_logging
from morpion_core.moves import list_possibilities, possibilities_through
from morpion_core.seed import check_grid_size, new_grid
from morpion_core.session import Action, GameEndStatus, GameSession, TurnPhase, TurnResult
from morpion_core.state import Variant

logger = logging.getLogger("morpion_core.app")

CONFIG = load_config()
app = Flask(__name__)


class ScoreStore(GameStore):
    """Clients keep the game themselves; the server only records finished scores."""

    def save_game(self, session: GameSession) -> None:
        """No-op: the game travels in each request body, there is no server-side file to write."""

    def remove_game(self, session: GameSession) -> None:
        """No-op: nothing was written by save_game, so there is nothing to delete."""


def _point_json(p) -> Optional[list]:
    return None if p is None else [int(p[0]), int(p[1])]


def session_to_json(s: GameSession) -> Dict[str, Any]:
    return {
        "grid": grid_to_json(s.state),
        "occupied": [[x, y] for (x, y) in s.state.occupied_points()],
        "variant": s.variant.value,
        "nickname": s.nickname,
        "cursor": _point_json(s.cursor),
        "select": _point_json(s.select),
        "phase": s.phase.value,
        "helpMode": bool(s.help_mode),
        "saved": bool(s.saved),
        "linesCount": int(s.lines_count),
        "possibilities": int(s.possibilities),
        "outcome": s.outcome.value if s.outcome is not None else None,
    }


def json_to_session(obj: Dict[str, Any]) -> GameSession:
    """Rebuilds a session; the line history is replayed and checked. Raises GameLoadError or ValueError."""
    if not isinstance(obj, dict):
        raise ValueError("session must be an object")
    variant = Variant.parse(str(obj.get("variant", CONFIG.variant.value)))
    state = grid_from_json(obj.get("grid") or {}, variant)
    session = GameSession(
        state,
        variant=variant,
        nickname=sanitize_nickname(str(obj.get("nickname", ""))),
        store=ScoreStore(CONFIG),
    )
    if obj.get("cursor") is not None:
        session.cursor = parse_point(obj["cursor"])
    if obj.get("select") is not None:
        session.select = parse_point(obj["select"])
    if obj.get("phase") == TurnPhase.CONFIRMING_QUIT.value and session.select is None:
        session.phase = TurnPhase.CONFIRMING_QUIT
    session.help_mode = bool(obj.get("helpMode", False))
    session.saved = bool(obj.get("saved", session.saved))
    if obj.get("outcome") is not None:
        session.outcome = GameEndStatus(obj["outcome"])
    return session


def _result_to_json(r: TurnResult) -> Dict[str, Any]:
    return {
        "action": r.action.value,
        "message": r.message,
        "kind": r.kind.value,
        "gridChanged": r.grid_changed,
        "played": line_to_json(r.played) if r.played is not None else None,
        "outcome": r.outcome.value if r.outcome is not None else None,
        "rank": r.rank,
    }


def _bad_request(msg: str) -> Any:
    logger.warning("Rejected request: %s", msg)
    return jsonify({"ok": False, "error": msg}), 400


@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        variant = Variant.parse(str(body.get("variant", CONFIG.variant.value)))
        size = check_grid_size(int(body.get("size", CONFIG.grid_size)))
        state = new_grid(size, CONFIG.line_length)
    except (TypeError, ValueError) as e:
        return _bad_request(f"bad settings: {e}")
    session = GameSession(
        state,
        variant=variant,
        nickname=sanitize_nickname(str(body.get("nickname", ""))),
        store=ScoreStore(CONFIG),
    )
    result = session.start()
    return jsonify({"ok": True, "session": session_to_json(session), "result": _result_to_json(result)})


@app.post("/api/action")
def api_action() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        session = json_to_session(body.get("session"))
        action = Action(str(body.get("action", "")))
    except (GameLoadError, KeyError, TypeError, ValueError) as e:
        return _bad_request(f"bad request: {e}")
    result = session.handle(action)
    return jsonify({"ok": True, "session": session_to_json(session), "result": _result_to_json(result)})


@app.post("/api/possibilities")
def api_possibilities() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        session = json_to_session(body.get("session"))
    except (GameLoadError, KeyError, TypeError, ValueError) as e:
        return _bad_request(f"bad request: {e}")
    lines = list_possibilities(session.state, session.variant)
    return jsonify({"ok": True, "count": len(lines), "lines": [line_to_json(l) for l in lines]})


@app.post("/api/hints")
def api_hints() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        session = json_to_session(body.get("session"))
        point = parse_point(body["point"]) if body.get("point") is not None else session.cursor
    except (GameLoadError, KeyError, TypeError, ValueError) as e:
        return _bad_request(f"bad request: {e}")
    lines = possibilities_through(session.state, session.variant, point)
    return jsonify({"ok": True, "point": _point_json(point), "lines": [line_to_json(l) for l in lines]})


@app.get("/api/scores")
def api_scores() -> Any:
    try:
        variant = Variant.parse(request.args.get("variant", CONFIG.variant.value))
        limit = int(request.args.get("limit", 10))
    except ValueError as e:
        return _bad_request(str(e))
    rows = db_top_scores(CONFIG.scores_db, variant, limit=limit, order=CONFIG.rank_order)
    return jsonify({"ok": True, "variant": variant.value, "scores": [row._asdict() for row in rows]})


if __name__ == "__main__":
    setup_logging(CONFIG.log_level)
    port = int(os.getenv("PORT", "5000"))
    app.run(host="127.0.0.1", port=port, debug=False)
