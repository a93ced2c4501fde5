#!/usr/bin/env python3
"""
Validate a saved Morpion Solitaire game file and summarize it.

- Replays every line through the legality check (touching or disjoint, as saved)
- Prints a JSON summary: nickname, variant, lines played, points, possibilities left
- Exits with status 1 when the file cannot be loaded

Usage:
  python tools/validate_game.py saves/alice.json
  python tools/validate_game.py saves/alice.json --list
"""
from __future__ import annotations

import json
import os
import sys
from typing import List

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from morpion_core.export import GameLoadError, import_game, line_to_json  # noqa: E402
from morpion_core.moves import list_possibilities  # noqa: E402


def validate(path: str, show_lines: bool = False) -> int:
    try:
        session = import_game(path)
    except GameLoadError as e:
        print(json.dumps({"ok": False, "file": path, "error": str(e)}, indent=2))
        return 1
    state = session.state
    remaining = list_possibilities(state, session.variant)
    summary = {
        "ok": True,
        "file": path,
        "nickname": session.nickname,
        "variant": session.variant.value,
        "gridSize": state.size,
        "lines": state.lines_count,
        "seedPoints": len(state.seed),
        "occupiedPoints": len(state.occupied_points()),
        "possibilities": len(remaining),
    }
    if show_lines:
        summary["possibleLines"] = [line_to_json(l) for l in remaining]
    print(json.dumps(summary, indent=2))
    return 0


def main(argv: List[str]) -> int:
    if not argv:
        print(__doc__)
        return 2
    return validate(argv[0], show_lines="--list" in argv[1:])


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
