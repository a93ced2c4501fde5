from __future__ import annotations

import argparse
import logging
import os
from typing import Callable, Iterator, List, Optional

from .config import GameConfig, load_config
from .db import db_top_scores
from .export import GameLoadError, GameStore, available_game_path, import_game, sanitize_nickname
from .logging_config import setup_logging
from .seed import new_grid
from .session import Action, GameEndStatus, GameSession, MessageKind, TurnResult
from .state import Variant

logger = logging.getLogger(__name__)

KEYS = {
    'z': Action.UP, 'w': Action.UP,
    's': Action.DOWN,
    'q': Action.LEFT, 'a': Action.LEFT,
    'd': Action.RIGHT,
    '.': Action.VALID, ' ': Action.VALID,
    'c': Action.CANCEL, 'x': Action.CANCEL,
    'u': Action.UNDO,
    'h': Action.TOGGLE_HELP,
    'y': Action.YES,
}

KEY_HELP = "keys: z/s/q/d move, <enter> or . select, c cancel, u undo, h hints, y confirm quit"


def parse_keys(text: str) -> List[Action]:
    """Turns one line of input into actions. An empty line is a single confirm."""
    if text.strip() == '':
        return [Action.VALID]
    return [KEYS.get(ch, Action.NONE) for ch in text.lower() if ch != '\n']


def _render(session: GameSession, result: TurnResult, write: Callable[[str], None]) -> None:
    if result.grid_changed or result.action is Action.NONE:
        write(session.state.pretty(session.cursor, session.select))
    hints = session.hints()
    if hints:
        write(f"Playable through {session.cursor}: " + ", ".join(f"{l[0]}-{l[-1]}" for l in hints))
    tag = {MessageKind.INFO: "", MessageKind.SUCCESS: "[ok] ", MessageKind.ERROR: "[error] "}[result.kind]
    saved = "saved" if session.saved else "not saved"
    write(f"{tag}{result.message}")
    write(f"{session.nickname} | lines: {session.lines_count} | possibilities: {result.possibilities} | {saved}")


def run_game(
    session: GameSession,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> GameEndStatus:
    """Text driver: reads key lines, feeds the session and prints its state after every event."""
    result = session.start()
    _render(session, result, write)
    if session.finished:
        return session.outcome  # type: ignore[return-value]
    write(KEY_HELP)

    def actions() -> Iterator[Action]:
        while True:
            try:
                line = read('> ')
            except EOFError:
                return
            for action in parse_keys(line):
                yield action

    for action in actions():
        result = session.handle(action)
        _render(session, result, write)
        if session.finished:
            return session.outcome  # type: ignore[return-value]
    return GameEndStatus.INTERRUPT


def new_game(nickname: str, config: GameConfig, **driver) -> GameEndStatus:
    try:
        os.makedirs(config.save_dir, exist_ok=True)
        filepath = available_game_path(config.save_dir, nickname)
        state = new_grid(config.grid_size, config.line_length)
    except (OSError, ValueError) as e:
        logger.error("Could not start a new game: %s", e)
        return GameEndStatus.ERROR_ON_LOAD
    session = GameSession(
        state,
        variant=config.variant,
        nickname=sanitize_nickname(nickname),
        filepath=filepath,
        store=GameStore(config),
    )
    return run_game(session, **driver)


def load_game(filepath: str, config: GameConfig, **driver) -> GameEndStatus:
    try:
        session = import_game(filepath, store=GameStore(config))
    except GameLoadError as e:
        logger.error("Could not resume %s: %s", filepath, e)
        return GameEndStatus.ERROR_ON_LOAD
    return run_game(session, **driver)


def show_highscores(config: GameConfig, write: Callable[[str], None] = print) -> None:
    rows = db_top_scores(config.scores_db, config.variant, order=config.rank_order)
    write(f"Highscores ({config.variant.value})")
    if not rows:
        write("  no finished games yet")
    for i, row in enumerate(rows, start=1):
        write(f"  {i:>2}. {row.nickname:<20} {row.lines:>4} lines  {row.played_at}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Morpion Solitaire -- draw 5-point lines on a dot grid')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-n', '--new', metavar='NICKNAME', help='Start a new game')
    group.add_argument('-l', '--load', metavar='GAME_FILE', help='Restore a saved game')
    group.add_argument('--highscores', action='store_true', help='Show highscores')
    parser.add_argument('--variant', choices=['5T', '5D'], default=None, help='Touching (5T) or disjoint (5D) lines')
    parser.add_argument('--size', type=int, default=None, help='Grid side length')
    parser.add_argument('--log-level', default=None, help='Logging level (DEBUG, INFO, ...)')
    args = parser.parse_args(argv)

    config = load_config().with_overrides(
        variant=Variant.parse(args.variant) if args.variant else None,
        grid_size=args.size,
        log_level=args.log_level.upper() if args.log_level else None,
    )
    setup_logging(config.log_level)

    if args.highscores:
        show_highscores(config)
        return 0
    if args.new:
        status = new_game(args.new, config)
    elif args.load:
        status = load_game(args.load, config)
    else:
        parser.print_usage()
        return 2
    if status is GameEndStatus.ERROR_ON_LOAD:
        print('error: could not start or resume the game.')
        return 1
    return 0
