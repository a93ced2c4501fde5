from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from .board import Line, Point, line_between
from .moves import (
    compute_all_possibilities,
    consume_line,
    is_playable_line,
    possibilities_through,
    undo_line,
)
from .state import GridState, Variant

logger = logging.getLogger(__name__)


class Action(Enum):
    NONE = "none"
    LEFT = "left"
    RIGHT = "right"
    UP = "up"
    DOWN = "down"
    VALID = "valid"
    CANCEL = "cancel"
    UNDO = "undo"
    TOGGLE_HELP = "help"
    YES = "yes"


class TurnPhase(Enum):
    IDLE = "idle"
    PENDING = "pending"
    CONFIRMING_QUIT = "confirming_quit"


class GameEndStatus(Enum):
    ERROR_ON_LOAD = "error_on_load"
    FINISHED = "finished"
    INTERRUPT = "interrupt"


class MessageKind(Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


_MOVES = {
    Action.LEFT: (-1, 0),
    Action.RIGHT: (1, 0),
    Action.UP: (0, 1),
    Action.DOWN: (0, -1),
}

MSG_START = "Move your cursor with arrows or ZSQD keys"
MSG_SELECT_START = "Select a line startpoint with your cursor by pressing <enter> or <space>"
MSG_SELECT_END = "Select the endpoint of the line by pressing <enter> or <space>"
MSG_PLAYED = "Line played"
MSG_INVALID_LINE = "Invalid line"
MSG_INVALID_ACTION = "Invalid action"
MSG_CONFIRM_EXIT = "Really quit? Press Y to confirm"


@dataclass
class TurnResult:
    """What a single event did, for the driver to display."""
    action: Action
    phase: TurnPhase
    possibilities: int
    message: str = ""
    kind: MessageKind = MessageKind.INFO
    grid_changed: bool = False
    played: Optional[Line] = None
    outcome: Optional[GameEndStatus] = None
    rank: Optional[int] = None

    @property
    def error(self) -> bool:
        return self.kind is MessageKind.ERROR


class GameSession:
    """
    One game of Morpion Solitaire: grid, selection and the turn state machine.

    The optional store receives save_game/remove_game/save_score calls after
    moves, undos and at the end of the game.
    """

    def __init__(
        self,
        state: GridState,
        variant: Variant = Variant.TOUCHING,
        nickname: str = "",
        filepath: Optional[str] = None,
        store=None,
    ) -> None:
        self.state = state
        self.variant = variant
        self.nickname = nickname
        self.filepath = filepath
        self.store = store
        self.saved = state.lines_count > 0
        self.help_mode = False
        self.phase = TurnPhase.IDLE
        self.outcome: Optional[GameEndStatus] = None
        self.rank: Optional[int] = None
        self._select: Optional[Point] = None
        self._cursor: Point = (state.size // 2, state.size // 2)
        self.possibilities = compute_all_possibilities(state, variant)
        logger.info("Session started for %r: %d lines, %d possibilities", nickname, state.lines_count, self.possibilities)

    # ---------- Selection ----------

    @property
    def cursor(self) -> Point:
        return self._cursor

    @cursor.setter
    def cursor(self, p: Point) -> None:
        if not self.state.exists(p):
            raise ValueError(f"Cursor {p} lies outside the grid")
        self._cursor = p

    @property
    def select(self) -> Optional[Point]:
        return self._select

    @select.setter
    def select(self, p: Optional[Point]) -> None:
        if p is not None and not self.state.exists(p):
            raise ValueError(f"Selection {p} lies outside the grid")
        self._select = p
        self.phase = TurnPhase.PENDING if p is not None else TurnPhase.IDLE

    @property
    def lines_count(self) -> int:
        return self.state.lines_count

    def select_case(self, cursor: Point) -> None:
        """Selects the point, or clears the selection when the point is already selected."""
        if self._select is None:
            self.select = cursor
        elif self._select == cursor:
            self.select = None

    def empty_selection(self) -> None:
        self._select = None
        if self.phase is TurnPhase.PENDING:
            self.phase = TurnPhase.IDLE

    def toggle_mode(self) -> None:
        self.help_mode = not self.help_mode

    def hints(self) -> List[Line]:
        """Playable lines through the cursor while help mode is on."""
        if not self.help_mode:
            return []
        return possibilities_through(self.state, self.variant, self._cursor)

    # ---------- Turn protocol ----------

    @property
    def finished(self) -> bool:
        return self.outcome is not None

    def start(self) -> TurnResult:
        """Opens the session; ends it right away when no move is possible."""
        result = self._result(Action.NONE, MSG_START)
        self._check_game_over(result)
        return result

    def handle(self, action: Action) -> TurnResult:
        """Applies one UI event and returns what happened."""
        if self.finished:
            return self._result(action)
        # A grid with no line left is over whatever the event.
        if self.possibilities == 0:
            result = self._result(action)
            self._check_game_over(result)
            return result

        if self.phase is TurnPhase.CONFIRMING_QUIT:
            if action is Action.YES:
                self.outcome = GameEndStatus.INTERRUPT
                logger.info("Session interrupted by %r after %d lines", self.nickname, self.lines_count)
                result = self._result(action)
                result.outcome = self.outcome
                return result
            self.phase = TurnPhase.IDLE

        if action in _MOVES:
            result = self._move_cursor(action)
        elif action is Action.VALID:
            result = self._confirm()
        elif action is Action.CANCEL:
            result = self._cancel()
        elif action is Action.UNDO:
            result = self._undo()
        elif action is Action.TOGGLE_HELP:
            self.toggle_mode()
            result = self._result(action, grid_changed=True)
        else:
            result = self._result(action)

        if not result.message:
            result.message = MSG_SELECT_END if self._select is not None else MSG_SELECT_START
        self._check_game_over(result)
        return result

    def _move_cursor(self, action: Action) -> TurnResult:
        dx, dy = _MOVES[action]
        nxt = (self._cursor[0] + dx, self._cursor[1] + dy)
        if not self.state.exists(nxt):
            return self._result(action)
        self._cursor = nxt
        return self._result(action, grid_changed=True)

    def _confirm(self) -> TurnResult:
        select = self._select
        cursor = self._cursor
        if select is None:
            self.select_case(cursor)
            self.phase = TurnPhase.PENDING
            return self._result(Action.VALID, grid_changed=True)
        if select == cursor:
            self.select_case(cursor)
            self.phase = TurnPhase.IDLE
            return self._result(Action.VALID, grid_changed=True)

        self.empty_selection()
        self.phase = TurnPhase.IDLE
        line = line_between(select, cursor, self.state.line_length)
        if line is None:
            return self._result(Action.VALID, MSG_INVALID_LINE, MessageKind.ERROR, grid_changed=True)
        if not is_playable_line(self.state, line, self.variant):
            return self._result(Action.VALID, MSG_INVALID_ACTION, MessageKind.ERROR, grid_changed=True)

        consume_line(self.state, line)
        self.possibilities = compute_all_possibilities(self.state, self.variant)
        self._save()
        result = self._result(Action.VALID, MSG_PLAYED, MessageKind.SUCCESS, grid_changed=True)
        result.played = line
        return result

    def _cancel(self) -> TurnResult:
        if self.phase is TurnPhase.PENDING:
            self.empty_selection()
            self.phase = TurnPhase.IDLE
            return self._result(Action.CANCEL, grid_changed=True)
        self.phase = TurnPhase.CONFIRMING_QUIT
        return self._result(Action.CANCEL, MSG_CONFIRM_EXIT)

    def _undo(self) -> TurnResult:
        self.empty_selection()
        self.phase = TurnPhase.IDLE
        if undo_line(self.state) is None:
            return self._result(Action.UNDO, grid_changed=True)
        self.possibilities = compute_all_possibilities(self.state, self.variant)
        self._save()
        return self._result(Action.UNDO, grid_changed=True)

    def _save(self) -> None:
        if self.store is not None:
            self.store.save_game(self)
        self.saved = True

    def _check_game_over(self, result: TurnResult) -> None:
        if self.finished or self.possibilities != 0:
            return
        self.outcome = GameEndStatus.FINISHED
        self.phase = TurnPhase.IDLE
        self.empty_selection()
        if self.store is not None:
            self.rank = self.store.save_score(self)
            self.store.remove_game(self)
        logger.info("Game over for %r with %d lines, rank %s", self.nickname, self.lines_count, self.rank)
        place = f" You take the {_ordinal(self.rank)} place!" if self.rank else ""
        result.message = f"Game over.{place}"
        result.kind = MessageKind.SUCCESS
        result.phase = self.phase
        result.outcome = self.outcome
        result.rank = self.rank

    def _result(
        self,
        action: Action,
        message: str = "",
        kind: MessageKind = MessageKind.INFO,
        grid_changed: bool = False,
    ) -> TurnResult:
        return TurnResult(
            action=action,
            phase=self.phase,
            possibilities=self.possibilities,
            message=message,
            kind=kind,
            grid_changed=grid_changed,
        )


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def run_session(session: GameSession, actions: Iterable[Action]) -> GameEndStatus:
    """
    Feeds actions to the session until it ends.
    Running out of actions leaves the game unfinished and counts as an interrupt.
    """
    session.start()
    if session.finished:
        return session.outcome  # type: ignore[return-value]
    for action in actions:
        session.handle(action)
        if session.finished:
            return session.outcome  # type: ignore[return-value]
    return GameEndStatus.INTERRUPT
