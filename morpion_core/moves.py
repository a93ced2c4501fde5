from __future__ import annotations

import logging
from typing import List, Optional

from .board import DIRECTIONS, Line, Point, line_between, line_from, line_segments
from .state import GridState, Variant

logger = logging.getLogger(__name__)


def is_playable_line(state: GridState, line: Line, variant: Variant) -> bool:
    """
    Checks whether a line may be drawn on the current grid.

    The points must form a straight run of unit steps along one axis. A line
    needs all but at most one of its points already occupied, must not
    reuse a unit segment of any played line, and under the disjoint variant
    must not pass through an interior point of a played line.
    """
    if len(line) != state.line_length:
        return False
    if line_between(line[0], line[-1], state.line_length) != tuple(line):
        return False
    if not all(state.exists(p) for p in line):
        return False
    count = state.occupied_count(line)
    if count < state.line_length - 1:
        return False
    if any(seg in state.segments for seg in line_segments(line)):
        return False
    if variant is Variant.DISJOINT and any(state.is_interior(p) for p in line):
        return False
    return True


def consume_line(state: GridState, line: Line) -> Optional[Point]:
    """Draws the line: occupies its points and records it. Returns the newly occupied point, if any."""
    added: Optional[Point] = None
    for p in line:
        if not state.is_occupied(p):
            added = p
            state.mark_occupied(p)
    state.record_line(line, added)
    logger.debug("Line %s played, new point %s", line, added)
    return added


def undo_line(state: GridState) -> Optional[Line]:
    """Removes the most recent line. The point it added is freed unless still needed."""
    played = state.pop_line()
    if played is None:
        return None
    p = played.added
    if p is not None and p not in state.seed and not state.is_referenced(p):
        state.unmark(p)
    logger.debug("Line %s undone", played.line)
    return played.line


def list_possibilities(state: GridState, variant: Variant) -> List[Line]:
    """Lists every playable line, each found once from its first endpoint along a forward axis."""
    found: List[Line] = []
    last = state.line_length - 1
    for p in state.points():
        for dx, dy in DIRECTIONS:
            end = (p[0] + last * dx, p[1] + last * dy)
            if not state.exists(end):
                continue
            line = line_from(p, (dx, dy), state.line_length)
            if is_playable_line(state, line, variant):
                found.append(line)
    return found


def compute_all_possibilities(state: GridState, variant: Variant) -> int:
    """Counts the playable lines. Zero means the game is over."""
    count = len(list_possibilities(state, variant))
    logger.debug("%d possibilities left", count)
    return count


def possibilities_through(state: GridState, variant: Variant, point: Point) -> List[Line]:
    """Playable lines passing through a point."""
    return [line for line in list_possibilities(state, variant) if point in line]
