from __future__ import annotations

from typing import List

from .board import GRID_SIZE, LINE_LENGTH, MAX_GRID_SIZE, Point
from .state import GridState

# Standard Greek cross of 36 points for 5-point lines, drawn top row first.
CROSS_5 = (
    "...####...",
    "...#..#...",
    "...#..#...",
    "####..####",
    "#........#",
    "#........#",
    "####..####",
    "...#..#...",
    "...#..#...",
    "...####...",
)


def check_grid_size(size: int) -> int:
    """Raises ValueError unless the grid can hold the starting cross and is at most MAX_GRID_SIZE."""
    span = len(CROSS_5)
    if size < span:
        raise ValueError(f"Grid of size {size} cannot hold the {span}x{span} starting cross")
    if size > MAX_GRID_SIZE:
        raise ValueError(f"Grid of size {size} exceeds the maximum of {MAX_GRID_SIZE}")
    return size


def cross_points(size: int = GRID_SIZE) -> List[Point]:
    """Returns the points of the standard cross centred on a size x size grid."""
    span = len(CROSS_5)
    check_grid_size(size)
    offset = (size - span) // 2
    points: List[Point] = []
    for row, text in enumerate(CROSS_5):
        y = offset + span - 1 - row
        for col, ch in enumerate(text):
            if ch == '#':
                points.append((offset + col, y))
    return points


def new_grid(size: int = GRID_SIZE, line_length: int = LINE_LENGTH) -> GridState:
    """Creates the grid of a new game, seeded with the starting cross."""
    if line_length != LINE_LENGTH:
        raise ValueError(f"Starting cross is defined for {LINE_LENGTH}-point lines only")
    return GridState.from_points(cross_points(size), size=size, line_length=line_length)
