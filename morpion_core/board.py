from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

Point = Tuple[int, int]  # (x, y)
Line = Tuple[Point, ...]
Segment = Tuple[Point, Point]

GRID_SIZE = 24
LINE_LENGTH = 5
MAX_GRID_SIZE = 100

# Forward unit vectors of the four axes: horizontal, vertical, both diagonals.
DIRECTIONS: Tuple[Point, ...] = ((1, 0), (0, 1), (1, 1), (1, -1))


def point_exists(p: Optional[Point], size: int = GRID_SIZE) -> bool:
    """True when the point lies on a size x size grid."""
    if p is None:
        return False
    x, y = p
    return 0 <= x < size and 0 <= y < size


def line_direction(a: Point, b: Point) -> Optional[Tuple[Point, int]]:
    """Returns the (unit step, number of steps) leading from a to b, or None when not aligned."""
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    if dx == 0 and dy == 0:
        return None
    if dx == 0:
        return (0, 1 if dy > 0 else -1), abs(dy)
    if dy == 0:
        return (1 if dx > 0 else -1, 0), abs(dx)
    if abs(dx) == abs(dy):
        return (1 if dx > 0 else -1, 1 if dy > 0 else -1), abs(dx)
    return None


def are_aligned(a: Point, b: Point) -> bool:
    return line_direction(a, b) is not None


def line_between(a: Point, b: Point, length: int = LINE_LENGTH) -> Optional[Line]:
    """
    Builds the line running from a to b inclusive.
    Only spans of exactly length - 1 steps make a line; anything else yields None.
    """
    found = line_direction(a, b)
    if found is None:
        return None
    (sx, sy), steps = found
    if steps != length - 1:
        return None
    return tuple((a[0] + i * sx, a[1] + i * sy) for i in range(length))


def line_from(start: Point, direction: Point, length: int = LINE_LENGTH) -> Line:
    """The line of the given length starting at start and extending along direction."""
    dx, dy = direction
    return tuple((start[0] + i * dx, start[1] + i * dy) for i in range(length))


def segment(a: Point, b: Point) -> Segment:
    """Orientation-free key of the unit segment joining two adjacent points."""
    return (a, b) if a <= b else (b, a)


def line_segments(line: Line) -> List[Segment]:
    return [segment(line[i], line[i + 1]) for i in range(len(line) - 1)]


def interior_points(line: Line) -> Line:
    return line[1:-1]


def parse_point(values: Iterable[int]) -> Point:
    """Converts a JSON-ish pair into a Point."""
    x, y = values
    return int(x), int(y)
