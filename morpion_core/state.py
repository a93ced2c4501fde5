from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from .board import (
    GRID_SIZE,
    LINE_LENGTH,
    Line,
    Point,
    Segment,
    interior_points,
    line_segments,
    point_exists,
)


class Variant(Enum):
    """Overlap rule of the game: touching lines (5T) or disjoint lines (5D)."""
    TOUCHING = "5T"
    DISJOINT = "5D"

    @classmethod
    def parse(cls, value: str) -> 'Variant':
        v = value.strip().upper()
        for variant in cls:
            if v in (variant.value, variant.name):
                return variant
        raise ValueError(f"Unknown variant: {value!r} (expected 5T or 5D)")


@dataclass(frozen=True)
class PlayedLine:
    """A line in the history together with the point its move newly occupied, if any."""
    line: Line
    added: Optional[Point]


@dataclass
class GridState:
    """Occupancy of the grid plus the ordered history of played lines."""
    size: int = GRID_SIZE
    line_length: int = LINE_LENGTH
    seed: FrozenSet[Point] = frozenset()
    occupied: List[bool] = field(default_factory=list)  # row-major, length == size * size
    history: List[PlayedLine] = field(default_factory=list)
    segments: Set[Segment] = field(default_factory=set)
    interiors: Dict[Point, int] = field(default_factory=Counter)

    def __post_init__(self) -> None:
        if not self.occupied:
            self.occupied = [False] * (self.size * self.size)
        for p in self.seed:
            if not point_exists(p, self.size):
                raise ValueError(f"Seed point {p} lies outside a {self.size}x{self.size} grid")
            self.occupied[self.index(p)] = True

    @classmethod
    def from_points(cls, points: Iterable[Point], size: int = GRID_SIZE, line_length: int = LINE_LENGTH) -> 'GridState':
        return cls(size=size, line_length=line_length, seed=frozenset(points))

    def index(self, p: Point) -> int:
        """Calculates the 1D index for a point."""
        return p[1] * self.size + p[0]

    def exists(self, p: Optional[Point]) -> bool:
        return point_exists(p, self.size)

    def is_occupied(self, p: Point) -> bool:
        return self.exists(p) and self.occupied[self.index(p)]

    def occupied_count(self, line: Line) -> int:
        return sum(1 for p in line if self.is_occupied(p))

    def mark_occupied(self, p: Point) -> None:
        self.occupied[self.index(p)] = True

    def unmark(self, p: Point) -> None:
        self.occupied[self.index(p)] = False

    def record_line(self, line: Line, added: Optional[Point]) -> None:
        self.history.append(PlayedLine(line, added))
        self.segments.update(line_segments(line))
        for p in interior_points(line):
            self.interiors[p] += 1

    def pop_line(self) -> Optional[PlayedLine]:
        if not self.history:
            return None
        played = self.history.pop()
        self.segments.difference_update(line_segments(played.line))
        for p in interior_points(played.line):
            self.interiors[p] -= 1
            if self.interiors[p] <= 0:
                del self.interiors[p]
        return played

    def is_interior(self, p: Point) -> bool:
        return self.interiors.get(p, 0) > 0

    def is_referenced(self, p: Point) -> bool:
        """True when some played line passes through the point."""
        return any(p in played.line for played in self.history)

    @property
    def lines(self) -> List[Line]:
        return [played.line for played in self.history]

    @property
    def lines_count(self) -> int:
        return len(self.history)

    def occupied_points(self) -> List[Point]:
        return [(x, y) for y in range(self.size) for x in range(self.size) if self.occupied[y * self.size + x]]

    def points(self) -> Iterable[Point]:
        """Iterates over every point of the grid."""
        for y in range(self.size):
            for x in range(self.size):
                yield (x, y)

    def pretty(self, cursor: Optional[Point] = None, select: Optional[Point] = None) -> str:
        """Text dump of the grid, top row first. Cursor is '@', selection '*', points 'o'."""
        rows: List[str] = []
        for y in reversed(range(self.size)):
            row: List[str] = []
            for x in range(self.size):
                p = (x, y)
                if p == cursor:
                    row.append("@")
                elif p == select:
                    row.append("*")
                elif self.occupied[self.index(p)]:
                    row.append("o")
                else:
                    row.append("·")
            rows.append(" ".join(row))
        return "\n".join(rows)
