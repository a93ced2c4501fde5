from __future__ import annotations

import logging
import os
import sqlite3
from datetime import datetime, timezone
from typing import List, NamedTuple

from .config import RankOrder
from .state import Variant

logger = logging.getLogger(__name__)


class ScoreRow(NamedTuple):
    nickname: str
    lines: int
    variant: str
    grid_size: int
    played_at: str


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the scores table exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS scores (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nickname TEXT NOT NULL,
            lines INTEGER NOT NULL,
            variant TEXT NOT NULL,
            grid_size INTEGER NOT NULL,
            played_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def _connect(db_path: str) -> sqlite3.Connection:
    _ensure_db_dir(db_path)
    conn = sqlite3.connect(db_path)
    _ensure_db(conn)
    return conn


def _order_sql(order: RankOrder) -> str:
    return "DESC" if order is RankOrder.HIGHER_IS_BETTER else "ASC"


def db_rank(db_path: str, lines: int, variant: Variant, order: RankOrder = RankOrder.HIGHER_IS_BETTER) -> int:
    """1-based rank a score of `lines` would take among stored scores of the same variant. Ties share the rank."""
    conn = _connect(db_path)
    try:
        op = ">" if order is RankOrder.HIGHER_IS_BETTER else "<"
        cur = conn.execute(
            f"SELECT COUNT(*) FROM scores WHERE variant = ? AND lines {op} ?",
            (variant.value, lines),
        )
        (better,) = cur.fetchone()
        return int(better) + 1
    finally:
        conn.close()


def db_store_score(
    db_path: str,
    nickname: str,
    lines: int,
    variant: Variant,
    grid_size: int,
    order: RankOrder = RankOrder.HIGHER_IS_BETTER,
) -> int:
    """Stores a finished game and returns its rank."""
    rank = db_rank(db_path, lines, variant, order)
    conn = _connect(db_path)
    try:
        conn.execute(
            "INSERT INTO scores (nickname, lines, variant, grid_size, played_at) VALUES (?, ?, ?, ?, ?)",
            (
                nickname,
                int(lines),
                variant.value,
                int(grid_size),
                datetime.now(timezone.utc).isoformat(timespec='seconds').replace('+00:00', 'Z'),
            ),
        )
        conn.commit()
    finally:
        conn.close()
    logger.info("Stored score %d for %r (%s), rank %d", lines, nickname, variant.value, rank)
    return rank


def db_top_scores(
    db_path: str,
    variant: Variant,
    limit: int = 10,
    order: RankOrder = RankOrder.HIGHER_IS_BETTER,
) -> List[ScoreRow]:
    """Best scores of a variant, best first; earlier games win ties."""
    conn = _connect(db_path)
    try:
        cur = conn.execute(
            f"""
            SELECT nickname, lines, variant, grid_size, played_at FROM scores
            WHERE variant = ?
            ORDER BY lines {_order_sql(order)}, id ASC
            LIMIT ?
            """,
            (variant.value, int(limit)),
        )
        return [ScoreRow(str(n), int(l), str(v), int(g), str(t)) for n, l, v, g, t in cur.fetchall()]
    finally:
        conn.close()
