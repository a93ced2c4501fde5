from __future__ import annotations

# Facade module that re-exports the Morpion Solitaire core.
# Used by the Flask app and tests; single-responsibility modules live under morpion_core/*.

from morpion_core.board import (
    DIRECTIONS,
    GRID_SIZE,
    LINE_LENGTH,
    Line,
    Point,
    are_aligned,
    line_between,
    line_from,
    line_segments,
    point_exists,
)
from morpion_core.state import GridState, PlayedLine, Variant
from morpion_core.seed import cross_points, new_grid
from morpion_core.moves import (
    compute_all_possibilities,
    consume_line,
    is_playable_line,
    list_possibilities,
    possibilities_through,
    undo_line,
)
from morpion_core.session import (
    Action,
    GameEndStatus,
    GameSession,
    MessageKind,
    TurnPhase,
    TurnResult,
    run_session,
)
from morpion_core.config import GameConfig, RankOrder, load_config
from morpion_core.db import db_rank, db_store_score, db_top_scores
from morpion_core.export import (
    GameLoadError,
    GameStore,
    available_game_path,
    export_game,
    grid_from_json,
    grid_to_json,
    import_game,
    remove_game,
    sanitize_nickname,
)


def main() -> None:
    # CLI driver delegated to morpion_core.cli
    from morpion_core.cli import main as _main
    raise SystemExit(_main())


if __name__ == '__main__':
    main()
