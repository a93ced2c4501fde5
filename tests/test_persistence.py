import json
import os
import tempfile
import unittest

from game import (
    GameConfig,
    GameLoadError,
    GameSession,
    GameStore,
    GridState,
    RankOrder,
    Variant,
    Action,
    GameEndStatus,
    available_game_path,
    db_rank,
    db_store_score,
    db_top_scores,
    export_game,
    import_game,
    line_between,
    consume_line,
    new_grid,
    list_possibilities,
    remove_game,
    sanitize_nickname,
)

ROW_FOUR = [(0, 0), (1, 0), (2, 0), (3, 0)]


class TestGameFiles(unittest.TestCase):
    def test_given_nicknames_when_sanitized_then_only_word_characters_kept(self):
        self.assertEqual(sanitize_nickname("Gaëtan R."), "Ga_tan_R_")
        self.assertEqual(sanitize_nickname("  bob "), "bob")
        self.assertEqual(sanitize_nickname(""), "player")
        self.assertEqual(len(sanitize_nickname("x" * 50)), 20)

    def test_given_existing_files_when_asking_path_then_next_free_name(self):
        with tempfile.TemporaryDirectory() as td:
            first = available_game_path(td, "alice")
            self.assertEqual(first, os.path.join(td, "alice.json"))
            open(first, "w").close()
            second = available_game_path(td, "alice")
            self.assertEqual(second, os.path.join(td, "alice_1.json"))
            open(second, "w").close()
            self.assertEqual(available_game_path(td, "alice"), os.path.join(td, "alice_2.json"))

    def test_given_played_game_when_exported_and_imported_then_same_game(self):
        with tempfile.TemporaryDirectory() as td:
            state = new_grid()
            for _ in range(3):
                consume_line(state, list_possibilities(state, Variant.DISJOINT)[0])
            path = os.path.join(td, "nested", "carol.json")
            session = GameSession(state, variant=Variant.DISJOINT, nickname="carol", filepath=path)
            export_game(session)
            self.assertTrue(os.path.isfile(path))

            loaded = import_game(path)
            self.assertEqual(loaded.nickname, "carol")
            self.assertEqual(loaded.variant, Variant.DISJOINT)
            self.assertEqual(loaded.filepath, path)
            self.assertEqual(loaded.state.lines, state.lines)
            self.assertEqual(loaded.state.occupied, state.occupied)
            self.assertEqual(loaded.state.seed, state.seed)
            self.assertEqual(loaded.possibilities, session.possibilities)
            self.assertTrue(loaded.saved)

    def test_given_illegal_line_in_file_when_imported_then_load_error(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "bad.json")
            data = {
                "nickname": "eve",
                "variant": "5T",
                "gridSize": 10,
                "seed": [[0, 0], [1, 0]],
                "lines": [[[0, 0], [1, 0], [2, 0], [3, 0], [4, 0]]],
            }
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            with self.assertRaises(GameLoadError):
                import_game(path)

    def _write(self, td, data):
        path = os.path.join(td, "game.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        return path

    def test_given_scattered_points_as_line_when_imported_then_load_error(self):
        with tempfile.TemporaryDirectory() as td:
            # four occupied points plus one fresh point, but not a straight run
            data = {
                "nickname": "mal",
                "variant": "5T",
                "gridSize": 10,
                "seed": [[0, 0], [1, 0], [2, 0], [5, 5]],
                "lines": [[[0, 0], [1, 0], [2, 0], [5, 5], [9, 9]]],
            }
            with self.assertRaises(GameLoadError):
                import_game(self._write(td, data))

    def test_given_out_of_range_dimensions_when_imported_then_load_error(self):
        base = {"nickname": "mal", "variant": "5T", "seed": [], "lines": []}
        with tempfile.TemporaryDirectory() as td:
            for dims in ({"gridSize": 24, "lineLength": 3},
                         {"gridSize": 0},
                         {"gridSize": 9},
                         {"gridSize": 101},
                         {"gridSize": 10 ** 9}):
                with self.assertRaises(GameLoadError):
                    import_game(self._write(td, dict(base, **dims)))
            loaded = import_game(self._write(td, dict(base, gridSize=10, lineLength=5)))
            self.assertEqual(loaded.state.size, 10)

    def test_given_missing_or_garbled_file_when_imported_then_load_error(self):
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(GameLoadError):
                import_game(os.path.join(td, "nope.json"))
            path = os.path.join(td, "garbled.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            with self.assertRaises(GameLoadError):
                import_game(path)
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"variant": "5X", "gridSize": 10}, f)
            with self.assertRaises(GameLoadError):
                import_game(path)

    def test_given_file_when_removed_then_gone_and_missing_is_noop(self):
        with tempfile.TemporaryDirectory() as td:
            path = os.path.join(td, "done.json")
            open(path, "w").close()
            remove_game(path)
            self.assertFalse(os.path.exists(path))
            remove_game(path)
            remove_game(None)


class TestScores(unittest.TestCase):
    def test_given_scores_when_stored_then_ranked_higher_first(self):
        with tempfile.TemporaryDirectory() as td:
            db = os.path.join(td, "deep", "scores.db")
            self.assertEqual(db_store_score(db, "a", 10, Variant.TOUCHING, 24), 1)
            self.assertEqual(db_store_score(db, "b", 5, Variant.TOUCHING, 24), 2)
            self.assertEqual(db_store_score(db, "c", 20, Variant.TOUCHING, 24), 1)
            self.assertEqual(db_store_score(db, "d", 10, Variant.TOUCHING, 24), 2)
            # Other variants do not compete
            self.assertEqual(db_store_score(db, "e", 1, Variant.DISJOINT, 24), 1)

            top = db_top_scores(db, Variant.TOUCHING)
            self.assertEqual([(r.nickname, r.lines) for r in top], [("c", 20), ("a", 10), ("d", 10), ("b", 5)])
            self.assertTrue(top[0].played_at.endswith("Z"))
            self.assertEqual(len(db_top_scores(db, Variant.TOUCHING, limit=2)), 2)

    def test_given_lower_is_better_when_ranking_then_order_reversed(self):
        with tempfile.TemporaryDirectory() as td:
            db = os.path.join(td, "scores.db")
            db_store_score(db, "a", 10, Variant.TOUCHING, 24, RankOrder.LOWER_IS_BETTER)
            db_store_score(db, "b", 30, Variant.TOUCHING, 24, RankOrder.LOWER_IS_BETTER)
            self.assertEqual(db_rank(db, 5, Variant.TOUCHING, RankOrder.LOWER_IS_BETTER), 1)
            self.assertEqual(db_rank(db, 20, Variant.TOUCHING, RankOrder.LOWER_IS_BETTER), 2)
            self.assertEqual(db_rank(db, 20, Variant.TOUCHING, RankOrder.HIGHER_IS_BETTER), 2)
            top = db_top_scores(db, Variant.TOUCHING, order=RankOrder.LOWER_IS_BETTER)
            self.assertEqual([r.lines for r in top], [10, 30])


class TestGameStore(unittest.TestCase):
    def test_given_store_when_game_ends_then_score_saved_and_file_removed(self):
        with tempfile.TemporaryDirectory() as td:
            config = GameConfig(save_dir=td, scores_db=os.path.join(td, "scores.db"))
            path = available_game_path(td, "dave")
            session = GameSession(
                GridState.from_points(ROW_FOUR, size=5),
                nickname="dave",
                filepath=path,
                store=GameStore(config),
            )
            session.start()
            session.select = (0, 0)
            session.cursor = (4, 0)
            result = session.handle(Action.VALID)
            self.assertEqual(result.outcome, GameEndStatus.FINISHED)
            self.assertEqual(result.rank, 1)
            self.assertFalse(os.path.exists(path))
            top = db_top_scores(config.scores_db, Variant.TOUCHING)
            self.assertEqual([(r.nickname, r.lines, r.grid_size) for r in top], [("dave", 1, 5)])

    def test_given_store_when_move_played_then_file_written(self):
        with tempfile.TemporaryDirectory() as td:
            config = GameConfig(save_dir=td, scores_db=os.path.join(td, "scores.db"))
            path = available_game_path(td, "fay")
            session = GameSession(new_grid(), nickname="fay", filepath=path, store=GameStore(config))
            line = list_possibilities(session.state, session.variant)[0]
            session.select = line[0]
            session.cursor = line[-1]
            session.handle(Action.VALID)
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            self.assertEqual(data["nickname"], "fay")
            self.assertEqual(data["lines"], [[list(p) for p in line]])
            self.assertEqual(len(data["seed"]), 36)
            self.assertEqual(line_between(line[0], line[-1]), line)


if __name__ == '__main__':
    unittest.main(verbosity=2)
