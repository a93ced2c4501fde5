import unittest

from game import (
    Action,
    GameEndStatus,
    GameSession,
    GridState,
    Variant,
    compute_all_possibilities,
    consume_line,
    is_playable_line,
    line_between,
    list_possibilities,
    new_grid,
    run_session,
    undo_line,
)


def make_state(points, size=5):
    return GridState.from_points(points, size=size)


class TestMorpionBasics(unittest.TestCase):
    def test_minimal_legal_move(self):
        state = make_state([(0, 0), (1, 0), (2, 0), (3, 0)])
        line = line_between((0, 0), (4, 0))
        self.assertEqual(line, ((0, 0), (1, 0), (2, 0), (3, 0), (4, 0)))
        self.assertEqual(state.occupied_count(line), 4)
        self.assertTrue(is_playable_line(state, line, Variant.TOUCHING))
        consume_line(state, line)
        self.assertTrue(all(state.is_occupied(p) for p in line))

    def test_bad_span_rejected(self):
        self.assertIsNone(line_between((0, 0), (3, 0)))

    def test_disjoint_rejects_shared_interior(self):
        state = make_state([(0, 0), (1, 0), (2, 0), (3, 0), (2, 1), (2, 2), (2, 3)])
        consume_line(state, line_between((0, 0), (4, 0)))
        crossing = line_between((2, 0), (2, 4))
        self.assertFalse(is_playable_line(state, crossing, Variant.DISJOINT))
        self.assertTrue(is_playable_line(state, crossing, Variant.TOUCHING))

    def test_occupancy_never_drops_while_playing(self):
        state = new_grid()
        before = sum(state.occupied)
        for _ in range(10):
            moves = list_possibilities(state, Variant.TOUCHING)
            if not moves:
                break
            consume_line(state, moves[-1])
            after = sum(state.occupied)
            self.assertGreaterEqual(after, before)
            before = after

    def test_play_then_undo_all_restores_start(self):
        state = new_grid()
        start = list(state.occupied)
        for _ in range(5):
            consume_line(state, list_possibilities(state, Variant.DISJOINT)[0])
        while undo_line(state) is not None:
            pass
        self.assertEqual(state.occupied, start)
        self.assertEqual(compute_all_possibilities(state, Variant.DISJOINT), 28)

    def test_game_over_without_input(self):
        session = GameSession(make_state([]))
        self.assertEqual(run_session(session, []), GameEndStatus.FINISHED)

    def test_scripted_game_finishes(self):
        session = GameSession(make_state([(0, 0), (1, 0), (2, 0), (3, 0)]))
        session.cursor = (0, 0)
        actions = [Action.VALID] + [Action.RIGHT] * 4 + [Action.VALID]
        self.assertEqual(run_session(session, actions), GameEndStatus.FINISHED)
        self.assertEqual(session.lines_count, 1)


if __name__ == '__main__':
    unittest.main(verbosity=2)
