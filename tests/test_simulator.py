"""
Tests for trial placements and the heuristic evaluator.
"""

import unittest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tetris_ga.core.board import Board
from tetris_ga.core.pieces import PieceType, STANDARD_GEOMETRY
from tetris_ga.ai.simulator import BoardSimulator
from tetris_ga.ai.evaluation import (
    BoardEvaluator, HeuristicWeights, FeatureVector, count_holes, bumpiness_and_height,
    extract_features, score,
)

I = PieceType.I.value
O = PieceType.O.value


def make_board(rows: int, cols: int, cells) -> Board:
    """Board with the given (row, col) cells occupied."""
    board = Board(rows, cols)
    field = np.zeros((rows, cols), dtype=np.int8)
    for r, c in cells:
        field[r, c] = 1
    board.set_field(field)
    return board


class TestBoardSimulator(unittest.TestCase):
    """Test trial placements."""

    def test_undo_restores_every_placement(self):
        """Simulate then undo leaves grid and tops exactly as before."""
        board = make_board(21, 10, [(0, c) for c in range(8)] + [(1, 2), (2, 2), (1, 5)])
        field_before = board.field.copy()
        tops_before = board.tops.copy()
        simulator = BoardSimulator(board)

        for piece in range(STANDARD_GEOMETRY.num_pieces):
            for orientation, column in STANDARD_GEOMETRY.legal_moves(piece, 10):
                outcome = simulator.simulate(piece, orientation, column)
                simulator.undo(outcome)
                np.testing.assert_array_equal(simulator.field, field_before)
                np.testing.assert_array_equal(simulator.tops, tops_before)

        np.testing.assert_array_equal(board.field, field_before)
        np.testing.assert_array_equal(board.tops, tops_before)

    def test_trial_context_rolls_back(self):
        board = make_board(20, 10, [])
        simulator = BoardSimulator(board)
        with simulator.trial(O, 0, 4) as outcome:
            self.assertEqual(len(outcome.cells), 4)
            self.assertEqual(int(simulator.field.sum()), 4)
        self.assertEqual(int(simulator.field.sum()), 0)
        np.testing.assert_array_equal(simulator.tops, np.zeros(10))

    def test_trial_does_not_touch_board(self):
        board = make_board(20, 10, [])
        simulator = BoardSimulator(board)
        simulator.simulate(I, 1, 0)
        self.assertTrue(board.is_empty())

    def test_flat_piece_on_empty_board(self):
        """A flat I on an empty 20x10 board: height 4, one step, no holes."""
        board = make_board(20, 10, [])
        simulator = BoardSimulator(board)

        outcome = simulator.simulate(I, 1, 0)
        features = extract_features(simulator.field, outcome)

        self.assertEqual(outcome.rows_cleared, 0)
        self.assertEqual(list(outcome.tops), [1, 1, 1, 1, 0, 0, 0, 0, 0, 0])
        self.assertEqual(features, FeatureVector(rows_cleared=0, holes=0,
                                                 bumpiness=1, aggregate_height=4))
        self.assertEqual(sorted(outcome.cells), [(0, 0), (0, 1), (0, 2), (0, 3)])

    def test_full_rows_counted_not_compacted(self):
        """Full rows are flagged while the grid keeps them in place."""
        board = make_board(20, 10, [(r, c) for r in range(2) for c in range(9)])
        simulator = BoardSimulator(board)

        outcome = simulator.simulate(I, 0, 9)

        self.assertEqual(outcome.rows_cleared, 2)
        self.assertEqual(list(np.flatnonzero(outcome.full_rows)), [0, 1])
        self.assertTrue(np.all(simulator.field[0:4, 9] == 1))
        self.assertEqual(outcome.tops[9], 4)

    def test_full_rows_at_span_boundaries(self):
        """Rows at the very bottom and top of the piece's span are both found."""
        board = make_board(20, 10, [(r, c) for r in (0, 3) for c in range(1, 10)]
                           + [(1, 5), (2, 5)])
        simulator = BoardSimulator(board)

        outcome = simulator.simulate(I, 0, 0)

        self.assertEqual(outcome.rows_cleared, 2)
        self.assertEqual(list(np.flatnonzero(outcome.full_rows)), [0, 3])

    def test_overflow_is_flagged(self):
        """A piece that does not fit reports -1 and writes nothing."""
        board = make_board(4, 10, [])
        simulator = BoardSimulator(board)

        outcome = simulator.simulate(I, 0, 0)

        self.assertTrue(outcome.overflowed)
        self.assertEqual(outcome.rows_cleared, -1)
        self.assertEqual(outcome.cells, [])
        self.assertEqual(int(simulator.field.sum()), 0)


class TestFeatures(unittest.TestCase):
    """Test feature extraction."""

    def test_covered_cell_is_hole(self):
        board = make_board(6, 3, [(1, 0)])
        no_full = np.zeros(6, dtype=bool)
        self.assertEqual(count_holes(board.field, board.tops, no_full), 1)

    def test_every_covered_cell_counts(self):
        board = make_board(6, 3, [(2, 1), (0, 2), (3, 2)])
        no_full = np.zeros(6, dtype=bool)
        self.assertEqual(count_holes(board.field, board.tops, no_full), 4)

    def test_full_row_mask_is_skipped(self):
        """A row flagged full at the column top is treated as already gone."""
        field = np.zeros((4, 2), dtype=np.int8)
        field[0, :] = 1
        field[1, 1] = 1
        field[2, :] = 1
        tops = np.array([2, 2])
        full_rows = np.array([False, False, True, False])

        self.assertEqual(count_holes(field, tops, full_rows), 0)
        self.assertEqual(count_holes(field, tops, np.zeros(4, dtype=bool)), 1)

    def test_holes_never_drop_when_stacking_on_top(self):
        """Adding a piece above existing cells cannot remove holes."""
        board = make_board(10, 4, [(1, 0)])
        before = count_holes(board.field, board.tops, np.zeros(10, dtype=bool))
        simulator = BoardSimulator(board)

        outcome = simulator.simulate(O, 0, 0)
        after = count_holes(simulator.field, outcome.tops, outcome.full_rows)

        self.assertEqual(before, 1)
        self.assertGreaterEqual(after, before)
        self.assertEqual(after, 3)

    def test_bumpiness_and_height(self):
        self.assertEqual(bumpiness_and_height(np.array([1, 3, 0])), (5, 4))
        self.assertEqual(bumpiness_and_height(np.zeros(10, dtype=np.int64)), (0, 0))

    def test_score_is_dot_product(self):
        self.assertAlmostEqual(score([1, 2, 3, 4], [0.5, -1.0, 0.0, 2.0]), 6.5)
        features = FeatureVector(rows_cleared=1, holes=0, bumpiness=2, aggregate_height=10)
        self.assertAlmostEqual(score(features, HeuristicWeights(1.0, -1.0, -0.5, -0.1)), -1.0)


class TestBoardEvaluator(unittest.TestCase):
    """Test placement scoring."""

    def test_default_weights(self):
        evaluator = BoardEvaluator()
        np.testing.assert_allclose(evaluator.weights, [0.76, -0.36, -0.18, -0.51])

    def test_weights_round_trip(self):
        weights = HeuristicWeights.from_array([0.1, -0.2, -0.3, -0.4])
        self.assertEqual(weights, HeuristicWeights(0.1, -0.2, -0.3, -0.4))
        with self.assertRaises(ValueError):
            HeuristicWeights.from_array([1.0, 2.0])
        with self.assertRaises(ValueError):
            BoardEvaluator([1.0, 2.0, 3.0])

    def test_placement_score(self):
        """Score of a flat I on an empty board."""
        evaluator = BoardEvaluator([1.0, -1.0, -1.0, -1.0])
        simulator = BoardSimulator(make_board(20, 10, []))
        self.assertAlmostEqual(evaluator.evaluate_placement(simulator, I, 1, 0), -5.0)
        self.assertEqual(int(simulator.field.sum()), 0)

    def test_overflow_scores_negative_infinity(self):
        evaluator = BoardEvaluator()
        simulator = BoardSimulator(make_board(4, 10, []))
        self.assertEqual(evaluator.evaluate_placement(simulator, I, 0, 0), float('-inf'))


if __name__ == '__main__':
    unittest.main()
