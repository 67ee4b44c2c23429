"""
Heuristic player for Tetris GA.
Picks the best-scoring placement for every piece and plays games to the end.
"""

from enum import Enum
from typing import Callable, Optional
import numpy as np

from ..core.tetris_engine import TetrisEngine, GameConfig
from ..core.pieces import PieceGeometry, STANDARD_GEOMETRY
from .evaluation import BoardEvaluator, WeightsLike
from .simulator import BoardSimulator


def best_move(engine: TetrisEngine, evaluator: BoardEvaluator) -> Optional[int]:
    """Index into engine.legal_moves() of the highest scoring placement.

    Ties go to the earliest move. Returns None when every placement tops out.
    """
    simulator = BoardSimulator(engine.board, engine.geometry)
    best_score = float('-inf')
    best_index = None

    for index, (orientation, column) in enumerate(engine.legal_moves()):
        move_score = evaluator.evaluate_placement(simulator, engine.next_piece, orientation, column)
        if move_score > best_score:
            best_score = move_score
            best_index = index

    return best_index


class AgentState(Enum):
    IDLE = 0
    PLAYING = 1
    GAME_OVER = 2


class HeuristicPlayer:
    """Plays complete games on a private engine with a fixed weight vector."""

    def __init__(self, weights: WeightsLike = None, config: Optional[GameConfig] = None,
                 geometry: PieceGeometry = STANDARD_GEOMETRY,
                 rng: Optional[np.random.Generator] = None):
        self.evaluator = BoardEvaluator(weights)
        self.engine = TetrisEngine(config, geometry, rng)
        self.state = AgentState.IDLE

        # Called after every committed piece with (engine, rows_cleared)
        self.on_piece_placed: Optional[Callable[[TetrisEngine, int], None]] = None

    @property
    def weights(self) -> np.ndarray:
        return self.evaluator.weights

    def step(self) -> bool:
        """Commit one move. Returns False once the game is over."""
        if self.engine.game_over:
            self.state = AgentState.GAME_OVER
            return False

        self.state = AgentState.PLAYING
        index = best_move(self.engine, self.evaluator)
        if index is None:
            self.engine.end_game()
            self.state = AgentState.GAME_OVER
            return False

        rows_cleared = self.engine.make_move_index(index)
        if self.on_piece_placed:
            self.on_piece_placed(self.engine, rows_cleared)

        if self.engine.game_over:
            self.state = AgentState.GAME_OVER
            return False
        return True

    def play(self) -> int:
        """Play until the game ends and return the rows cleared in it."""
        while self.step():
            pass
        return self.engine.lines_cleared

    def reset_state(self, rng: Optional[np.random.Generator] = None):
        """Start over with an empty board, optionally on a new random stream."""
        self.engine.reset(rng)
        self.state = AgentState.IDLE
