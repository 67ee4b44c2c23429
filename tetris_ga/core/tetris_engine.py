"""
Main Tetris engine for Tetris GA.
Owns the authoritative board, deals pieces and commits placements.
"""

from typing import List, Optional, Dict, Any, Tuple
import numpy as np
from dataclasses import dataclass

from .board import Board
from .exceptions import ConfigurationError, GameOverException, InvalidMoveException
from .pieces import PieceGeometry, STANDARD_GEOMETRY, piece_name


@dataclass
class GameConfig:
    """Configuration for the Tetris game."""
    rows: int = Board.BOARD_HEIGHT
    cols: int = Board.BOARD_WIDTH
    max_pieces: Optional[int] = None  # Piece budget per game, None = play until topping out

    def __post_init__(self):
        if self.rows < 1 or self.cols < 1:
            raise ConfigurationError(f"Board must be at least 1x1, got {self.rows}x{self.cols}")
        if self.max_pieces is not None and self.max_pieces < 0:
            raise ConfigurationError(f"max_pieces must be non-negative, got {self.max_pieces}")


class TetrisEngine:
    """Main Tetris game engine: one board, one current piece, one random stream."""

    def __init__(self, config: Optional[GameConfig] = None,
                 geometry: PieceGeometry = STANDARD_GEOMETRY,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or GameConfig()
        self.geometry = geometry
        self.rng = rng if rng is not None else np.random.default_rng()

        self._legal_moves = []
        for piece in range(geometry.num_pieces):
            moves = geometry.legal_moves(piece, self.config.cols)
            if not moves:
                raise ConfigurationError(
                    f"Piece {piece_name(piece)} has no legal placement on a "
                    f"{self.config.cols}-column board"
                )
            self._legal_moves.append(moves)

        self.board = Board(self.config.rows, self.config.cols)
        self.next_piece = 0
        self.turn = 0
        self.game_over = False

        self._initialize_game()

    def _initialize_game(self):
        """Initialize the game state."""
        self.board.reset()
        self.turn = 0
        self.game_over = False
        self.next_piece = self._random_piece()

    def _random_piece(self) -> int:
        return int(self.rng.integers(self.geometry.num_pieces))

    @property
    def lines_cleared(self) -> int:
        return self.board.lines_cleared

    def legal_moves(self) -> List[Tuple[int, int]]:
        """All (orientation, column) placements of the current piece."""
        return self._legal_moves[self.next_piece]

    def make_move(self, orientation: int, column: int) -> int:
        """Commit a placement of the current piece.

        Returns the rows cleared by the move, or -1 when the piece overflows the
        board, which ends the game.
        """
        if self.game_over:
            raise GameOverException("Cannot move after the game has ended")
        if not 0 <= orientation < self.geometry.num_orientations(self.next_piece):
            raise InvalidMoveException(
                f"Orientation {orientation} out of range for piece {piece_name(self.next_piece)}"
            )
        shape = self.geometry.get(self.next_piece, orientation)
        if not 0 <= column <= self.config.cols - shape.width:
            raise InvalidMoveException(
                f"Column {column} out of range for piece {piece_name(self.next_piece)} "
                f"orientation {orientation}"
            )

        self.turn += 1
        rows_cleared = self.board.place_piece(shape, column)
        if rows_cleared < 0:
            self.game_over = True
            return -1

        if self.config.max_pieces is not None and self.turn >= self.config.max_pieces:
            self.game_over = True

        self.next_piece = self._random_piece()
        return rows_cleared

    def end_game(self):
        """Mark the game as lost, e.g. when no placement fits."""
        self.game_over = True

    def make_move_index(self, index: int) -> int:
        """Commit the placement at the given index of legal_moves()."""
        orientation, column = self.legal_moves()[index]
        return self.make_move(orientation, column)

    def reset(self, rng: Optional[np.random.Generator] = None):
        """Reset the game to initial state, optionally switching random stream."""
        if rng is not None:
            self.rng = rng
        self._initialize_game()

    def get_stats(self) -> Dict[str, Any]:
        """Get current game statistics."""
        return {
            'turn': self.turn,
            'lines_cleared': self.lines_cleared,
            'game_over': self.game_over,
            'heights': self.board.get_height_map(),
            'board_height': max(self.board.get_height_map()),
            'aggregate_height': self.board.get_aggregate_height(),
            'holes': self.board.get_holes(),
            'bumpiness': self.board.get_bumpiness(),
        }

    def __str__(self):
        """String representation of the game state."""
        result = []
        result.append(f"Turn: {self.turn}")
        result.append(f"Lines: {self.lines_cleared}")
        result.append(f"Next: {piece_name(self.next_piece)}")
        result.append("")
        result.append(str(self.board))
        return "\n".join(result)
