"""
Board state management for Tetris GA.
Handles the occupancy grid, the column-top profile, committed placements and line clearing.
"""

from typing import List
import numpy as np

from .exceptions import ConfigurationError
from .pieces import Orientation


class Board:
    """Authoritative playfield. Row 0 is the floor; rows stack upward."""

    BOARD_WIDTH = 10
    BOARD_HEIGHT = 21  # 20 visible rows plus the spawn row

    def __init__(self, rows: int = BOARD_HEIGHT, cols: int = BOARD_WIDTH):
        if rows < 1 or cols < 1:
            raise ConfigurationError(f"Board must be at least 1x1, got {rows}x{cols}")
        self.rows = rows
        self.cols = cols
        self.field = np.zeros((rows, cols), dtype=np.int8)
        # Row index one above the highest occupied cell of each column
        self.tops = np.zeros(cols, dtype=np.int64)
        self.lines_cleared = 0

    def reset(self):
        """Reset the board to an empty playfield."""
        self.field = np.zeros((self.rows, self.cols), dtype=np.int8)
        self.tops = np.zeros(self.cols, dtype=np.int64)
        self.lines_cleared = 0

    def copy(self) -> 'Board':
        board = Board(self.rows, self.cols)
        board.field = self.field.copy()
        board.tops = self.tops.copy()
        board.lines_cleared = self.lines_cleared
        return board

    def set_field(self, field: np.ndarray):
        """Replace the grid contents and rebuild the column-top profile from it."""
        field = np.asarray(field, dtype=np.int8)
        if field.shape != (self.rows, self.cols):
            raise ConfigurationError(
                f"Field shape {field.shape} does not match board {(self.rows, self.cols)}"
            )
        self.field = field.copy()
        self.tops = self.compute_tops(self.field)

    @staticmethod
    def compute_tops(field: np.ndarray) -> np.ndarray:
        """Column-top profile of a grid (0 for an empty column)."""
        occupied = field != 0
        highest = field.shape[0] - np.argmax(occupied[::-1], axis=0)
        return np.where(occupied.any(axis=0), highest, 0).astype(np.int64)

    def landing_height(self, shape: Orientation, column: int) -> int:
        """Row where the piece's reference bottom comes to rest when dropped at column."""
        return landing_height(self.tops, shape, column)

    def overflows(self, shape: Orientation, landing: int) -> bool:
        return landing + shape.height >= self.rows

    def place_piece(self, shape: Orientation, column: int) -> int:
        """Drop a piece and commit it.

        Full rows are removed and everything above them shifts down. Returns the
        number of rows cleared, or -1 if the piece does not fit (board untouched).
        """
        landing = self.landing_height(shape, column)
        if self.overflows(shape, landing):
            return -1

        for c in range(shape.width):
            self.field[landing + shape.bottom[c]:landing + shape.top[c], column + c] = 1
            self.tops[column + c] = landing + shape.top[c]

        # Scan from the top of the piece down so earlier removals keep lower indices valid
        full_rows = [
            r for r in range(landing + shape.height - 1, landing - 1, -1)
            if self.field[r].all()
        ]
        if full_rows:
            self.clear_lines(full_rows)
        return len(full_rows)

    def clear_lines(self, rows: List[int]):
        """Remove the given rows and compact everything above them."""
        remaining = np.delete(self.field, rows, axis=0)
        empty = np.zeros((len(rows), self.cols), dtype=np.int8)
        self.field = np.vstack([remaining, empty])
        self.tops = self.compute_tops(self.field)
        self.lines_cleared += len(rows)

    def get_height_map(self) -> List[int]:
        """Get the height of each column."""
        return [int(t) for t in self.tops]

    def get_bumpiness(self) -> int:
        """Calculate board bumpiness (sum of height differences between adjacent columns)."""
        return int(np.abs(np.diff(self.tops)).sum())

    def get_aggregate_height(self) -> int:
        return int(self.tops.sum())

    def get_holes(self) -> int:
        """Count empty cells that have an occupied cell somewhere above them."""
        holes = 0
        for x in range(self.cols):
            top = self.tops[x]
            holes += int(np.count_nonzero(self.field[:top, x] == 0))
        return holes

    def is_consistent(self) -> bool:
        """Check the cached column tops against the grid."""
        return bool(np.array_equal(self.tops, self.compute_tops(self.field)))

    def is_empty(self) -> bool:
        return not self.field.any()

    def __str__(self):
        """String representation of the board, top row first."""
        result = []
        for y in range(self.rows - 1, -1, -1):
            result.append("".join("█" if cell else "·" for cell in self.field[y]))
        return "\n".join(result)

    def __repr__(self):
        return f"Board(rows={self.rows}, cols={self.cols}, lines_cleared={self.lines_cleared})"


def landing_height(tops: np.ndarray, shape: Orientation, column: int) -> int:
    """Highest point of contact over every column the piece spans."""
    height = int(tops[column]) - shape.bottom[0]
    for c in range(1, shape.width):
        height = max(height, int(tops[column + c]) - shape.bottom[c])
    return height
