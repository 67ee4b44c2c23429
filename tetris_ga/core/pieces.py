"""
Tetromino geometry for Tetris GA.
Describes every piece orientation by its per-column bottom and top offsets,
which is all the drop simulation needs.
"""

from enum import Enum
from typing import List, Sequence, Tuple
from dataclasses import dataclass

from .exceptions import ConfigurationError


class PieceType(Enum):
    """The 7 standard Tetris pieces, in classic table order."""
    O = 0
    I = 1
    L = 2
    J = 3
    T = 4
    S = 5
    Z = 6


# Piece definitions: [piece][orientation][row][col], top row first, 1 = filled
PIECE_DEFINITIONS = {
    PieceType.O: [
        [[1, 1],
         [1, 1]],
    ],
    PieceType.I: [
        [[1],
         [1],
         [1],
         [1]],
        [[1, 1, 1, 1]],
    ],
    PieceType.L: [
        [[1, 0],
         [1, 0],
         [1, 1]],
        [[1, 1, 1],
         [1, 0, 0]],
        [[1, 1],
         [0, 1],
         [0, 1]],
        [[0, 0, 1],
         [1, 1, 1]],
    ],
    PieceType.J: [
        [[0, 1],
         [0, 1],
         [1, 1]],
        [[1, 0, 0],
         [1, 1, 1]],
        [[1, 1],
         [1, 0],
         [1, 0]],
        [[1, 1, 1],
         [0, 0, 1]],
    ],
    PieceType.T: [
        [[1, 0],
         [1, 1],
         [1, 0]],
        [[1, 1, 1],
         [0, 1, 0]],
        [[0, 1],
         [1, 1],
         [0, 1]],
        [[0, 1, 0],
         [1, 1, 1]],
    ],
    PieceType.S: [
        [[0, 1, 1],
         [1, 1, 0]],
        [[1, 0],
         [1, 1],
         [0, 1]],
    ],
    PieceType.Z: [
        [[1, 1, 0],
         [0, 1, 1]],
        [[0, 1],
         [1, 1],
         [1, 0]],
    ],
}


@dataclass(frozen=True)
class Orientation:
    """Column profile of one piece orientation.

    ``bottom[c]`` is the lowest occupied row offset of column ``c`` and
    ``top[c]`` the row offset just above its highest occupied cell.
    """
    width: int
    height: int
    bottom: Tuple[int, ...]
    top: Tuple[int, ...]

    @classmethod
    def from_matrix(cls, matrix: Sequence[Sequence[int]]) -> 'Orientation':
        """Derive the column profile from a 0/1 shape matrix (top row first)."""
        if not matrix or not matrix[0]:
            raise ConfigurationError("Piece shape must have at least one cell")

        height = len(matrix)
        width = len(matrix[0])
        if any(len(row) != width for row in matrix):
            raise ConfigurationError("Piece shape rows must all have the same width")
        if not any(matrix[-1]):
            raise ConfigurationError("Piece shape must rest on its bottom row")

        bottom = []
        top = []
        for c in range(width):
            # Row offsets measured from the bottom of the shape
            filled = [height - 1 - r for r in range(height) if matrix[r][c]]
            if not filled:
                raise ConfigurationError(f"Piece shape column {c} is empty")
            low, high = min(filled), max(filled)
            if high - low + 1 != len(filled):
                raise ConfigurationError(f"Piece shape column {c} is not contiguous")
            bottom.append(low)
            top.append(high + 1)

        return cls(width=width, height=height, bottom=tuple(bottom), top=tuple(top))


@dataclass(frozen=True)
class PieceGeometry:
    """Immutable lookup table: piece index -> orientation index -> Orientation."""
    orientations: Tuple[Tuple[Orientation, ...], ...]

    @classmethod
    def from_shapes(cls, shapes: Sequence[Sequence[Sequence[Sequence[int]]]]) -> 'PieceGeometry':
        """Build a table from shape matrices, one list of orientations per piece."""
        if not shapes:
            raise ConfigurationError("Piece geometry needs at least one piece")
        table = []
        for piece_shapes in shapes:
            if not piece_shapes:
                raise ConfigurationError("Every piece needs at least one orientation")
            table.append(tuple(Orientation.from_matrix(m) for m in piece_shapes))
        return cls(orientations=tuple(table))

    @property
    def num_pieces(self) -> int:
        return len(self.orientations)

    def num_orientations(self, piece: int) -> int:
        return len(self.orientations[piece])

    def get(self, piece: int, orientation: int) -> Orientation:
        return self.orientations[piece][orientation]

    def legal_moves(self, piece: int, cols: int) -> List[Tuple[int, int]]:
        """Get all (orientation, column) placements of a piece on a board of the given width."""
        moves = []
        for orientation, shape in enumerate(self.orientations[piece]):
            for column in range(cols + 1 - shape.width):
                moves.append((orientation, column))
        return moves


STANDARD_GEOMETRY = PieceGeometry.from_shapes(
    [PIECE_DEFINITIONS[piece_type] for piece_type in PieceType]
)


def get_all_piece_types() -> List[PieceType]:
    """Get all piece types."""
    return list(PieceType)


def piece_name(piece: int) -> str:
    """Name of a standard piece index, or its number for custom tables."""
    try:
        return PieceType(piece).name
    except ValueError:
        return str(piece)

