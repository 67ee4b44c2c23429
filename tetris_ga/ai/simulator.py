"""
Trial placements for Tetris GA.
Drops a candidate piece onto a scratch copy of the board so it can be scored,
then rolls the placement back before the next candidate is tried.
"""

from contextlib import contextmanager
from typing import Iterator, List, Tuple
import numpy as np
from dataclasses import dataclass, field

from ..core.board import Board, landing_height
from ..core.pieces import PieceGeometry, STANDARD_GEOMETRY


@dataclass
class SimulatedOutcome:
    """Result of one trial placement. Discarded once scored."""
    rows_cleared: int  # -1 when the placement overflows the board
    tops: np.ndarray
    full_rows: np.ndarray  # One flag per board row
    cells: List[Tuple[int, int]] = field(default_factory=list)  # (row, col) written by the trial

    @property
    def overflowed(self) -> bool:
        return self.rows_cleared < 0


class BoardSimulator:
    """Scratch overlay of a board for scoring candidate placements.

    The grid and column tops are copied once at construction; ``simulate``
    writes into the copy and ``undo`` removes exactly what it wrote, so the
    authoritative board is never touched.
    """

    def __init__(self, board: Board, geometry: PieceGeometry = STANDARD_GEOMETRY):
        self.geometry = geometry
        self.rows = board.rows
        self.cols = board.cols
        scratch = board.copy()
        self.field = scratch.field
        self.base_tops = scratch.tops
        self.tops = self.base_tops.copy()

    def simulate(self, piece: int, orientation: int, column: int) -> SimulatedOutcome:
        """Drop a piece onto the scratch grid and report the result."""
        shape = self.geometry.get(piece, orientation)
        tops = self.base_tops.copy()
        full_rows = np.zeros(self.rows, dtype=bool)

        landing = landing_height(tops, shape, column)
        if landing + shape.height >= self.rows:
            return SimulatedOutcome(-1, tops, full_rows)

        cells = []
        for c in range(shape.width):
            for r in range(landing + shape.bottom[c], landing + shape.top[c]):
                self.field[r, column + c] = 1
                cells.append((r, column + c))
            tops[column + c] = landing + shape.top[c]
        self.tops = tops

        # Piece reached the ceiling: legal, but nothing can follow it
        if int(tops.max()) >= self.rows:
            return SimulatedOutcome(0, tops, full_rows, cells)

        rows_cleared = 0
        for r in range(landing + shape.height - 1, landing - 1, -1):
            if self.field[r].all():
                full_rows[r] = True
                rows_cleared += 1

        # Full rows stay in place; hole counting skips them through the mask
        return SimulatedOutcome(rows_cleared, tops, full_rows, cells)

    def undo(self, outcome: SimulatedOutcome):
        """Roll back a trial placement."""
        for r, c in outcome.cells:
            self.field[r, c] = 0
        self.tops = self.base_tops.copy()

    @contextmanager
    def trial(self, piece: int, orientation: int, column: int) -> Iterator[SimulatedOutcome]:
        """Simulate a placement for the duration of a with-block."""
        outcome = self.simulate(piece, orientation, column)
        try:
            yield outcome
        finally:
            self.undo(outcome)
