"""
Board evaluation functions for Tetris GA.
Extracts the four placement features and scores them against a weight vector.
"""

from typing import Sequence, Tuple, Union
import numpy as np
from dataclasses import dataclass

from .simulator import BoardSimulator, SimulatedOutcome

NUM_FEATURES = 4
ROWS_CLEARED, HOLES, BUMPINESS, HEIGHT = range(NUM_FEATURES)


@dataclass
class HeuristicWeights:
    """Weights for the board evaluation heuristics."""
    rows_cleared: float = 0.76
    holes: float = -0.36
    bumpiness: float = -0.18
    height: float = -0.51

    def as_array(self) -> np.ndarray:
        return np.array([self.rows_cleared, self.holes, self.bumpiness, self.height],
                        dtype=np.float64)

    @classmethod
    def from_array(cls, values: Sequence[float]) -> 'HeuristicWeights':
        if len(values) != NUM_FEATURES:
            raise ValueError(f"Expected {NUM_FEATURES} weights, got {len(values)}")
        return cls(*(float(v) for v in values))


@dataclass
class FeatureVector:
    """Features of one simulated placement, in weight order."""
    rows_cleared: int
    holes: int
    bumpiness: int
    aggregate_height: int

    def as_array(self) -> np.ndarray:
        return np.array([self.rows_cleared, self.holes, self.bumpiness, self.aggregate_height],
                        dtype=np.float64)


WeightsLike = Union[HeuristicWeights, Sequence[float], np.ndarray]


def as_weight_array(weights: WeightsLike) -> np.ndarray:
    if isinstance(weights, HeuristicWeights):
        return weights.as_array()
    array = np.array(weights, dtype=np.float64)
    if array.shape != (NUM_FEATURES,):
        raise ValueError(f"Expected {NUM_FEATURES} weights, got shape {array.shape}")
    return array


def count_holes(field: np.ndarray, tops: np.ndarray, full_rows: np.ndarray) -> int:
    """Count covered empty cells, ignoring rows a trial placement has filled.

    Scanning each column down from its top, rows flagged in ``full_rows`` are
    skipped first, then the run of empty cells directly under the top. Every
    empty cell below that point is a hole.
    """
    rows, cols = field.shape
    holes = 0
    for col in range(cols):
        row = min(int(tops[col]), rows - 1)
        while row >= 0 and full_rows[row]:
            row -= 1
        while row >= 0 and field[row, col] == 0:
            row -= 1
        if row >= 0:
            holes += int(np.count_nonzero(field[:row + 1, col] == 0))
    return holes


def bumpiness_and_height(tops: np.ndarray) -> Tuple[int, int]:
    """Sum of adjacent column height differences, and sum of column heights."""
    bumpiness = int(np.abs(np.diff(tops)).sum())
    aggregate_height = int(np.sum(tops))
    return bumpiness, aggregate_height


def score(features: Union[FeatureVector, Sequence[float]], weights: WeightsLike) -> float:
    """Dot product of features and weights."""
    if isinstance(features, FeatureVector):
        features = features.as_array()
    return float(np.dot(np.asarray(features, dtype=np.float64), as_weight_array(weights)))


def extract_features(field: np.ndarray, outcome: SimulatedOutcome) -> FeatureVector:
    bumpiness, aggregate_height = bumpiness_and_height(outcome.tops)
    return FeatureVector(
        rows_cleared=outcome.rows_cleared,
        holes=count_holes(field, outcome.tops, outcome.full_rows),
        bumpiness=bumpiness,
        aggregate_height=aggregate_height,
    )


class BoardEvaluator:
    """Linear heuristic over the placement features."""

    def __init__(self, weights: WeightsLike = None):
        self.weights = as_weight_array(weights if weights is not None else HeuristicWeights())

    def evaluate_placement(self, simulator: BoardSimulator, piece: int,
                           orientation: int, column: int) -> float:
        """Score a placement on the simulator's scratch grid. Losing moves score -inf."""
        with simulator.trial(piece, orientation, column) as outcome:
            if outcome.overflowed:
                return float('-inf')
            return score(extract_features(simulator.field, outcome), self.weights)
