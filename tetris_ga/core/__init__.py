"""
Core module for Tetris GA.
Contains the game engine, board management and the piece geometry table.
"""

from .tetris_engine import TetrisEngine, GameConfig
from .board import Board
from .pieces import PieceType, PieceGeometry, Orientation, STANDARD_GEOMETRY
from .exceptions import ConfigurationError, InvalidMoveException, GameOverException

__all__ = ['TetrisEngine', 'GameConfig', 'Board', 'PieceType', 'PieceGeometry', 'Orientation',
           'STANDARD_GEOMETRY', 'ConfigurationError', 'InvalidMoveException', 'GameOverException']
