"""
Custom exceptions for the Tetris GA game engine.
"""


class ConfigurationError(ValueError):
    """Raised when a game or optimizer configuration cannot be used."""
    pass


class InvalidMoveException(Exception):
    """Custom exception for an orientation or column outside the legal range."""
    pass


class GameOverException(Exception):
    """Custom exception for a move requested after the game has ended."""
    pass
