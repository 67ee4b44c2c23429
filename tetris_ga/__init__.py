"""
Tetris GA: a heuristic Tetris player whose weights are tuned by a genetic algorithm.
"""

__version__ = "0.1.0"
