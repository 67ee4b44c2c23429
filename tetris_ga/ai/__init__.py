"""
AI module for Tetris GA.
Contains the trial-placement simulator, the heuristic evaluator, the player and the genetic optimizer.
"""

from .simulator import BoardSimulator, SimulatedOutcome
from .evaluation import BoardEvaluator, HeuristicWeights, FeatureVector
from .player import HeuristicPlayer, AgentState, best_move
from .training import GeneticTrainer, GeneticConfig, GenerationResult, Individual

__all__ = ['BoardSimulator', 'SimulatedOutcome', 'BoardEvaluator', 'HeuristicWeights',
           'FeatureVector', 'HeuristicPlayer', 'AgentState', 'best_move', 'GeneticTrainer',
           'GeneticConfig', 'GenerationResult', 'Individual']
