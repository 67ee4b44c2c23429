#!/usr/bin/env python3
"""
Tetris GA: a heuristic Tetris player tuned by a genetic algorithm.
Main entry point and command-line interface.
"""

import argparse
import time

from tetris_ga.core.tetris_engine import TetrisEngine
from tetris_ga.ai.evaluation import HeuristicWeights
from tetris_ga.ai.player import HeuristicPlayer
from tetris_ga.ai.training import GeneticTrainer, GeneticConfig

DISPLAY_EVERY = 100  # Pieces between board printouts in play mode


def play_game():
    """Play one game with the default weight vector."""
    print("Tetris GA Playout")
    print("=" * 50)

    weights = HeuristicWeights()
    player = HeuristicPlayer(weights)
    print(f"Weights: {weights}")
    print()

    def show(engine: TetrisEngine, rows_cleared: int):
        if engine.turn % DISPLAY_EVERY == 0:
            print(engine)
            print("-" * 30)

    player.on_piece_placed = show

    start_time = time.time()
    rows = player.play()
    duration = time.time() - start_time

    print(player.engine)
    print()
    print(f"You have completed {rows} rows.")
    print(f"Pieces placed: {player.engine.turn}")
    print(f"Game duration: {duration:.2f} seconds")


def train_weights():
    """Run the genetic optimizer with the default parameters.

    Progress is the one line per generation printed by the trainer.
    """
    trainer = GeneticTrainer(GeneticConfig())
    trainer.train()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Tetris GA: heuristic Tetris player tuned by a genetic algorithm"
    )
    parser.add_argument('-g', '--genetic', action='store_true',
                        help='Run the genetic optimizer instead of a single playout')
    args = parser.parse_args()

    if args.genetic:
        train_weights()
    else:
        play_game()


if __name__ == "__main__":
    main()
