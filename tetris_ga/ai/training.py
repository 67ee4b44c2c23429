"""
Training module for Tetris GA.
Tunes the heuristic weight vector with a genetic algorithm over simulated games.
"""

import itertools
from concurrent.futures import ProcessPoolExecutor
from functools import cmp_to_key
from typing import List, Optional, Sequence, Tuple
import numpy as np
from dataclasses import dataclass

from ..core.exceptions import ConfigurationError
from ..core.tetris_engine import GameConfig
from ..core.pieces import PieceGeometry, STANDARD_GEOMETRY
from .evaluation import NUM_FEATURES, ROWS_CLEARED
from .player import HeuristicPlayer


@dataclass
class GeneticConfig:
    """Configuration for the genetic optimizer."""
    population_size: int = 100  # Must be even
    generations: int = 20
    mutation_rate: float = 0.01  # Per-feature probability
    games_per_evaluation: int = 15
    mutation_step: float = 0.005  # Largest single perturbation
    fitness_epsilon: float = 1e-4  # Fitness closer than this ranks as a tie
    seed: Optional[int] = None
    workers: int = 1
    verbose: bool = True

    def __post_init__(self):
        if self.population_size < 2 or self.population_size % 2:
            raise ConfigurationError(
                f"population_size must be an even number >= 2, got {self.population_size}"
            )
        if self.generations < 0:
            raise ConfigurationError(f"generations must be >= 0, got {self.generations}")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError(f"mutation_rate must be in [0, 1], got {self.mutation_rate}")
        if self.games_per_evaluation < 1:
            raise ConfigurationError(
                f"games_per_evaluation must be >= 1, got {self.games_per_evaluation}"
            )
        if self.mutation_step <= 0:
            raise ConfigurationError(f"mutation_step must be positive, got {self.mutation_step}")
        if self.fitness_epsilon < 0:
            raise ConfigurationError(
                f"fitness_epsilon must be non-negative, got {self.fitness_epsilon}"
            )
        if self.workers < 1:
            raise ConfigurationError(f"workers must be >= 1, got {self.workers}")


@dataclass
class GenerationResult:
    """Summary of one generation, taken before selection."""
    generation: int
    best_weights: np.ndarray
    best_fitness: float
    mean_fitness: float


class Individual(HeuristicPlayer):
    """One candidate weight vector and the private game used to measure it."""

    def __init__(self, features: Sequence[float], game_config: Optional[GameConfig] = None,
                 geometry: PieceGeometry = STANDARD_GEOMETRY,
                 rng: Optional[np.random.Generator] = None):
        super().__init__(features, game_config, geometry, rng)
        self.fitness = 0.0

    @property
    def features(self) -> np.ndarray:
        return self.evaluator.weights

    @staticmethod
    def random_features(rng: np.random.Generator) -> np.ndarray:
        """Rows cleared starts non-negative, the three penalties non-positive."""
        features = -rng.random(NUM_FEATURES)
        features[ROWS_CLEARED] = -features[ROWS_CLEARED]
        return features

    def play_games(self, games: int) -> int:
        """Total rows cleared over several independent games."""
        total = 0
        for _ in range(games):
            total += self.play()
            self.reset_state()
        return total

    def __str__(self):
        return "[" + ", ".join(f"{w:.6f}" for w in self.features) + "]"

    def __repr__(self):
        return f"Individual(features={self}, fitness={self.fitness})"


def compare_fitness(a: Individual, b: Individual, epsilon: float = 1e-4) -> int:
    """Sort comparator: higher fitness first, near-equal fitness ties."""
    if abs(a.fitness - b.fitness) < epsilon:
        return 0
    return -1 if a.fitness > b.fitness else 1


def rank_population(population: Sequence[Individual], epsilon: float = 1e-4) -> List[Individual]:
    """Population sorted by descending fitness. Ties keep their population order."""
    return sorted(population, key=cmp_to_key(lambda a, b: compare_fitness(a, b, epsilon)))


def uniform_crossover(parent_a: np.ndarray, parent_b: np.ndarray,
                      rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    """Flip a coin per feature to decide which child inherits from which parent."""
    coins = rng.random(len(parent_a)) < 0.5
    child_a = np.where(coins, parent_a, parent_b)
    child_b = np.where(coins, parent_b, parent_a)
    return child_a, child_b


def mutate_features(features: np.ndarray, rate: float, rng: np.random.Generator,
                    step: float = 0.005) -> np.ndarray:
    """Nudge each feature with probability rate, in place, clamped to [-1, 1]."""
    for j in range(len(features)):
        if rng.random() < rate:
            amount = 0.0
            while amount == 0.0:
                sign = 1.0 if rng.random() < 0.5 else -1.0
                amount = sign * step * rng.random()
            features[j] = min(1.0, max(-1.0, features[j] + amount))
    return features


def evaluate_weights(features: np.ndarray, game_config: Optional[GameConfig],
                     geometry: PieceGeometry, games: int,
                     seed: np.random.SeedSequence) -> float:
    """Fitness of a weight vector on a fresh private game. Runs in worker processes."""
    individual = Individual(features, game_config, geometry, np.random.default_rng(seed))
    return float(individual.play_games(games))


class GeneticTrainer:
    """Genetic optimizer over a population of Individuals."""

    def __init__(self, config: Optional[GeneticConfig] = None,
                 game_config: Optional[GameConfig] = None,
                 geometry: PieceGeometry = STANDARD_GEOMETRY):
        self.config = config or GeneticConfig()
        self.game_config = game_config or GameConfig()
        self.geometry = geometry

        # Root of every random stream in the run
        self.seed_sequence = np.random.SeedSequence(self.config.seed)
        self.rng = np.random.default_rng(self.seed_sequence.spawn(1)[0])

        self.generation = 0
        self.history: List[GenerationResult] = []
        self.population = self.create_population()

    def _new_individual(self, features: np.ndarray) -> Individual:
        return Individual(features, self.game_config, self.geometry)

    def create_population(self) -> List[Individual]:
        """Create the first generation with randomly initialized weights."""
        return [
            self._new_individual(Individual.random_features(self.rng))
            for _ in range(self.config.population_size)
        ]

    def fitness(self, individual: Individual, seed: np.random.SeedSequence) -> float:
        """Sum of rows cleared over the configured number of games."""
        individual.reset_state(np.random.default_rng(seed))
        individual.fitness = float(individual.play_games(self.config.games_per_evaluation))
        return individual.fitness

    def evaluate_population(self):
        """Assign a fitness to every individual, each on its own random stream."""
        seeds = self.seed_sequence.spawn(len(self.population))

        if self.config.workers > 1:
            with ProcessPoolExecutor(max_workers=self.config.workers) as pool:
                futures = [
                    pool.submit(evaluate_weights, individual.features, self.game_config,
                                self.geometry, self.config.games_per_evaluation, seed)
                    for individual, seed in zip(self.population, seeds)
                ]
                for individual, future in zip(self.population, futures):
                    individual.fitness = future.result()
        else:
            for individual, seed in zip(self.population, seeds):
                self.fitness(individual, seed)

    def select(self, ranked: Sequence[Individual]) -> List[Individual]:
        """Keep the better half of a ranked population."""
        return list(ranked[:len(ranked) // 2])

    def combine(self, parents: Sequence[Individual]) -> List[Individual]:
        """Breed a full-size generation from the survivors.

        Survivors are paired in order (an odd one out pairs with the first) and
        the pairs are cycled, each producing two children, until the population
        is back to size.
        """
        count = len(parents)
        pairs = [(parents[i], parents[(i + 1) % count]) for i in range(0, count, 2)]

        children = []
        for parent_a, parent_b in itertools.cycle(pairs):
            if len(children) >= self.config.population_size:
                break
            child_a, child_b = uniform_crossover(parent_a.features, parent_b.features, self.rng)
            children.append(self._new_individual(child_a))
            children.append(self._new_individual(child_b))
        return children

    def mutate(self, population: Sequence[Individual]):
        """Mutate every individual's features in place."""
        for individual in population:
            mutate_features(individual.features, self.config.mutation_rate, self.rng,
                            self.config.mutation_step)

    def step(self) -> GenerationResult:
        """Run one generation: evaluate, select, recombine and mutate."""
        self.evaluate_population()
        ranked = rank_population(self.population, self.config.fitness_epsilon)
        best = ranked[0]

        result = GenerationResult(
            generation=self.generation,
            best_weights=best.features.copy(),
            best_fitness=best.fitness,
            mean_fitness=float(np.mean([individual.fitness for individual in self.population])),
        )

        self.population = self.combine(self.select(ranked))
        self.mutate(self.population)

        if self.config.verbose:
            print(f"Generation {self.generation}, best individual: {best} "
                  f"(fitness {best.fitness:.1f})")

        self.history.append(result)
        self.generation += 1
        return result

    def train(self, generations: Optional[int] = None) -> List[GenerationResult]:
        """Run the configured number of generations."""
        if generations is None:
            generations = self.config.generations

        for _ in range(generations):
            self.step()

        return self.history

    def best_result(self) -> Optional[GenerationResult]:
        """Best generation seen so far."""
        if not self.history:
            return None
        return max(self.history, key=lambda result: result.best_fitness)
