"""
Genetic search: a population evolved by truncation selection, mean crossover and resampling mutation.

Each generation evaluates the whole pool (parents answered from the cache), keeps the
``population_size`` fittest members, then breeds ``population_size`` children that join
the pool until the next selection.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from utils.logger import get_logger
from ..context import OptimizationContext
from ..results import BestResult
from ..search_space.dimension import count_decimal_places, round_half_up
from .base import BaseOptimizer

logger = get_logger(__name__)


@dataclass
class PopulationMember:
    """A candidate vector plus its fitness. Children start with a 0.0 placeholder; None means unresolved."""

    values: List[float]
    fitness: Optional[float] = 0.0

    @property
    def parameters(self) -> List[float]:
        return list(self.values)

    def candidate(self) -> List[float]:
        """Population representation: the values followed by a trailing fitness slot."""
        return [*self.values, self.fitness if self.fitness is not None else 0.0]

    def sort_key(self) -> float:
        return self.fitness if self.fitness is not None else -math.inf


ParentLike = Union[PopulationMember, Sequence[float]]


def _values_of(parent: ParentLike) -> List[float]:
    if isinstance(parent, PopulationMember):
        return parent.values
    return list(parent)


class GeneticOptimizer(BaseOptimizer):
    """
    Population-based stochastic search.

    Args:
        population_size: Members kept after each selection
        max_iterations: Number of generations
        mutation_probability: Chance that a child is re-randomized
    """

    name = "genetic"

    def __init__(self, population_size: int, max_iterations: int, mutation_probability: float = 0.1):
        super().__init__()
        if population_size < 1:
            raise ValueError(f"population_size must be >= 1, got {population_size}")
        if max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {max_iterations}")
        if not 0.0 <= mutation_probability <= 1.0:
            raise ValueError(f"mutation_probability must be within [0, 1], got {mutation_probability}")

        self.population_size = population_size
        self.max_iterations = max_iterations
        self.mutation_probability = mutation_probability
        self.population: List[PopulationMember] = []
        self.generation_history: List[Dict[str, Any]] = []

    def get_total_trials(self, context: OptimizationContext) -> float:
        return self.population_size * self.max_iterations

    def initialize_population(self, context: OptimizationContext) -> List[PopulationMember]:
        return [
            PopulationMember(values=context.random_candidate())
            for _ in range(self.population_size)
        ]

    async def selection(self, context: OptimizationContext, population: List[PopulationMember]) -> bool:
        """
        Evaluate every member, sort by fitness descending and truncate to population_size.

        Returns:
            False if the run was cancelled before the whole pool was evaluated.
        """
        for member in population:
            if self._check_cancelled(context):
                return False
            member.fitness = await context.evaluate(member.values)
            self._append_history(member.values, member.fitness)

        population.sort(key=PopulationMember.sort_key, reverse=True)
        del population[self.population_size:]
        return True

    def crossover(self, parent1: ParentLike, parent2: ParentLike) -> PopulationMember:
        """
        Component-wise mean of two parents.

        Each value is rounded to the decimal places of the first parent's own value, not to
        the dimension's step precision.
        """
        values1 = _values_of(parent1)
        values2 = _values_of(parent2)
        child = [
            round_half_up((a + b) / 2, count_decimal_places(a))
            for a, b in zip(values1, values2)
        ]
        return PopulationMember(values=child, fitness=0.0)

    def mutate(self, context: OptimizationContext, member: PopulationMember) -> PopulationMember:
        """Replace every value with a fresh uniform draw from its dimension."""
        member.values = context.random_candidate()
        return member

    def reproduce(self, context: OptimizationContext, population: List[PopulationMember]) -> List[PopulationMember]:
        rng = context.random_state
        parents = population[:self.population_size]
        children = []
        for _ in range(self.population_size):
            parent1 = parents[rng.randint(len(parents))]
            parent2 = parents[rng.randint(len(parents))]
            child = self.crossover(parent1, parent2)
            if rng.random_sample() < self.mutation_probability:
                self.mutate(context, child)
            children.append(child)
        return children

    async def search(self, context: OptimizationContext) -> BestResult:
        logger.info(
            f"Starting genetic search: population {self.population_size}, "
            f"{self.max_iterations} generations, mutation probability {self.mutation_probability}"
        )
        self.population = self.initialize_population(context)

        for generation in range(self.max_iterations):
            if self._check_cancelled(context):
                break

            completed = await self.selection(context, self.population)
            if not completed or self._check_cancelled(context):
                break

            leader = self.population[0]
            if leader.fitness is not None and leader.fitness > self.best.fitness:
                self.best.update(leader.parameters, leader.fitness)
                logger.info(f"Generation {generation}: new best {leader.parameters} with fitness {leader.fitness}")

            self._log_generation(generation)
            self.population.extend(self.reproduce(context, self.population))

        if self.was_cancelled:
            logger.info("Genetic search stopped by cancellation")
        logger.info(f"Genetic search finished: best {self.best.parameters} with fitness {self.best.fitness}")
        return self.get_best_result()

    def _log_generation(self, generation: int):
        resolved = [member.fitness for member in self.population if member.fitness is not None]
        entry = {
            'generation': generation,
            'population_size': len(self.population),
            'best_fitness': max(resolved) if resolved else None,
            'mean_fitness': sum(resolved) / len(resolved) if resolved else None,
        }
        self.generation_history.append(entry)
        logger.debug(f"Generation {generation}: {entry}")
