"""
Optimization orchestrator - main entry point for every parameter search.

The orchestrator manages the optimization lifecycle and coordinates between:
- The search space built from raw range specs
- The external evaluator and the shared result cache
- The selected search strategy (traversal, genetic, bayesian) and its hyperparameters
- Progress tracking and cooperative cancellation
"""

import asyncio
import math
from datetime import datetime
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union
import numpy as np

from paramsearch.configs.optimization.algorithms import GeneticConfig
from paramsearch.configs.optimization.orchestrator import Algorithm, OptimizationConfig
from utils.logger import get_logger
from .algorithms.base import BaseOptimizer
from .algorithms.bayesian import BayesianOptimizer
from .algorithms.genetic import GeneticOptimizer
from .algorithms.traversal import TraversalOptimizer
from .context import CancellationFlag, OptimizationContext
from .evaluation import CandidateEvaluator, EvaluatorFn
from .progress import ProgressTracker, ProgressUpdate
from .results import BestResult, OptimizationReport, Report, ResultCache
from .search_space.space import SearchSpace

logger = get_logger(__name__)


def derive_genetic_hyperparameters(total_combinations: float, config: Optional[GeneticConfig] = None) -> Tuple[int, int, float]:
    """
    Size the genetic search from the number of combinations in the space.

    population_size = min(ceil(total / 4), 1000)
    max_iterations = max(ceil(total / population_size * 0.6), 10)

    Explicit values in the config win over the derived ones.

    Returns:
        (population_size, max_iterations, mutation_probability)
    """
    config = config or GeneticConfig()

    population_size = config.population_size
    if population_size is None:
        population_size = min(math.ceil(total_combinations / config.population_divisor), config.max_population_size)
        population_size = max(population_size, 1)

    max_iterations = config.max_iterations
    if max_iterations is None:
        max_iterations = max(
            math.ceil(total_combinations / population_size * config.iteration_factor),
            config.min_iterations
        )

    return population_size, max_iterations, config.mutation_probability


class OptimizationOrchestrator:
    """
    Main orchestrator for optimization workflows.

    Manages the complete optimization lifecycle:
    1. Initialization - Search space validation and strategy selection
    2. Execution - Sequential evaluation of candidates proposed by the strategy
    3. Finalization - Best result and run report

    Features:
    - Per-candidate failure tolerance (timeouts, out-of-range observations)
    - Progress tracking and cooperative cancellation
    - At most one evaluation per unique parameter combination
    """

    def __init__(self, config: Optional[OptimizationConfig] = None):
        """
        Initialize the optimization orchestrator.

        Args:
            config: Configuration for the optimization process, including the algorithm to run
        """
        self.config = config or OptimizationConfig()

        # State management
        self.is_running = False
        self._own_cancellation = CancellationFlag()
        self._active_cancellation = self._own_cancellation
        self._progress_callbacks: List[Callable[[ProgressUpdate], None]] = []

        # Results of the last run
        self.results: Optional[ResultCache] = None
        self.optimizer: Optional[BaseOptimizer] = None
        self.best: Optional[BestResult] = None
        self._report: Optional[OptimizationReport] = None

    @property
    def cancellation(self) -> CancellationFlag:
        """The flag polled by the current run, or the orchestrator's own flag between runs."""
        return self._active_cancellation

    @property
    def is_cancelled(self) -> bool:
        return self._active_cancellation.is_set()

    def add_progress_callback(self, callback: Callable[[ProgressUpdate], None]):
        """Add callback for progress updates."""
        self._progress_callbacks.append(callback)

    def cancel(self):
        """Ask the running search to stop at its next yield point."""
        logger.info("Cancellation requested")
        self._active_cancellation.set()

    def create_optimizer(self, space: SearchSpace, random_state: np.random.RandomState,
                         algorithm: Optional[Algorithm] = None) -> BaseOptimizer:
        """
        Build the strategy selected in the configuration.

        Args:
            space: Validated search space
            random_state: Random state shared by the whole run
            algorithm: Overrides the configured algorithm
        """
        algorithm = Algorithm(algorithm or self.config.algorithm)

        if algorithm == Algorithm.TRAVERSAL:
            return TraversalOptimizer()

        if algorithm == Algorithm.GENETIC:
            total = space.total_combinations()
            population_size, max_iterations, mutation_probability = derive_genetic_hyperparameters(
                total, self.config.genetic
            )
            logger.info(
                f"Genetic hyperparameters for {total} combinations: population {population_size}, "
                f"{max_iterations} generations, mutation probability {mutation_probability}"
            )
            return GeneticOptimizer(population_size, max_iterations, mutation_probability)

        if algorithm == Algorithm.BAYESIAN:
            return BayesianOptimizer(space, self.config.bayesian, random_state=random_state)

        raise ValueError(f"Unsupported algorithm: {algorithm}")

    async def run(
        self,
        dimensions: Union[SearchSpace, Iterable[Any]],
        evaluator: EvaluatorFn,
        cache: Optional[ResultCache] = None,
        algorithm: Optional[Union[Algorithm, str]] = None,
        cancellation: Optional[CancellationFlag] = None
    ) -> BestResult:
        """
        Run the complete optimization workflow.

        Args:
            dimensions: Raw range specs ({start, end, step}), Dimension objects or a SearchSpace
            evaluator: Async function mapping a parameter vector to a fitness (or a Report)
            cache: Result cache to read and extend; a fresh one is created when omitted
            algorithm: Overrides the configured algorithm for this run
            cancellation: External stop flag for this run only, never cleared here; when omitted
                the orchestrator's own flag is reset and used

        Returns:
            The best parameters found and their fitness (fitness -inf when nothing was evaluated)

        Raises:
            InvalidDimension: if the space is malformed, before any evaluation starts
        """
        if self.is_running:
            raise RuntimeError("An optimization run is already in progress")

        algorithm = Algorithm(algorithm or self.config.algorithm)
        space = SearchSpace.from_specs(dimensions)
        space.validate_for(algorithm)

        if cancellation is None:
            self._own_cancellation.clear()
            cancellation = self._own_cancellation

        cache = cache if cache is not None else ResultCache()
        random_state = np.random.RandomState(self.config.seed)
        total = space.total_combinations()

        progress = ProgressTracker(total, enabled=self.config.enable_progress_tracking)
        for callback in self._progress_callbacks:
            progress.add_callback(callback)

        def on_result(parameters: List[float], report: Report):
            progress.record(len(cache), parameters, report.fitness)

        candidate_evaluator = CandidateEvaluator(space, evaluator, cache, self.config.evaluation, on_result=on_result)
        context = OptimizationContext(
            space=space,
            evaluator=candidate_evaluator,
            cancellation=cancellation,
            random_state=random_state
        )
        optimizer = self.create_optimizer(space, random_state, algorithm)
        progress.total_count = min(total, optimizer.get_total_trials(context))

        self.results = cache
        self.optimizer = optimizer
        self._active_cancellation = cancellation
        self.is_running = True
        started_at = datetime.now()
        progress.start()
        logger.info(f"Starting {algorithm.value} optimization over {space!r} ({total} combinations)")

        try:
            best = await optimizer.search(context)
        finally:
            self.is_running = False
            # A caller-supplied flag is only borrowed for this run
            self._active_cancellation = self._own_cancellation

        self.best = best
        self._report = OptimizationReport(
            algorithm=algorithm.value,
            ranges=space.describe(),
            best=best,
            started_at=started_at,
            finished_at=datetime.now(),
            cancelled=optimizer.was_cancelled,
            evaluations=candidate_evaluator.evaluations,
            cache_hits=candidate_evaluator.cache_hits,
            failures=candidate_evaluator.failures,
            results=dict(cache.items())
        )
        logger.info(
            f"Optimization finished: best {best.parameters} with fitness {best.fitness} "
            f"({candidate_evaluator.summary()})"
        )
        return best

    def optimize(
        self,
        dimensions: Union[SearchSpace, Iterable[Any]],
        evaluator: EvaluatorFn,
        cache: Optional[ResultCache] = None,
        algorithm: Optional[Union[Algorithm, str]] = None
    ) -> BestResult:
        """Synchronous wrapper around ``run`` for callers without an event loop."""
        return asyncio.run(self.run(dimensions, evaluator, cache=cache, algorithm=algorithm))

    def build_report(self) -> OptimizationReport:
        """
        Summary of the last run for the reporting collaborator.

        Raises:
            RuntimeError: if no run has finished yet
        """
        if self._report is None:
            raise RuntimeError("No optimization run has finished yet")
        return self._report
