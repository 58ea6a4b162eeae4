"""
Sequential model-based search.

The surrogate is a Gaussian-kernel weighted regression over every sample collected so
far; the next candidate maximizes Expected Improvement over a batch of random draws.
"""

import math
from typing import List, NamedTuple, Optional
import numpy as np

from paramsearch.configs.optimization.algorithms import BayesianConfig
from utils.logger import get_logger
from ..context import OptimizationContext
from ..results import BestResult
from ..search_space.space import SearchSpace
from .base import BaseOptimizer

logger = get_logger(__name__)

# Abramowitz-Stegun 7.1.26 coefficients
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


class SurrogateEstimate(NamedTuple):
    mu: float
    sigma: float


class Acquisition(NamedTuple):
    mu: float
    sigma: float
    ei: float


_PRIOR = SurrogateEstimate(mu=0.0, sigma=1.0)


def gaussian_pdf(x: float) -> float:
    """Standard normal probability density."""
    return math.exp(-0.5 * x * x) / math.sqrt(2 * math.pi)


def gaussian_cdf(x: float) -> float:
    """Standard normal cumulative probability (Abramowitz-Stegun rational approximation)."""
    sign = -1.0 if x < 0 else 1.0
    x = abs(x) / math.sqrt(2.0)
    t = 1.0 / (1.0 + _P * x)
    y = 1.0 - ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t * math.exp(-x * x)
    return 0.5 * (1.0 + sign * y)


class BayesianOptimizer(BaseOptimizer):
    """
    Kernel-regression surrogate search with an Expected Improvement acquisition.

    Works both as a strategy driven by ``search`` and as an ask/tell optimizer through
    ``suggest_parameters`` / ``update_with_result``.

    Args:
        space: Search space the candidates are drawn from
        config: Surrogate and acquisition settings
        random_state: Random state for reproducible suggestions
    """

    name = "bayesian"

    def __init__(
        self,
        space: SearchSpace,
        config: Optional[BayesianConfig] = None,
        random_state: Optional[np.random.RandomState] = None
    ):
        super().__init__()
        self.space = space
        self.config = config or BayesianConfig()
        self.rng = random_state or np.random.RandomState()
        self.samples: List[List[float]] = []
        self.fitness_values: List[float] = []
        self._ranges = space.get_ranges()

    def get_total_trials(self, context: OptimizationContext) -> float:
        return self.config.max_iterations

    gaussian_pdf = staticmethod(gaussian_pdf)
    gaussian_cdf = staticmethod(gaussian_cdf)

    def random_candidate(self) -> List[float]:
        return self.space.sample(self.rng)

    def perturb_candidate(self, candidate: List[float]) -> List[float]:
        """Move each value by up to half the perturbation scale of its range, clamped and rounded."""
        perturbed = []
        for dimension, value in zip(self.space, candidate):
            offset = (self.rng.random_sample() - 0.5) * self.config.perturbation_scale * dimension.span
            perturbed.append(dimension.clip_value(value + offset))
        return perturbed

    def get_surrogate_estimate(self, x: List[float]) -> SurrogateEstimate:
        """
        Kernel-weighted mean and spread of the observed fitness around x.

        With no samples, or when every kernel weight underflows to zero, the prior
        (mu=0, sigma=1) is returned.
        """
        if not self.samples:
            return _PRIOR

        samples = np.asarray(self.samples, dtype=float)
        fitness = np.asarray(self.fitness_values, dtype=float)
        diffs = (np.asarray(x, dtype=float) - samples) / self._ranges
        distance_squared = np.sum(diffs * diffs, axis=1)
        bandwidth = self.config.kernel_bandwidth
        weights = np.exp(-distance_squared / (2 * bandwidth * bandwidth))

        weight_total = weights.sum()
        if weight_total <= 0:
            return _PRIOR

        mu = float(np.dot(weights, fitness) / weight_total)
        variance = float(np.dot(weights, fitness * fitness) / weight_total - mu * mu)
        sigma = math.sqrt(max(variance, self.config.variance_floor))
        return SurrogateEstimate(mu=mu, sigma=sigma)

    def compute_acquisition(self, x: List[float]) -> Acquisition:
        mu, sigma = self.get_surrogate_estimate(x)
        improvement = mu - self.best.fitness - self.config.xi
        z = improvement / sigma if sigma > 0 else 0.0
        ei = improvement * gaussian_cdf(z) + sigma * gaussian_pdf(z) if sigma > 0 else 0.0
        return Acquisition(mu=mu, sigma=sigma, ei=ei)

    def suggest_parameters(self) -> List[float]:
        """
        Choose the next candidate.

        Random until the first sample exists, random with the exploration probability,
        otherwise the best-EI candidate of a random batch. When even the best EI is below
        the threshold the best known candidate is perturbed instead.
        """
        if not self.samples:
            return self.random_candidate()
        if self.rng.random_sample() < self.config.exploration_probability:
            logger.debug("Exploration: random candidate chosen")
            return self.random_candidate()

        best_candidate = None
        best_ei = -math.inf
        for _ in range(self.config.n_candidates):
            candidate = self.random_candidate()
            ei = self.compute_acquisition(candidate).ei
            if ei > best_ei:
                best_ei = ei
                best_candidate = candidate

        if best_ei < self.config.ei_threshold and self.best.parameters is not None:
            logger.debug(f"EI {best_ei} below threshold {self.config.ei_threshold}, perturbing best candidate")
            best_candidate = self.perturb_candidate(self.best.parameters)

        if best_candidate is None:
            return self.random_candidate()
        return best_candidate

    def update_with_result(self, parameters: List[float], fitness: float) -> bool:
        """Add a sample; returns True when it is the new best."""
        self.samples.append(list(parameters))
        self.fitness_values.append(fitness)
        improved = self._record(parameters, fitness)
        if improved:
            logger.debug(f"New best {self.best.parameters} with fitness {self.best.fitness}")
        return improved

    async def search(self, context: OptimizationContext) -> BestResult:
        logger.info(f"Starting bayesian search: {self.config.max_iterations} iterations over {self.space.describe()}")

        for iteration in range(self.config.max_iterations):
            if self._check_cancelled(context):
                logger.info(f"Bayesian search stopped by cancellation after {iteration} iterations")
                break

            candidate = self.suggest_parameters()
            fitness = await context.evaluate(candidate)
            if fitness is None:
                self._append_history(candidate, None)
                continue
            self.update_with_result(candidate, fitness)

        logger.info(f"Bayesian search finished: best {self.best.parameters} with fitness {self.best.fitness}")
        return self.get_best_result()
