"""
Glue between the search strategies and the external evaluator.

Every strategy evaluates candidates through CandidateEvaluator, which:
- answers from the ResultCache when the candidate was already evaluated
- forces one probe of the evaluator when the first dimension is pinned
- serializes evaluator calls (at most one in flight), waits the settle delay
  and bounds each call with the configured timeout
- absorbs per-candidate failures, reporting them as "no observation" (None)
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from paramsearch.configs.optimization.evaluation import EvaluationConfig
from utils.logger import get_logger
from .errors import EvaluationError, EvaluationTimeout, ParameterOutOfRange
from .results import Report, ResultCache
from .search_space.space import SearchSpace

logger = get_logger(__name__)

EvaluatorFn = Callable[[List[float]], Awaitable[Any]]
ResultCallback = Callable[[List[float], Report], None]


class CandidateEvaluator:
    """Cache-aware, failure-tolerant wrapper around an async evaluator."""

    def __init__(
        self,
        space: SearchSpace,
        evaluator: EvaluatorFn,
        cache: ResultCache,
        config: Optional[EvaluationConfig] = None,
        on_result: Optional[ResultCallback] = None
    ):
        if not callable(evaluator):
            raise TypeError("evaluator must be an async callable taking a parameter vector")
        self.space = space
        self.evaluator = evaluator
        self.cache = cache
        self.config = config or EvaluationConfig()
        self.on_result = on_result
        self._lock = asyncio.Lock()

        self.evaluations = 0
        self.cache_hits = 0
        self.failures = 0
        self.probes = 0

    async def evaluate(self, values: Sequence[float]) -> Optional[float]:
        """
        Resolve the fitness of a candidate.

        Args:
            values: Candidate values, one per dimension

        Returns:
            The fitness, or None when the evaluation failed and no observation was made.
        """
        parameters = list(values)
        key = ResultCache.make_key(parameters)

        cached = self.cache.lookup(key)
        if cached is not None:
            self.cache_hits += 1
            logger.debug(f"Cache hit for [{key}]: {cached.fitness}")
            return cached.fitness

        if self.config.probe_pinned and self.space.first_pinned:
            await self._probe(parameters)

        try:
            outcome = await self._call(parameters)
            report = Report.from_outcome(outcome)
        except ParameterOutOfRange as e:
            self.failures += 1
            logger.warning(f"Parameter out of range for [{key}], omitted: {e}")
            return None
        except EvaluationTimeout as e:
            self.failures += 1
            logger.warning(f"Evaluation timed out for [{key}], skipped: {e}")
            return None
        except EvaluationError as e:
            self.failures += 1
            logger.warning(f"Evaluator rejected [{key}], skipped: {e}")
            return None
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.failures += 1
            logger.warning(f"Evaluation failed for [{key}], skipped: {e}")
            return None

        self.evaluations += 1
        self.cache.record(key, report)
        logger.debug(f"Evaluated [{key}]: {report.fitness}")
        if self.on_result is not None:
            self.on_result(parameters, report)
        return report.fitness

    async def _probe(self, parameters: List[float]):
        """Trigger evaluation that refreshes the evaluated system; its outcome is discarded."""
        self.probes += 1
        try:
            await self._call(parameters)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Pinned-dimension probe failed: {e}")

    async def _call(self, parameters: List[float]) -> Any:
        async with self._lock:
            if self.config.settle_delay:
                await asyncio.sleep(self.config.settle_delay)
            outcome = self.evaluator(list(parameters))
            if not inspect.isawaitable(outcome):
                return outcome
            try:
                if self.config.timeout is None:
                    return await outcome
                return await asyncio.wait_for(outcome, timeout=self.config.timeout)
            except asyncio.TimeoutError:
                raise EvaluationTimeout(
                    f"No result within {self.config.timeout}s", parameters=parameters
                ) from None

    def summary(self) -> dict:
        return {
            'evaluations': self.evaluations,
            'cache_hits': self.cache_hits,
            'failures': self.failures,
            'probes': self.probes,
        }
