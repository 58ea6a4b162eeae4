"""
Per-run state passed explicitly into every search strategy.
"""

import threading
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import numpy as np

from .evaluation import CandidateEvaluator
from .search_space.space import SearchSpace


class CancellationFlag:
    """
    Cooperative stop signal. Set from any thread or task; strategies poll it between units of work
    and never interrupt an evaluation in flight.
    """

    def __init__(self):
        self._event = threading.Event()

    def set(self):
        self._event.set()

    def clear(self):
        self._event.clear()

    def is_set(self) -> bool:
        return self._event.is_set()

    def __bool__(self) -> bool:
        return self._event.is_set()


@dataclass
class OptimizationContext:
    """Everything a strategy needs for one run: the space, the evaluator glue, the stop flag and the RNG."""

    space: SearchSpace
    evaluator: CandidateEvaluator
    cancellation: CancellationFlag = field(default_factory=CancellationFlag)
    random_state: np.random.RandomState = field(default_factory=np.random.RandomState)

    @property
    def cancelled(self) -> bool:
        return self.cancellation.is_set()

    async def evaluate(self, values: Sequence[float]) -> Optional[float]:
        return await self.evaluator.evaluate(values)

    def random_candidate(self) -> List[float]:
        return self.space.sample(self.random_state)
