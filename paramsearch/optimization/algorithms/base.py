import math
from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic import BaseModel

from ..context import OptimizationContext
from ..results import BestResult


class OptimizationResult(BaseModel):
    """
    Result from a single evaluation requested by an optimizer.
    """
    parameters: List[float]
    objective_value: Optional[float] = None
    success: bool = True


class BaseOptimizer(ABC):
    """
    Abstract base class for all search strategies.

    A strategy drives its own loop through ``search``: it asks the context to evaluate
    candidates one at a time, polls the cancellation flag between units of work, and
    keeps the best result it has seen.
    """

    name: str = "base"

    def __init__(self, **kwargs):
        self.best = BestResult()
        self.history: List[OptimizationResult] = []
        self.was_cancelled = False

    @abstractmethod
    async def search(self, context: OptimizationContext) -> BestResult:
        """
        Run the strategy until its budget is spent or the run is cancelled.
        """
        pass

    @abstractmethod
    def get_total_trials(self, context: OptimizationContext) -> float:
        """
        Number of evaluations the strategy expects to request.
        """
        pass

    def _check_cancelled(self, context: OptimizationContext) -> bool:
        if context.cancelled:
            self.was_cancelled = True
        return self.was_cancelled

    def _append_history(self, parameters: List[float], fitness: Optional[float]):
        self.history.append(OptimizationResult(
            parameters=list(parameters),
            objective_value=fitness,
            success=fitness is not None
        ))

    def _record(self, parameters: List[float], fitness: Optional[float]) -> bool:
        """Append to the history and update the best result; True on a new best."""
        self._append_history(parameters, fitness)
        return self.best.update(parameters, fitness)

    def get_best_result(self) -> BestResult:
        return self.best.model_copy(deep=True)

    def get_optimization_history(self) -> List[OptimizationResult]:
        # Evaluation order
        return self.history.copy()

    def get_sorted_results(self) -> List[OptimizationResult]:
        # Best first, unresolved evaluations last
        return sorted(
            self.history,
            key=lambda x: x.objective_value if x.objective_value is not None else -math.inf,
            reverse=True
        )
