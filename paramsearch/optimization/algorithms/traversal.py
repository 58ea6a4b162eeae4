from typing import List

from utils.logger import get_logger
from ..context import OptimizationContext
from ..results import BestResult
from .base import BaseOptimizer

logger = get_logger(__name__)


class TraversalOptimizer(BaseOptimizer):
    """
    Exhaustive grid search by recursive descent.

    The last dimension is the outermost loop and dimension 0 the innermost; only the
    innermost level calls the evaluator. Values are produced index-wise and rounded to
    each dimension's precision, so no floating-point drift builds up across a sweep.
    """

    name = "traversal"

    def get_total_trials(self, context: OptimizationContext) -> float:
        total = 1
        for dimension in context.space:
            total *= len(dimension.values())
        return total

    async def search(self, context: OptimizationContext) -> BestResult:
        space = context.space
        logger.info(f"Starting traversal over {space.describe()} ({self.get_total_trials(context)} candidates)")

        current = [dimension.start for dimension in space]
        await self._iterate_ranges(context, len(space) - 1, current)

        if self.was_cancelled:
            logger.info("Traversal stopped by cancellation")
        logger.info(f"Traversal finished: best {self.best.parameters} with fitness {self.best.fitness}")
        return self.get_best_result()

    async def _iterate_ranges(self, context: OptimizationContext, index: int, current: List[float]):
        if self._check_cancelled(context):
            return

        dimension = context.space[index]
        for value in dimension.values():
            current[index] = value
            if index == 0:
                if self._check_cancelled(context):
                    return
                fitness = await context.evaluate(current)
                if self._record(current, fitness):
                    logger.debug(f"New best {current} with fitness {fitness}")
            else:
                await self._iterate_ranges(context, index - 1, current)
                if self.was_cancelled:
                    return
