"""
Result types shared by every search strategy and the memoization cache keyed by candidate values.
"""

import math
from datetime import datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple
import pandas as pd
from pydantic import BaseModel, Field

from utils.logger import get_logger
from .search_space.dimension import format_value

logger = get_logger(__name__)


class Report(BaseModel):
    """
    Outcome of evaluating one candidate.

    Attributes:
        fitness: Score to maximize
        metrics: Raw metrics reported by the evaluator, kept opaque
    """
    fitness: float
    metrics: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_outcome(cls, outcome: Any) -> "Report":
        """Normalize an evaluator return value (number, Report or mapping with 'fitness')."""
        if isinstance(outcome, Report):
            return outcome
        if isinstance(outcome, Mapping):
            payload = dict(outcome)
            if 'fitness' not in payload:
                raise ValueError(f"Evaluator result has no 'fitness': {payload!r}")
            fitness = payload.pop('fitness')
            metrics = payload.pop('metrics', None)
            return cls(fitness=fitness, metrics=metrics if metrics is not None else payload)
        if isinstance(outcome, bool) or outcome is None:
            raise ValueError(f"Evaluator returned {outcome!r} instead of a fitness")
        return cls(fitness=float(outcome))


class BestResult(BaseModel):
    """
    Best candidate observed so far. Replaced only by a strictly greater fitness.
    """
    parameters: Optional[List[float]] = None
    fitness: float = -math.inf

    def update(self, parameters: Sequence[float], fitness: Optional[float]) -> bool:
        if fitness is None or not fitness > self.fitness:
            return False
        self.parameters = list(parameters)
        self.fitness = fitness
        return True

    @property
    def found(self) -> bool:
        return self.parameters is not None


class ResultCache:
    """
    Memoizes evaluator reports by candidate key.

    Keys join each dimension's current value with ", " in dimension order. A key is
    recorded at most once, so every unique combination is evaluated at most once per run.
    There is no eviction.
    """

    SEPARATOR = ", "

    def __init__(self, reports: Optional[Mapping[str, Report]] = None):
        self._reports: Dict[str, Report] = {}
        for key, report in (reports or {}).items():
            self.record(key, Report.from_outcome(report))

    @classmethod
    def make_key(cls, values: Sequence[float]) -> str:
        return cls.SEPARATOR.join(format_value(value) for value in values)

    def lookup(self, key: str) -> Optional[Report]:
        return self._reports.get(key)

    def record(self, key: str, report: Report) -> bool:
        """
        Store a report under key.

        Returns:
            False if the key was already present; the first report is kept.
        """
        if key in self._reports:
            logger.warning(f"Result for '{key}' already recorded, keeping the first report")
            return False
        self._reports[key] = report
        return True

    def items(self) -> Iterator[Tuple[str, Report]]:
        return iter(self._reports.items())

    def best(self) -> Optional[Tuple[str, Report]]:
        if not self._reports:
            return None
        return max(self._reports.items(), key=lambda item: item[1].fitness)

    def to_frame(self) -> pd.DataFrame:
        """
        One row per recorded key: parameters, fitness and one column per metric.
        Rows keep recording order.
        """
        rows = []
        for key, report in self._reports.items():
            row = {'parameters': key, 'fitness': report.fitness}
            row.update(report.metrics)
            rows.append(row)
        return pd.DataFrame(rows, columns=None if rows else ['parameters', 'fitness'])

    def __contains__(self, key: object) -> bool:
        return key in self._reports

    def __len__(self) -> int:
        return len(self._reports)

    def __repr__(self) -> str:
        return f"ResultCache({len(self)} results)"


class OptimizationReport(BaseModel):
    """
    Summary of a finished run, handed to the reporting collaborator.
    """
    algorithm: str
    ranges: str
    best: BestResult
    started_at: datetime
    finished_at: Optional[datetime] = None
    cancelled: bool = False
    evaluations: int = 0
    cache_hits: int = 0
    failures: int = 0
    results: Dict[str, Report] = Field(default_factory=dict)

    def to_frame(self) -> pd.DataFrame:
        return ResultCache(self.results).to_frame()
