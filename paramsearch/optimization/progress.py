"""
Progress reporting for long optimization runs.
"""

import math
from datetime import datetime, timedelta
from typing import Callable, List, Optional
from pydantic import BaseModel

from utils.logger import get_logger

logger = get_logger(__name__)


class ProgressUpdate(BaseModel):
    """Snapshot sent to progress callbacks after every resolved evaluation."""
    tested_count: int
    total_count: float
    elapsed_seconds: float
    predicted_finish: Optional[datetime] = None
    best_fitness: float = -math.inf
    last_parameters: List[float]
    last_fitness: float


ProgressCallback = Callable[[ProgressUpdate], None]


class ProgressTracker:
    """
    Tracks tested candidates against the size of the space and extrapolates the finish time.

    The finish time assumes every remaining candidate costs the average time seen so far.
    """

    def __init__(self, total_count: float, enabled: bool = True):
        self.total_count = total_count
        self.enabled = enabled
        self.started_at: Optional[datetime] = None
        self.best_fitness = -math.inf
        self._callbacks: List[ProgressCallback] = []

    def add_callback(self, callback: ProgressCallback):
        self._callbacks.append(callback)

    def start(self):
        self.started_at = datetime.now()
        self.best_fitness = -math.inf

    def record(self, tested_count: int, parameters: List[float], fitness: float) -> ProgressUpdate:
        if self.started_at is None:
            self.start()
        now = datetime.now()
        elapsed = (now - self.started_at).total_seconds()
        if fitness > self.best_fitness:
            self.best_fitness = fitness

        predicted_finish = None
        if tested_count > 0:
            predicted_finish = self.started_at + timedelta(seconds=elapsed / tested_count * self.total_count)

        update = ProgressUpdate(
            tested_count=tested_count,
            total_count=self.total_count,
            elapsed_seconds=elapsed,
            predicted_finish=predicted_finish,
            best_fitness=self.best_fitness,
            last_parameters=list(parameters),
            last_fitness=fitness
        )
        self._notify(update)
        return update

    def _notify(self, update: ProgressUpdate):
        if not self.enabled:
            return

        for callback in self._callbacks:
            try:
                callback(update)
            except Exception as e:
                logger.error(f"Progress callback failed: {e}")
