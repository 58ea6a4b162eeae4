"""
Search space management for optimization parameters.
"""

from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union
import numpy as np

from paramsearch.configs.optimization.orchestrator import Algorithm
from ..errors import InvalidDimension
from .dimension import Dimension

# Strategies that draw random values from every range
_SAMPLING_ALGORITHMS = (Algorithm.GENETIC, Algorithm.BAYESIAN)


class SearchSpace:
    """
    Ordered set of dimensions explored by an optimization run.

    Dimension order matters: candidate vectors, cache keys and the traversal
    nesting all follow it.

    Example:
        space = SearchSpace.from_specs([
            {"start": 5, "end": 50, "step": 5},
            {"start": 0.5, "end": 2, "step": 0.25},
        ])
    """

    def __init__(self, dimensions: List[Dimension]):
        """
        Initialize search space with dimension definitions.

        Args:
            dimensions: List of Dimension objects, in candidate order
        """
        self.dimensions = list(dimensions)
        self._validate_search_space()

    @classmethod
    def from_specs(cls, specs: Iterable[Any]) -> "SearchSpace":
        """
        Build a search space from raw range specs or Dimension objects.

        Raises:
            InvalidDimension: if any spec is malformed or the space is empty.
        """
        if isinstance(specs, SearchSpace):
            return specs
        return cls([Dimension.parse(spec) for spec in specs])

    def _validate_search_space(self):
        if not self.dimensions:
            raise InvalidDimension("Search space cannot be empty")

        names = [dimension.name for dimension in self.dimensions if dimension.name is not None]
        if len(names) != len(set(names)):
            duplicates = sorted({name for name in names if names.count(name) > 1})
            raise InvalidDimension(f"Duplicate dimension names found: {duplicates}")

    def validate_for(self, algorithm: Union[Algorithm, str]):
        """
        Check the space against the needs of a strategy.

        Random-sampling strategies need a non-empty range on every stepped dimension.

        Raises:
            InvalidDimension: if a stepped dimension has start >= end for such a strategy.
        """
        if Algorithm(algorithm) not in _SAMPLING_ALGORITHMS:
            return
        for index, dimension in enumerate(self.dimensions):
            if dimension.is_degenerate:
                raise InvalidDimension(
                    f"Dimension {index} ({dimension.describe()}): start must be < end "
                    f"when step > 0 for {Algorithm(algorithm).value} search",
                    spec=dimension
                )

    def get_dimensionality(self) -> int:
        return len(self.dimensions)

    def total_combinations(self) -> float:
        """Product of the per-dimension grid sizes."""
        total = 1
        for dimension in self.dimensions:
            total *= dimension.total_combinations
        return total

    def sample(self, random_state: Optional[np.random.RandomState] = None) -> List[float]:
        """Draw one uniform random candidate."""
        rng = random_state or np.random.RandomState()
        return [dimension.sample(rng) for dimension in self.dimensions]

    def clip_vector(self, values: List[float]) -> List[float]:
        return [dimension.clip_value(value) for dimension, value in zip(self.dimensions, values)]

    def validate_vector(self, values: List[float]) -> bool:
        if len(values) != len(self.dimensions):
            return False
        return all(dimension.validate_value(value) for dimension, value in zip(self.dimensions, values))

    def get_bounds(self) -> List[Tuple[float, float]]:
        return [(dimension.start, dimension.end) for dimension in self.dimensions]

    def get_ranges(self) -> np.ndarray:
        """Span of every dimension, with empty spans replaced by 1 for normalization."""
        spans = np.array([dimension.span for dimension in self.dimensions], dtype=float)
        spans[spans == 0] = 1.0
        return spans

    @property
    def first_pinned(self) -> bool:
        return self.dimensions[0].is_pinned

    def describe(self) -> str:
        """Range label of the run, e.g. '5→50 0.5→2'."""
        return " ".join(dimension.describe() for dimension in self.dimensions)

    def __len__(self) -> int:
        return len(self.dimensions)

    def __iter__(self) -> Iterator[Dimension]:
        return iter(self.dimensions)

    def __getitem__(self, index: int) -> Dimension:
        return self.dimensions[index]

    def __repr__(self) -> str:
        info = []
        for index, dimension in enumerate(self.dimensions):
            label = dimension.name or f"x{index}"
            info.append(f"{label}: [{dimension.start}, {dimension.end}] step {dimension.step}")
        return f"SearchSpace({', '.join(info)})"
