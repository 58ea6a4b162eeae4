"""
Optimization module for parameter searches against an external evaluator.

Three interchangeable strategies (exhaustive traversal, genetic, kernel-surrogate bayesian)
explore a bounded, stepped search space and report the best parameter vector found.
"""

from .orchestrator import OptimizationOrchestrator, derive_genetic_hyperparameters
from .algorithms.base import BaseOptimizer
from .context import CancellationFlag, OptimizationContext
from .errors import (
    EvaluationError,
    EvaluationTimeout,
    InvalidDimension,
    OptimizationError,
    ParameterOutOfRange,
)
from .results import BestResult, OptimizationReport, Report, ResultCache
from .search_space.dimension import Dimension
from .search_space.space import SearchSpace

__all__ = [
    'OptimizationOrchestrator',
    'derive_genetic_hyperparameters',
    'BaseOptimizer',
    'CancellationFlag',
    'OptimizationContext',
    'OptimizationError',
    'InvalidDimension',
    'EvaluationError',
    'EvaluationTimeout',
    'ParameterOutOfRange',
    'BestResult',
    'OptimizationReport',
    'Report',
    'ResultCache',
    'Dimension',
    'SearchSpace'
]
