"""
Search strategies for parameter optimization.
"""

from .base import BaseOptimizer, OptimizationResult
from .traversal import TraversalOptimizer
from .genetic import GeneticOptimizer, PopulationMember
from .bayesian import BayesianOptimizer

__all__ = [
    'BaseOptimizer',
    'OptimizationResult',
    'TraversalOptimizer',
    'GeneticOptimizer',
    'PopulationMember',
    'BayesianOptimizer'
]
