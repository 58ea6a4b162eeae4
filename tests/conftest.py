"""Pytest configuration and shared fixtures."""

import os
import sys
import tempfile
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Keep test runs from writing log files into the working tree
os.environ.setdefault("PARAMSEARCH_LOG_DIR", tempfile.mkdtemp(prefix="paramsearch-logs-"))


class RecordingEvaluator:
    """Async evaluator that records every call and scores candidates with a plain function."""

    def __init__(self, objective=None):
        self.objective = objective or (lambda values: float(sum(values)))
        self.calls = []

    async def __call__(self, values):
        self.calls.append(list(values))
        return self.objective(values)


@pytest.fixture
def recording_evaluator():
    return RecordingEvaluator


@pytest.fixture
def make_context():
    """Build an OptimizationContext around raw range specs and an evaluator."""
    from paramsearch.configs.optimization.evaluation import EvaluationConfig
    from paramsearch.optimization.context import CancellationFlag, OptimizationContext
    from paramsearch.optimization.evaluation import CandidateEvaluator
    from paramsearch.optimization.results import ResultCache
    from paramsearch.optimization.search_space.space import SearchSpace

    def _make(specs, evaluator, cache=None, seed=7, config=None, cancelled=False):
        space = SearchSpace.from_specs(specs)
        glue = CandidateEvaluator(
            space,
            evaluator,
            cache if cache is not None else ResultCache(),
            config or EvaluationConfig()
        )
        flag = CancellationFlag()
        if cancelled:
            flag.set()
        return OptimizationContext(
            space=space,
            evaluator=glue,
            cancellation=flag,
            random_state=np.random.RandomState(seed)
        )

    return _make
