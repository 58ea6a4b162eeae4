"""
Exception taxonomy for parameter searches.

Only InvalidDimension escapes a run; evaluation errors are absorbed per candidate.
"""


class OptimizationError(Exception):
    """Base class for all optimization errors."""


class InvalidDimension(OptimizationError):
    """A range/step specification is malformed or inconsistent."""

    def __init__(self, message: str, spec=None):
        super().__init__(message)
        self.spec = spec


class EvaluationError(OptimizationError):
    """The evaluator could not produce a fitness for a candidate."""

    def __init__(self, message: str, parameters=None):
        super().__init__(message)
        self.parameters = parameters


class EvaluationTimeout(EvaluationError):
    """The evaluator did not answer within its bounded wait."""


class ParameterOutOfRange(EvaluationError):
    """The externally observed state does not match the requested candidate."""
