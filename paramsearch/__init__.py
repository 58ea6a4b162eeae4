"""Parameter search engine: traversal, genetic and bayesian strategies against an external evaluator."""

__version__ = "0.1.0"
