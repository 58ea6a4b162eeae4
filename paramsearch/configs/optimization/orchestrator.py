from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .algorithms import BayesianConfig, GeneticConfig
from .evaluation import EvaluationConfig


class Algorithm(str, Enum):
    """Search strategies the orchestrator can drive."""
    TRAVERSAL = "traversal"
    GENETIC = "genetic"
    BAYESIAN = "bayesian"


class OptimizationConfig(BaseModel):
    """Configuration for optimization runs."""
    model_config = ConfigDict(extra="forbid")

    algorithm: Algorithm = Field(Algorithm.TRAVERSAL, description="Search strategy to run")
    seed: Optional[int] = Field(None, description="Seed for every random draw of a run")
    enable_progress_tracking: bool = True

    genetic: GeneticConfig = Field(default_factory=GeneticConfig)
    bayesian: BayesianConfig = Field(default_factory=BayesianConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
