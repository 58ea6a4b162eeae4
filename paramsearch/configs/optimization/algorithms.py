from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional


class GeneticConfig(BaseModel):
    """
    Configuration for the genetic search.

    Attributes:
        # Explicit overrides (derived from the space size when left unset)
        population_size (int): Members kept after each selection.
        max_iterations (int): Number of generations.

        # Reproduction
        mutation_probability (float): Chance that a child is fully re-randomized.

        # Derivation rules
        population_divisor (int): One member per this many combinations.
        max_population_size (int): Upper bound on the derived population.
        iteration_factor (float): Share of (combinations / population) used as generations.
        min_iterations (int): Lower bound on the derived generation count.
    """
    model_config = ConfigDict(extra="forbid")

    population_size: Optional[int] = Field(None, gt=0, description="Explicit population size")
    max_iterations: Optional[int] = Field(None, ge=0, description="Explicit generation count")

    mutation_probability: float = Field(0.1, ge=0, le=1.0, description="Per-child mutation probability")

    population_divisor: int = Field(4, gt=0, description="Combinations per population member")
    max_population_size: int = Field(1000, gt=0, description="Population size cap")
    iteration_factor: float = Field(0.6, gt=0, description="Generations per population-sized slice of the space")
    min_iterations: int = Field(10, ge=0, description="Minimum derived generation count")


class BayesianConfig(BaseModel):
    """Configuration for the kernel-regression surrogate search."""
    model_config = ConfigDict(extra="forbid")

    max_iterations: int = Field(50, ge=0, description="Number of evaluations requested")
    kernel_bandwidth: float = Field(0.2, gt=0, description="Gaussian kernel bandwidth in normalized units")
    xi: float = Field(0.01, ge=0, description="Exploration margin of the expected improvement")
    ei_threshold: float = Field(1e-6, ge=0, description="EI below which the best candidate is perturbed")
    n_candidates: int = Field(50, gt=0, description="Random candidates scored per suggestion")
    exploration_probability: float = Field(0.1, ge=0, le=1.0, description="Chance of a purely random suggestion")
    perturbation_scale: float = Field(0.1, gt=0, description="Perturbation width as a share of each range")
    variance_floor: float = Field(1e-6, gt=0, description="Minimum surrogate variance")

    @model_validator(mode="after")
    def validate_scales(self) -> "BayesianConfig":
        if self.perturbation_scale > 1.0:
            raise ValueError("perturbation_scale must not exceed the full range (1.0)")
        return self
