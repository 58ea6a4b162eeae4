from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class EvaluationConfig(BaseModel):
    """
    Configuration for calls into the external evaluator.

    Attributes:
        timeout (float): Bounded wait per evaluator call in seconds, None to wait forever.
        settle_delay (float): Pause before each call so the evaluated system can settle.
        probe_pinned (bool): Force one probe before each real evaluation when the first
            dimension is pinned (step 0).
    """
    model_config = ConfigDict(extra="forbid")

    timeout: Optional[float] = Field(5.0, gt=0, description="Bounded wait per evaluator call")
    settle_delay: float = Field(0.0, ge=0, description="Delay before each evaluator call")
    probe_pinned: bool = Field(True, description="Probe once before evaluating with a pinned first dimension")
