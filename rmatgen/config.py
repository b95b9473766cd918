"""Pydantic models defining the configuration contract for rmatgen."""

from __future__ import annotations

from typing import Optional

import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator

from rmatgen.randomness import DEFAULT_SEED, list_random_factories


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

# Graph500 uses A = 0.57, B = C = 0.19
DEFAULT_A = 0.57
DEFAULT_B = 0.19
DEFAULT_C = 0.19

DEFAULT_NOISE = 0.10


# ---------------------------------------------------------------------------
# Validation helpers (shared with the imperative setters)
# ---------------------------------------------------------------------------

def check_constants(a: float, b: float, c: float) -> None:
    """Raise ``ValueError`` unless *a*, *b*, *c* form valid R-MAT constants."""
    a32, b32, c32 = np.float32(a), np.float32(b), np.float32(c)
    # NaN must fail this check
    if not (0 <= a32 and 0 <= b32 and 0 <= c32 and a32 + b32 + c32 <= np.float32(1.0)):
        raise ValueError(
            "RMat parameters A, B, and C must be non-negative and sum to less "
            f"than or equal to one, got A={a}, B={b}, C={c}"
        )


def check_noise(noise: float) -> None:
    """Raise ``ValueError`` unless *noise* lies in ``[0, 2]``."""
    if not (0.0 <= noise <= 2.0):
        raise ValueError(
            "RMat parameter noise must be non-negative and less than or equal "
            f"to 2.0, got {noise}"
        )


# ---------------------------------------------------------------------------
# Model parameters
# ---------------------------------------------------------------------------

class RMatConstants(BaseModel):
    """
    Probabilities for recursively subdividing the adjacency matrix.

    Setting A = B = C = 0.25 emulates the Erdős-Rényi model.
    """
    a: float = Field(default=DEFAULT_A, description="P(source bit 0, target bit 0)")
    b: float = Field(default=DEFAULT_B, description="P(source bit 0, target bit 1)")
    c: float = Field(default=DEFAULT_C, description="P(source bit 1, target bit 0)")

    @model_validator(mode="after")
    def _check_sum(self) -> "RMatConstants":
        check_constants(self.a, self.b, self.c)
        return self

    @property
    def d(self) -> float:
        """P(source bit 1, target bit 1)."""
        return 1.0 - self.a - self.b - self.c


class NoiseConfig(BaseModel):
    """Per-bit perturbation of the quadrant probabilities."""
    enabled: bool = False
    noise: float = Field(default=DEFAULT_NOISE, ge=0.0, le=2.0)


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------

class ExecutionConfig(BaseModel):
    """How blocks are spread over workers."""
    parallelism: Optional[int] = Field(
        default=None, ge=1, description="Worker count; None uses os.cpu_count()",
    )
    use_processes: bool = Field(
        default=True, description="Process pool if True, thread pool otherwise",
    )
    show_progress: bool = False


# ---------------------------------------------------------------------------
# Top-level configuration
# ---------------------------------------------------------------------------

class RMatConfig(BaseModel):
    """Everything needed to generate one R-MAT graph."""
    vertex_count: int = Field(..., gt=0)
    edge_count: int = Field(..., gt=0)
    constants: RMatConstants = Field(default_factory=RMatConstants)
    noise: NoiseConfig = Field(default_factory=NoiseConfig)

    seed: int = Field(default=DEFAULT_SEED, ge=0, description="Base seed of all blocks")
    random_generator: str = Field(default="pcg64", description="Random factory name")
    max_attempts_per_edge: Optional[int] = Field(
        default=None, ge=1, description="Retry guard per edge; None is unbounded",
    )

    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)

    @field_validator("random_generator")
    @classmethod
    def _known_generator(cls, value: str) -> str:
        available = list_random_factories()
        if value not in available:
            raise ValueError(
                f"Unknown random generator '{value}'. Available: {', '.join(available)}"
            )
        return value
