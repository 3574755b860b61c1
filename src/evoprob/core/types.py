"""Core types for evaluation state and results.

This module defines the per-call values exchanged between the driver,
the dispatcher and user hooks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from numbers import Integral
from typing import TYPE_CHECKING, Any

import numpy as np

if TYPE_CHECKING:
    from .schema import ProblemSchema

# Value stored in response slots that a surrogate supplies
EXTERNAL = np.nan


@dataclass(frozen=True)
class EvaluationState:
    """Context handed to every user hook.

    Attributes:
        gen_id: Generation index (>= 0).
        pop_id: Candidate slot within the generation (>= 0).
        userdata: Shared read-only reference owned by the schema. Concurrent
            evaluations hold the same object; hooks must not mutate it.
    """

    gen_id: int
    pop_id: int
    userdata: Any = field(default=None, compare=False)

    def __post_init__(self) -> None:
        for name in ("gen_id", "pop_id"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
            object.__setattr__(self, name, int(value))


def make_state(schema: ProblemSchema, gen_id: int, pop_id: int) -> EvaluationState:
    """Build the state for one evaluation, aliasing the schema's userdata."""
    return EvaluationState(gen_id=gen_id, pop_id=pop_id, userdata=schema.userdata)


@dataclass
class EvaluationResult:
    """Result from candidate evaluation.

    Attributes:
        f: Objective values (minimize). Shape: (nf,)
        g: Constraint values. Convention: g >= 0 is feasible. Shape: (ng,)
        x_final: Candidate after any repair. Shape: (nx,)
        external: True where the slot is supplied by a surrogate rather than
            computed here. Shape: (nf + ng,), objectives first. Unfilled
            external slots hold NaN.
    """

    f: np.ndarray
    g: np.ndarray
    x_final: np.ndarray
    external: np.ndarray = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        self.f = np.asarray(self.f, dtype=np.float64).reshape(-1)
        self.g = np.asarray(self.g, dtype=np.float64).reshape(-1)
        self.x_final = np.asarray(self.x_final, dtype=np.float64).reshape(-1)
        n = len(self.f) + len(self.g)
        if self.external is None:
            self.external = np.zeros(n, dtype=bool)
        else:
            self.external = np.asarray(self.external, dtype=bool).reshape(-1)
        if len(self.external) != n:
            raise ValueError(f"external flags must have length {n}, got {len(self.external)}")

    @property
    def responses(self) -> np.ndarray:
        """Objectives followed by constraints."""
        return np.concatenate([self.f, self.g])

    @property
    def pending(self) -> np.ndarray:
        """Indices of external slots that still hold no value."""
        return np.flatnonzero(self.external & np.isnan(self.responses))

    @property
    def is_complete(self) -> bool:
        return len(self.pending) == 0

    @property
    def is_feasible(self) -> bool:
        """Check if all constraints are satisfied (g >= 0)."""
        return bool(np.all(self.g >= 0))

    @property
    def max_violation(self) -> float:
        """Return maximum violation over known constraints (0 if none violated)."""
        known = self.g[~np.isnan(self.g)]
        return float(np.maximum(-known, 0).max()) if len(known) > 0 else 0.0

    def with_responses(self, values: dict[int, float]) -> EvaluationResult:
        """Return a copy with the given global response slots filled.

        Only external slots may be filled; computed values are authoritative.
        """
        responses = self.responses.copy()
        for index, value in values.items():
            if not self.external[index]:
                raise ValueError(f"response {index} was computed by the analysis, not external")
            responses[index] = float(value)
        nf = len(self.f)
        return EvaluationResult(
            f=responses[:nf],
            g=responses[nf:],
            x_final=self.x_final.copy(),
            external=self.external.copy(),
        )
