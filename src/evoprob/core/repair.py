"""Pre-evaluation repair.

Post-evaluation repair has no separate call: it is the optional third output
of a Composite analysis (see dispatcher.py), substituted by the evaluator.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from .errors import RepairError
from .schema import ProblemSchema
from .timeout import call_with_timeout
from .types import EvaluationState


def apply_repair(
    schema: ProblemSchema,
    x: Any,
    state: EvaluationState,
    *,
    timeout: float | None = None,
) -> np.ndarray:
    """Run the schema's repair function on x, if one is configured.

    Returns:
        The repaired candidate, or x unchanged (as float64) without repair_func.

    Raises:
        RepairError: Output is not a numeric vector of length nx, or timeout.
    """
    x_arr = np.asarray(x, dtype=np.float64).reshape(-1)
    if schema.repair_func is None:
        return x_arr

    out = call_with_timeout(schema.repair_func, (x_arr.copy(), state), timeout, RepairError, "repair")
    try:
        x_pre = np.asarray(out, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise RepairError(f"repair returned a non-numeric vector: {out!r}") from exc
    if len(x_pre) != schema.nx:
        raise RepairError(f"repair returned {len(x_pre)} variables, expected {schema.nx}")
    return x_pre
