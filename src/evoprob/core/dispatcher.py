"""Analysis dispatch: computes one candidate's responses.

Interface:
    evaluate(schema, x, state) -> EvaluationResult(f, g, x_final, external)

Flow:
    1. Check len(x) == nx and every component against its range
    2. Composite: call fn(x, state) once, check output sizes
       SingleSet: call each unmasked response function in declared order,
       leave masked slots as EXTERNAL (NaN)
    3. Return EvaluationResult

The dispatcher holds no state between calls and never clamps or repairs x.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from .analysis import Composite, SingleSet
from .errors import DispatchError, DomainError
from .logging import get_logger
from .schema import ProblemSchema
from .timeout import call_with_timeout
from .types import EXTERNAL, EvaluationResult, EvaluationState

log = get_logger(__name__)


def check_candidate(schema: ProblemSchema, x: Any) -> np.ndarray:
    """Return x as a float64 vector after checking it against the schema.

    Raises:
        DispatchError: Wrong length, or any component outside its range.
    """
    try:
        x_arr = np.array(x, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise DispatchError(f"candidate is not a numeric vector: {x!r}") from exc

    if len(x_arr) != schema.nx:
        raise DispatchError(f"out-of-domain value: expected {schema.nx} variables, got {len(x_arr)}")

    for i, (rng, value) in enumerate(zip(schema.ranges, x_arr)):
        try:
            rng.check(float(value), index=i)
        except DomainError as exc:
            raise DispatchError(f"out-of-domain value: {exc}") from exc
    return x_arr


def _as_vector(values: Any, size: int, label: str) -> np.ndarray:
    if values is None:
        raise DispatchError(f"analysis output {label} is None")
    try:
        arr = np.asarray(values, dtype=np.float64).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise DispatchError(f"analysis output {label} is not numeric: {values!r}") from exc
    if len(arr) != size:
        raise DispatchError(
            f"analysis output length mismatch: {label} has {len(arr)} entries, expected {size}"
        )
    # NaN marks external slots only; a computed slot must hold a number
    if np.isnan(arr).any():
        raise DispatchError(f"analysis output {label} is not numeric: {values!r}")
    return arr


def _dispatch_composite(
    schema: ProblemSchema,
    analysis: Composite,
    x: np.ndarray,
    state: EvaluationState,
    timeout: float | None,
) -> EvaluationResult:
    out = call_with_timeout(analysis.fn, (x.copy(), state), timeout, DispatchError, "analysis")

    if not isinstance(out, (tuple, list)) or len(out) not in (2, 3):
        n_out = len(out) if isinstance(out, (tuple, list)) else 1
        raise DispatchError(
            f"analysis output length mismatch: expected (f, g) or (f, g, x), got {n_out} outputs"
        )

    f = _as_vector(out[0], schema.nf, "f")
    g = _as_vector(out[1], schema.ng, "g")

    # The repaired candidate is not re-validated; the next generation does that
    x_final = x
    if len(out) == 3 and out[2] is not None:
        x_final = _as_vector(out[2], schema.nx, "x")

    return EvaluationResult(f=f, g=g, x_final=x_final)


def _dispatch_single_set(
    schema: ProblemSchema,
    analysis: SingleSet,
    x: np.ndarray,
    state: EvaluationState,
    timeout: float | None,
) -> EvaluationResult:
    mask = schema.mask
    responses = np.full(schema.n_responses, EXTERNAL, dtype=np.float64)

    for i in range(schema.n_responses):
        if mask[i]:
            continue
        fn = analysis.callable_at(i, schema.nf)
        if fn is None:
            raise DispatchError(f"missing analysis function for unmasked response {i}")
        value = call_with_timeout(fn, (x.copy(), state), timeout, DispatchError, f"response {i}")
        responses[i] = _as_vector(value, 1, f"response {i}")[0]

    return EvaluationResult(
        f=responses[: schema.nf],
        g=responses[schema.nf :],
        x_final=x.copy(),
        external=mask,
    )


def evaluate(
    schema: ProblemSchema,
    x: Any,
    state: EvaluationState,
    *,
    timeout: float | None = None,
) -> EvaluationResult:
    """Evaluate the analysis of one candidate.

    Args:
        schema: Validated problem schema.
        x: Candidate vector of length nx.
        state: Per-call state forwarded to every analysis function.
        timeout: Optional per-call bound in seconds for each user function.

    Returns:
        EvaluationResult with f, g, x_final and external flags.

    Raises:
        DispatchError: Out-of-domain candidate, wrong output sizes, missing
            callable, or timeout. Errors raised by user functions propagate.
    """
    x_arr = check_candidate(schema, x)
    analysis = schema.analysis

    with log.timer("dispatch", gen_id=state.gen_id, pop_id=state.pop_id):
        if isinstance(analysis, Composite):
            return _dispatch_composite(schema, analysis, x_arr, state, timeout)
        if isinstance(analysis, SingleSet):
            return _dispatch_single_set(schema, analysis, x_arr, state, timeout)

    raise DispatchError(f"unknown analysis type {type(analysis).__name__}")
