"""Candidate evaluation: the interface drivers call.

Interface:
    evaluate_candidate(schema, x, state) -> EvaluationResult

Flow (strictly sequential per candidate):
    1. apply_repair(schema, x, state) -> x_pre
    2. evaluate(schema, x_pre, state) -> f, g computed against x_pre
    3. Composite analysis may return x'; it becomes x_final

Different candidates share no mutable data, so evaluate_population runs
them on a thread pool.
"""

from __future__ import annotations

from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import numpy as np

from .dispatcher import evaluate
from .errors import EvaluationError
from .logging import get_logger
from .repair import apply_repair
from .schema import ProblemSchema
from .types import EvaluationResult, EvaluationState

log = get_logger(__name__)


def evaluate_candidate(
    schema: ProblemSchema,
    x: Any,
    state: EvaluationState,
    *,
    timeout: float | None = None,
) -> EvaluationResult:
    """Repair, then evaluate one candidate.

    Args:
        schema: Validated problem schema.
        x: Candidate vector (length nx).
        state: Per-call state.
        timeout: Optional bound in seconds for each user call.

    Returns:
        EvaluationResult. x_final is the analysis's repaired output when it
        returns one, else the pre-repaired candidate.
    """
    x_pre = apply_repair(schema, x, state, timeout=timeout)
    return evaluate(schema, x_pre, state, timeout=timeout)


def evaluate_population(
    schema: ProblemSchema,
    X: np.ndarray | Sequence[Any],
    gen_id: int,
    *,
    pop_offset: int = 0,
    max_workers: int | None = None,
    timeout: float | None = None,
    return_exceptions: bool = False,
) -> list[EvaluationResult | EvaluationError]:
    """Evaluate a batch of candidates concurrently.

    Args:
        schema: Shared, immutable schema.
        X: Array-like of shape (n, nx) or iterable of 1-D vectors.
        gen_id: Generation index for every state in the batch.
        pop_offset: pop_id of the first row; row i gets pop_offset + i.
        max_workers: Thread pool size (None = concurrent.futures default,
            1 = evaluate serially on the calling thread).
        timeout: Per-call bound forwarded to evaluate_candidate.
        return_exceptions: Return EvaluationErrors in place of results
            instead of raising the first one.

    Returns:
        Results in input order.
    """
    rows = list(X)
    states = [
        EvaluationState(gen_id=gen_id, pop_id=pop_offset + i, userdata=schema.userdata)
        for i in range(len(rows))
    ]

    def run(i: int) -> EvaluationResult | EvaluationError:
        try:
            return evaluate_candidate(schema, rows[i], states[i], timeout=timeout)
        except EvaluationError as exc:
            if not return_exceptions:
                raise
            log.warn(
                "candidate rejected",
                gen_id=gen_id,
                pop_id=states[i].pop_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return exc

    with log.timer("population", gen_id=gen_id, n=len(rows)):
        if max_workers == 1:
            return [run(i) for i in range(len(rows))]
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="evoprob-eval") as pool:
            return list(pool.map(run, range(len(rows))))
