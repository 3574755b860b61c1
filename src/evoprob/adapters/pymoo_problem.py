"""PyMoo adapter for multi-objective optimization.

This module wraps a ProblemSchema for use with pymoo. pymoo plays the
external driver: it produces generations, while every candidate is
evaluated through evaluate_candidate.

Sign convention: the core reports constraints as g >= 0 feasible, pymoo
expects G <= 0 feasible, so G = -g.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from pymoo.core.callback import Callback
from pymoo.core.problem import Problem
from pymoo.core.repair import Repair

from ..core.errors import EvaluationError
from ..core.evaluator import evaluate_candidate
from ..core.logging import get_logger
from ..core.plotting import PlotContext, invoke_plot
from ..core.ranges import ranges_bounds, snap_candidate
from ..core.schema import ProblemSchema
from ..core.types import EvaluationState
from ..surrogate.engine import SurrogateEngine

log = get_logger(__name__)

# Objective/violation assigned to rejected candidates
DEFAULT_PENALTY = 1e12


def _generation(algorithm: Any) -> int | None:
    n_gen = getattr(algorithm, "n_gen", None)
    if isinstance(n_gen, (int, np.integer)) and n_gen >= 1:
        return int(n_gen) - 1
    return None


class SnapRepair(Repair):
    """pymoo repair operator moving offspring into their variable domains."""

    def __init__(self, schema: ProblemSchema) -> None:
        super().__init__()
        self.schema = schema

    def _do(self, problem, X, **kwargs):
        return np.array([snap_candidate(self.schema.ranges, x) for x in X])


class SchemaProblem(Problem):
    """PyMoo Problem wrapper around a ProblemSchema.

    Args:
        schema: Validated schema (nf >= 1).
        surrogate: Engine filling externally supplied responses. Required
            when a SingleSet analysis masks any response.
        timeout: Per-call bound for user hooks, in seconds.
        reject_failed: Assign DEFAULT_PENALTY to candidates raising
            EvaluationError instead of aborting the run.
    """

    def __init__(
        self,
        schema: ProblemSchema,
        surrogate: SurrogateEngine | None = None,
        timeout: float | None = None,
        reject_failed: bool = True,
        **kwargs,
    ) -> None:
        if schema.nf < 1:
            raise ValueError("pymoo requires at least one objective (nf >= 1)")
        if surrogate is None and not schema.is_composite and schema.external_indices:
            raise ValueError(
                f"responses {schema.external_indices} are masked external; a SurrogateEngine is required"
            )

        xl, xu = ranges_bounds(schema.ranges)
        super().__init__(
            n_var=schema.nx,
            n_obj=schema.nf,
            n_ieq_constr=schema.ng,
            xl=xl,
            xu=xu,
            **kwargs,
        )

        self.schema = schema
        self.surrogate = surrogate
        self.timeout = timeout
        self.reject_failed = reject_failed
        self.last_x_final: np.ndarray | None = None
        self._n_evals = 0
        self._n_rejected = 0
        self._n_calls = 0

    def _evaluate(
        self,
        X: np.ndarray,
        out: dict,
        *args,
        **kwargs,
    ) -> None:
        """Evaluate population.

        Args:
            X: Decision matrix of shape (pop_size, n_var).
            out: Output dict for F and G.
        """
        gen_id = _generation(kwargs.get("algorithm"))
        if gen_id is None:
            gen_id = self._n_calls
        self._n_calls += 1

        n_pop = X.shape[0]
        F = np.zeros((n_pop, self.schema.nf), dtype=np.float64)
        G = np.zeros((n_pop, self.schema.ng), dtype=np.float64)
        X_final = np.zeros((n_pop, self.schema.nx), dtype=np.float64)

        for i, x in enumerate(X):
            x_in = snap_candidate(self.schema.ranges, x)
            state = EvaluationState(gen_id=gen_id, pop_id=i, userdata=self.schema.userdata)
            try:
                result = evaluate_candidate(self.schema, x_in, state, timeout=self.timeout)
                if self.surrogate is not None:
                    result = self.surrogate.fill(result)
            except EvaluationError as exc:
                if not self.reject_failed:
                    raise
                log.warn("candidate rejected", gen_id=gen_id, pop_id=i, error=str(exc))
                F[i] = DEFAULT_PENALTY
                G[i] = DEFAULT_PENALTY
                X_final[i] = x_in
                self._n_rejected += 1
            else:
                F[i] = result.f
                G[i] = -result.g
                X_final[i] = result.x_final
            self._n_evals += 1

        self.last_x_final = X_final
        out["F"] = F
        if self.schema.ng > 0:
            out["G"] = G

    @property
    def n_evals(self) -> int:
        """Total number of evaluations performed."""
        return self._n_evals

    @property
    def n_rejected(self) -> int:
        return self._n_rejected


def _population_index(algorithm, x: np.ndarray) -> int:
    """Row of x in algorithm.pop (0 when the population is unavailable)."""
    pop = getattr(algorithm, "pop", None)
    if pop is None or len(pop) == 0:
        return 0
    rows = np.flatnonzero(np.all(pop.get("X") == x, axis=1))
    return int(rows[0]) if len(rows) else 0


class PlotCallback(Callback):
    """Invoke the schema's plot hook with the best candidate each generation.

    "Best" is the optimum set member with the lowest first objective; the
    state's pop_id is that candidate's row in the current population.
    """

    def __init__(self, schema: ProblemSchema, context: PlotContext, every: int = 1) -> None:
        super().__init__()
        self.schema = schema
        self.context = context
        self.every = max(int(every), 1)
        self.n_plotted = 0
        self.n_failed = 0

    def notify(self, algorithm):
        if self.schema.plot_func is None:
            return
        gen_id = _generation(algorithm) or 0
        if gen_id % self.every:
            return

        opt = getattr(algorithm, "opt", None)
        if opt is None or len(opt) == 0:
            return
        F = opt.get("F")
        X = opt.get("X")
        best = int(np.argmin(F[:, 0]))
        pop_id = _population_index(algorithm, X[best])

        state = EvaluationState(gen_id=gen_id, pop_id=pop_id, userdata=self.schema.userdata)
        x_best = snap_candidate(self.schema.ranges, X[best])
        if invoke_plot(self.schema.plot_func, x_best, state, self.context):
            self.n_plotted += 1
        else:
            self.n_failed += 1
