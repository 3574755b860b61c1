"""Example problems.

sphere_problem  - 2 real variables, composite analysis f = x0^2 + x1^2
masked_problem  - SingleSet analysis with eval_mask [1, 0, 1]: the objective
                  and the second constraint come from a surrogate
mixed_problem   - real/integer/set variables with pre-repair, a composite
                  analysis returning a canonicalized candidate, and a plot hook
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from ..core.analysis import Composite, SingleSet
from ..core.plotting import PlotContext
from ..core.ranges import IntegerRange, RealRange, SetRange
from ..core.schema import ProblemSchema, build_schema
from ..core.types import EvaluationState


def sphere_analysis(x: np.ndarray, state: EvaluationState) -> tuple[list[float], list[float]]:
    return [float(x[0] ** 2 + x[1] ** 2)], []


def sphere_problem() -> ProblemSchema:
    return build_schema(
        nx=2,
        nf=1,
        ng=0,
        ranges=[RealRange(-5.0, 5.0), RealRange(-5.0, 5.0)],
        analysis=Composite(sphere_analysis),
    )


def radius_margin(x: np.ndarray, state: EvaluationState) -> float:
    """Constraint: stay within radius sqrt(limit) of the origin (>= 0 feasible)."""
    limit = state.userdata["radius_limit"] if state.userdata else 4.0
    return float(limit - x[0] ** 2 - x[1] ** 2)


def masked_problem(userdata: Any = None) -> ProblemSchema:
    return build_schema(
        nx=2,
        nf=1,
        ng=2,
        ranges=[RealRange(-2.0, 2.0), RealRange(-2.0, 2.0)],
        analysis=SingleSet(obj=(None,), constr=(radius_margin, None)),
        eval_mask=[1, 0, 1],
        userdata=userdata if userdata is not None else {"radius_limit": 4.0},
    )


def mixed_repair(x: np.ndarray, state: EvaluationState) -> np.ndarray:
    """Pre-repair: pull the real pair inside the unit-sum simplex."""
    x = x.copy()
    total = x[0] + x[1]
    if total > 1.0:
        x[0] /= total
        x[1] /= total
    return x


def mixed_analysis(
    x: np.ndarray, state: EvaluationState
) -> tuple[list[float], list[float], np.ndarray]:
    weights = state.userdata["weights"]
    f = [
        float(weights[0] * x[0] + weights[1] * x[1] + x[2]),
        float((1.0 - x[0]) ** 2 + x[3] / 8.0),
    ]
    g = [float(1.0 - x[0] - x[1])]
    # Canonical form: real pair sorted descending
    x_canon = x.copy()
    x_canon[:2] = np.sort(x[:2])[::-1]
    return f, g, x_canon


def jsonl_plot(x: np.ndarray, state: EvaluationState, context: PlotContext) -> None:
    """Append the best candidate of a generation to <outdir>/best.jsonl."""
    if context.outdir is None:
        return
    outdir = Path(context.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    record = {
        "figure_id": context.figure_id,
        "title": context.title,
        "gen_id": state.gen_id,
        "pop_id": state.pop_id,
        "x": x.tolist(),
    }
    with open(outdir / "best.jsonl", "a") as f:
        f.write(json.dumps(record) + "\n")


def mixed_problem(userdata: Any = None) -> ProblemSchema:
    return build_schema(
        nx=4,
        nf=2,
        ng=1,
        ranges=[
            RealRange(0.0, 1.0),
            RealRange(0.0, 1.0),
            IntegerRange(0, 5),
            SetRange((1.0, 2.0, 4.0, 8.0)),
        ],
        analysis=Composite(mixed_analysis),
        userdata=userdata if userdata is not None else {"weights": (1.0, 2.0)},
        repair_func=mixed_repair,
        plot_func=jsonl_plot,
    )
