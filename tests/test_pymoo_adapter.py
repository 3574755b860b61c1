"""Tests for the pymoo bridge."""

import json
from types import SimpleNamespace

import numpy as np
import pytest
from pymoo.algorithms.moo.nsga2 import NSGA2
from pymoo.core.population import Population
from pymoo.optimize import minimize

from evoprob.adapters.pymoo_problem import (
    DEFAULT_PENALTY,
    PlotCallback,
    SchemaProblem,
    SnapRepair,
)
from evoprob.core.plotting import PlotContext
from evoprob.surrogate.engine import SurrogateEngine


class SumModel:
    def predict(self, X):
        return np.array([X[0].sum()])


def test_problem_dimensions(mixed):
    problem = SchemaProblem(mixed)
    assert problem.n_var == 4
    assert problem.n_obj == 2
    assert problem.n_ieq_constr == 1
    np.testing.assert_array_equal(problem.xl, [0.0, 0.0, 0.0, 1.0])
    np.testing.assert_array_equal(problem.xu, [1.0, 1.0, 5.0, 8.0])


def test_constraint_sign_flipped(mixed):
    problem = SchemaProblem(mixed)
    out = problem.evaluate(np.array([[0.9, 0.9, 1.0, 2.0], [0.1, 0.2, 0.0, 1.0]]), return_as_dictionary=True)
    # Row 0 pre-repaired to (0.5, 0.5): g = 0 -> G = 0 ; row 1: g = 0.7 -> G = -0.7
    np.testing.assert_allclose(out["G"][:, 0], [0.0, -0.7], atol=1e-12)
    np.testing.assert_allclose(problem.last_x_final[1], [0.2, 0.1, 0.0, 1.0])
    assert problem.n_evals == 2


def test_masked_requires_surrogate(masked):
    with pytest.raises(ValueError, match="SurrogateEngine is required"):
        SchemaProblem(masked)


def test_masked_with_surrogate(masked):
    engine = SurrogateEngine(masked, {0: SumModel(), 2: SumModel()})
    problem = SchemaProblem(masked, surrogate=engine)
    out = problem.evaluate(np.array([[1.0, 0.5]]), return_as_dictionary=True)
    np.testing.assert_allclose(out["F"], [[1.5]])
    np.testing.assert_allclose(out["G"], [[-(4.0 - 1.0 - 0.25), -1.5]])


def test_failed_candidates_penalized(make_composite):
    schema = make_composite(lambda x, s: ([1.0, 2.0], []), nf=1)
    problem = SchemaProblem(schema)
    out = problem.evaluate(np.array([[0.0, 0.0]]), return_as_dictionary=True)
    assert out["F"][0, 0] == DEFAULT_PENALTY
    assert problem.n_rejected == 1

    strict = SchemaProblem(schema, reject_failed=False)
    with pytest.raises(Exception, match="length mismatch"):
        strict.evaluate(np.array([[0.0, 0.0]]))


def test_snap_repair(mixed):
    repaired = SnapRepair(mixed)._do(None, np.array([[1.2, 0.5, 2.4, 5.5]]))
    np.testing.assert_array_equal(repaired, [[1.0, 0.5, 2.0, 4.0]])


def test_nsga2_smoke_with_plot_callback(mixed, tmp_path):
    context = PlotContext(figure_id=1, title="smoke", outdir=tmp_path)
    callback = PlotCallback(mixed, context)
    problem = SchemaProblem(mixed)

    res = minimize(
        problem,
        NSGA2(pop_size=8, repair=SnapRepair(mixed)),
        termination=("n_gen", 3),
        seed=1,
        callback=callback,
        verbose=False,
    )

    assert res.F is not None
    assert problem.n_evals >= 8
    assert callback.n_plotted == 3
    records = [json.loads(line) for line in (tmp_path / "best.jsonl").read_text().splitlines()]
    assert [r["gen_id"] for r in records] == [0, 1, 2]
    assert all(mixed.ranges[3].validate(r["x"][3]) for r in records)


def test_plot_callback_reports_population_row(mixed, tmp_path):
    pop_X = np.array([[0.9, 0.1, 1.0, 2.0], [0.8, 0.2, 3.0, 4.0], [0.7, 0.3, 2.0, 8.0]])
    pop = Population.new(X=pop_X)
    pop.set("F", np.array([[3.0, 0.0], [1.0, 0.0], [2.0, 0.0]]))
    # Optimum set ordering differs from the population
    opt = pop[[2, 1]]
    algorithm = SimpleNamespace(n_gen=1, pop=pop, opt=opt)

    callback = PlotCallback(mixed, PlotContext(outdir=tmp_path))
    callback.notify(algorithm)

    record = json.loads((tmp_path / "best.jsonl").read_text().splitlines()[0])
    assert record["pop_id"] == 1
    assert record["x"] == [0.8, 0.2, 3.0, 4.0]


def test_sphere_converges_towards_origin(sphere):
    res = minimize(SchemaProblem(sphere), NSGA2(pop_size=20), termination=("n_gen", 15), seed=3)
    assert float(np.min(res.F)) < 1.0
