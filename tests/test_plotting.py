"""Tests for plot hook invocation."""

import json

import numpy as np

from evoprob.core.plotting import PlotContext, invoke_plot
from evoprob.core.types import EvaluationState, make_state
from evoprob.problems.examples import jsonl_plot


def test_invoke_plot_passes_explicit_context():
    calls = []
    context = PlotContext(figure_id=7, title="best")

    def plot(x, state, ctx):
        calls.append((x.copy(), state.gen_id, ctx))

    ok = invoke_plot(plot, [1.0, 2.0], EvaluationState(gen_id=3, pop_id=0), context)

    assert ok
    np.testing.assert_array_equal(calls[0][0], [1.0, 2.0])
    assert calls[0][1] == 3
    assert calls[0][2] is context


def test_invoke_plot_failure_is_reported_not_raised(capsys):
    def broken(x, state, ctx):
        raise RuntimeError("no display")

    ok = invoke_plot(broken, [0.0], EvaluationState(gen_id=1, pop_id=2), PlotContext())

    assert ok is False
    err = capsys.readouterr().err.strip().splitlines()
    record = json.loads(err[-1])
    assert record["level"] == "ERROR"
    assert record["error_type"] == "RuntimeError"
    assert record["gen_id"] == 1
    assert record["pop_id"] == 2


def test_invoke_plot_malformed_candidate_is_reported(capsys):
    calls = []
    ok = invoke_plot(
        lambda x, s, c: calls.append(x), ["a", None], EvaluationState(gen_id=0, pop_id=4), PlotContext()
    )

    assert ok is False
    assert calls == []
    record = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert record["message"] == "plot hook failed"
    assert record["pop_id"] == 4


def test_invoke_plot_without_hook():
    assert invoke_plot(None, [0.0], EvaluationState(gen_id=0, pop_id=0), PlotContext()) is False


def test_jsonl_plot_writes_records(mixed, tmp_path):
    context = PlotContext(figure_id=2, title="mixed", outdir=tmp_path)
    for gen in range(3):
        assert invoke_plot(mixed.plot_func, [0.5, 0.25, 1, 8.0], make_state(mixed, gen, 0), context)

    lines = (tmp_path / "best.jsonl").read_text().splitlines()
    assert [json.loads(line)["gen_id"] for line in lines] == [0, 1, 2]
    assert json.loads(lines[0])["x"] == [0.5, 0.25, 1.0, 8.0]
