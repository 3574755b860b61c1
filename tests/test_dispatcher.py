"""Tests for analysis dispatch."""

import time

import numpy as np
import pytest

from evoprob.core.dispatcher import evaluate
from evoprob.core.errors import DispatchError, DomainError
from evoprob.core.types import EvaluationState, make_state


def test_sphere_scenario(sphere, state0):
    result = evaluate(sphere, [3.0, 4.0], state0)

    np.testing.assert_array_equal(result.f, [25.0])
    assert result.g.shape == (0,)
    np.testing.assert_array_equal(result.x_final, [3.0, 4.0])
    assert result.is_complete
    assert result.is_feasible


@pytest.mark.parametrize("x", [[0.0, 0.0], [3.0, 4.0], [-5.0, 5.0], [1.5, -2.5]])
def test_composite_short_f_always_fails(make_composite, state0, x):
    schema = make_composite(lambda x, s: ([1.0, 2.0], [0.0]), nf=3, ng=1)
    with pytest.raises(DispatchError, match="analysis output length mismatch"):
        evaluate(schema, x, state0)


def test_composite_wrong_g_and_x_lengths(make_composite, state0):
    schema = make_composite(lambda x, s: ([1.0], [0.0, 1.0]), ng=1)
    with pytest.raises(DispatchError, match="length mismatch"):
        evaluate(schema, [0.0, 0.0], state0)

    schema = make_composite(lambda x, s: ([1.0], [], [0.0, 0.0, 0.0]))
    with pytest.raises(DispatchError, match="length mismatch: x"):
        evaluate(schema, [0.0, 0.0], state0)


@pytest.mark.parametrize("output", [[1.0], ([1.0],), ([1.0], [], None, 4), 7.0])
def test_composite_wrong_arity(make_composite, state0, output):
    schema = make_composite(lambda x, s: output)
    with pytest.raises(DispatchError, match="length mismatch"):
        evaluate(schema, [0.0, 0.0], state0)


def test_composite_third_output_replaces_x_without_revalidation(make_composite, state0):
    # 99.0 is outside [-5, 5]; x_final is stored as returned
    schema = make_composite(lambda x, s: ([x[0]], [], [99.0, x[1]]))
    result = evaluate(schema, [1.0, 2.0], state0)
    np.testing.assert_array_equal(result.f, [1.0])
    np.testing.assert_array_equal(result.x_final, [99.0, 2.0])


def test_composite_third_output_none_keeps_x(make_composite, state0):
    schema = make_composite(lambda x, s: ([0.0], [], None))
    result = evaluate(schema, [1.0, 2.0], state0)
    np.testing.assert_array_equal(result.x_final, [1.0, 2.0])


def test_out_of_domain_candidate_rejected(sphere, state0):
    with pytest.raises(DispatchError, match="out-of-domain value") as excinfo:
        evaluate(sphere, [5.5, 0.0], state0)
    assert isinstance(excinfo.value.__cause__, DomainError)


def test_wrong_length_candidate_rejected(sphere, state0):
    with pytest.raises(DispatchError, match="expected 2 variables"):
        evaluate(sphere, [1.0, 2.0, 3.0], state0)


def test_non_integral_value_rejected(mixed, state0):
    with pytest.raises(DispatchError, match="not integral"):
        evaluate(mixed, [0.2, 0.3, 2.5, 4.0], make_state(mixed, 0, 0))


def test_dispatcher_does_not_call_analysis_for_bad_candidate(make_composite, state0):
    calls = []
    schema = make_composite(lambda x, s: calls.append(x) or ([0.0], []))
    with pytest.raises(DispatchError):
        evaluate(schema, [10.0, 0.0], state0)
    assert calls == []


def test_masked_scenario(masked):
    state = make_state(masked, gen_id=1, pop_id=3)
    result = evaluate(masked, [1.0, 1.0], state)

    assert np.isnan(result.f[0])
    assert result.g[0] == pytest.approx(2.0)  # 4 - 1 - 1
    assert np.isnan(result.g[1])
    np.testing.assert_array_equal(result.external, [True, False, True])
    np.testing.assert_array_equal(result.pending, [0, 2])
    assert not result.is_complete
    np.testing.assert_array_equal(result.x_final, [1.0, 1.0])


def test_single_set_order_and_state(make_single_set):
    seen = []

    def record(tag, value):
        def fn(x, state):
            seen.append((tag, state.gen_id, state.pop_id))
            return value

        return fn

    schema = make_single_set(
        obj=(record("f0", 1.0), record("f1", 2.0)),
        constr=(record("g0", -1.0),),
    )
    result = evaluate(schema, [0.0, 0.0], EvaluationState(gen_id=4, pop_id=7))

    assert seen == [("f0", 4, 7), ("f1", 4, 7), ("g0", 4, 7)]
    np.testing.assert_array_equal(result.f, [1.0, 2.0])
    np.testing.assert_array_equal(result.g, [-1.0])
    assert not result.is_feasible
    assert result.max_violation == pytest.approx(1.0)


def test_single_set_masked_callable_not_called(make_single_set, state0):
    def boom(x, state):
        raise AssertionError("masked response must not be evaluated")

    schema = make_single_set(obj=(boom,), constr=(lambda x, s: 1.0,), eval_mask=[1, 0])
    result = evaluate(schema, [0.0, 0.0], state0)
    assert np.isnan(result.f[0])
    assert result.g[0] == 1.0


def test_single_set_non_scalar_output_rejected(make_single_set, state0):
    schema = make_single_set(obj=(lambda x, s: [1.0, 2.0],), constr=())
    with pytest.raises(DispatchError, match="response 0"):
        evaluate(schema, [0.0, 0.0], state0)


@pytest.mark.parametrize("value", [None, float("nan"), "abc"])
def test_single_set_non_numeric_output_rejected(make_single_set, state0, value):
    schema = make_single_set(obj=(lambda x, s: value,), constr=())
    with pytest.raises(DispatchError, match="response 0"):
        evaluate(schema, [0.0, 0.0], state0)


@pytest.mark.parametrize(
    "output",
    [(None, []), ([None], []), ([float("nan")], []), ([0.0], [], [None, 1.0])],
)
def test_composite_non_numeric_output_rejected(make_composite, state0, output):
    schema = make_composite(lambda x, s: output)
    with pytest.raises(DispatchError, match="is None|is not numeric"):
        evaluate(schema, [0.0, 0.0], state0)


def test_user_errors_propagate(make_composite, state0):
    def broken(x, state):
        raise ZeroDivisionError("model failed")

    schema = make_composite(broken)
    with pytest.raises(ZeroDivisionError):
        evaluate(schema, [0.0, 0.0], state0)


def test_hooks_receive_copies(make_composite, state0):
    def mutate(x, state):
        x[0] = 4.0
        return [0.0], []

    schema = make_composite(mutate)
    x = np.array([1.0, 1.0])
    result = evaluate(schema, x, state0)
    np.testing.assert_array_equal(x, [1.0, 1.0])
    np.testing.assert_array_equal(result.x_final, [1.0, 1.0])


def test_idempotent(mixed):
    state = make_state(mixed, 2, 5)
    x = [0.25, 0.5, 3, 2.0]
    r1 = evaluate(mixed, x, state)
    r2 = evaluate(mixed, x, state)
    np.testing.assert_array_equal(r1.f, r2.f)
    np.testing.assert_array_equal(r1.g, r2.g)
    np.testing.assert_array_equal(r1.x_final, r2.x_final)
    np.testing.assert_array_equal(r1.external, r2.external)


def test_idempotent_with_external_slots(masked):
    state = make_state(masked, 0, 0)
    r1 = evaluate(masked, [0.5, -0.5], state)
    r2 = evaluate(masked, [0.5, -0.5], state)
    np.testing.assert_array_equal(r1.responses, r2.responses)


def test_timeout_becomes_dispatch_error(make_composite, state0):
    def slow(x, state):
        time.sleep(0.5)
        return [0.0], []

    schema = make_composite(slow)
    with pytest.raises(DispatchError, match="timed out"):
        evaluate(schema, [0.0, 0.0], state0, timeout=0.05)


def test_timeout_not_hit(sphere, state0):
    result = evaluate(sphere, [1.0, 1.0], state0, timeout=5.0)
    np.testing.assert_array_equal(result.f, [2.0])
