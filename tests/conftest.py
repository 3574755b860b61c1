"""Pytest configuration for evoprob.

Shared schemas used across the test modules. Loggers write JSON lines to
stderr; tests that inspect log output use capsys.
"""

from __future__ import annotations

import pytest

from evoprob.core.analysis import Composite, SingleSet
from evoprob.core.ranges import RealRange
from evoprob.core.schema import build_schema
from evoprob.core.types import EvaluationState
from evoprob.problems.examples import masked_problem, mixed_problem, sphere_problem


@pytest.fixture
def sphere():
    return sphere_problem()


@pytest.fixture
def masked():
    return masked_problem()


@pytest.fixture
def mixed():
    return mixed_problem()


@pytest.fixture
def state0():
    return EvaluationState(gen_id=0, pop_id=0)


@pytest.fixture
def make_composite():
    """Factory: composite schema over real ranges [-5, 5] with a given analysis."""

    def _make(fn, nx=2, nf=1, ng=0, **kwargs):
        return build_schema(
            nx=nx,
            nf=nf,
            ng=ng,
            ranges=[RealRange(-5.0, 5.0)] * nx,
            analysis=Composite(fn),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_single_set():
    def _make(obj, constr, nx=2, **kwargs):
        return build_schema(
            nx=nx,
            nf=len(obj),
            ng=len(constr),
            ranges=[RealRange(-5.0, 5.0)] * nx,
            analysis=SingleSet(obj=obj, constr=constr),
            **kwargs,
        )

    return _make
