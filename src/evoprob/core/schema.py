"""Problem schema construction and validation.

A ProblemSchema is built once, before the search starts, and treated as
immutable for the rest of the run. build_schema() validates in a fixed order
so the first structural defect found is the one reported.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any, Optional

import numpy as np

from .analysis import AnalysisSpec, Composite, SingleSet
from .errors import SchemaError
from .logging import get_logger
from .ranges import VariableRange, is_range

log = get_logger(__name__)

RepairFn = Callable[..., Any]
PlotFn = Callable[..., Any]


@dataclass(frozen=True)
class ProblemSchema:
    """Validated, immutable problem definition.

    Attributes:
        nx: Number of design variables (>= 1).
        nf: Number of objectives.
        ng: Number of constraints.
        ranges: One VariableRange per design variable.
        analysis: Composite or SingleSet analysis.
        eval_mask: Optional 0/1 flags over objectives then constraints;
            1 = supplied externally by a surrogate.
        userdata: Opaque data forwarded to every hook, never inspected.
        repair_func: Optional pre-evaluation repair, (x, state) -> x.
        plot_func: Optional plot hook, (x, state, context) -> None.
    """

    nx: int
    nf: int
    ng: int
    ranges: tuple[VariableRange, ...]
    analysis: AnalysisSpec
    eval_mask: Optional[tuple[int, ...]] = None
    userdata: Any = field(default=None, compare=False)
    repair_func: Optional[RepairFn] = None
    plot_func: Optional[PlotFn] = None

    @property
    def n_responses(self) -> int:
        return self.nf + self.ng

    @property
    def mask(self) -> np.ndarray:
        """eval_mask as a boolean array; all False when no mask was given."""
        if self.eval_mask is None:
            return np.zeros(self.n_responses, dtype=bool)
        return np.asarray(self.eval_mask, dtype=bool)

    @property
    def external_indices(self) -> list[int]:
        """Global response indices supplied by a surrogate."""
        return [int(i) for i in np.flatnonzero(self.mask)]

    @property
    def is_composite(self) -> bool:
        return isinstance(self.analysis, Composite)


def _is_dim(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


def _check_mask(eval_mask: Any, n_responses: int) -> tuple[int, ...]:
    try:
        entries = list(np.asarray(eval_mask).reshape(-1).tolist())
    except (TypeError, ValueError) as exc:
        raise SchemaError("mask length/values invalid") from exc
    if len(entries) != n_responses:
        raise SchemaError(
            f"mask length/values invalid: expected {n_responses} entries, got {len(entries)}"
        )
    if any(v not in (0, 1) for v in entries):
        raise SchemaError(f"mask length/values invalid: entries must be 0 or 1, got {entries}")
    return tuple(int(v) for v in entries)


def _check_single_set(analysis: SingleSet, nf: int, ng: int, mask: tuple[int, ...]) -> None:
    for label, seq, limit in (("objective", analysis.obj, nf), ("constraint", analysis.constr, ng)):
        if len(seq) > limit:
            raise SchemaError(f"{len(seq)} {label} functions given for {limit} {label}s")
        for pos, fn in enumerate(seq):
            if fn is not None and not callable(fn):
                raise SchemaError(f"{label} function {pos} is not callable: {fn!r}")

    for i in range(nf + ng):
        if mask[i] == 0 and analysis.callable_at(i, nf) is None:
            kind, pos = ("objective", i) if i < nf else ("constraint", i - nf)
            raise SchemaError(
                f"missing analysis function for unmasked response {i} ({kind} {pos})"
            )


def build_schema(
    nx: int,
    nf: int,
    ng: int,
    ranges: Sequence[VariableRange],
    analysis: AnalysisSpec,
    eval_mask: Optional[Sequence[int]] = None,
    userdata: Any = None,
    repair_func: Optional[RepairFn] = None,
    plot_func: Optional[PlotFn] = None,
) -> ProblemSchema:
    """Validate inputs and build an immutable ProblemSchema.

    Validation order:
        1. dimensions, 2. range count, 3. eval_mask, 4./5. analysis,
        then the optional hooks.

    Raises:
        SchemaError: On the first structural mismatch found.
    """
    # 1. Dimensions
    if not (_is_dim(nx) and _is_dim(nf) and _is_dim(ng)) or nx < 1 or nf < 0 or ng < 0:
        raise SchemaError(f"invalid dimensions: nx={nx!r}, nf={nf!r}, ng={ng!r}")
    nx, nf, ng = int(nx), int(nf), int(ng)

    # 2. Ranges
    ranges = tuple(ranges)
    if len(ranges) != nx:
        raise SchemaError(f"range count mismatch: nx={nx}, got {len(ranges)} ranges")
    for i, r in enumerate(ranges):
        if not is_range(r):
            raise SchemaError(f"range {i} is not a VariableRange: {r!r}")

    # 3. Mask
    mask = _check_mask(eval_mask, nf + ng) if eval_mask is not None else None

    # 4./5. Analysis
    if isinstance(analysis, Composite):
        if not callable(analysis.fn):
            raise SchemaError(f"composite analysis function is not callable: {analysis.fn!r}")
    elif isinstance(analysis, SingleSet):
        _check_single_set(analysis, nf, ng, mask if mask is not None else (0,) * (nf + ng))
    else:
        raise SchemaError(f"analysis must be Composite or SingleSet, got {type(analysis).__name__}")

    # Optional hooks
    if repair_func is not None and not callable(repair_func):
        raise SchemaError(f"repair_func is not callable: {repair_func!r}")
    if plot_func is not None and not callable(plot_func):
        raise SchemaError(f"plot_func is not callable: {plot_func!r}")

    schema = ProblemSchema(
        nx=nx,
        nf=nf,
        ng=ng,
        ranges=ranges,
        analysis=analysis,
        eval_mask=mask,
        userdata=userdata,
        repair_func=repair_func,
        plot_func=plot_func,
    )
    log.debug(
        "schema built",
        nx=nx,
        nf=nf,
        ng=ng,
        analysis=type(analysis).__name__,
        external=schema.external_indices,
        repair=repair_func is not None,
        plot=plot_func is not None,
    )
    return schema
