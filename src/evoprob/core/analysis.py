"""Analysis variants: how responses are computed.

Exactly two variants exist:

    Composite(fn)            fn(x, state) -> (f, g) or (f, g, x_repaired)
    SingleSet(obj, constr)   one callable per response, fn(x, state) -> scalar

A SingleSet slot may be None when the response is supplied externally
(eval_mask bit set). Dispatch switches on the variant type; see dispatcher.py.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

CompositeFn = Callable[..., Any]
ResponseFn = Callable[..., float]


@dataclass(frozen=True)
class Composite:
    """Single callable producing all objectives and constraints together."""

    fn: CompositeFn


@dataclass(frozen=True)
class SingleSet:
    """Per-response callables.

    Attributes:
        obj: Objective callables in declared order (None = externally supplied).
        constr: Constraint callables in declared order (None = externally supplied).
    """

    obj: tuple[Optional[ResponseFn], ...] = field(default_factory=tuple)
    constr: tuple[Optional[ResponseFn], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "obj", tuple(self.obj))
        object.__setattr__(self, "constr", tuple(self.constr))

    def callable_at(self, index: int, nf: int) -> Optional[ResponseFn]:
        """Return the callable for global response index (objectives first)."""
        seq: Sequence[Optional[ResponseFn]]
        if index < nf:
            seq, pos = self.obj, index
        else:
            seq, pos = self.constr, index - nf
        return seq[pos] if pos < len(seq) else None


AnalysisSpec = Union[Composite, SingleSet]
