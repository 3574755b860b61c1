"""Design variable ranges.

Each design variable is typed by one immutable range:

    RealRange(lo, hi)      continuous, lo < hi, closed interval
    IntegerRange(lo, hi)   whole numbers in [lo, hi], lo <= hi
    SetRange(values)       one of a finite ordered set of distinct numbers

Problem files describe ranges with the literal kinds "range", "irange"
and "set" (see parse_range).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, Union

import numpy as np

from .constants import INTEGER_TOL, KIND_INTEGER, KIND_REAL, KIND_SET, RANGE_KINDS
from .errors import DomainError, RangeError


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _where(index: int | None) -> str:
    return f"x[{index}]" if index is not None else "value"


@dataclass(frozen=True)
class RealRange:
    """Continuous variable on the closed interval [lo, hi]."""

    lo: float
    hi: float

    def __post_init__(self) -> None:
        if not (_is_number(self.lo) and _is_number(self.hi)):
            raise RangeError(f"real range bounds must be numbers, got {self.lo!r}, {self.hi!r}")
        lo, hi = float(self.lo), float(self.hi)
        if not (math.isfinite(lo) and math.isfinite(hi)):
            raise RangeError(f"real range bounds must be finite, got [{lo}, {hi}]")
        if lo >= hi:
            raise RangeError(f"real range requires lo < hi, got [{lo}, {hi}]")
        object.__setattr__(self, "lo", lo)
        object.__setattr__(self, "hi", hi)

    @property
    def kind(self) -> str:
        return KIND_REAL

    @property
    def bounds(self) -> tuple[float, float]:
        return self.lo, self.hi

    def validate(self, value: Any) -> bool:
        if not _is_number(value):
            return False
        v = float(value)
        return math.isfinite(v) and self.lo <= v <= self.hi

    def check(self, value: Any, index: int | None = None) -> None:
        if not self.validate(value):
            raise DomainError(f"{_where(index)}={value!r} outside [{self.lo}, {self.hi}]")

    def snap(self, value: float) -> float:
        return float(np.clip(value, self.lo, self.hi))


@dataclass(frozen=True)
class IntegerRange:
    """Integer variable on [lo, hi].

    A value counts as integral when its fractional residue is below
    INTEGER_TOL, so 3.0 and 3 + 1e-12 are accepted while 3.5 is not.
    """

    lo: int
    hi: int

    def __post_init__(self) -> None:
        for name, bound in (("lo", self.lo), ("hi", self.hi)):
            if not _is_number(bound) or not math.isfinite(float(bound)):
                raise RangeError(f"integer range {name} must be a finite number, got {bound!r}")
            if not isinstance(bound, Integral) and not float(bound).is_integer():
                raise RangeError(f"integer range {name} must be whole, got {bound!r}")
            object.__setattr__(self, name, int(bound))
        if self.lo > self.hi:
            raise RangeError(f"integer range requires lo <= hi, got [{self.lo}, {self.hi}]")

    @property
    def kind(self) -> str:
        return KIND_INTEGER

    @property
    def bounds(self) -> tuple[float, float]:
        return float(self.lo), float(self.hi)

    def _in_bounds(self, value: Any) -> bool:
        if not _is_number(value):
            return False
        v = float(value)
        return math.isfinite(v) and self.lo <= v <= self.hi

    @staticmethod
    def _is_integral(value: Any) -> bool:
        v = float(value)
        return abs(v - round(v)) <= INTEGER_TOL

    def validate(self, value: Any) -> bool:
        return self._in_bounds(value) and self._is_integral(value)

    def check(self, value: Any, index: int | None = None) -> None:
        if not self._in_bounds(value):
            raise DomainError(f"{_where(index)}={value!r} outside [{self.lo}, {self.hi}]")
        if not self._is_integral(value):
            raise DomainError(f"{_where(index)}={value!r} is not integral")

    def snap(self, value: float) -> float:
        return float(np.clip(np.rint(value), self.lo, self.hi))


@dataclass(frozen=True)
class SetRange:
    """Discrete variable taking one of an ordered set of distinct numbers.

    Membership is exact; no tolerance is applied.
    """

    values: tuple[float, ...]

    def __post_init__(self) -> None:
        if isinstance(self.values, (str, bytes)) or not isinstance(self.values, (Sequence, np.ndarray)):
            raise RangeError(f"set range requires a sequence of values, got {self.values!r}")
        values = tuple(self.values.tolist() if isinstance(self.values, np.ndarray) else self.values)
        if not values:
            raise RangeError("set range must not be empty")
        for v in values:
            if not _is_number(v) or not math.isfinite(float(v)):
                raise RangeError(f"set range members must be finite numbers, got {v!r}")
        if len(set(values)) != len(values):
            raise RangeError(f"set range members must be distinct, got {values}")
        object.__setattr__(self, "values", values)

    @property
    def kind(self) -> str:
        return KIND_SET

    @property
    def bounds(self) -> tuple[float, float]:
        return float(min(self.values)), float(max(self.values))

    def validate(self, value: Any) -> bool:
        if not _is_number(value):
            return False
        return any(value == member for member in self.values)

    def check(self, value: Any, index: int | None = None) -> None:
        if not self.validate(value):
            raise DomainError(f"{_where(index)}={value!r} not in {list(self.values)}")

    def snap(self, value: float) -> float:
        members = np.asarray(self.values, dtype=np.float64)
        return float(members[np.argmin(np.abs(members - value))])


VariableRange = Union[RealRange, IntegerRange, SetRange]


def parse_range(kind: str, payload: Sequence[Any]) -> VariableRange:
    """Build a range from its literal form.

    Args:
        kind: One of "range" (Real), "irange" (Integer) or "set" (Set).
        payload: [lo, hi] for range/irange, the member list for set.

    Returns:
        The corresponding immutable range.

    Raises:
        RangeError: Unknown kind or malformed payload.
    """
    if kind not in RANGE_KINDS:
        raise RangeError(f"unknown range kind {kind!r}, expected one of {RANGE_KINDS}")

    if kind == KIND_SET:
        return SetRange(tuple(payload))

    values = list(payload)
    if len(values) != 2:
        raise RangeError(f"{kind} payload must be [lo, hi], got {values!r}")
    if kind == KIND_REAL:
        return RealRange(values[0], values[1])
    return IntegerRange(values[0], values[1])


def is_range(obj: Any) -> bool:
    return isinstance(obj, (RealRange, IntegerRange, SetRange))


def ranges_bounds(ranges: Sequence[VariableRange]) -> tuple[np.ndarray, np.ndarray]:
    """Return lower and upper bounds for a sequence of ranges.

    Returns:
        (xl, xu) tuple of float64 arrays, each of length len(ranges).
    """
    xl = np.array([r.bounds[0] for r in ranges], dtype=np.float64)
    xu = np.array([r.bounds[1] for r in ranges], dtype=np.float64)
    return xl, xu


def snap_candidate(ranges: Sequence[VariableRange], x: np.ndarray) -> np.ndarray:
    """Move each component of x to the nearest value inside its range."""
    return np.array([r.snap(float(v)) for r, v in zip(ranges, x)], dtype=np.float64)
