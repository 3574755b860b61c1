"""Error taxonomy for problem definition and candidate evaluation.

Construction-time errors (RangeError, SchemaError) abort building a problem
before any search begins. Evaluation-time errors (DomainError, DispatchError,
RepairError) are raised per candidate; the driver decides whether a failed
candidate is fatal or merely rejected.
"""

from __future__ import annotations


class ProblemError(ValueError):
    """Base class for all evoprob errors."""


class RangeError(ProblemError):
    """Malformed variable range (bad bounds, empty or duplicate set)."""


class SchemaError(ProblemError):
    """Structural mismatch detected while building a ProblemSchema."""


class EvaluationError(ProblemError):
    """Base class for errors raised while evaluating a single candidate."""


class DomainError(EvaluationError):
    """A candidate value violates its declared range or type."""


class DispatchError(EvaluationError):
    """Analysis dispatch failed (bad candidate, bad outputs, missing callable)."""


class RepairError(EvaluationError):
    """A repair callable returned a wrongly-sized vector or timed out."""
