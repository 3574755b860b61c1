"""Core module: ranges, schema, dispatch, repair, plot hooks."""

from .analysis import AnalysisSpec, Composite, SingleSet
from .dispatcher import evaluate
from .errors import (
    DispatchError,
    DomainError,
    EvaluationError,
    ProblemError,
    RangeError,
    RepairError,
    SchemaError,
)
from .evaluator import evaluate_candidate, evaluate_population
from .plotting import PlotContext, invoke_plot
from .ranges import IntegerRange, RealRange, SetRange, VariableRange, parse_range
from .repair import apply_repair
from .schema import ProblemSchema, build_schema
from .types import EvaluationResult, EvaluationState, make_state

__all__ = [
    "AnalysisSpec",
    "Composite",
    "SingleSet",
    "evaluate",
    "DispatchError",
    "DomainError",
    "EvaluationError",
    "ProblemError",
    "RangeError",
    "RepairError",
    "SchemaError",
    "evaluate_candidate",
    "evaluate_population",
    "PlotContext",
    "invoke_plot",
    "IntegerRange",
    "RealRange",
    "SetRange",
    "VariableRange",
    "parse_range",
    "apply_repair",
    "ProblemSchema",
    "build_schema",
    "EvaluationResult",
    "EvaluationState",
    "make_state",
]
