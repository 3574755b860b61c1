"""evoprob: problem definitions for surrogate-assisted evolutionary optimization."""

from .core import (
    Composite,
    DispatchError,
    DomainError,
    EvaluationError,
    EvaluationResult,
    EvaluationState,
    IntegerRange,
    PlotContext,
    ProblemError,
    ProblemSchema,
    RangeError,
    RealRange,
    RepairError,
    SchemaError,
    SetRange,
    SingleSet,
    apply_repair,
    build_schema,
    evaluate,
    evaluate_candidate,
    evaluate_population,
    invoke_plot,
    make_state,
    parse_range,
)

__version__ = "0.1.0"

__all__ = [
    "Composite",
    "DispatchError",
    "DomainError",
    "EvaluationError",
    "EvaluationResult",
    "EvaluationState",
    "IntegerRange",
    "PlotContext",
    "ProblemError",
    "ProblemSchema",
    "RangeError",
    "RealRange",
    "RepairError",
    "SchemaError",
    "SetRange",
    "SingleSet",
    "apply_repair",
    "build_schema",
    "evaluate",
    "evaluate_candidate",
    "evaluate_population",
    "invoke_plot",
    "make_state",
    "parse_range",
]
