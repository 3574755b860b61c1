"""Declarative problem files.

A problem file is YAML naming callables by import path:

    nx: 2
    nf: 1
    ng: 2
    ranges:
      - {kind: range, values: [-5, 5]}
      - {kind: set, values: [1, 2, 4, 8]}
    eval_mask: [1, 0, 1]
    analysis:
      objectives: [null]
      constraints: ["mypkg.model:stress", null]
    repair: "mypkg.model:repair"
    plot: "mypkg.model:plot"

Exactly one of analysis.composite or analysis.objectives/constraints is
given. Loading userdata is the caller's job; pass it to load_problem.
"""

from __future__ import annotations

import importlib
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from .analysis import AnalysisSpec, Composite, SingleSet
from .constants import RANGE_KINDS
from .errors import RangeError, SchemaError
from .ranges import VariableRange, parse_range
from .schema import ProblemSchema, build_schema


class RangeModel(BaseModel):
    kind: str
    values: list[float]

    @model_validator(mode="after")
    def _known_kind(self) -> RangeModel:
        if self.kind not in RANGE_KINDS:
            raise ValueError(f"unknown range kind {self.kind!r}, expected one of {RANGE_KINDS}")
        return self


class AnalysisModel(BaseModel):
    composite: Optional[str] = None
    objectives: Optional[list[Optional[str]]] = None
    constraints: Optional[list[Optional[str]]] = None

    @model_validator(mode="after")
    def _one_mode(self) -> AnalysisModel:
        single = self.objectives is not None or self.constraints is not None
        if (self.composite is None) == (not single):
            raise ValueError("give either 'composite' or 'objectives'/'constraints', not both or neither")
        return self


class ProblemSpecModel(BaseModel):
    """Schema of a problem file."""

    nx: int
    nf: int = 1
    ng: int = 0
    ranges: list[RangeModel] = Field(default_factory=list)
    eval_mask: Optional[list[int]] = None
    analysis: AnalysisModel
    repair: Optional[str] = None
    plot: Optional[str] = None


def resolve_callable(path: str) -> Callable[..., Any]:
    """Import "package.module:attr" (or "package.module.attr") and return it.

    Raises:
        SchemaError: Module or attribute missing, or target not callable.
    """
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise SchemaError(f"invalid callable path {path!r}, expected 'module:attr'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SchemaError(f"cannot import {module_name!r} for {path!r}") from exc

    target: Any = module
    for part in attr.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as exc:
            raise SchemaError(f"{module_name!r} has no attribute {attr!r}") from exc

    if not callable(target):
        raise SchemaError(f"{path!r} is not callable")
    return target


def _optional(path: Optional[str]) -> Optional[Callable[..., Any]]:
    return resolve_callable(path) if path is not None else None


def _build_analysis(model: AnalysisModel) -> AnalysisSpec:
    if model.composite is not None:
        return Composite(resolve_callable(model.composite))
    return SingleSet(
        obj=tuple(_optional(p) for p in (model.objectives or [])),
        constr=tuple(_optional(p) for p in (model.constraints or [])),
    )


def _build_ranges(models: list[RangeModel]) -> list[VariableRange]:
    ranges = []
    for i, rm in enumerate(models):
        values: list[Any] = list(rm.values)
        if rm.kind != "range":
            # YAML integers arrive as floats through the model; restore whole numbers
            values = [int(v) if float(v).is_integer() else v for v in values]
        try:
            ranges.append(parse_range(rm.kind, values))
        except RangeError as exc:
            raise SchemaError(f"range {i}: {exc}") from exc
    return ranges


def schema_from_mapping(data: dict[str, Any], userdata: Any = None) -> ProblemSchema:
    """Build a ProblemSchema from a parsed problem-file mapping.

    Raises:
        SchemaError: Invalid structure, unresolvable callables, or any
            build_schema failure.
    """
    try:
        model = ProblemSpecModel.model_validate(data)
    except ValidationError as exc:
        raise SchemaError(f"invalid problem definition: {exc}") from exc

    return build_schema(
        nx=model.nx,
        nf=model.nf,
        ng=model.ng,
        ranges=_build_ranges(model.ranges),
        analysis=_build_analysis(model.analysis),
        eval_mask=model.eval_mask,
        userdata=userdata,
        repair_func=_optional(model.repair),
        plot_func=_optional(model.plot),
    )


def load_problem(path: str | Path, userdata: Any = None) -> ProblemSchema:
    """Load a problem file and return the validated schema.

    Args:
        path: Path to the YAML problem file.
        userdata: Opaque data handed to every hook.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Problem file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise SchemaError(f"problem file {path} must contain a mapping")
    return schema_from_mapping(data, userdata=userdata)
