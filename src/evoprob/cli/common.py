"""Shared CLI helpers."""

from __future__ import annotations

import argparse

from ..core.errors import SchemaError
from ..core.loader import load_problem, resolve_callable
from ..core.schema import ProblemSchema


def add_problem_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--problem",
        type=str,
        default="evoprob.problems.examples:sphere_problem",
        help="Problem factory as module:attr",
    )
    group.add_argument("--problem-file", type=str, default=None, help="YAML problem file")


def load_problem_from_args(args: argparse.Namespace) -> ProblemSchema:
    """Build the schema named on the command line."""
    if args.problem_file is not None:
        return load_problem(args.problem_file)

    factory = resolve_callable(args.problem)
    schema = factory()
    if not isinstance(schema, ProblemSchema):
        raise SchemaError(f"{args.problem} returned {type(schema).__name__}, not ProblemSchema")
    return schema
