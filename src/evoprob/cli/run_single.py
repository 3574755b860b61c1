"""Single candidate evaluation CLI.

Usage:
    python -m evoprob.cli.run_single --x "[3, 4]"
    python -m evoprob.cli.run_single --problem evoprob.problems.examples:mixed_problem --random

Outputs JSON with f, g, x_final and external flags to stdout.
"""

from __future__ import annotations

import argparse
import json

import numpy as np

from .common import add_problem_args, load_problem_from_args


def main(argv: list[str] | None = None) -> int:
    """Run single candidate evaluation.

    Args:
        argv: Command-line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 = success, 1 = candidate rejected).
    """
    parser = argparse.ArgumentParser(description="Evaluate a single candidate solution")
    add_problem_args(parser)
    parser.add_argument("--x", type=str, default=None, help="Candidate vector as JSON array")
    parser.add_argument("--random", action="store_true", help="Use random in-domain candidate")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--gen", type=int, default=0, help="Generation id")
    parser.add_argument("--pop", type=int, default=0, help="Population id")
    parser.add_argument("--timeout", type=float, default=None, help="Per-call timeout (s)")

    args = parser.parse_args(argv)

    from ..core.errors import EvaluationError
    from ..core.evaluator import evaluate_candidate
    from ..core.ranges import ranges_bounds, snap_candidate
    from ..core.types import make_state

    schema = load_problem_from_args(args)

    # Get candidate
    xl, xu = ranges_bounds(schema.ranges)
    if args.x is not None:
        x = np.array(json.loads(args.x), dtype=np.float64)
    elif args.random:
        rng = np.random.default_rng(args.seed)
        x = snap_candidate(schema.ranges, rng.uniform(xl, xu))
    else:
        x = snap_candidate(schema.ranges, (xl + xu) / 2)

    state = make_state(schema, args.gen, args.pop)

    try:
        result = evaluate_candidate(schema, x, state, timeout=args.timeout)
    except EvaluationError as exc:
        print(json.dumps({"x": x.tolist(), "error": type(exc).__name__, "message": str(exc)}, indent=2))
        return 1

    # NaN marks external slots; JSON has no NaN, so emit null
    def clean(arr: np.ndarray) -> list[float | None]:
        return [None if np.isnan(v) else float(v) for v in arr]

    output = {
        "x": x.tolist(),
        "f": clean(result.f),
        "g": clean(result.g),
        "x_final": result.x_final.tolist(),
        "external": result.external.tolist(),
        "is_complete": result.is_complete,
        "is_feasible": result.is_feasible,
        "max_violation": result.max_violation,
    }

    print(json.dumps(output, indent=2))

    return 0


if __name__ == "__main__":
    import sys

    sys.exit(main())
