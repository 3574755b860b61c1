"""Evolutionary optimization CLI runner.

Usage:
    python -m evoprob.cli.run_ga --pop 32 --gen 20
    python -m evoprob.cli.run_ga --problem evoprob.problems.examples:mixed_problem \
        --config run.yaml --outdir ./results

Outputs:
    X.npy         - Final candidates of the optimum set
    F.npy         - Objective values
    G.npy         - Constraint values (g >= 0 feasible)
    summary.json  - Run metadata and statistics
"""

from __future__ import annotations

import argparse
import time
from pathlib import Path

import numpy as np

from ..core.archive_io import save_archive
from ..core.config import default_config, load_config, merge_config
from ..core.logging import get_logger, set_log_level
from .common import add_problem_args, load_problem_from_args

log = get_logger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Run NSGA-II on a problem schema.

    Args:
        argv: Command-line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 = success).
    """
    parser = argparse.ArgumentParser(description="Run evolutionary optimization on a problem")
    add_problem_args(parser)
    parser.add_argument("--config", type=str, default=None, help="YAML run configuration")
    parser.add_argument("--pop", type=int, default=None, help="Population size")
    parser.add_argument("--gen", type=int, default=None, help="Number of generations")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--surrogate-dir", type=str, default=None, help="Pickled surrogate models")
    parser.add_argument(
        "--output", "--outdir", type=str, default=".", dest="output", help="Output directory"
    )
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else default_config()
    overrides = {
        k: v
        for k, v in {"pop_size": args.pop, "n_gen": args.gen, "seed": args.seed}.items()
        if v is not None
    }
    if overrides:
        config = merge_config(config, {"optimization": overrides})
    set_log_level("INFO" if args.verbose else config.logging.level)

    # Import here to avoid loading pymoo at module level
    from pymoo.algorithms.moo.nsga2 import NSGA2
    from pymoo.optimize import minimize
    from pymoo.termination import get_termination

    from ..adapters.pymoo_problem import PlotCallback, SchemaProblem, SnapRepair
    from ..core.plotting import PlotContext
    from ..surrogate.engine import SurrogateEngine

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)

    schema = load_problem_from_args(args)
    surrogate = (
        SurrogateEngine.from_registry(schema, args.surrogate_dir) if args.surrogate_dir else None
    )
    problem = SchemaProblem(
        schema,
        surrogate=surrogate,
        timeout=config.evaluation.timeout_s,
        reject_failed=config.evaluation.reject_failed,
    )

    callback = None
    if config.plot.enabled and schema.plot_func is not None:
        context = PlotContext(
            figure_id=config.plot.figure_id,
            title=config.plot.title or args.problem,
            outdir=output_dir,
        )
        callback = PlotCallback(schema, context, every=config.plot.every)

    opt = config.optimization
    algorithm = NSGA2(pop_size=opt.pop_size, repair=SnapRepair(schema))
    termination = get_termination("n_gen", opt.n_gen)

    log.info("starting NSGA-II", pop=opt.pop_size, gen=opt.n_gen, nx=schema.nx, nf=schema.nf, ng=schema.ng)

    # pymoo calls its callback unconditionally; None would replace its default
    extra = {"callback": callback} if callback is not None else {}

    t_start = time.perf_counter()
    result = minimize(
        problem,
        algorithm,
        termination,
        seed=opt.seed,
        verbose=args.verbose,
        **extra,
    )
    t_elapsed = time.perf_counter() - t_start

    # The optimum set is re-evaluated through the core so that X holds the
    # final (possibly repaired) candidates and G uses the g >= 0 convention
    from ..core.evaluator import evaluate_population

    X = result.X
    if X is None:
        X = np.empty((0, schema.nx))
    X = np.atleast_2d(X).reshape(-1, schema.nx)
    outcomes = evaluate_population(
        schema,
        X,
        gen_id=opt.n_gen,
        timeout=config.evaluation.timeout_s,
        max_workers=config.evaluation.max_workers,
        return_exceptions=True,
    )
    kept = []
    for outcome in outcomes:
        if isinstance(outcome, Exception):
            continue
        kept.append(surrogate.fill(outcome) if surrogate is not None else outcome)

    n_kept = len(kept)
    X_out = np.array([r.x_final for r in kept], dtype=np.float64).reshape(n_kept, schema.nx)
    F_out = np.array([r.f for r in kept], dtype=np.float64).reshape(n_kept, schema.nf)
    G_out = np.array([r.g for r in kept], dtype=np.float64).reshape(n_kept, schema.ng)
    n_feasible = int(sum(r.is_feasible for r in kept))

    summary = {
        "problem": args.problem_file or args.problem,
        "n_solutions": len(kept),
        "n_rejected_final": len(outcomes) - len(kept),
        "n_evals": problem.n_evals,
        "n_rejected": problem.n_rejected,
        "elapsed_s": t_elapsed,
        "pop_size": opt.pop_size,
        "n_gen": opt.n_gen,
        "seed": opt.seed,
        "n_feasible": n_feasible,
        "F_min": F_out.min(axis=0).tolist() if n_kept else [],
        "F_max": F_out.max(axis=0).tolist() if n_kept else [],
        "n_plotted": callback.n_plotted if callback is not None else 0,
    }
    save_archive(output_dir, schema, X_out, F_out, G_out, summary)

    log.info("run complete", elapsed_s=t_elapsed, n_solutions=len(kept), n_feasible=n_feasible)
    if args.verbose:
        print(f"\nCompleted in {t_elapsed:.1f}s")
        print(f"Optimum set: {len(kept)} solutions ({n_feasible} feasible)")
        print(f"Results saved to: {output_dir}")

    return 0


if __name__ == "__main__":
    import sys

    sys.exit(main())
