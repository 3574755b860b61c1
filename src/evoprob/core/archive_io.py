"""Run archive IO with format and shape guards."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np

from .constants import ARCHIVE_FORMAT_VERSION
from .schema import ProblemSchema

META_FILENAME = "summary.json"


def save_archive(
    outdir: Path,
    schema: ProblemSchema,
    X: np.ndarray,
    F: np.ndarray,
    G: np.ndarray,
    summary: Dict[str, Any],
) -> None:
    """Save final candidates, objectives, constraints and run metadata.

    G follows the core convention (g >= 0 feasible).
    """
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    X = np.asarray(X, dtype=np.float64).reshape(-1, schema.nx)
    # Row count comes from X; -1 cannot be inferred for nf == 0 or ng == 0
    n = X.shape[0]
    np.save(outdir / "X.npy", X)
    np.save(outdir / "F.npy", np.asarray(F, dtype=np.float64).reshape(n, schema.nf))
    np.save(outdir / "G.npy", np.asarray(G, dtype=np.float64).reshape(n, schema.ng))

    summary = {
        **summary,
        "format_version": ARCHIVE_FORMAT_VERSION,
        "nx": schema.nx,
        "nf": schema.nf,
        "ng": schema.ng,
        "eval_mask": list(schema.eval_mask) if schema.eval_mask is not None else None,
        "range_kinds": [r.kind for r in schema.ranges],
    }
    with open(outdir / META_FILENAME, "w") as f:
        json.dump(summary, f, indent=2)


def load_archive(
    outdir: Path, schema: Optional[ProblemSchema] = None
) -> tuple[np.ndarray, np.ndarray, np.ndarray, dict]:
    """Load archive with version validation.

    Args:
        outdir: Archive directory.
        schema: When given, dimensions must match the archive.

    Raises:
        FileNotFoundError: Missing summary.
        ValueError: Incompatible format version or shape mismatch.
    """
    outdir = Path(outdir)
    summary_path = outdir / META_FILENAME
    if not summary_path.exists():
        raise FileNotFoundError(f"Missing {META_FILENAME} in {outdir}")

    with open(summary_path) as f:
        summary = json.load(f)

    version = summary.get("format_version")
    if version != ARCHIVE_FORMAT_VERSION:
        raise ValueError(f"Archive format mismatch: archive {version}, expected {ARCHIVE_FORMAT_VERSION}")

    X = np.load(outdir / "X.npy", allow_pickle=False)
    F = np.load(outdir / "F.npy", allow_pickle=False)
    G = np.load(outdir / "G.npy", allow_pickle=False)

    for name, arr, dim in (("X", X, "nx"), ("F", F, "nf"), ("G", G, "ng")):
        if arr.shape[1] != summary[dim]:
            raise ValueError(f"{name} has {arr.shape[1]} columns, summary says {dim}={summary[dim]}")
    if not (len(X) == len(F) == len(G)):
        raise ValueError(f"row count mismatch: X={len(X)}, F={len(F)}, G={len(G)}")

    if schema is not None:
        expected = (schema.nx, schema.nf, schema.ng)
        found = (summary["nx"], summary["nf"], summary["ng"])
        if expected != found:
            raise ValueError(f"archive dimensions {found} do not match schema {expected}")

    return X, F, G, summary
