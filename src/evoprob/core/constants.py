"""Core constants for evoprob.

This module defines system-wide invariants such as:
- Numeric tolerances used in domain checks
- Range literal kinds accepted from problem files
- Archive format versioning
"""

from __future__ import annotations

# Maximum fractional residue for a value to count as integral
INTEGER_TOL = 1e-9

# Range literal kinds (problem files, parse_range)
KIND_REAL = "range"
KIND_INTEGER = "irange"
KIND_SET = "set"
RANGE_KINDS = (KIND_REAL, KIND_INTEGER, KIND_SET)

# Archive format; bump when the on-disk layout changes
ARCHIVE_FORMAT_VERSION = "1.0"
