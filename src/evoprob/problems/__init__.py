"""Bundled example problems."""

from .examples import masked_problem, mixed_problem, sphere_problem

__all__ = ["masked_problem", "mixed_problem", "sphere_problem"]
