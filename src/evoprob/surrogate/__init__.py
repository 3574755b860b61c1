"""Surrogate components for externally supplied responses."""

from evoprob.surrogate.engine import SurrogateEngine
from evoprob.surrogate.registry import ModelRegistry, response_key

__all__ = [
    "SurrogateEngine",
    "ModelRegistry",
    "response_key",
]
