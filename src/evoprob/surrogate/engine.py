"""Surrogate engine: fills externally supplied response slots.

The dispatcher leaves masked responses as NaN. The engine predicts those
slots from the final candidate with one regressor per response; any object
exposing a scikit-learn style predict(X2d) works. Fitting models is the
caller's concern.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import numpy as np

from ..core.errors import DispatchError
from ..core.logging import get_logger
from ..core.schema import ProblemSchema
from ..core.types import EvaluationResult
from .registry import ModelRegistry, response_key

log = get_logger(__name__)


def _predict_scalar(model: Any, x: np.ndarray) -> tuple[float, float]:
    """Return (value, std); std is 0.0 for models without uncertainty."""
    res = model.predict(x.reshape(1, -1))
    if isinstance(res, tuple) and len(res) == 2:
        pred, std = res
        return float(np.ravel(pred)[0]), float(np.ravel(std)[0])
    return float(np.ravel(res)[0]), 0.0


class SurrogateEngine:
    """Predicts external responses of a schema.

    Args:
        schema: Problem whose eval_mask marks the external responses.
        models: Global response index -> fitted regressor.
    """

    def __init__(self, schema: ProblemSchema, models: Mapping[int, Any]):
        unknown = sorted(set(models) - set(schema.external_indices))
        if unknown:
            raise ValueError(f"models given for responses {unknown} that are not masked external")
        self.schema = schema
        self.models = dict(models)

    @classmethod
    def from_registry(cls, schema: ProblemSchema, root_dir: str | Path) -> SurrogateEngine:
        """Load one pickled model per external response from root_dir."""
        registry = ModelRegistry(root_dir)
        models = {}
        for index in schema.external_indices:
            key = response_key(index, schema.nf)
            models[index] = registry.load(key)
            log.info("surrogate loaded", key=key, root_dir=str(root_dir))
        return cls(schema, models)

    @property
    def missing(self) -> list[int]:
        """External responses without a model."""
        return [i for i in self.schema.external_indices if i not in self.models]

    def fill(self, result: EvaluationResult) -> EvaluationResult:
        """Return a copy of result with every pending external slot predicted.

        Raises:
            DispatchError: A pending slot has no model.
        """
        pending = [int(i) for i in result.pending]
        if not pending:
            return result

        values: dict[int, float] = {}
        for index in pending:
            model = self.models.get(index)
            if model is None:
                raise DispatchError(f"no surrogate model for external response {index}")
            value, std = _predict_scalar(model, result.x_final)
            values[index] = value
            log.debug("surrogate prediction", index=index, value=value, std=std)
        return result.with_responses(values)
