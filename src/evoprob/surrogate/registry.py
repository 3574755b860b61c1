"""Surrogate model registry.

Centralizes knowledge of where pickled response models live. A response
model is looked up by key, by convention "f0", "f1", ... for objectives and
"g0", "g1", ... for constraints.
"""

from __future__ import annotations

import pickle
from pathlib import Path
from typing import Any, Optional


class ModelRegistry:
    def __init__(self, root_dir: str | Path = "models/surrogate"):
        self.root_dir = Path(root_dir)

    def get_path(self, model_key: str) -> Optional[Path]:
        """Get path for a named model, or None if no file matches."""
        candidates = [
            self.root_dir / f"model_{model_key}.pkl",
            self.root_dir / f"{model_key}.pkl",
            self.root_dir / model_key / "model.pkl",
        ]
        for p in candidates:
            if p.exists():
                return p
        return None

    def load(self, model_key: str) -> Any:
        """Unpickle the model stored under model_key.

        Raises:
            FileNotFoundError: No model file for the key.
        """
        path = self.get_path(model_key)
        if path is None:
            raise FileNotFoundError(f"No surrogate model {model_key!r} under {self.root_dir}")
        with open(path, "rb") as f:
            return pickle.load(f)

    def save(self, model_key: str, model: Any) -> Path:
        self.root_dir.mkdir(parents=True, exist_ok=True)
        path = self.root_dir / f"model_{model_key}.pkl"
        with open(path, "wb") as f:
            pickle.dump(model, f)
        return path

    def list_models(self) -> list[str]:
        """List available model keys."""
        if not self.root_dir.exists():
            return []
        return sorted(p.stem.removeprefix("model_") for p in self.root_dir.glob("*.pkl"))


def response_key(index: int, nf: int) -> str:
    """Registry key for a global response index ("f<i>" or "g<j>")."""
    return f"f{index}" if index < nf else f"g{index - nf}"
