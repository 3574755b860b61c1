"""Run configuration with pydantic and YAML support."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class OptimizationConfig(BaseModel):
    """Search settings handed to the external driver."""

    pop_size: int = Field(default=64, ge=2, le=100000)
    n_gen: int = Field(default=100, ge=1, le=100000)
    seed: int = Field(default=42, ge=0)


class EvaluationConfig(BaseModel):
    """Per-candidate evaluation settings."""

    timeout_s: Optional[float] = Field(default=None, gt=0)
    max_workers: Optional[int] = Field(default=None, ge=1)
    reject_failed: bool = Field(
        default=True,
        description="Penalize candidates raising EvaluationError instead of aborting the run",
    )


class PlotConfig(BaseModel):
    """Plot hook cadence and context."""

    enabled: bool = True
    every: int = Field(default=1, ge=1)
    figure_id: int = Field(default=1, ge=0)
    title: str = ""


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = "WARN"


class EvoprobConfig(BaseModel):
    """Root configuration object."""

    optimization: OptimizationConfig = Field(default_factory=OptimizationConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    plot: PlotConfig = Field(default_factory=PlotConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(path: str | Path) -> EvoprobConfig:
    """Load configuration from YAML file.

    Args:
        path: Path to YAML config file.

    Returns:
        Parsed EvoprobConfig object.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    return EvoprobConfig.model_validate(data or {})


def save_config(config: EvoprobConfig, path: str | Path) -> None:
    """Save configuration to YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        yaml.safe_dump(config.model_dump(), f, default_flow_style=False)


def default_config() -> EvoprobConfig:
    return EvoprobConfig()


def merge_config(base: EvoprobConfig, overrides: dict[str, Any]) -> EvoprobConfig:
    """Merge nested overrides into base configuration.

    Args:
        base: Base configuration.
        overrides: Dictionary of override values, e.g. {"optimization": {"n_gen": 5}}.

    Returns:
        New configuration with overrides applied.
    """

    def deep_merge(d1: dict, d2: dict) -> dict:
        result = d1.copy()
        for k, v in d2.items():
            if k in result and isinstance(result[k], dict) and isinstance(v, dict):
                result[k] = deep_merge(result[k], v)
            else:
                result[k] = v
        return result

    merged = deep_merge(base.model_dump(), overrides)
    return EvoprobConfig.model_validate(merged)
