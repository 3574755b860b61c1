"""Tests for run configuration."""

import pytest
from pydantic import ValidationError

from evoprob.core.config import (
    EvoprobConfig,
    default_config,
    load_config,
    merge_config,
    save_config,
)


def test_defaults():
    cfg = default_config()
    assert cfg.optimization.pop_size == 64
    assert cfg.evaluation.timeout_s is None
    assert cfg.evaluation.reject_failed is True
    assert cfg.logging.level == "WARN"


def test_yaml_roundtrip(tmp_path):
    cfg = merge_config(
        default_config(),
        {"optimization": {"n_gen": 5, "seed": 7}, "evaluation": {"timeout_s": 2.5}},
    )
    path = tmp_path / "nested" / "run.yaml"
    save_config(cfg, path)
    loaded = load_config(path)
    assert loaded == cfg
    assert loaded.optimization.pop_size == 64


def test_empty_file_gives_defaults(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == EvoprobConfig()


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        merge_config(default_config(), {"evaluation": {"timeout_s": 0}})
    with pytest.raises(ValidationError):
        merge_config(default_config(), {"logging": {"level": "LOUD"}})


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")
