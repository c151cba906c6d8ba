"""
Resolved benchmark settings.

Turns one of the environment configuration classes from :mod:`config`
into an immutable :class:`BenchmarkSettings`, optionally overlaid with a
YAML file so CI jobs can tune benchmark length without touching the
environment:

.. code-block:: yaml

    min_time_ms: 500
    max_iterations: 100000
    error_slack: 10
    failure_odds: 1000
    item_failure_odds: 0
    seed: 42
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from config import Config, get_config
from harness.errors import ConfigurationError

logger = logging.getLogger(__name__)

_INT_FIELDS = ("min_time_ms", "max_iterations", "error_slack", "failure_odds", "item_failure_odds")


@dataclass(frozen=True)
class BenchmarkSettings:
    """Knobs shared by the benchmark runner and the workloads."""

    min_time_ms: int = 1000
    max_iterations: int = 1_000_000_000
    error_slack: int = 10
    failure_odds: int = 1000
    item_failure_odds: int = 0
    seed: int | None = None

    @classmethod
    def from_config(cls, config_class: type[Config]) -> BenchmarkSettings:
        return cls(
            min_time_ms=config_class.BENCHMARK_MIN_TIME_MS,
            max_iterations=config_class.BENCHMARK_MAX_ITERATIONS,
            error_slack=config_class.BENCHMARK_ERROR_SLACK,
            failure_odds=config_class.WORKLOAD_FAILURE_ODDS,
            item_failure_odds=config_class.WORKLOAD_ITEM_FAILURE_ODDS,
            seed=config_class.WORKLOAD_SEED,
        )

    def make_rng(self) -> random.Random:
        """Return the failure-injection source for one scenario."""
        return random.Random(self.seed)


def _parse_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Non-numeric value for {field_name}: {value}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Non-numeric value for {field_name}: {value}") from exc


def load_settings_file(path: Path, base: BenchmarkSettings) -> BenchmarkSettings:
    """
    Overlay the values in a YAML settings file onto *base*.

    Args:
        path: YAML file with any of the ``BenchmarkSettings`` field names.
        base: Settings to start from.

    Returns:
        A new ``BenchmarkSettings`` with the file's values applied.

    Raises:
        ConfigurationError: If the file is missing, is not a mapping,
            names an unknown key, or holds a non-numeric value.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"Cannot read settings file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in settings file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")

    overrides: dict[str, Any] = {}
    for key, value in data.items():
        if key in _INT_FIELDS:
            overrides[key] = _parse_int(value, key)
        elif key == "seed":
            overrides[key] = None if value is None else _parse_int(value, key)
        else:
            raise ConfigurationError(f"Unknown setting '{key}' in {path}")

    for key in ("min_time_ms", "error_slack", "failure_odds", "item_failure_odds"):
        if overrides.get(key, 0) < 0:
            raise ConfigurationError(f"{key} must not be negative")
    if overrides.get("max_iterations", 1) < 1:
        raise ConfigurationError("max_iterations must be at least 1")

    logger.info("Loaded benchmark settings overrides from %s: %s", path, sorted(overrides))
    return replace(base, **overrides)


def resolve_settings(env: str | None = None, settings_path: Path | None = None) -> BenchmarkSettings:
    """
    Build settings for *env*.

    The YAML file at *settings_path* (or, when omitted, the one named by
    the ``BENCHMARK_SETTINGS`` config value) is applied on top.
    """
    config_class = get_config(env)
    settings = BenchmarkSettings.from_config(config_class)
    if settings_path is None and config_class.BENCHMARK_SETTINGS:
        settings_path = Path(config_class.BENCHMARK_SETTINGS)
    if settings_path is not None:
        settings = load_settings_file(Path(settings_path), settings)
    return settings
