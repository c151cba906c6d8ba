"""
Benchmark harness configuration module.

This module defines configuration classes for different environments
(development, testing, production). Configuration values are loaded
from environment variables with sensible defaults.

Key Concepts Demonstrated:
- Class-based configuration with inheritance for shared defaults
- Environment-variable overrides so CI can tune benchmark length
- A testing profile with short benchmarks and failure injection disabled
"""

from __future__ import annotations

import os
from pathlib import Path

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent


def _optional_int(name: str) -> int | None:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


class Config:
    """Base configuration with default settings."""

    # Minimum wall-clock time a benchmark round must reach before its
    # ns/op figure is reported.
    BENCHMARK_MIN_TIME_MS: int = int(os.environ.get("BENCHMARK_MIN_TIME_MS", "1000"))

    # Hard ceiling for the doubling iteration count.
    BENCHMARK_MAX_ITERATIONS: int = int(
        os.environ.get("BENCHMARK_MAX_ITERATIONS", "1000000000")
    )

    # Extra error-aggregator slots on top of the operation's item count.
    BENCHMARK_ERROR_SLACK: int = int(os.environ.get("BENCHMARK_ERROR_SLACK", "10"))

    # Workloads fail once in this many calls; 0 disables failure injection.
    WORKLOAD_FAILURE_ODDS: int = int(os.environ.get("WORKLOAD_FAILURE_ODDS", "1000"))

    # Per-item failure odds for sub-operation errors; 0 disables them.
    WORKLOAD_ITEM_FAILURE_ODDS: int = int(os.environ.get("WORKLOAD_ITEM_FAILURE_ODDS", "0"))

    # Seed for the workload failure source; unset means nondeterministic.
    WORKLOAD_SEED: int | None = _optional_int("WORKLOAD_SEED")

    # Optional YAML file overlaying the values above.
    BENCHMARK_SETTINGS: str | None = os.environ.get("BENCHMARK_SETTINGS")

    # When set, the suite runner writes cucumber JSON here instead of
    # printing the verbose terminal report.
    BENCHMARK_RESULTS_DIR: str | None = os.environ.get("BENCHMARK_RESULTS_DIR")

    # Feature files ship inside the harness package.
    FEATURES_DIR: Path = Path(os.environ.get("FEATURES_DIR", str(BASE_DIR / "harness" / "features")))

    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG: bool = True
    TESTING: bool = False


class TestingConfig(Config):
    """Testing environment configuration."""

    DEBUG: bool = True
    TESTING: bool = True

    # Short rounds keep the suite fast; sleep-based workloads still
    # produce stable per-item figures at this length.
    BENCHMARK_MIN_TIME_MS: int = int(os.environ.get("TEST_BENCHMARK_MIN_TIME_MS", "20"))
    BENCHMARK_MAX_ITERATIONS: int = int(
        os.environ.get("TEST_BENCHMARK_MAX_ITERATIONS", "10000")
    )

    # Random failures would make "completes without error" steps flaky.
    WORKLOAD_FAILURE_ODDS: int = int(os.environ.get("TEST_WORKLOAD_FAILURE_ODDS", "0"))
    WORKLOAD_SEED: int | None = 7


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG: bool = False
    TESTING: bool = False


# Configuration mapping for easy access
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env: str | None = None) -> type[Config]:
    """
    Get the configuration class for the specified environment.

    Args:
        env: Environment name (development, testing, production).
             If None, uses the BENCH_ENV environment variable.

    Returns:
        Configuration class for the specified environment.
    """
    if env is None:
        env = os.environ.get("BENCH_ENV", "development")
    return config.get(env, config["default"])
