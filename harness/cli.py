"""
Run the performance feature suite.

Invokes pytest on the packaged scenario module (:mod:`harness.suite`,
with the :mod:`harness.bdd` step plugin) using the settings resolved from
the environment (and an optional YAML settings file), stopping at the
first failing scenario.

When ``BENCHMARK_RESULTS_DIR`` is set (or ``--results-dir`` is given)
the report is written as cucumber JSON to ``<dir>/cucumber.json`` for CI
dashboards; otherwise scenarios are printed with the Gherkin terminal
reporter.

Exit codes follow a three-state convention so that CI can distinguish
"a scenario failed" from "the harness could not run":

- ``0``: every scenario passed
- ``1``: at least one scenario failed
- ``2``: setup failed (bad settings file, unwritable results dir, ...)
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pytest

from config import get_config
from harness import configure_logging
from harness.bdd import SETTINGS_KEY
from harness.errors import ConfigurationError
from harness.settings import BenchmarkSettings, resolve_settings

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_SCENARIO_FAILURE = 1
EXIT_SCRIPT_ERROR = 2

SUITE_PATH = Path(__file__).with_name("suite.py")
BDD_PLUGIN = "harness.bdd"
CUCUMBER_JSON_NAME = "cucumber.json"


class SuiteSettingsPlugin:
    """Hands the CLI's resolved settings to the BDD fixtures."""

    def __init__(self, settings: BenchmarkSettings) -> None:
        self.settings = settings

    def pytest_configure(self, config: pytest.Config) -> None:
        config.stash[SETTINGS_KEY] = self.settings


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse CLI arguments for the suite runner.

    ``--features`` and ``--results-dir`` default to the values of the
    configuration selected by ``--env``.
    """
    parser = argparse.ArgumentParser(
        description="Run the scenario performance suite and gate on its thresholds."
    )
    parser.add_argument(
        "--env",
        default=None,
        help="Configuration environment (development, testing, production)",
    )
    parser.add_argument(
        "--features",
        type=Path,
        default=None,
        help="Directory containing .feature files",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="YAML file overriding benchmark settings",
    )
    parser.add_argument(
        "--results-dir",
        type=Path,
        default=None,
        help="Write cucumber JSON results here instead of printing them",
    )
    parser.add_argument(
        "--tests",
        type=Path,
        default=SUITE_PATH,
        help="Scenario module (or test path) to run",
    )
    args = parser.parse_args(argv)

    config_class = get_config(args.env)
    if args.features is None:
        args.features = Path(config_class.FEATURES_DIR)
    if args.results_dir is None and config_class.BENCHMARK_RESULTS_DIR:
        args.results_dir = Path(config_class.BENCHMARK_RESULTS_DIR)
    return args


def prepare_results_file(results_dir: Path) -> Path:
    """Create *results_dir* if needed and return the cucumber JSON path."""
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    return results_dir / CUCUMBER_JSON_NAME


def build_pytest_args(tests_path: Path, features_dir: Path, results_file: Path | None) -> list[str]:
    """Assemble the pytest command line for one suite run."""
    args = [
        str(tests_path),
        "-p",
        BDD_PLUGIN,
        "-x",
        "-o",
        f"bdd_features_base_dir={features_dir}",
    ]
    if results_file is not None:
        args.append(f"--cucumberjson={results_file}")
    else:
        args.extend(["--gherkin-terminal-reporter", "-v"])
    return args


def main(argv: list[str] | None = None) -> int:
    """
    Entry point: resolve settings, run the suite, map the pytest status.

    Returns:
        ``EXIT_PASS`` (0), ``EXIT_SCENARIO_FAILURE`` (1) or
        ``EXIT_SCRIPT_ERROR`` (2).
    """
    args = parse_args(argv)
    configure_logging(get_config(args.env).LOG_LEVEL)

    try:
        settings = resolve_settings(args.env, args.settings)
        results_file = prepare_results_file(args.results_dir) if args.results_dir else None
    except (ConfigurationError, OSError) as exc:
        print(f"Suite setup failed: {exc}", file=sys.stderr)
        return EXIT_SCRIPT_ERROR

    pytest_args = build_pytest_args(args.tests, Path(args.features).resolve(), results_file)
    logger.info("Running scenario suite: pytest %s", " ".join(pytest_args))
    status = pytest.main(pytest_args, plugins=[SuiteSettingsPlugin(settings)])

    if status == pytest.ExitCode.OK:
        return EXIT_PASS
    if status == pytest.ExitCode.TESTS_FAILED:
        return EXIT_SCENARIO_FAILURE
    logger.error("pytest exited with status %s", status)
    return EXIT_SCRIPT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
