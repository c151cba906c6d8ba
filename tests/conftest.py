"""
Shared pytest fixtures for the performance harness test suite.

This module contains fixtures that are shared across all test modules.
Fixtures follow the Arrange-Act-Assert (AAA) pattern and keep timing
tests deterministic by replacing the wall clock with a fake one.

Key Concepts Demonstrated:
- Fixture dependencies (orchestrator -> runner -> clock)
- Fake clocks instead of real sleeps
- Test data factories with Faker
"""

import os

import pytest
from faker import Faker

pytest_plugins = ["harness.bdd"]

# Select the testing configuration before anything reads it
os.environ["BENCH_ENV"] = "testing"

from harness.benchmark import BenchmarkRunner
from harness.orchestrator import StepOrchestrator
from harness.settings import BenchmarkSettings
from harness.state import ScenarioState
from harness.steps import registry as game_registry


# Initialize Faker for generating test data
fake = Faker()


class FakeClock:
    """
    Nanosecond clock that only moves when something sleeps.

    Passed as the runner's clock and the workloads' sleep function, it
    makes every ns/op figure exact.
    """

    def __init__(self, start: int = 0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> int:
        return self.now

    def advance(self, nanoseconds: int) -> None:
        self.now += nanoseconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += int(round(seconds * 1_000_000_000))


# -----------------------------------------------------------------------------
# Timing Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def clock():
    """Provide a fresh fake clock starting at zero."""
    return FakeClock()


@pytest.fixture
def settings():
    """
    Benchmark settings for deterministic tests.

    Rounds must reach 20 ms of fake time and random workload failures
    are disabled.
    """
    return BenchmarkSettings(
        min_time_ms=20,
        max_iterations=10_000,
        error_slack=10,
        failure_odds=0,
        item_failure_odds=0,
        seed=7,
    )


@pytest.fixture
def make_orchestrator(clock):
    """
    Factory fixture for orchestrators bound to the game steps.

    Usage:
        def test_something(make_orchestrator, settings):
            orchestrator = make_orchestrator(settings)
    """

    def _make_orchestrator(settings: BenchmarkSettings) -> StepOrchestrator:
        runner = BenchmarkRunner(
            min_time_ns=settings.min_time_ms * 1_000_000,
            max_iterations=settings.max_iterations,
            error_slack=settings.error_slack,
            clock=clock,
        )
        return StepOrchestrator(game_registry, runner, settings, sleep=clock.sleep)

    return _make_orchestrator


@pytest.fixture
def orchestrator(make_orchestrator, settings):
    """Orchestrator with failure injection disabled."""
    return make_orchestrator(settings)


@pytest.fixture
def empty_state():
    return ScenarioState()


@pytest.fixture
def area_name():
    """A random area name; steps must store it verbatim."""
    return fake.city().replace("'", "")
