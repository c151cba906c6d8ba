"""
pytest-bdd plugin binding feature files to the game steps.

Loaded with ``-p harness.bdd``.  pytest-bdd owns Gherkin parsing and
reporting; every step line is handed to the game
:class:`~harness.orchestrator.StepOrchestrator`, which owns step binding.
The scenario state is re-injected as the ``scenario_state`` fixture after
each step so the next step sees the snapshot its predecessor produced.
"""

from __future__ import annotations

import pytest
from pytest_bdd import given, parsers, then, when

from harness.orchestrator import StepOrchestrator
from harness.registry import StepKind
from harness.settings import BenchmarkSettings, resolve_settings
from harness.state import ScenarioState
from harness.steps import build_orchestrator

SETTINGS_KEY = pytest.StashKey[BenchmarkSettings]()

STEP_TEXT = parsers.re(r"(?P<text>.+)")


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "bdd: feature file scenarios run through pytest-bdd")


@pytest.fixture
def suite_settings(request: pytest.FixtureRequest) -> BenchmarkSettings:
    """Settings handed over by the suite runner, or the testing profile."""
    settings = request.config.stash.get(SETTINGS_KEY, None)
    if settings is None:
        settings = resolve_settings("testing")
    return settings


@pytest.fixture
def suite_orchestrator(suite_settings: BenchmarkSettings) -> StepOrchestrator:
    return build_orchestrator(suite_settings)


@pytest.fixture
def scenario_state() -> ScenarioState:
    return ScenarioState()


@given(STEP_TEXT, target_fixture="scenario_state")
def given_step(suite_orchestrator, scenario_state, text):
    return suite_orchestrator.run_step(text, scenario_state, StepKind.GIVEN)


@when(STEP_TEXT, target_fixture="scenario_state")
def when_step(suite_orchestrator, scenario_state, text):
    return suite_orchestrator.run_step(text, scenario_state, StepKind.WHEN)


@then(STEP_TEXT, target_fixture="scenario_state")
def then_step(suite_orchestrator, scenario_state, text):
    return suite_orchestrator.run_step(text, scenario_state, StepKind.THEN)
