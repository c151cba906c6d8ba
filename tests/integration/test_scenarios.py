"""
End-to-end scenarios through the game step bindings.

The fake clock makes each simulated item cost exactly its nominal time:
100 enemies at level 2 take 5 ms per operation, 50 µs per enemy.
"""

from dataclasses import replace

import pytest

from harness.errors import (
    OperationErrorsFound,
    StateKeyMissingError,
    StateLinkageError,
    ThresholdExceededError,
    UndefinedStepError,
    ValidationError,
)
from harness.orchestrator import ScenarioPhase
from harness.state import StateKey


pytestmark = pytest.mark.integration


def fight_scenario(max_ms, area_name):
    return [
        "Given the player has a level of 2",
        f"And the player is in the '{area_name}' area",
        "When the player fights 100 enemies",
        f"Then the average time per enemy defeated should be less than {max_ms} milliseconds",
        "And all fight operations should complete without error",
    ]


def test_fight_scenario_passes_under_bound(orchestrator, area_name, capsys):
    """Test that a levelled player's fight meets a generous per-enemy bound."""
    # Act
    outcome = orchestrator.run_scenario(fight_scenario(5, area_name))

    # Assert
    assert outcome.passed, outcome.message
    result = outcome.state.require(StateKey.BENCHMARK_RESULT)
    assert result.ns_per_op == 5_000_000
    assert result.iterations == 4
    assert outcome.state.require(StateKey.TARGET_COUNT) == 100
    assert outcome.state.require(StateKey.AREA) == area_name
    assert outcome.state.require(StateKey.ERRORS) == ()
    assert "Observed NsPerItem: 50000 ns" in capsys.readouterr().out


def test_fight_scenario_fails_at_zero_bound(orchestrator, area_name):
    """Test that a zero millisecond bound fails with the observed figure."""
    # Act
    outcome = orchestrator.run_scenario(fight_scenario(0, area_name))

    # Assert
    assert not outcome.passed
    assert outcome.phase is ScenarioPhase.FAILED
    assert isinstance(outcome.error, ThresholdExceededError)
    assert outcome.error.observed == 50_000
    assert outcome.failed_step.startswith("the average time per enemy defeated")


def test_zero_guards_is_rejected_before_timing(orchestrator, clock):
    """Test that spawning no guards fails validation without benchmarking."""
    # Act
    outcome = orchestrator.run_scenario(
        [
            "When 0 guards spawn around the player",
            "Then the player reacts to all guards within 1 seconds",
        ]
    )

    # Assert
    assert not outcome.passed
    assert isinstance(outcome.error, ValidationError)
    assert "number of guards must be positive" in str(outcome.error)
    assert clock.sleeps == []
    assert StateKey.BENCHMARK_RESULT not in outcome.state


def test_forced_failure_yields_exactly_one_error(make_orchestrator, settings):
    """Test that a workload failing on every call reports one structural error."""
    # Arrange
    orchestrator = make_orchestrator(replace(settings, failure_odds=1))

    # Act
    outcome = orchestrator.run_scenario(
        [
            "Given the player has a level of 1",
            "When the player fights 10 enemies",
            "Then all fight operations should complete without error",
        ]
    )

    # Assert
    assert not outcome.passed
    assert isinstance(outcome.error, OperationErrorsFound)
    assert len(outcome.error.errors) == 1
    assert "mystical force interrupted the battle" in str(outcome.error)
    assert "found 1 errors" in str(outcome.error)
    result = outcome.state.require(StateKey.BENCHMARK_RESULT)
    assert result.failed_calls == result.total_calls


def test_item_failures_overflow_the_aggregator(make_orchestrator, settings):
    """Test that sub-operation errors beyond capacity are counted as dropped."""
    # Arrange: 5 hits of 20 µs -> rounds up to 256 calls, 511 calls in total
    orchestrator = make_orchestrator(replace(settings, item_failure_odds=1))

    # Act
    outcome = orchestrator.run_scenario(
        [
            "Given the player is moving at high speed",
            "When the player hits a wall 5 times",
            "Then all hit wall operations should complete without error",
        ]
    )

    # Assert
    assert isinstance(outcome.error, OperationErrorsFound)
    assert len(outcome.error.errors) == 15
    assert outcome.state.require(StateKey.DROPPED_ERRORS) == 511 * 5 - 15
    assert "more dropped" in str(outcome.error)


def test_guard_reaction_within_seconds(orchestrator):
    outcome = orchestrator.run_scenario(
        [
            "When 1 guard spawns near the player",
            "Then the player reacts to all guards within 1 second",
            "And all guard spawning operations should complete without error",
        ]
    )

    assert outcome.passed, outcome.message
    assert outcome.state.require(StateKey.BENCHMARK_RESULT).ns_per_op == 50_000


def test_impact_processing_time(orchestrator):
    outcome = orchestrator.run_scenario(
        [
            "Given the player is moving at low speed",
            "When the player hits a wall 1 time",
            "Then the average impact processing time should be less than 1 milliseconds",
        ]
    )

    assert outcome.passed, outcome.message
    assert outcome.state.require(StateKey.SPEED) == "low"


def test_fight_without_level_is_a_linkage_error(orchestrator):
    """Test that fighting before any level is set names the missing key."""
    outcome = orchestrator.run_scenario(["When the player fights 10 enemies"])

    assert isinstance(outcome.error, StateKeyMissingError)
    assert "playerLevel" in str(outcome.error)


def test_threshold_for_other_operation_is_a_linkage_error(orchestrator):
    outcome = orchestrator.run_scenario(
        [
            "When 3 guards spawn around the player",
            "Then the average time per enemy defeated should be less than 5 milliseconds",
        ]
    )

    assert isinstance(outcome.error, StateLinkageError)
    assert "last operation was 'guard spawning'" in str(outcome.error)


def test_negative_level_is_rejected(orchestrator):
    outcome = orchestrator.run_scenario(
        [
            "Given the player has a level of -1",
            "When the player fights 10 enemies",
        ]
    )

    assert isinstance(outcome.error, ValidationError)
    assert "player level must be positive" in str(outcome.error)


def test_action_text_under_then_keyword_is_undefined(orchestrator, clock):
    """Test that a When step written as a Then line fails without benchmarking."""
    outcome = orchestrator.run_scenario(
        [
            "Given the player has a level of 1",
            "Then the player fights 10 enemies",
        ]
    )

    assert isinstance(outcome.error, UndefinedStepError)
    assert clock.sleeps == []
