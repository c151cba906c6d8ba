"""
Unit tests for the adaptive benchmark loop.

Every workload here advances the fake clock by a fixed amount per call,
so iteration counts and ns/op figures can be asserted exactly.
"""

import logging
from types import SimpleNamespace

import pytest

from harness.aggregator import ErrorAggregator
from harness.benchmark import BenchmarkResult, BenchmarkRun, BenchmarkRunner
from harness.errors import StructuralError, ValidationError
from harness.settings import BenchmarkSettings
from harness.workload import WorkloadContract, WorkloadError


pytestmark = pytest.mark.unit


def ticking_contract(clock, ns_per_call, name="Tick", repetitions=1, result=None):
    def execute(record):
        clock.advance(ns_per_call)
        return result

    return WorkloadContract(name=name, repetitions=repetitions, execute=execute)


def test_doubles_until_minimum_time_is_reached(clock):
    """Test that iterations double until a round reaches the minimum time."""
    # Arrange: 100 ns per call, 1000 ns minimum -> rounds of 1, 2, 4, 8, 16
    runner = BenchmarkRunner(min_time_ns=1000, clock=clock)
    contract = ticking_contract(clock, 100)

    # Act
    run = runner.run(contract)

    # Assert
    assert run.result.iterations == 16
    assert run.result.elapsed_ns == 1600
    assert run.result.ns_per_op == 100
    assert run.result.rounds == 5
    assert run.result.total_calls == 31
    assert run.structural_error is None
    assert run.all_errors == ()


def test_iteration_cap_stops_the_loop(clock):
    """Test that the cap bounds the final round even below the minimum time."""
    runner = BenchmarkRunner(min_time_ns=10**12, max_iterations=10, clock=clock)

    run = runner.run(ticking_contract(clock, 50))

    assert run.result.iterations == 10
    assert run.result.rounds == 5
    assert run.result.ns_per_op == 50


def test_zero_minimum_time_runs_single_round(clock):
    runner = BenchmarkRunner(min_time_ns=0, clock=clock)

    run = runner.run(ticking_contract(clock, 7))

    assert run.result.iterations == 1
    assert run.result.ns_per_op == 7


def test_first_failure_becomes_structural_error(clock):
    """Test that only the first returned error is kept as the structural error."""
    # Arrange
    failures = iter(WorkloadError(f"failure {i}") for i in range(100))

    def execute(record):
        clock.advance(100)
        return next(failures)

    runner = BenchmarkRunner(min_time_ns=1000, clock=clock)
    contract = WorkloadContract(name="AlwaysFails", repetitions=1, execute=execute)

    # Act
    run = runner.run(contract)

    # Assert: the loop keeps timing despite failures
    assert run.result.iterations == 16
    assert run.result.failed_calls == run.result.total_calls == 31
    assert isinstance(run.structural_error, StructuralError)
    assert str(run.structural_error.cause) == "failure 0"
    assert "benchmark function structure error: failure 0" in str(run.structural_error)
    assert run.errors == ()
    assert run.all_errors == (run.structural_error,)


def test_recorded_errors_are_drained_after_structural_error(clock):
    def execute(record):
        clock.advance(600)
        record(WorkloadError("item failed"))
        return WorkloadError("call failed")

    runner = BenchmarkRunner(min_time_ns=1000, clock=clock)
    contract = WorkloadContract(name="Mixed", repetitions=1, execute=execute)
    aggregator = ErrorAggregator(10, name="Mixed")

    run = runner.run(contract, aggregator)

    # Rounds of 1 and 2 calls -> three recorded errors
    assert [str(e) for e in run.errors] == ["item failed"] * 3
    assert run.all_errors[0] is run.structural_error
    assert len(run.all_errors) == 4
    assert aggregator.drained is True


def test_dropped_errors_are_reported(clock):
    def execute(record):
        clock.advance(1000)
        for _ in range(5):
            record(WorkloadError("noisy"))
        return None

    runner = BenchmarkRunner(min_time_ns=1000, error_slack=0, clock=clock)
    contract = WorkloadContract(name="Noisy", repetitions=2, execute=execute)

    run = runner.run(contract)

    assert len(run.errors) == 2
    assert run.dropped_errors == 3


def test_result_line_is_logged(clock, caplog):
    """Test that each run logs its name, iteration count and ns/op."""
    caplog.set_level(logging.INFO, logger="harness.benchmark")
    runner = BenchmarkRunner(min_time_ns=1000, clock=clock)

    runner.run(ticking_contract(clock, 100, name="FightEnemies"))

    assert "FightEnemies Result\tFightEnemies,16,100" in caplog.text


def test_negative_minimum_time_is_rejected():
    with pytest.raises(ValidationError):
        BenchmarkRunner(min_time_ns=-1)


def test_runner_from_settings():
    settings = BenchmarkSettings(min_time_ms=20, max_iterations=500, error_slack=3)

    runner = BenchmarkRunner.from_settings(settings)

    assert runner.min_time_ns == 20_000_000
    assert runner.max_iterations == 500
    assert runner.error_slack == 3


def test_ns_per_op_uses_integer_division():
    assert BenchmarkResult(iterations=3, elapsed_ns=1000).ns_per_op == 333


def test_ns_per_op_is_zero_without_iterations():
    assert BenchmarkResult(iterations=0, elapsed_ns=1000).ns_per_op == 0


def test_all_errors_without_structural_error():
    errors = (WorkloadError("only"),)

    run = BenchmarkRun(result=BenchmarkResult(1, 1), errors=errors)

    assert run.all_errors == errors


def test_non_positive_repetitions_rejected_before_timing(clock):
    """Test that a zero-item workload is refused before the clock is read."""
    # Arrange: bypasses WorkloadContract's own check
    calls = []
    contract = SimpleNamespace(name="Empty", repetitions=0, run=calls.append)
    readings = []

    def counting_clock():
        readings.append(clock())
        return clock()

    runner = BenchmarkRunner(min_time_ns=0, clock=counting_clock)

    # Act / Assert
    with pytest.raises(ValidationError, match="Empty repetitions must be positive"):
        runner.run(contract)

    assert calls == []
    assert readings == []


def test_no_logging_inside_timed_calls(clock, caplog):
    """Test that overflowing the aggregator emits nothing while calls are timed."""
    # Arrange
    caplog.set_level(logging.DEBUG, logger="harness")
    emitted_during_calls = []

    def execute(record):
        before = len(caplog.records)
        clock.advance(100)
        for _ in range(5):
            record(WorkloadError("noisy"))
        emitted_during_calls.append(len(caplog.records) - before)
        return None

    runner = BenchmarkRunner(min_time_ns=1000, error_slack=0, clock=clock)
    contract = WorkloadContract(name="Noisy", repetitions=1, execute=execute)

    # Act
    run = runner.run(contract)

    # Assert: 31 calls, 155 errors, 1 kept
    assert sum(emitted_during_calls) == 0
    assert run.dropped_errors == 154
    drop_warnings = [r for r in caplog.records if r.name == "harness.aggregator"]
    assert len(drop_warnings) == 1
    assert "dropped 154 error(s)" in drop_warnings[0].getMessage()
