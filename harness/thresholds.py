"""
Convert benchmark timing into pass/fail verdicts.

Two shapes of bound are supported:

- **Per item**: the operation processed ``target_count`` identical items
  (100 enemies, 5 wall hits), so ``ns_per_op // target_count`` is checked
  against a bound given in whole milliseconds.
- **Per operation**: the operation is one unit of work (reacting to all
  guards), so ``ns_per_op`` converted to seconds is checked directly.

Both pass when ``measured <= expected`` and, on failure, raise
:class:`~harness.errors.ThresholdExceededError` carrying both values.
Each check also prints a small metric block to stdout so the margin is
visible in CI logs even when the check passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from harness.benchmark import NS_PER_MS, NS_PER_SECOND, BenchmarkResult
from harness.errors import EmptyBenchmarkError, PerItemComputationError, ThresholdExceededError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThresholdCheck:
    """Outcome of comparing one measured figure with its bound."""

    metric: str
    observed: float
    expected: float
    unit: str
    details: tuple[tuple[str, str], ...] = ()

    @property
    def passed(self) -> bool:
        return self.observed <= self.expected


def _require_iterations(result: BenchmarkResult) -> None:
    if result.iterations <= 0:
        raise EmptyBenchmarkError("benchmark result has zero iterations, cannot compute ns/op")


def per_item_ns(result: BenchmarkResult, target_count: int) -> int:
    """
    Return nanoseconds per item using integer division.

    Raises:
        PerItemComputationError: If *target_count* is zero or negative.
        EmptyBenchmarkError: If the result has no iterations.
    """
    if target_count <= 0:
        raise PerItemComputationError(
            f"target count is {target_count}, cannot calculate per-item performance"
        )
    _require_iterations(result)
    return result.ns_per_op // target_count


def check_per_item(
    result: BenchmarkResult,
    target_count: int,
    expected_ms_per_item: int,
    *,
    metric: str = "Average Time Per Item",
    item_label: str = "item",
    item_plural: str | None = None,
) -> ThresholdCheck:
    """
    Check the average time per item against a millisecond bound.

    Args:
        result: Benchmark result for the whole operation.
        target_count: Number of items one operation processed.
        expected_ms_per_item: Upper bound in whole milliseconds.
        metric: Title for the printed report.
        item_label: Singular noun used in the failure message.
        item_plural: Plural noun for the report; defaults to
            *item_label* with an "s" appended.

    Returns:
        The passing ``ThresholdCheck``.

    Raises:
        PerItemComputationError: If *target_count* is not positive.
        ThresholdExceededError: If the observed per-item time is above
            the bound.
    """
    observed_ns = per_item_ns(result, target_count)
    expected_ns = expected_ms_per_item * NS_PER_MS
    check = ThresholdCheck(
        metric=metric,
        observed=observed_ns,
        expected=expected_ns,
        unit="ns",
        details=(
            ("Target Count in Operation", f"{target_count} {item_plural or item_label + 's'}"),
            ("Total NsPerOp (for group)", f"{result.ns_per_op} ns"),
            ("Observed NsPerItem", f"{observed_ns} ns ({observed_ns / NS_PER_MS:.4f} ms)"),
            ("Expected Max NsPerItem", f"{expected_ns} ns ({expected_ms_per_item} ms)"),
        ),
    )
    print_metric_report(check)

    if not check.passed:
        raise ThresholdExceededError(
            f"expected average time per {item_label} to be less than {expected_ms_per_item} ms "
            f"({expected_ns}ns), but was {observed_ns / NS_PER_MS:.4f} ms ({observed_ns}ns)",
            observed=observed_ns,
            expected=expected_ns,
        )
    return check


def check_per_operation(
    result: BenchmarkResult,
    expected_seconds: float,
    *,
    metric: str = "Total Operation Time",
    description: str = "the operation",
    target_count: int | None = None,
) -> ThresholdCheck:
    """
    Check the whole-operation time against a bound in seconds.

    Raises:
        EmptyBenchmarkError: If the result has no iterations.
        ThresholdExceededError: If the operation took longer than
            *expected_seconds*.
    """
    _require_iterations(result)
    observed_seconds = result.ns_per_op / NS_PER_SECOND
    details = [
        ("Observed NsPerOp (total for operation)", f"{result.ns_per_op} ns ({observed_seconds:.4f} s)"),
        ("Expected Max Operation Time", f"{expected_seconds:.2f} s"),
    ]
    if target_count is not None:
        details.insert(0, ("Target Count in Operation", str(target_count)))
    check = ThresholdCheck(
        metric=metric,
        observed=observed_seconds,
        expected=float(expected_seconds),
        unit="s",
        details=tuple(details),
    )
    print_metric_report(check)

    if not check.passed:
        raise ThresholdExceededError(
            f"expected {description} to be within {expected_seconds:.2f} seconds, "
            f"but was {observed_seconds:.4f} seconds",
            observed=observed_seconds,
            expected=float(expected_seconds),
        )
    return check


def print_metric_report(check: ThresholdCheck) -> None:
    """Print a human-readable metric block to stdout for CI logs."""
    status = "PASS" if check.passed else "FAIL"
    print(f"  Benchmark Metric: {check.metric}")
    for label, value in check.details:
        print(f"    {label}: {value}")
    print(f"    Status: {status}")
    logger.info(
        "%s: observed %s %s, limit %s %s -> %s",
        check.metric,
        check.observed,
        check.unit,
        check.expected,
        check.unit,
        status,
    )
