"""
Adaptive benchmark loop.

:class:`BenchmarkRunner` runs a workload contract repeatedly, doubling
the iteration count until one round takes at least the configured
minimum time (or the iteration cap is reached), and reports the final
round as a :class:`BenchmarkResult`.

Only the contract calls are timed.  A failing call never stops the loop:
the first failure is kept as the run's structural error, later ones are
only counted, because a usable ns/op figure needs the full iteration
count.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from harness.aggregator import DEFAULT_SLACK, ErrorAggregator
from harness.errors import StructuralError, ValidationError
from harness.workload import WorkloadContract, validate_repetitions

if TYPE_CHECKING:
    from harness.settings import BenchmarkSettings

logger = logging.getLogger(__name__)

NS_PER_MS = 1_000_000
NS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class BenchmarkResult:
    """Timing of the final benchmark round."""

    iterations: int
    elapsed_ns: int
    rounds: int = 1
    total_calls: int = 0
    failed_calls: int = 0

    @property
    def ns_per_op(self) -> int:
        """Integer nanoseconds per call; ``0`` when no iterations ran."""
        if self.iterations <= 0:
            return 0
        return self.elapsed_ns // self.iterations

    def __str__(self) -> str:
        return f"{self.iterations:>10d}\t{self.ns_per_op:>10d} ns/op"


@dataclass(frozen=True)
class BenchmarkRun:
    """Everything a benchmark run produced."""

    result: BenchmarkResult
    structural_error: StructuralError | None = None
    errors: tuple[BaseException, ...] = field(default_factory=tuple)
    dropped_errors: int = 0

    @property
    def all_errors(self) -> tuple[BaseException, ...]:
        """Structural error first, then the aggregated errors in order."""
        if self.structural_error is None:
            return self.errors
        return (self.structural_error, *self.errors)


class BenchmarkRunner:
    """Runs a workload contract until its timing is stable."""

    def __init__(
        self,
        min_time_ns: int = NS_PER_SECOND,
        max_iterations: int = 1_000_000_000,
        error_slack: int = DEFAULT_SLACK,
        clock: Callable[[], int] = time.perf_counter_ns,
    ) -> None:
        if min_time_ns < 0:
            raise ValidationError(f"minimum benchmark time must not be negative, got {min_time_ns}")
        validate_repetitions(max_iterations, "max_iterations")
        self.min_time_ns = min_time_ns
        self.max_iterations = max_iterations
        self.error_slack = error_slack
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: BenchmarkSettings) -> BenchmarkRunner:
        return cls(
            min_time_ns=settings.min_time_ms * NS_PER_MS,
            max_iterations=settings.max_iterations,
            error_slack=settings.error_slack,
        )

    def new_aggregator(self, contract: WorkloadContract) -> ErrorAggregator:
        return ErrorAggregator.for_operation(contract.repetitions, self.error_slack, name=contract.name)

    def run(self, contract: WorkloadContract, aggregator: ErrorAggregator | None = None) -> BenchmarkRun:
        """
        Benchmark *contract* and drain its aggregator.

        Args:
            contract: The workload to time.
            aggregator: Collector for sub-operation errors.  A fresh one
                sized from the contract is created when omitted.

        Returns:
            The final round's result, the structural error (if any call
            failed) and the aggregated errors.

        Raises:
            ValidationError: If the contract's repetition count is not
                positive.  Raised before any timing.
        """
        validate_repetitions(contract.repetitions, f"{contract.name} repetitions")
        if aggregator is None:
            aggregator = self.new_aggregator(contract)
        record = aggregator.record

        first_error: BaseException | None = None
        failed_calls = 0
        total_calls = 0
        rounds = 0
        n = 1
        while True:
            rounds += 1
            start = self._clock()
            for _ in range(n):
                err = contract.run(record)
                if err is not None:
                    failed_calls += 1
                    if first_error is None:
                        first_error = err
            elapsed = self._clock() - start
            total_calls += n
            logger.debug("%s round %d: %d iteration(s) in %d ns", contract.name, rounds, n, elapsed)
            if elapsed >= self.min_time_ns or n >= self.max_iterations:
                break
            n = min(n * 2, self.max_iterations)

        errors = aggregator.drain()
        result = BenchmarkResult(
            iterations=n,
            elapsed_ns=elapsed,
            rounds=rounds,
            total_calls=total_calls,
            failed_calls=failed_calls,
        )
        structural = StructuralError(first_error) if first_error is not None else None
        if failed_calls:
            logger.warning("%s failed on %d of %d call(s)", contract.name, failed_calls, total_calls)
        logger.info("%s Result\t%s,%d,%d", contract.name, contract.name, result.iterations, result.ns_per_op)
        return BenchmarkRun(
            result=result,
            structural_error=structural,
            errors=errors,
            dropped_errors=aggregator.dropped,
        )
