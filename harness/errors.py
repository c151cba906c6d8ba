"""
Exception hierarchy for the benchmark harness.

Every failure a step can produce maps onto one of these classes so that
callers (and tests) can tell a broken scenario handoff apart from a
genuine performance regression:

- :class:`ValidationError`: bad input rejected before any timing
- :class:`StructuralError`: the workload call itself failed mid-benchmark
- :class:`OperationErrorsFound`: errors were collected during the run
- :class:`ThresholdExceededError` and friends: timing verdicts
- :class:`StateLinkageError`: a step needed a value no prior step set
"""

from __future__ import annotations


class HarnessError(Exception):
    """Base exception for all harness errors."""


class ValidationError(HarnessError):
    """Raised when input is rejected before a benchmark starts."""


class ConfigurationError(HarnessError):
    """Raised when benchmark settings cannot be loaded."""


class StructuralError(HarnessError):
    """Wraps the first error returned by a workload during a benchmark run."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"benchmark function structure error: {cause}")
        self.cause = cause


class AggregatorDrainedError(HarnessError):
    """Raised when an error aggregator is drained a second time."""


class StateLinkageError(HarnessError):
    """A step expected a scenario value that is absent or unusable."""


class UnknownStateKeyError(StateLinkageError):
    """The key is not part of the closed scenario key set."""


class StateKeyMissingError(StateLinkageError):
    """No prior step stored a value under the key."""

    def __init__(self, key: object) -> None:
        super().__init__(f"value for key '{key}' not found in scenario state")
        self.key = key


class StateTypeMismatchError(StateLinkageError):
    """The stored value does not have the type the key requires."""

    def __init__(self, key: object, expected: type, actual: object) -> None:
        super().__init__(
            f"value for key '{key}' is not of type {expected.__name__}: "
            f"{type(actual).__name__}"
        )
        self.key = key
        self.expected = expected
        self.actual = actual


class UndefinedStepError(HarnessError):
    """No registered step pattern matches the step text."""


class ThresholdExceededError(HarnessError):
    """A measured duration is above its declared bound."""

    def __init__(self, message: str, *, observed: float, expected: float) -> None:
        super().__init__(message)
        self.observed = observed
        self.expected = expected


class PerItemComputationError(HarnessError):
    """A per-item figure was requested for a non-positive item count."""


class EmptyBenchmarkError(HarnessError):
    """The benchmark result carries no iterations to average over."""


class OperationErrorsFound(HarnessError):
    """Errors were collected while benchmarking an operation."""

    def __init__(self, message: str, errors: tuple[BaseException, ...]) -> None:
        super().__init__(message)
        self.errors = errors
