"""
The contract every benchmarked action satisfies.

A :class:`WorkloadContract` describes one repeatable unit of simulated
work; "fight 100 enemies" is a single contract call that internally
simulates 100 fights.  Calling :meth:`WorkloadContract.run` never raises:
failures come back as values so the benchmark loop can keep timing.

Sub-operation failures (one enemy out of the hundred misbehaving) are
reported through the ``record`` callable handed to :meth:`run`; the
returned error describes a failure of the call as a whole.

:meth:`WorkloadContract.run` sits inside the timed loop, so it does no
logging; the runner reports failed calls once timing has finished.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from harness.errors import ValidationError

Recorder = Callable[[BaseException], None]
Execute = Callable[[Recorder], "BaseException | None"]


class WorkloadError(Exception):
    """An action raised instead of returning its failure."""


def _discard(_: BaseException) -> None:
    return None


def validate_repetitions(repetitions: object, what: str = "repetitions") -> int:
    """
    Return *repetitions* if it is a positive integer.

    Raises:
        ValidationError: For zero, negative, boolean or non-integer values.
    """
    if isinstance(repetitions, bool) or not isinstance(repetitions, int):
        raise ValidationError(f"{what} must be an integer, got {repetitions!r}")
    if repetitions <= 0:
        raise ValidationError(f"{what} must be positive, got {repetitions}")
    return repetitions


@dataclass(frozen=True)
class WorkloadContract:
    """
    One repeatable unit of simulated work.

    Attributes:
        name: Label used in logs and benchmark result lines.
        repetitions: Number of items the unit processes per call.
        execute: Callable performing the work; receives the sub-operation
            error recorder and returns an error or ``None``.
    """

    name: str
    repetitions: int
    execute: Execute

    def __post_init__(self) -> None:
        validate_repetitions(self.repetitions, f"{self.name} repetitions")

    def run(self, record: Recorder | None = None) -> BaseException | None:
        """
        Run the unit once, returning its failure instead of raising it.

        An exception raised by ``execute`` is returned wrapped in a
        :class:`WorkloadError` chained from the original.
        """
        try:
            return self.execute(record or _discard)
        except Exception as exc:
            error = WorkloadError(f"{self.name} raised instead of returning: {exc!r}")
            error.__cause__ = exc
            return error
