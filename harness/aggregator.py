"""
Bounded collector for errors raised inside a timed benchmark loop.

The aggregator is sized once, before timing starts, to the number of
items the operation processes plus a fixed slack.  Recording never
blocks and never grows the buffer: once it is full, further errors are
counted as dropped, and the count is logged once on drain so nothing
disappears without trace and nothing is logged while timing runs.
"""

from __future__ import annotations

import logging

from harness.errors import AggregatorDrainedError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_SLACK = 10


class ErrorAggregator:
    """Fixed-capacity, append-only error buffer that is drained once."""

    def __init__(self, capacity: int, name: str = "benchmark") -> None:
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            raise ValidationError(f"aggregator capacity must be a positive integer, got {capacity!r}")
        self.capacity = capacity
        self.name = name
        self.dropped = 0
        self._errors: list[BaseException] = []
        self._drained = False
        self._first_dropped: BaseException | None = None

    @classmethod
    def for_operation(cls, item_count: int, slack: int = DEFAULT_SLACK, name: str = "benchmark") -> ErrorAggregator:
        """Create an aggregator sized to *item_count* plus *slack* slots."""
        return cls(max(item_count, 0) + max(slack, 0) or 1, name=name)

    def __len__(self) -> int:
        return len(self._errors)

    @property
    def drained(self) -> bool:
        return self._drained

    def record(self, error: BaseException | None) -> bool:
        """
        Store *error* if there is room.

        Called from inside the timed loop, so a full buffer only counts
        the drop; :meth:`drain` logs the total once timing is over.

        Returns:
            ``True`` if the error was stored, ``False`` if it was dropped
            (or was ``None``).
        """
        if error is None:
            return False
        if self._drained:
            self.dropped += 1
            logger.warning("Error channel %s already drained, dropping error: %s", self.name, error)
            return False
        if len(self._errors) >= self.capacity:
            self.dropped += 1
            if self._first_dropped is None:
                self._first_dropped = error
            return False
        self._errors.append(error)
        return True

    def drain(self) -> tuple[BaseException, ...]:
        """Return recorded errors in insertion order and close the aggregator."""
        if self._drained:
            raise AggregatorDrainedError(f"error aggregator {self.name} was already drained")
        self._drained = True
        errors = tuple(self._errors)
        self._errors.clear()
        if self.dropped:
            logger.warning(
                "Error channel %s full, dropped %d error(s) beyond capacity %d; first dropped: %s",
                self.name,
                self.dropped,
                self.capacity,
                self._first_dropped,
            )
        return errors
