"""
Immutable scenario state threaded through step calls.

Each step receives the current :class:`ScenarioState` snapshot and hands
the next step a *new* snapshot built with :meth:`ScenarioState.with_value`.
Snapshots are never modified after construction, so a failed step can
always be replayed from the state it was given.

Keys come from the closed :class:`StateKey` enumeration, and each key
declares the type its value must have.  Reading a key that was never set
and reading a value of the wrong type raise two different exceptions so
that tests can assert on which handoff went wrong.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from harness.benchmark import BenchmarkResult
from harness.errors import (
    StateKeyMissingError,
    StateTypeMismatchError,
    UnknownStateKeyError,
)


class StateKey(Enum):
    """Well-known scenario keys and the value type each one carries."""

    PLAYER_LEVEL = ("playerLevel", int)
    AREA = ("areaName", str)
    SPEED = ("playerSpeed", str)
    TARGET_COUNT = ("targetCount", int)
    OPERATION = ("operation", str)
    BENCHMARK_RESULT = ("benchmarkResult", BenchmarkResult)
    ERRORS = ("benchmarkErrors", tuple)
    DROPPED_ERRORS = ("droppedErrors", int)

    def __init__(self, label: str, value_type: type) -> None:
        self.label = label
        self.value_type = value_type

    def __str__(self) -> str:
        return self.label

    def accepts(self, value: object) -> bool:
        # bool is an int subclass; a level of True is never intended.
        if self.value_type is int and isinstance(value, bool):
            return False
        return isinstance(value, self.value_type)


def _check_key(key: object) -> StateKey:
    if not isinstance(key, StateKey):
        raise UnknownStateKeyError(f"'{key}' is not a known scenario state key")
    return key


class ScenarioState:
    """Append-only snapshot of scenario values keyed by :class:`StateKey`."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[StateKey, Any] | None = None) -> None:
        checked = {_check_key(key): value for key, value in (values or {}).items()}
        self._values = MappingProxyType(checked)

    def find(self, key: StateKey) -> tuple[Any, bool]:
        """Return ``(value, True)`` if *key* is set, else ``(None, False)``."""
        key = _check_key(key)
        if key in self._values:
            return self._values[key], True
        return None, False

    def require(self, key: StateKey) -> Any:
        """
        Return the value stored under *key*.

        Raises:
            StateKeyMissingError: No value was stored under *key*.
            StateTypeMismatchError: The stored value has the wrong type.
        """
        value, found = self.find(key)
        if not found:
            raise StateKeyMissingError(key)
        if not key.accepts(value):
            raise StateTypeMismatchError(key, key.value_type, value)
        return value

    def with_value(self, key: StateKey, value: Any) -> ScenarioState:
        """Return a new snapshot with *key* set; the receiver is unchanged."""
        key = _check_key(key)
        if isinstance(value, list):
            value = tuple(value)
        if not key.accepts(value):
            raise StateTypeMismatchError(key, key.value_type, value)
        updated = dict(self._values)
        updated[key] = value
        return ScenarioState(updated)

    def with_values(self, values: Mapping[StateKey, Any]) -> ScenarioState:
        """Apply several :meth:`with_value` updates, returning the final snapshot."""
        state = self
        for key, value in values.items():
            state = state.with_value(key, value)
        return state

    def as_dict(self) -> dict[str, Any]:
        """Return a plain copy keyed by label, for logging and debugging."""
        return {key.label: value for key, value in self._values.items()}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[StateKey]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScenarioState):
            return NotImplemented
        return dict(self._values) == dict(other._values)

    def __repr__(self) -> str:
        return f"ScenarioState({self.as_dict()!r})"
