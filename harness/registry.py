"""
Binding of scenario step text to step functions.

Steps are registered with an anchored regular expression whose named
groups become keyword arguments, converted by the callables given at
registration time, in the same shape as ``pytest_bdd.parsers.re``::

    registry = StepRegistry()

    @registry.when(r"the player fights (?P<count>\\d+) enemies", count=int)
    def player_fights_enemies(ctx, state, count):
        ...
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from harness.errors import UndefinedStepError


class StepKind(Enum):
    """Gherkin keyword family a step is registered under."""

    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"


@dataclass(frozen=True)
class StepDefinition:
    kind: StepKind
    pattern: re.Pattern[str]
    func: Callable[..., Any]
    converters: dict[str, Callable[[str], Any]] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return getattr(self.func, "__name__", repr(self.func))

    def match(self, text: str) -> dict[str, Any] | None:
        found = self.pattern.fullmatch(text)
        if found is None:
            return None
        kwargs: dict[str, Any] = {}
        for group, raw in found.groupdict().items():
            convert = self.converters.get(group)
            kwargs[group] = convert(raw) if convert is not None and raw is not None else raw
        return kwargs


class StepRegistry:
    """Ordered collection of step definitions."""

    def __init__(self) -> None:
        self._definitions: list[StepDefinition] = []

    def __len__(self) -> int:
        return len(self._definitions)

    @property
    def definitions(self) -> tuple[StepDefinition, ...]:
        return tuple(self._definitions)

    def step(
        self, kind: StepKind, pattern: str, **converters: Callable[[str], Any]
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        compiled = re.compile(pattern)
        unknown = set(converters) - set(compiled.groupindex)
        if unknown:
            raise ValueError(f"converters for unknown groups {sorted(unknown)} in {pattern!r}")

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._definitions.append(StepDefinition(kind, compiled, func, dict(converters)))
            return func

        return decorator

    def given(self, pattern: str, **converters: Callable[[str], Any]):
        return self.step(StepKind.GIVEN, pattern, **converters)

    def when(self, pattern: str, **converters: Callable[[str], Any]):
        return self.step(StepKind.WHEN, pattern, **converters)

    def then(self, pattern: str, **converters: Callable[[str], Any]):
        return self.step(StepKind.THEN, pattern, **converters)

    def resolve(self, text: str, kind: StepKind | None = None) -> tuple[StepDefinition, dict[str, Any]]:
        """
        Find the definition matching *text*.

        When *kind* is given only definitions of that kind are tried, so
        ``Then the player fights 10 enemies`` is undefined rather than a
        benchmark.  Without a kind every definition is tried in order.

        Raises:
            UndefinedStepError: If no definition matches.
        """
        text = text.strip()
        candidates = self._definitions
        if kind is not None:
            candidates = [d for d in self._definitions if d.kind is kind]
        for definition in candidates:
            kwargs = definition.match(text)
            if kwargs is not None:
                return definition, kwargs
        label = f"{kind.value} step" if kind is not None else "step"
        raise UndefinedStepError(f"{label} is undefined: {text!r}")
