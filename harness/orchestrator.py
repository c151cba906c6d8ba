"""
Scenario step orchestration.

:class:`StepOrchestrator` resolves step text against a
:class:`~harness.registry.StepRegistry`, calls the bound function with
the current :class:`~harness.state.ScenarioState`, and returns the state
the step produced.  Action steps use :meth:`StepOrchestrator.benchmark`
to run a workload contract and merge its timing and errors into a new
snapshot.

:meth:`StepOrchestrator.run_scenario` drives a whole Given/When/Then
scenario and stops at the first failing step, the way a Gherkin runner
does.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from harness.benchmark import BenchmarkRunner
from harness.errors import HarnessError
from harness.registry import StepKind, StepRegistry
from harness.settings import BenchmarkSettings
from harness.state import ScenarioState, StateKey
from harness.workload import WorkloadContract

logger = logging.getLogger(__name__)

_KEYWORDS = {
    "given": StepKind.GIVEN,
    "when": StepKind.WHEN,
    "then": StepKind.THEN,
}
_CONTINUATIONS = {"and", "but", "*"}


class ScenarioPhase(Enum):
    IDLE = "idle"
    GIVEN = "given"
    WHEN = "when"
    THEN = "then"
    PASSED = "passed"
    FAILED = "failed"


_PHASE_FOR_KIND = {
    StepKind.GIVEN: ScenarioPhase.GIVEN,
    StepKind.WHEN: ScenarioPhase.WHEN,
    StepKind.THEN: ScenarioPhase.THEN,
}


@dataclass(frozen=True)
class ScenarioOutcome:
    """Terminal result of one scenario run."""

    passed: bool
    state: ScenarioState
    steps_run: tuple[str, ...] = ()
    failed_step: str | None = None
    error: BaseException | None = None
    phases: tuple[ScenarioPhase, ...] = field(default_factory=tuple)

    @property
    def phase(self) -> ScenarioPhase:
        return ScenarioPhase.PASSED if self.passed else ScenarioPhase.FAILED

    @property
    def message(self) -> str:
        if self.passed:
            return "passed"
        return f"step {self.failed_step!r} failed: {self.error}"


def split_keyword(line: str) -> tuple[str | None, str]:
    """Split ``"And the player ..."`` into ``("and", "the player ...")``."""
    stripped = line.strip()
    head, _, rest = stripped.partition(" ")
    keyword = head.lower()
    if keyword in _KEYWORDS or keyword in _CONTINUATIONS:
        return keyword, rest.strip()
    return None, stripped


class StepOrchestrator:
    """Runs scenario steps against a registry, threading immutable state."""

    def __init__(
        self,
        registry: StepRegistry,
        runner: BenchmarkRunner,
        settings: BenchmarkSettings | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.registry = registry
        self.runner = runner
        self.settings = settings or BenchmarkSettings()
        self.rng = rng if rng is not None else self.settings.make_rng()
        # Workloads spend their simulated time through this function.
        self.sleep = sleep

    @classmethod
    def from_settings(cls, registry: StepRegistry, settings: BenchmarkSettings, **kwargs) -> StepOrchestrator:
        return cls(registry, BenchmarkRunner.from_settings(settings), settings, **kwargs)

    def run_step(self, text: str, state: ScenarioState, kind: StepKind | None = None) -> ScenarioState:
        """
        Run one step and return the state it produced.

        Steps that return ``None`` leave the state unchanged.

        Raises:
            UndefinedStepError: If no binding matches *text*.
            HarnessError: Whatever the step itself raised.
        """
        definition, kwargs = self.registry.resolve(text, kind)
        logger.debug("Running step %s %r with %s", definition.kind.value, text, kwargs)
        produced = definition.func(self, state, **kwargs)
        if produced is None:
            return state
        if not isinstance(produced, ScenarioState):
            raise TypeError(f"step {definition.name} returned {type(produced).__name__}, expected ScenarioState")
        return produced

    def run_scenario(self, lines: Iterable[str], state: ScenarioState | None = None) -> ScenarioOutcome:
        """
        Run Gherkin-style step lines until the first failure.

        Blank lines and ``#`` comments are skipped.  ``And``/``But`` lines
        inherit the keyword of the step before them.
        """
        state = state if state is not None else ScenarioState()
        kind: StepKind | None = None
        phases: list[ScenarioPhase] = [ScenarioPhase.IDLE]
        steps_run: list[str] = []

        for raw in lines:
            if not raw.strip() or raw.strip().startswith("#"):
                continue
            keyword, text = split_keyword(raw)
            if keyword in _KEYWORDS:
                kind = _KEYWORDS[keyword]
            elif keyword is None:
                kind = None
            phase = _PHASE_FOR_KIND.get(kind) if kind is not None else None
            if phase is not None and phases[-1] is not phase:
                phases.append(phase)

            try:
                state = self.run_step(text, state, kind)
            except HarnessError as exc:
                logger.info("Scenario failed at step %r: %s", text, exc)
                phases.append(ScenarioPhase.FAILED)
                return ScenarioOutcome(
                    passed=False,
                    state=state,
                    steps_run=tuple(steps_run),
                    failed_step=text,
                    error=exc,
                    phases=tuple(phases),
                )
            steps_run.append(text)

        phases.append(ScenarioPhase.PASSED)
        return ScenarioOutcome(passed=True, state=state, steps_run=tuple(steps_run), phases=tuple(phases))

    def benchmark(
        self,
        state: ScenarioState,
        operation: str,
        contract: WorkloadContract,
        target_count: int,
    ) -> ScenarioState:
        """
        Benchmark *contract* and return a snapshot holding its outcome.

        The new snapshot records the result, the item count, the operation
        name and every error (structural first).  Errors do not fail the
        step; the "without error" assertion reports them.
        """
        aggregator = self.runner.new_aggregator(contract)
        run = self.runner.run(contract, aggregator)
        errors = run.all_errors
        if errors:
            logger.warning(
                "%s operation finished with %d error(s) (%d dropped); first: %s",
                operation,
                len(errors),
                run.dropped_errors,
                errors[0],
            )
        return state.with_values(
            {
                StateKey.BENCHMARK_RESULT: run.result,
                StateKey.TARGET_COUNT: target_count,
                StateKey.OPERATION: operation,
                StateKey.ERRORS: errors,
                StateKey.DROPPED_ERRORS: run.dropped_errors,
            }
        )
