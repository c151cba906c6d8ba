"""
Step bindings for the game performance scenarios.

Given steps store player attributes, When steps benchmark one of the
:mod:`gameengine` actions, and Then steps compare the stored timing with
the bound stated in the scenario.  Every function receives the running
:class:`~harness.orchestrator.StepOrchestrator` and the current
:class:`~harness.state.ScenarioState`, and returns the next state (or
``None`` when the state is unchanged).
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from gameengine import fight_enemies, hit_wall, spawn_guards
from harness.benchmark import BenchmarkResult
from harness.errors import OperationErrorsFound, StateLinkageError, ValidationError
from harness.orchestrator import StepOrchestrator
from harness.registry import StepRegistry
from harness.settings import BenchmarkSettings, resolve_settings
from harness.state import ScenarioState, StateKey
from harness.thresholds import check_per_item, check_per_operation
from harness.workload import Recorder, WorkloadContract, validate_repetitions

logger = logging.getLogger(__name__)

FIGHT = "fight"
GUARD_SPAWNING = "guard spawning"
HIT_WALL = "hit wall"

registry = StepRegistry()


def build_orchestrator(settings: BenchmarkSettings | None = None, **kwargs) -> StepOrchestrator:
    """Create an orchestrator bound to the game step registry."""
    return StepOrchestrator.from_settings(registry, settings or resolve_settings(), **kwargs)


def _workload(
    ctx: StepOrchestrator,
    name: str,
    count: int,
    action: Callable[..., Exception | None],
    *args: int,
) -> WorkloadContract:
    settings = ctx.settings

    def execute(record: Recorder) -> Exception | None:
        return action(
            count,
            *args,
            rng=ctx.rng,
            failure_odds=settings.failure_odds,
            item_failure_odds=settings.item_failure_odds,
            record=record,
            sleep=ctx.sleep,
        )

    return WorkloadContract(name=name, repetitions=count, execute=execute)


def _require_operation(state: ScenarioState, operation: str) -> None:
    recorded = state.require(StateKey.OPERATION)
    if recorded != operation:
        raise StateLinkageError(
            f"expected results of a '{operation}' operation, but the last operation was '{recorded}'"
        )


def _last_result(state: ScenarioState, operation: str) -> tuple[BenchmarkResult, int]:
    _require_operation(state, operation)
    return state.require(StateKey.BENCHMARK_RESULT), state.require(StateKey.TARGET_COUNT)


# -- Given -----------------------------------------------------------------


@registry.given(r"the player has a level of (?P<level>-?\d+)", level=int)
def player_has_level(ctx: StepOrchestrator, state: ScenarioState, level: int) -> ScenarioState:
    return state.with_value(StateKey.PLAYER_LEVEL, level)


@registry.given(r"the player is in the '(?P<area>[^']*)' area")
def player_is_in_area(ctx: StepOrchestrator, state: ScenarioState, area: str) -> ScenarioState:
    return state.with_value(StateKey.AREA, area)


@registry.given(r"the player is moving at (?P<speed>\w+) speed")
def player_is_moving_at_speed(ctx: StepOrchestrator, state: ScenarioState, speed: str) -> ScenarioState:
    return state.with_value(StateKey.SPEED, speed)


# -- When ------------------------------------------------------------------


@registry.when(r"the player fights (?P<count>-?\d+) enemies", count=int)
def player_fights_enemies(ctx: StepOrchestrator, state: ScenarioState, count: int) -> ScenarioState:
    level = state.require(StateKey.PLAYER_LEVEL)
    validate_repetitions(count, "number of enemies")
    if level <= 0:
        raise ValidationError(f"player level must be positive, got {level}")
    contract = _workload(ctx, "FightEnemies", count, fight_enemies, level)
    return ctx.benchmark(state, FIGHT, contract, count)


@registry.when(r"(?P<count>-?\d+) guards spawn around the player", count=int)
@registry.when(r"(?P<count>-?\d+) guard spawns near the player", count=int)
def guards_spawn(ctx: StepOrchestrator, state: ScenarioState, count: int) -> ScenarioState:
    validate_repetitions(count, "number of guards")
    contract = _workload(ctx, "SpawnGuards", count, spawn_guards)
    return ctx.benchmark(state, GUARD_SPAWNING, contract, count)


@registry.when(r"the player hits a wall (?P<count>-?\d+) times?", count=int)
def player_hits_wall(ctx: StepOrchestrator, state: ScenarioState, count: int) -> ScenarioState:
    validate_repetitions(count, "number of hits")
    contract = _workload(ctx, "HitWall", count, hit_wall)
    return ctx.benchmark(state, HIT_WALL, contract, count)


# -- Then ------------------------------------------------------------------


@registry.then(
    r"the average time per enemy defeated should be less than (?P<ms>\d+) milliseconds",
    ms=int,
)
def average_time_per_enemy_defeated(ctx: StepOrchestrator, state: ScenarioState, ms: int) -> None:
    result, target_count = _last_result(state, FIGHT)
    check_per_item(
        result,
        target_count,
        ms,
        metric="Average Time Per Enemy Defeated",
        item_label="enemy",
        item_plural="enemies",
    )


@registry.then(
    r"the average impact processing time should be less than (?P<ms>\d+) milliseconds",
    ms=int,
)
def average_impact_processing_time(ctx: StepOrchestrator, state: ScenarioState, ms: int) -> None:
    result, target_count = _last_result(state, HIT_WALL)
    check_per_item(
        result,
        target_count,
        ms,
        metric="Average Impact Processing Time Per Hit",
        item_label="hit",
    )


@registry.then(r"the player reacts to all guards within (?P<seconds>\d+) seconds?", seconds=int)
def player_reacts_to_all_guards(ctx: StepOrchestrator, state: ScenarioState, seconds: int) -> None:
    result, target_count = _last_result(state, GUARD_SPAWNING)
    check_per_operation(
        result,
        float(seconds),
        metric="Total Guard Spawning & Reaction Time",
        description="reaction to all guards (spawning operation)",
        target_count=target_count,
    )


@registry.then(
    r"all (?P<operation>fight|guard spawning|hit wall) operations should complete without error"
)
def all_operations_complete_without_error(ctx: StepOrchestrator, state: ScenarioState, operation: str) -> None:
    _require_operation(state, operation)
    errors = state.require(StateKey.ERRORS)
    if not errors:
        return

    dropped, _ = state.find(StateKey.DROPPED_ERRORS)
    result, _ = state.find(StateKey.BENCHMARK_RESULT)
    print(f"Found {len(errors)} background error(s) for '{operation}' operations:")
    for index, error in enumerate(errors, start=1):
        print(f"    Error {index}: {error}")

    message = (
        f"expected all '{operation}' operations to complete without error, "
        f"but found {len(errors)} errors. First error: {errors[0]}"
    )
    if dropped:
        message += f" ({dropped} more dropped)"
    if result is not None and result.failed_calls:
        message += f" [{result.failed_calls} of {result.total_calls} calls failed]"
    raise OperationErrorsFound(message, tuple(errors)) from errors[0]
