"""
Placeholder game workloads.

Each action simulates its per-item cost by sleeping and fails, rarely
and at random, to exercise the harness's error paths.  Actions follow
one contract:

- the first argument is a positive item count;
- failures are *returned* as :class:`GameEngineError`, never raised;
- the random source is passed in, so tests can force success or failure.

An optional ``record`` callable receives per-item errors when
``item_failure_odds`` is non-zero.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Base per-item cost of each action, in seconds.
FIGHT_WORK_PER_ENEMY = 100e-6
SPAWN_WORK_PER_GUARD = 50e-6
HIT_WORK_PER_HIT = 20e-6

DEFAULT_FAILURE_ODDS = 1000

Sleep = Callable[[float], None]
Record = Callable[[Exception], None]


class GameEngineError(Exception):
    """A simulated action did not complete."""


def simulate_work(duration: float, sleep: Sleep = time.sleep) -> None:
    """Spend *duration* seconds standing in for real game logic."""
    if duration > 0:
        sleep(duration)


def rolls_failure(rng: random.Random, odds: int) -> bool:
    """Return True once in *odds* draws; never when *odds* is 0 or less."""
    if odds <= 0:
        return False
    return rng.randrange(odds) == 0


def _process_items(
    count: int,
    work_per_item: float,
    rng: random.Random,
    item_failure_odds: int,
    record: Record | None,
    describe: Callable[[int], str],
    sleep: Sleep,
) -> None:
    for index in range(count):
        simulate_work(work_per_item, sleep)
        if record is not None and rolls_failure(rng, item_failure_odds):
            record(GameEngineError(describe(index)))


def fight_enemies(
    num_enemies: int,
    player_level: int,
    *,
    rng: random.Random | None = None,
    failure_odds: int = DEFAULT_FAILURE_ODDS,
    item_failure_odds: int = 0,
    record: Record | None = None,
    sleep: Sleep = time.sleep,
) -> GameEngineError | None:
    """
    Simulate the player fighting *num_enemies* enemies.

    Higher levels fight faster: each enemy costs ``100µs / player_level``.
    """
    if num_enemies <= 0:
        return GameEngineError(f"numEnemies must be positive, got {num_enemies}")
    if player_level <= 0:
        return GameEngineError(f"playerLevel must be positive, got {player_level}")
    rng = rng or random.Random()

    _process_items(
        num_enemies,
        FIGHT_WORK_PER_ENEMY / player_level,
        rng,
        item_failure_odds,
        record,
        lambda index: f"enemy {index + 1} shrugged off the blow",
        sleep,
    )
    if rolls_failure(rng, failure_odds):
        return GameEngineError(
            f"a mystical force interrupted the battle after {num_enemies} enemies in one iteration"
        )
    return None


def spawn_guards(
    num_guards: int,
    *,
    rng: random.Random | None = None,
    failure_odds: int = DEFAULT_FAILURE_ODDS,
    item_failure_odds: int = 0,
    record: Record | None = None,
    sleep: Sleep = time.sleep,
) -> GameEngineError | None:
    """Simulate spawning *num_guards* guards (AI setup, pathfinding)."""
    if num_guards <= 0:
        return GameEngineError(f"numGuards must be positive, got {num_guards}")
    rng = rng or random.Random()

    _process_items(
        num_guards,
        SPAWN_WORK_PER_GUARD,
        rng,
        item_failure_odds,
        record,
        lambda index: f"guard {index + 1} spawned inside a wall",
        sleep,
    )
    if rolls_failure(rng, failure_odds):
        return GameEngineError(
            f"a magical anomaly prevented {num_guards} guards from spawning correctly in one iteration"
        )
    return None


def hit_wall(
    num_hits: int,
    *,
    rng: random.Random | None = None,
    failure_odds: int = DEFAULT_FAILURE_ODDS,
    item_failure_odds: int = 0,
    record: Record | None = None,
    sleep: Sleep = time.sleep,
) -> GameEngineError | None:
    """Simulate the player hitting a wall *num_hits* times (collision + physics)."""
    if num_hits <= 0:
        return GameEngineError(f"numHits must be positive, got {num_hits}")
    rng = rng or random.Random()

    _process_items(
        num_hits,
        HIT_WORK_PER_HIT,
        rng,
        item_failure_odds,
        record,
        lambda index: f"hit {index + 1} passed through the wall",
        sleep,
    )
    if rolls_failure(rng, failure_odds):
        return GameEngineError(
            f"the wall phased out of existence during collision for {num_hits} hits in one iteration"
        )
    return None
