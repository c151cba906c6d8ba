"""
Simulated game actions used as benchmark workloads.

The actions only consume wall-clock time and occasionally fail; they
stand in for real combat, spawning and collision code.
"""

from gameengine.engine import (
    GameEngineError,
    fight_enemies,
    hit_wall,
    rolls_failure,
    simulate_work,
    spawn_guards,
)

__all__ = [
    "GameEngineError",
    "fight_enemies",
    "hit_wall",
    "rolls_failure",
    "simulate_work",
    "spawn_guards",
]
