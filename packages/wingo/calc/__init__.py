"""
Calculation utilities for WINGO runs.

Contains:
- Damage calculation (pure functions, no side effects)
- Adaptive threat and boss HP scaling
"""

from .damage import (
    CallDamage,
    compute_call_damage,
    compute_counter_damage,
    compute_bomb_damage,
    line_bonus,
    passive_power,
    passive_presence_power,
    round_half_up,
    boss_max_hp,
    adjust_threat,
)

__all__ = [
    "CallDamage",
    "compute_call_damage",
    "compute_counter_damage",
    "compute_bomb_damage",
    "line_bonus",
    "passive_power",
    "passive_presence_power",
    "round_half_up",
    "boss_max_hp",
    "adjust_threat",
]
