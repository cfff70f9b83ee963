"""
Floor & encounter modifier rolls.

Floor modifiers (any floor):
- floor 0: 40% chance of none, then the general roll below
- every floor: 40% chance of none, else a uniform pick

Encounter modifiers (only on the difficulty's negative_modifier_floors):
- always a uniform pick from the encounter table

Rolled definitions are immutable snapshots stored on the run, so content
edits never reach a run in progress.
"""

from __future__ import annotations

from typing import Optional

from ..content.balance import BalanceData, DifficultySettings, FloorModifierDefinition
from ..state.rng import SeededRng
from ..state.run import EncounterModifierState

NO_MODIFIER_CHANCE = 0.4


def roll_floor_modifier(
    rng: SeededRng,
    floor: int,
    balance: BalanceData,
) -> Optional[FloorModifierDefinition]:
    modifiers = balance.floor_modifiers
    if not modifiers:
        return None
    if floor == 0 and rng.next() < NO_MODIFIER_CHANCE:
        return None
    if rng.next() < NO_MODIFIER_CHANCE:
        return None
    return rng.pick(modifiers)


def is_negative_floor(difficulty: DifficultySettings, floor: int) -> bool:
    return floor in difficulty.negative_modifier_floors


def roll_encounter_modifier(
    rng: SeededRng,
    floor: int,
    difficulty: DifficultySettings,
    balance: BalanceData,
) -> Optional[EncounterModifierState]:
    """Roll an encounter modifier, or None when the floor isn't designated."""
    if not is_negative_floor(difficulty, floor) or not balance.encounter_modifiers:
        return None
    return EncounterModifierState.start(rng.pick(balance.encounter_modifiers))
