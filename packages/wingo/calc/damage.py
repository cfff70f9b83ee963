"""
Damage Calculator - single source of truth for call, counter and bomb damage.

Design principles:
1. Pure functions - read the run, never mutate it
2. Status infliction is returned, not applied; the caller applies it
3. Clear calculation order, additive steps before the multiplier

Call damage order:
1. Base: matched * hit + combo * combo_hit_bonus   (combo before this call's +1)
2. Line tiers (additive): >=1 single, >=2 double, >=3 triple, >=4 bingo
3. Passive relics:
   - damage-tagged: + rarity power per stack
   - combo-tagged:  + matched per stack
   - Arcane Dauber: + 2 per combo
4. Cursed Brand: * 1.2 (half-up rounding), always inflicts vulnerable
5. Floor at 0, half-up rounding

Boss and player statuses never enter either formula; they are inflicted
and tracked, and only burn and chill act during call resolution.

Counter damage (whiff and enrage):
    max(1, boss damage + encounter bonus - shield relic power)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Tuple

from ..content.balance import AdaptiveConfig, BalanceData
from ..content.events import StatusGrant
from ..content.items import ARCANE_DAUBER, CURSED_BRAND, EMBERSHARD, FROST_LANTERN
from ..content.statuses import BURN, CHILL, StatusTarget, VULNERABLE
from ..state.run import InventoryItem, RunState

__all__ = [
    "CallDamage",
    "compute_call_damage",
    "compute_counter_damage",
    "compute_bomb_damage",
    "round_half_up",
    "passive_power",
    "passive_presence_power",
    "line_bonus",
    "boss_max_hp",
    "adjust_threat",
    # Constants
    "ARCANE_PER_COMBO",
    "CURSED_MULT",
    "BOMB_FRACTION",
    "BOSS_HP_PER_FLOOR",
]


# =============================================================================
# CONSTANTS
# =============================================================================

ARCANE_PER_COMBO = 2

# Cursed Brand: damage multiplier plus a vulnerable stack on every hit
CURSED_MULT = 1.2
CURSED_VULNERABLE = StatusGrant(StatusTarget.BOSS, VULNERABLE, stacks=1, duration=2)

EMBERSHARD_BURN = StatusGrant(StatusTarget.BOSS, BURN, stacks=3, duration=3)
FROST_LANTERN_CHILL = StatusGrant(StatusTarget.BOSS, CHILL, stacks=1, duration=2)

BOMB_FRACTION = 0.25
BOSS_HP_PER_FLOOR = 0.18

MIN_COUNTER_DAMAGE = 1


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (not banker's rounding)."""
    return int(math.floor(value + 0.5))


# =============================================================================
# RELIC SUMS
# =============================================================================

def passive_power(inventory: Iterable[InventoryItem], *tags: str) -> int:
    """Sum of rarity power * quantity over passives carrying any of ``tags``."""
    return sum(
        entry.definition.power * entry.quantity
        for entry in inventory
        if entry.definition.is_passive and any(entry.definition.has_tag(t) for t in tags)
    )


def passive_presence_power(inventory: Iterable[InventoryItem], tag: str) -> int:
    """Sum of rarity power over distinct passives with ``tag``; quantity ignored."""
    return sum(
        entry.definition.power
        for entry in inventory
        if entry.definition.is_passive and entry.definition.has_tag(tag)
    )


def _passive_stacks(inventory: Iterable[InventoryItem], tag: str) -> int:
    return sum(
        entry.quantity
        for entry in inventory
        if entry.definition.is_passive and entry.definition.has_tag(tag)
    )


# =============================================================================
# CALL DAMAGE
# =============================================================================

@dataclass(frozen=True)
class CallDamage:
    """Result of a call-damage calculation."""
    total: int
    base: int = 0
    line_bonus: int = 0
    relic_bonus: int = 0
    inflicted: Tuple[StatusGrant, ...] = field(default_factory=tuple)


def line_bonus(lines: int, balance: BalanceData) -> int:
    """Additive tier bonus for simultaneously completed lines."""
    tiers = balance.damage
    bonus = 0
    if lines >= 1:
        bonus += tiers.line_single
    if lines >= 2:
        bonus += tiers.line_double
    if lines >= 3:
        bonus += tiers.line_triple
    if lines >= 4:
        bonus += tiers.bingo
    return bonus


def compute_call_damage(run: RunState, matched: int, lines: int, balance: BalanceData) -> CallDamage:
    """
    Damage for a call that matched ``matched`` cells with ``lines`` complete lines.

    Args:
        run: Run state before this call's combo increment
        matched: Number of cells marked by the call
        lines: Lines complete after marking
        balance: Balance table

    Returns:
        CallDamage with the final total and statuses to inflict on the boss
    """
    combo = run.player.combo
    base = matched * balance.damage.hit + combo * balance.combo.hit_bonus
    bonus_lines = line_bonus(lines, balance)

    inventory = run.inventory
    relic = passive_power(inventory, "damage")
    relic += matched * _passive_stacks(inventory, "combo")
    if run.has_item(ARCANE_DAUBER):
        relic += combo * ARCANE_PER_COMBO

    damage: float = base + bonus_lines + relic

    inflicted = []
    if lines > 0 and run.has_item(EMBERSHARD):
        inflicted.append(EMBERSHARD_BURN)
    if lines > 0 and run.has_item(FROST_LANTERN):
        inflicted.append(FROST_LANTERN_CHILL)
    if run.has_item(CURSED_BRAND):
        damage = round_half_up(damage * CURSED_MULT)
        inflicted.append(CURSED_VULNERABLE)

    return CallDamage(
        total=max(0, round_half_up(damage)),
        base=base,
        line_bonus=bonus_lines,
        relic_bonus=relic,
        inflicted=tuple(inflicted),
    )


# =============================================================================
# INCOMING / MISC DAMAGE
# =============================================================================

def compute_counter_damage(run: RunState) -> int:
    """Damage the boss deals on a whiff or an enrage. Never below 1."""
    damage = run.boss.definition.damage
    if run.encounter_modifier:
        damage += run.encounter_modifier.definition.effect.boss_damage_bonus
    damage -= passive_power(run.inventory, "shield")
    return max(MIN_COUNTER_DAMAGE, damage)


def compute_bomb_damage(max_hp: int) -> int:
    return round_half_up(max_hp * BOMB_FRACTION)


def boss_max_hp(base_hp: int, floor: int, threat: float) -> int:
    """round(base_hp * (1 + floor * 0.18) * threat)"""
    return round_half_up(base_hp * (1 + floor * BOSS_HP_PER_FLOOR) * threat)


# =============================================================================
# ADAPTIVE THREAT
# =============================================================================

def adjust_threat(threat: float, calls_made: int, call_cap: int, adaptive: AdaptiveConfig) -> float:
    """
    New adaptive threat after a boss kill.

    Efficient kills (low calls/cap ratio) lower threat, never below 1.0; slow
    kills raise it; the middle band leaves it alone.
    """
    ratio = calls_made / max(1, call_cap)
    low, high = adaptive.thresholds
    if ratio < low:
        return max(1.0, threat - adaptive.player_reward)
    if ratio > high:
        return threat + adaptive.boss_multiplier
    return threat
