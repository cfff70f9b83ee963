"""
Status bookkeeping for bosses and the player.

Merge-on-insert: adding a status whose id already exists on the same target
sums the stacks and accumulates the duration instead of adding a second
entry. Durations are removed at <= 0; a status without a duration lasts
until consumed.

Trigger points:
- boss burn:      ticks on every hit call (damage = stacks, duration - 1)
- boss chill:     a timed chill negates a whiff counterattack, duration - 1
- player curse:   duration - 1 per whiff
- player vision:  duration - 1 per call
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..content.events import StatusGrant
from ..content.statuses import BURN, CHILL, StatusTarget, WILD_MAGIC_STATUSES
from ..state.rng import SeededRng
from ..state.run import RunState, StatusEffectState

logger = logging.getLogger(__name__)

WILD_MAGIC_BOSS_SIDE = 0.5


def add_status(collection: List[StatusEffectState], status: StatusEffectState) -> StatusEffectState:
    """Insert or merge ``status`` into ``collection``; returns the live entry."""
    for existing in collection:
        if existing.id == status.id:
            existing.stacks += status.stacks
            if status.duration:
                existing.duration = (existing.duration or 0) + status.duration
            return existing
    collection.append(status)
    return status


def grant_status(run: RunState, grant: StatusGrant) -> StatusEffectState:
    """Apply a StatusGrant to the right collection and count it in metrics."""
    collection = run.boss.statuses if grant.target == StatusTarget.BOSS else run.player.statuses
    entry = add_status(
        collection,
        StatusEffectState(id=grant.id, stacks=grant.stacks, target=grant.target, duration=grant.duration),
    )
    run.metrics.statuses_applied += grant.stacks
    return entry


def remove_status(collection: List[StatusEffectState], status_id: str) -> None:
    collection[:] = [s for s in collection if s.id != status_id]


def tick_duration(collection: List[StatusEffectState], status_id: str) -> Optional[StatusEffectState]:
    """
    Decrement a timed status by one; drop it at 0.

    Statuses without a duration are left alone. Returns the entry if it
    survives.
    """
    for status in collection:
        if status.id != status_id:
            continue
        if status.duration is None:
            return status
        status.duration -= 1
        if status.duration <= 0:
            remove_status(collection, status_id)
            return None
        return status
    return None


def tick_boss_burn(run: RunState) -> int:
    """Burn deals its stacks as damage and loses a turn. Returns damage dealt."""
    burn = run.boss.get_status(BURN)
    if burn is None:
        return 0
    damage = min(run.boss.hp, burn.stacks)
    run.boss.hp = max(0, run.boss.hp - burn.stacks)
    burn.duration = (burn.duration if burn.duration is not None else burn.stacks) - 1
    if burn.duration <= 0:
        remove_status(run.boss.statuses, BURN)
    if damage:
        run.log.append(f"Burn scorches the boss for {damage}.")
    return damage


def consume_chill(run: RunState) -> bool:
    """
    Spend one turn of boss chill. Returns True when a counterattack is negated.

    Only a timed chill with turns left negates; an untimed one (wild magic)
    is inert.
    """
    chill = run.boss.get_status(CHILL)
    if chill is None or chill.duration is None or chill.duration <= 0:
        return False
    tick_duration(run.boss.statuses, CHILL)
    return True


def apply_wild_magic(run: RunState, rng: SeededRng, chance: float) -> Optional[StatusGrant]:
    """
    Wild magic: with ``chance``, a random status lands on the boss or the player.
    """
    if chance <= 0 or rng.next() >= chance:
        return None
    status_id = rng.pick(WILD_MAGIC_STATUSES)
    if rng.next() >= WILD_MAGIC_BOSS_SIDE:
        grant = StatusGrant(StatusTarget.BOSS, status_id, stacks=1)
        run.log.append(f"Wild magic inflicts {status_id} on the boss.")
    else:
        grant = StatusGrant(StatusTarget.PLAYER, status_id, stacks=1)
        run.log.append(f"Wild magic afflicts you with {status_id}.")
    grant_status(run, grant)
    logger.debug("Wild magic rolled %s on %s", status_id, grant.target.value)
    return grant
