"""
Item Handler - consumable activation.

A consumable applies every effect its tags name, each scaled by the item's
rarity power ``p``:

    heal        +p hearts (+1 more in the Aurora Sanctum)
    coins       +3p coins
    damage      8p damage to the boss
    dauber      +p free daubers
    combo       +p combo (capped)
    vulnerable  p vulnerable stacks on the boss, duration 2

One stack is consumed per use and empty stacks leave the inventory.
Relics, modifiers and curses are permanently equipped and cannot be used.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..content.balance import BalanceData
from ..content.events import StatusGrant
from ..content.items import ItemType
from ..content.statuses import StatusTarget, VULNERABLE
from ..state.meta import MetaState, update_codex
from ..state.run import RunState
from .statuses import grant_status

COINS_PER_POWER = 3
DAMAGE_PER_POWER = 8
VULNERABLE_DURATION = 2
AURORA_BIOME_ID = "aurora"


@dataclass
class ItemResult:
    """Outcome of using an item."""
    success: bool
    item_id: str
    boss_damage: int = 0
    message: str = ""


class ItemHandler:
    """Consumable activation on an already-copied RunState."""

    @staticmethod
    def use_item(meta: MetaState, run: RunState, item_id: str, balance: BalanceData) -> ItemResult:
        entry = run.get_inventory(item_id)
        if entry is None or entry.quantity <= 0:
            message = "You don't have that item."
            run.log.append(message)
            return ItemResult(success=False, item_id=item_id, message=message)

        item = entry.definition
        if item.type != ItemType.CONSUMABLE:
            message = f"{item.name} is a passive relic and stays equipped."
            run.log.append(message)
            return ItemResult(success=False, item_id=item_id, message=message)

        power = item.power
        player = run.player
        effects = []
        boss_damage = 0

        if item.has_tag("heal"):
            heal = power + (1 if run.biome_id == AURORA_BIOME_ID else 0)
            player.hearts += heal
            effects.append(f"restores {heal} heart{'s' if heal > 1 else ''}")
        if item.has_tag("coins"):
            coins = COINS_PER_POWER * power
            player.coins += coins
            run.metrics.coins_earned += coins
            effects.append(f"grants {coins} coins")
        if item.has_tag("damage") and run.boss.hp > 0:
            boss_damage = min(run.boss.hp, DAMAGE_PER_POWER * power)
            run.boss.hp -= boss_damage
            run.metrics.damage_dealt += boss_damage
            effects.append(f"deals {boss_damage} damage")
        if item.has_tag("dauber"):
            player.free_daubers += power
            effects.append(f"grants {power} free dauber{'s' if power > 1 else ''}")
        if item.has_tag("combo"):
            player.combo = min(balance.combo.max, player.combo + power)
            effects.append(f"adds {power} combo")
        if item.has_tag("vulnerable"):
            grant_status(run, StatusGrant(StatusTarget.BOSS, VULNERABLE, stacks=power,
                                          duration=VULNERABLE_DURATION))
            effects.append("leaves the boss vulnerable")

        entry.quantity -= 1
        if entry.quantity <= 0:
            run.inventory = [i for i in run.inventory if i.quantity > 0]

        message = f"{item.name} {', '.join(effects)}." if effects else f"{item.name} fizzles."
        run.log.append(message)
        update_codex(meta, run)
        return ItemResult(success=True, item_id=item_id, boss_damage=boss_damage, message=message)
