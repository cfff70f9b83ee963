"""
Event Handler - resolving inter-floor event choices.

Resolution order:
1. The event must be offered on this floor and not yet resolved
2. The option must exist and its requirements hold (coins, item possession)
3. Effects apply in listed order
4. The event is marked resolved; resolving it again only logs a refusal

Effects can write to the meta ledger (biome/item unlocks, codex) as well as
the run. Hearts lost here can end the run; the caller checks for that.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from ..content.balance import BalanceData
from ..content.events import EventDefinition, EventEffect
from ..content.items import ItemDefinition
from ..generation.shop import generate_shop
from ..state.meta import MetaState, update_codex
from ..state.rng import SeededRng
from ..state.run import RunState
from .shop_handler import add_to_inventory
from .statuses import grant_status


@dataclass
class EventChoiceResult:
    """Result of making an event choice."""
    event_id: str
    option_id: str
    success: bool = False

    coins_change: int = 0
    hearts_change: int = 0
    items_gained: List[str] = field(default_factory=list)
    statuses_applied: List[str] = field(default_factory=list)
    unlocked: List[str] = field(default_factory=list)
    shop_rerolled: bool = False

    description: str = ""


class EventHandler:
    """
    Event resolution against a fixed event and item table.

    Responsibilities:
    - Validate the event, the option and its requirements
    - Apply each effect to the run (and the ledger for unlocks)
    - Mark the event resolved
    """

    def __init__(
        self,
        events: Mapping[str, EventDefinition],
        items: Iterable[ItemDefinition],
        balance: BalanceData,
    ):
        self.events = events
        self.items = tuple(items)
        self._items_by_id = {item.id: item for item in self.items}
        self.balance = balance

    def resolve(
        self,
        meta: MetaState,
        run: RunState,
        event_id: str,
        option_id: str,
        rng: SeededRng,
    ) -> EventChoiceResult:
        """
        Resolve one option of an offered event on an already-copied run.

        Args:
            meta: Ledger (unlocks and codex may be appended to)
            run: Run state to modify
            event_id: Id of an event offered on this floor
            option_id: Option within that event
            rng: Run RNG (only consumed by a shop reroll effect)

        Returns:
            EventChoiceResult; success False means a refusal was logged
        """
        result = EventChoiceResult(event_id=event_id, option_id=option_id)

        active = run.get_event(event_id)
        definition = self.events.get(event_id)
        if active is None or definition is None:
            return self._refuse(run, result, "That event is not available.")
        if active.resolved:
            return self._refuse(run, result, f"{definition.name} has already been resolved.")

        option = definition.get_option(option_id)
        if option is None:
            return self._refuse(run, result, "That choice is not available.")
        if option.requires.coins and run.player.coins < option.requires.coins:
            return self._refuse(run, result, "You cannot afford that choice.")
        if option.requires.item and not run.has_item(option.requires.item):
            return self._refuse(run, result, "You lack the required item.")

        for effect in option.effects:
            self.apply_effect(meta, run, effect, rng, result)

        active.resolved = True
        result.success = True
        result.description = f"{definition.name}: {option.label}."
        run.log.append(result.description)
        return result

    def _refuse(self, run: RunState, result: EventChoiceResult, message: str) -> EventChoiceResult:
        run.log.append(message)
        result.description = message
        return result

    def _get_item(self, item_id: str) -> Optional[ItemDefinition]:
        return self._items_by_id.get(item_id)

    def apply_effect(
        self,
        meta: MetaState,
        run: RunState,
        effect: EventEffect,
        rng: SeededRng,
        result: EventChoiceResult,
    ) -> None:
        """Apply a single effect entry; unset fields are skipped."""
        player = run.player

        if effect.coins:
            before = player.coins
            player.coins = max(0, player.coins + effect.coins)
            run.metrics.coins_earned += max(0, effect.coins)
            result.coins_change += player.coins - before

        if effect.hearts:
            player.hearts += effect.hearts
            result.hearts_change += effect.hearts

        if effect.combo:
            player.combo = min(self.balance.combo.max, player.combo + effect.combo)

        if effect.free_daubers:
            player.free_daubers += effect.free_daubers

        if effect.item:
            item = self._get_item(effect.item)
            if item is not None:
                add_to_inventory(run, item)
                run.metrics.items_collected += 1
                update_codex(meta, run, item.id)
                result.items_gained.append(item.id)

        if effect.status:
            grant_status(run, effect.status)
            result.statuses_applied.append(effect.status.id)

        if effect.unlock_biome and meta.unlock_biome(effect.unlock_biome):
            result.unlocked.append(effect.unlock_biome)
            run.log.append(f"Unlocked biome: {effect.unlock_biome}.")

        if effect.unlock_item and meta.unlock_item(effect.unlock_item):
            result.unlocked.append(effect.unlock_item)
            run.log.append(f"Unlocked item: {effect.unlock_item}.")

        if effect.reroll_shop:
            floor = run.floor_index + 1 if run.awaiting_advance else run.floor_index
            run.shop = generate_shop(
                meta, rng, self.items, run.biome, floor, run.inventory, run.difficulty,
            )
            result.shop_rerolled = True
