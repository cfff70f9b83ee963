"""
Shop Handler - purchases, rerolls and skipping.

Handles all shop interactions on an already-copied RunState:
- Buying an offer (unlock, affordability and sold checks)
- Inventory stacking (same item id shares one stack)
- Free Space Charm's on-purchase board mark
- Rerolling offers for coins
- Skipping (closing) the shop for the floor

Every refusal appends one log line and leaves the rest of the run untouched;
nothing here raises for gameplay conditions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..content.items import FREE_SPACE_CHARM, ItemDefinition
from ..generation.board import free_index
from ..generation.shop import generate_shop, get_reroll_cost
from ..state.meta import MetaState, update_codex
from ..state.rng import SeededRng
from ..state.run import InventoryItem, RunState

SHOP_CLOSED = "The shop is closed."
CHARMED_STATUS = "charmed"


@dataclass
class ShopResult:
    """Result of a shop transaction."""
    success: bool
    item_id: str = ""
    coins_spent: int = 0
    message: str = ""


def add_to_inventory(run: RunState, item: ItemDefinition) -> InventoryItem:
    """Add one of ``item``, stacking onto an existing entry."""
    entry = run.get_inventory(item.id)
    if entry is not None:
        entry.quantity += 1
        return entry
    entry = InventoryItem(definition=item, quantity=1)
    run.inventory.append(entry)
    return entry


class ShopHandler:
    """
    Shop transitions.

    Usage with GameService:
        next_run = run.copy()
        result = ShopHandler.buy_item(meta, next_run, item_id)
    """

    @staticmethod
    def _refuse(run: RunState, message: str, item_id: str = "") -> ShopResult:
        run.log.append(message)
        return ShopResult(success=False, item_id=item_id, message=message)

    @staticmethod
    def buy_item(meta: MetaState, run: RunState, item_id: str) -> ShopResult:
        if not run.shop_available:
            return ShopHandler._refuse(run, SHOP_CLOSED, item_id)

        offer = next((o for o in run.shop if o.item.id == item_id), None)
        if offer is None or offer.locked:
            return ShopHandler._refuse(run, "That item is not for sale.", item_id)
        if offer.sold:
            return ShopHandler._refuse(run, f"{offer.item.name} is already sold.", item_id)
        if not meta.is_item_unlocked(item_id):
            return ShopHandler._refuse(run, "Item is still locked. Progress further to unlock it.", item_id)
        if run.player.coins < offer.price:
            return ShopHandler._refuse(run, "Not enough coins.", item_id)

        run.player.coins -= offer.price
        offer.sold = True
        add_to_inventory(run, offer.item)
        run.metrics.items_collected += 1
        update_codex(meta, run, item_id)
        run.log.append(f"Purchased {offer.item.name}.")

        if item_id == FREE_SPACE_CHARM:
            center = run.board[free_index(run.board_size)]
            center.marked = True
            center.status = CHARMED_STATUS
            run.log.append("The Free Space Charm anchors the center cell.")

        return ShopResult(success=True, item_id=item_id, coins_spent=offer.price,
                          message=f"Purchased {offer.item.name}.")

    @staticmethod
    def reroll_shop(
        meta: MetaState,
        run: RunState,
        rng: SeededRng,
        items: Iterable[ItemDefinition],
    ) -> ShopResult:
        if not run.shop_available:
            return ShopHandler._refuse(run, SHOP_CLOSED)
        cost = get_reroll_cost(run.inventory)
        if run.player.coins < cost:
            return ShopHandler._refuse(run, "Not enough coins to reroll.")

        run.player.coins -= cost
        floor = run.floor_index + 1 if run.awaiting_advance else run.floor_index
        run.shop = generate_shop(meta, rng, items, run.biome, floor, run.inventory, run.difficulty)
        run.log.append("Shop rerolled.")
        return ShopResult(success=True, coins_spent=cost, message="Shop rerolled.")

    @staticmethod
    def skip_shop(run: RunState) -> ShopResult:
        if not run.shop_available:
            return ShopHandler._refuse(run, SHOP_CLOSED)
        for offer in run.shop:
            offer.locked = True
        run.shop_available = False
        run.log.append("You ignore the shop for now.")
        return ShopResult(success=True, message="Left the shop")
