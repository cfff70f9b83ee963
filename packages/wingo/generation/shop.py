"""
WINGO - Shop & Event Generation

Shop Structure:
- 3 offers, 4 from floor index 2 onward
- Pool: globally unlocked items only
  - Curses never appear on floor 0
  - Items must share a tag with the biome's shop_tags, or be COMMON
    (a biome without shop_tags accepts everything)
- Pool is shuffled with the run RNG and the first N items are offered

Price Calculation:
- price = max(1, cost - discount), discounts stack:
  - 1 for Seer Lens itself
  - 1 for a vision item while another vision passive is owned
  - 1 for COMMON items on hard difficulty

Events:
- Two per floor, drawn without replacement from the biome's event pool
"""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ..content.balance import DifficultySettings
from ..content.bosses import BiomeDefinition
from ..content.items import ItemDefinition, ItemType, Rarity, SEER_LENS
from ..state.meta import MetaState
from ..state.rng import SeededRng
from ..state.run import ActiveEvent, InventoryItem, ShopOffer

SHOP_SIZE = 3
SHOP_SIZE_LATE = 4
SHOP_LATE_FLOOR = 2

REROLL_BASE_COST = 3

EVENTS_PER_FLOOR = 2

HARD_DIFFICULTY_ID = "hard"


def shop_size_for_floor(floor: int) -> int:
    return SHOP_SIZE_LATE if floor >= SHOP_LATE_FLOOR else SHOP_SIZE


def get_shop_discount(
    item: ItemDefinition,
    inventory: Sequence[InventoryItem],
    difficulty: DifficultySettings,
) -> int:
    """Total stacked discount for one item."""
    discount = 0
    if item.id == SEER_LENS:
        discount += 1
    if item.has_tag("vision") and any(
        entry.definition.is_passive
        and entry.definition.has_tag("vision")
        and entry.definition.id != item.id
        for entry in inventory
    ):
        discount += 1
    if difficulty.id == HARD_DIFFICULTY_ID and item.rarity == Rarity.COMMON:
        discount += 1
    return discount


def get_price(
    item: ItemDefinition,
    inventory: Sequence[InventoryItem],
    difficulty: DifficultySettings,
) -> int:
    return max(1, item.cost - get_shop_discount(item, inventory, difficulty))


def get_reroll_cost(inventory: Sequence[InventoryItem]) -> int:
    """Base reroll price, 1 less with Seer Lens."""
    if any(entry.definition.id == SEER_LENS for entry in inventory):
        return REROLL_BASE_COST - 1
    return REROLL_BASE_COST


def _shop_pool(
    meta: MetaState,
    items: Iterable[ItemDefinition],
    biome: BiomeDefinition,
    floor: int,
) -> List[ItemDefinition]:
    pool = []
    for item in items:
        if not meta.is_item_unlocked(item.id):
            continue
        if item.type == ItemType.CURSE and floor == 0:
            continue
        if biome.shop_tags and not (
            any(tag in biome.shop_tags for tag in item.tags) or item.rarity == Rarity.COMMON
        ):
            continue
        pool.append(item)
    return pool


def generate_shop(
    meta: MetaState,
    rng: SeededRng,
    items: Iterable[ItemDefinition],
    biome: BiomeDefinition,
    floor: int,
    inventory: Sequence[InventoryItem],
    difficulty: DifficultySettings,
) -> List[ShopOffer]:
    """
    Roll the offers for a floor.

    Args:
        meta: Ledger providing the unlocked item set
        rng: Run RNG (consumes one shuffle of the pool)
        items: Item table to draw from
        biome: Biome whose shop_tags filter the pool
        floor: Floor index the shop is for
        inventory: Current inventory, for vision discounts
        difficulty: Run difficulty, for the hard-mode discount

    Returns:
        Unsold, unlocked offers
    """
    pool = _shop_pool(meta, items, biome, floor)
    rng.shuffle(pool)
    return [
        ShopOffer(item=item, price=get_price(item, inventory, difficulty))
        for item in pool[:shop_size_for_floor(floor)]
    ]


def generate_events(biome: BiomeDefinition, rng: SeededRng) -> List[ActiveEvent]:
    """Draw this floor's events from the biome's pool."""
    pool = list(biome.events)
    rng.shuffle(pool)
    return [ActiveEvent(id=event_id) for event_id in pool[:EVENTS_PER_FLOOR]]
