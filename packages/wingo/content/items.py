"""
WINGO Item Definitions - relics, modifiers, consumables and curses.

Item structure:
- id: Unique identifier string (kebab-case)
- type: RELIC, MODIFIER, CONSUMABLE, CURSE
- rarity: COMMON, UNCOMMON, RARE, LEGENDARY
- cost: Base shop price in coins
- tags: Effect tags the run state machine keys off

Tag semantics (passives = relics and modifiers):
- damage:   +rarity power per call hit
- combo:    +1 per matched cell per stack
- vision:   +rarity power preview slots
- shield:   -rarity power to counter damage taken
- economy / luck: +rarity power coins per boss defeat
- burn / chill: inflict status on line completion (named relics)

Consumable tags (scaled by rarity power on use):
- heal, coins, damage, dauber, combo, vulnerable

Non-consumables are permanently equipped and have no activation effect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ItemType(Enum):
    """Item categories."""
    RELIC = "relic"
    MODIFIER = "modifier"
    CONSUMABLE = "consumable"
    CURSE = "curse"


class Rarity(Enum):
    """Item rarities, in ascending order of power."""
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


RARITY_POWER: Dict[Rarity, int] = {
    Rarity.COMMON: 1,
    Rarity.UNCOMMON: 2,
    Rarity.RARE: 3,
    Rarity.LEGENDARY: 4,
}

PASSIVE_TYPES = (ItemType.RELIC, ItemType.MODIFIER)

# Named items with bespoke rules in the run state machine
ARCANE_DAUBER = "arcane-dauber"
EMBERSHARD = "embershard"
FROST_LANTERN = "frost-lantern"
CURSED_BRAND = "cursed-brand"
SEER_LENS = "seer-lens"
FREE_SPACE_CHARM = "free-space-charm"
HEALING_BREW = "healing-brew"


@dataclass(frozen=True)
class ItemDefinition:
    """An immutable item definition."""
    id: str
    name: str
    type: ItemType
    rarity: Rarity
    cost: int
    tags: Tuple[str, ...] = field(default_factory=tuple)
    effect: str = ""
    synergy: str = ""
    icon: str = ""

    def __deepcopy__(self, memo):
        return self

    @property
    def power(self) -> int:
        """Rarity-derived power used by bonuses and consumables."""
        return RARITY_POWER[self.rarity]

    @property
    def is_passive(self) -> bool:
        return self.type in PASSIVE_TYPES

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "rarity": self.rarity.value,
            "cost": self.cost,
            "tags": list(self.tags),
            "effect": self.effect,
            "synergy": self.synergy,
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ItemDefinition":
        return cls(
            id=data["id"],
            name=data["name"],
            type=ItemType(data["type"]),
            rarity=Rarity(data["rarity"]),
            cost=int(data["cost"]),
            tags=tuple(data.get("tags", ())),
            effect=data.get("effect", ""),
            synergy=data.get("synergy", ""),
            icon=data.get("icon", ""),
        )


# =============================================================================
# RELICS
# =============================================================================

LUCKY_CHARM_DEF = ItemDefinition(
    id="lucky-charm", name="Lucky Charm", type=ItemType.RELIC, rarity=Rarity.COMMON,
    cost=4, tags=("vision", "luck"),
    effect="+1 preview. Bosses drop an extra coin.",
    synergy="Pairs with Seer Lens for deep previews.", icon="charm",
)

SEER_LENS_DEF = ItemDefinition(
    id=SEER_LENS, name="Seer Lens", type=ItemType.RELIC, rarity=Rarity.UNCOMMON,
    cost=7, tags=("vision",),
    effect="+2 preview. Shop rerolls cost 1 less.",
    synergy="Vision items are cheaper while equipped.", icon="lens",
)

ARCANE_DAUBER_DEF = ItemDefinition(
    id=ARCANE_DAUBER, name="Arcane Dauber", type=ItemType.RELIC, rarity=Rarity.UNCOMMON,
    cost=6, tags=("combo", "arcane"),
    effect="Hits deal +2 damage per combo.",
    synergy="Snowballs with long combo chains.", icon="dauber",
)

EMBERSHARD_DEF = ItemDefinition(
    id=EMBERSHARD, name="Embershard", type=ItemType.RELIC, rarity=Rarity.UNCOMMON,
    cost=6, tags=("fire", "burn", "damage"),
    effect="Completing a line burns the boss (3).",
    synergy="Burn ticks on every hit.", icon="ember",
)

FROST_LANTERN_DEF = ItemDefinition(
    id=FROST_LANTERN, name="Frost Lantern", type=ItemType.RELIC, rarity=Rarity.RARE,
    cost=8, tags=("ice", "chill"),
    effect="Completing a line chills the boss.",
    synergy="Chill cancels a counterattack.", icon="lantern",
)

WHETSTONE_DEF = ItemDefinition(
    id="whetstone", name="Whetstone", type=ItemType.RELIC, rarity=Rarity.COMMON,
    cost=5, tags=("damage",),
    effect="+1 damage on every hit.",
    synergy="Stacks with other damage relics.", icon="whetstone",
)

WAR_DRUM_DEF = ItemDefinition(
    id="war-drum", name="War Drum", type=ItemType.RELIC, rarity=Rarity.UNCOMMON,
    cost=6, tags=("combo", "damage"),
    effect="+1 damage per matched cell.",
    synergy="Duplicate-heavy boards hit harder.", icon="drum",
)

BONE_WARD_DEF = ItemDefinition(
    id="bone-ward", name="Bone Ward", type=ItemType.RELIC, rarity=Rarity.COMMON,
    cost=5, tags=("shield",),
    effect="Counterattacks deal 1 less damage (minimum 1).",
    synergy="Softens enraged bosses.", icon="ward",
)

GILDED_IDOL_DEF = ItemDefinition(
    id="gilded-idol", name="Gilded Idol", type=ItemType.RELIC, rarity=Rarity.UNCOMMON,
    cost=6, tags=("economy",),
    effect="Bosses drop 2 extra coins.",
    synergy="Funds rerolls.", icon="idol",
)

FREE_SPACE_CHARM_DEF = ItemDefinition(
    id=FREE_SPACE_CHARM, name="Free Space Charm", type=ItemType.RELIC, rarity=Rarity.COMMON,
    cost=3, tags=("board",),
    effect="Anchors a permanent mark on the center cell of every board.",
    synergy="Diagonals through the center come easier.", icon="star",
)

# =============================================================================
# MODIFIERS
# =============================================================================

STARLIT_INK_DEF = ItemDefinition(
    id="starlit-ink", name="Starlit Ink", type=ItemType.MODIFIER, rarity=Rarity.RARE,
    cost=9, tags=("damage", "arcane"),
    effect="+3 damage on every hit.",
    synergy="The strongest flat damage source.", icon="ink",
)

# =============================================================================
# CURSES
# =============================================================================

CURSED_BRAND_DEF = ItemDefinition(
    id=CURSED_BRAND, name="Cursed Brand", type=ItemType.CURSE, rarity=Rarity.RARE,
    cost=2, tags=("curse", "damage"),
    effect="Hits deal 20% more and leave the boss vulnerable. Missing a call costs a heart.",
    synergy="High risk, high reward.", icon="brand",
)

# =============================================================================
# CONSUMABLES
# =============================================================================

HEALING_BREW_DEF = ItemDefinition(
    id=HEALING_BREW, name="Healing Brew", type=ItemType.CONSUMABLE, rarity=Rarity.COMMON,
    cost=3, tags=("heal",),
    effect="Restore a heart (two in Aurora Sanctum).",
    synergy="Keep one for enrage turns.", icon="brew",
)

AURORA_DRAFT_DEF = ItemDefinition(
    id="aurora-draft", name="Aurora Draft", type=ItemType.CONSUMABLE, rarity=Rarity.COMMON,
    cost=3, tags=("combo", "dauber"),
    effect="+1 combo and a free dauber.",
    synergy="Restarts a broken combo.", icon="draft",
)

COIN_POUCH_DEF = ItemDefinition(
    id="coin-pouch", name="Coin Pouch", type=ItemType.CONSUMABLE, rarity=Rarity.UNCOMMON,
    cost=4, tags=("coins",),
    effect="Gain 6 coins.",
    synergy="Buy now, profit later.", icon="pouch",
)

FIRE_BOMB_DEF = ItemDefinition(
    id="fire-bomb", name="Fire Bomb", type=ItemType.CONSUMABLE, rarity=Rarity.UNCOMMON,
    cost=5, tags=("damage",),
    effect="Deal 16 damage to the boss.",
    synergy="Finish off a wounded boss.", icon="bomb",
)

HEX_VIAL_DEF = ItemDefinition(
    id="hex-vial", name="Hex Vial", type=ItemType.CONSUMABLE, rarity=Rarity.COMMON,
    cost=3, tags=("vulnerable",),
    effect="Leave the boss vulnerable.",
    synergy="Throw before a big line.", icon="vial",
)


ALL_ITEMS: Tuple[ItemDefinition, ...] = (
    LUCKY_CHARM_DEF,
    SEER_LENS_DEF,
    ARCANE_DAUBER_DEF,
    EMBERSHARD_DEF,
    FROST_LANTERN_DEF,
    WHETSTONE_DEF,
    WAR_DRUM_DEF,
    BONE_WARD_DEF,
    GILDED_IDOL_DEF,
    FREE_SPACE_CHARM_DEF,
    STARLIT_INK_DEF,
    CURSED_BRAND_DEF,
    HEALING_BREW_DEF,
    AURORA_DRAFT_DEF,
    COIN_POUCH_DEF,
    FIRE_BOMB_DEF,
    HEX_VIAL_DEF,
)

# Unlocked for every profile from the start
STARTER_ITEM_IDS: Tuple[str, ...] = (
    "aurora-draft",
    HEALING_BREW,
    FREE_SPACE_CHARM,
    "lucky-charm",
    ARCANE_DAUBER,
)

_ITEMS_BY_ID: Dict[str, ItemDefinition] = {item.id: item for item in ALL_ITEMS}


def get_item(item_id: str) -> Optional[ItemDefinition]:
    """Look up an item definition by id."""
    return _ITEMS_BY_ID.get(item_id)


def get_items_by_type(item_type: ItemType) -> List[ItemDefinition]:
    """All items of one type, in table order."""
    return [item for item in ALL_ITEMS if item.type == item_type]
