"""
Boss and biome ladders.

A biome is an ordered ladder of bosses (one per floor), the item tags its
shop favours, and the event pool drawn from between floors. Boss max HP is
derived at spawn time from base HP, floor index and adaptive threat.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class BossDefinition:
    """An immutable boss definition."""
    id: str
    name: str
    base_hp: int
    damage: int
    elite: bool = False
    status: Tuple[str, ...] = field(default_factory=tuple)
    icon: str = ""

    def __deepcopy__(self, memo):
        return self

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "base_hp": self.base_hp,
            "damage": self.damage,
            "elite": self.elite,
            "status": list(self.status),
            "icon": self.icon,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BossDefinition":
        return cls(
            id=data["id"],
            name=data["name"],
            base_hp=int(data["base_hp"]),
            damage=int(data["damage"]),
            elite=bool(data.get("elite", False)),
            status=tuple(data.get("status", ())),
            icon=data.get("icon", ""),
        )


@dataclass(frozen=True)
class BiomeDefinition:
    """A biome: floor ladder, shop affinity and event pool."""
    id: str
    name: str
    palette: str
    floors: Tuple[BossDefinition, ...]
    shop_tags: Tuple[str, ...] = field(default_factory=tuple)
    events: Tuple[str, ...] = field(default_factory=tuple)
    note: str = ""

    def __deepcopy__(self, memo):
        return self


# =============================================================================
# BIOMES
# =============================================================================

CRYPT = BiomeDefinition(
    id="crypt",
    name="Crypt of Numbers",
    palette="bone",
    note="Rotting halls haunted by curses and shrines.",
    shop_tags=("curse", "combo", "heal"),
    events=("shrine", "mystery", "fortune-teller"),
    floors=(
        BossDefinition("grave-counter", "Grave Counter", base_hp=60, damage=1, icon="skull"),
        BossDefinition("bone-caller", "Bone Caller", base_hp=80, damage=1, status=("shield",), icon="bones"),
        BossDefinition("lich-of-lots", "Lich of Lots", base_hp=110, damage=2, elite=True,
                       status=("rebirth",), icon="lich"),
    ),
)

EMBERFORGE = BiomeDefinition(
    id="emberforge",
    name="Emberforge",
    palette="ember",
    note="Molten chambers where fire relics abound.",
    shop_tags=("fire", "burn", "damage"),
    events=("forge", "smuggler", "shrine"),
    floors=(
        BossDefinition("cinder-imp", "Cinder Imp", base_hp=70, damage=1, icon="imp"),
        BossDefinition("slag-golem", "Slag Golem", base_hp=95, damage=2, status=("shield",), icon="golem"),
        BossDefinition("forge-tyrant", "Forge Tyrant", base_hp=130, damage=2, elite=True, icon="tyrant"),
    ),
)

AURORA = BiomeDefinition(
    id="aurora",
    name="Aurora Sanctum",
    palette="frost",
    note="Frozen sanctum with vision-focused relics.",
    shop_tags=("vision", "ice", "chill"),
    events=("aurora", "fortune-teller", "mystery"),
    floors=(
        BossDefinition("frost-wisp", "Frost Wisp", base_hp=65, damage=1, icon="wisp"),
        BossDefinition("glacier-seer", "Glacier Seer", base_hp=90, damage=1, icon="seer"),
        BossDefinition("aurora-wyrm", "Aurora Wyrm", base_hp=125, damage=2, elite=True,
                       status=("rebirth",), icon="wyrm"),
    ),
)

SWAMP = BiomeDefinition(
    id="swamp",
    name="Bogmire",
    palette="moss",
    note="Sludge that slows every counterattack.",
    shop_tags=("heal", "vulnerable"),
    events=("mystery", "shrine", "smuggler"),
    floors=(
        BossDefinition("mire-toad", "Mire Toad", base_hp=75, damage=1, status=("ooze",), icon="toad"),
        BossDefinition("rot-hydra", "Rot Hydra", base_hp=100, damage=2, icon="hydra"),
        BossDefinition("bog-matron", "Bog Matron", base_hp=135, damage=2, elite=True,
                       status=("ooze", "shield"), icon="matron"),
    ),
)

DUNES = BiomeDefinition(
    id="dunes",
    name="Shifting Dunes",
    palette="sand",
    note="Sandstorms bury the preview.",
    shop_tags=("economy", "luck", "coins"),
    events=("smuggler", "fortune-teller", "forge"),
    floors=(
        BossDefinition("dust-jackal", "Dust Jackal", base_hp=80, damage=1, icon="jackal"),
        BossDefinition("sand-sphinx", "Sand Sphinx", base_hp=105, damage=2, status=("shield",), icon="sphinx"),
        BossDefinition("sun-pharaoh", "Sun Pharaoh", base_hp=140, damage=2, elite=True,
                       status=("rebirth",), icon="pharaoh"),
    ),
)

REEF = BiomeDefinition(
    id="reef",
    name="Coral Reef",
    palette="tide",
    note="Tides that wash combos away.",
    shop_tags=("combo", "dauber"),
    events=("aurora", "mystery", "shrine"),
    floors=(
        BossDefinition("reef-crab", "Reef Crab", base_hp=85, damage=1, status=("shield",), icon="crab"),
        BossDefinition("ink-kraken", "Ink Kraken", base_hp=110, damage=2, icon="kraken"),
        BossDefinition("tide-leviathan", "Tide Leviathan", base_hp=150, damage=3, elite=True, icon="leviathan"),
    ),
)

SKY = BiomeDefinition(
    id="sky",
    name="Sky Spires",
    palette="cloud",
    note="High winds and higher stakes.",
    shop_tags=("vision", "damage"),
    events=("fortune-teller", "aurora", "forge"),
    floors=(
        BossDefinition("gale-harpy", "Gale Harpy", base_hp=90, damage=2, icon="harpy"),
        BossDefinition("storm-roc", "Storm Roc", base_hp=115, damage=2, icon="roc"),
        BossDefinition("thunder-titan", "Thunder Titan", base_hp=140, damage=2, status=("shield",), icon="titan"),
        BossDefinition("sky-sovereign", "Sky Sovereign", base_hp=170, damage=3, elite=True,
                       status=("rebirth",), icon="sovereign"),
    ),
)

CLOCKWORK = BiomeDefinition(
    id="clockwork",
    name="Clockwork Vault",
    palette="brass",
    note="Gears that count every call.",
    shop_tags=("arcane", "combo", "damage"),
    events=("forge", "smuggler", "shrine", "mystery"),
    floors=(
        BossDefinition("cog-sentry", "Cog Sentry", base_hp=95, damage=2, status=("shield",), icon="sentry"),
        BossDefinition("brass-minotaur", "Brass Minotaur", base_hp=125, damage=2, icon="minotaur"),
        BossDefinition("chrono-warden", "Chrono Warden", base_hp=150, damage=3, status=("ooze",), icon="warden"),
        BossDefinition("grand-automaton", "Grand Automaton", base_hp=185, damage=3, elite=True,
                       status=("rebirth", "shield"), icon="automaton"),
    ),
)


BIOMES: Dict[str, BiomeDefinition] = {
    biome.id: biome
    for biome in (CRYPT, EMBERFORGE, AURORA, SWAMP, DUNES, REEF, SKY, CLOCKWORK)
}

STARTER_BIOME_ID = "crypt"


def get_biome(biome_id: str) -> Optional[BiomeDefinition]:
    """Look up a biome by id."""
    return BIOMES.get(biome_id)
