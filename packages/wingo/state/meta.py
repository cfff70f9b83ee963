"""
Meta-progression ledger - persistent unlocks, stats and codex across runs.

The run state machine only touches this ledger in narrow spots:
- reads: unlocked biomes/items, xp (heart and vision bonuses)
- writes: codex discovery lists (append only), event-driven unlocks

Everything else (xp gain, stats, threshold unlocks) happens in ``record_run``
once a run's summary is final.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..content.bosses import STARTER_BIOME_ID
from ..content.items import STARTER_ITEM_IDS
from .run import RunState, RunSummary

META_VERSION = 1

# (xp threshold, id) pairs, checked after every recorded run
BIOME_UNLOCKS: Tuple[Tuple[int, str], ...] = (
    (15, "emberforge"),
    (35, "aurora"),
    (55, "swamp"),
    (75, "dunes"),
    (95, "reef"),
    (120, "sky"),
    (150, "clockwork"),
)

ITEM_UNLOCKS: Tuple[Tuple[int, str], ...] = (
    (8, "embershard"),
    (18, "seer-lens"),
    (28, "frost-lantern"),
    (45, "cursed-brand"),
)

XP_PER_FLOOR = 5
XP_VICTORY_BONUS = 10


def _append_unique(values: List[str], value: str) -> bool:
    if value in values:
        return False
    values.append(value)
    return True


@dataclass
class MetaUnlocks:
    biomes: List[str] = field(default_factory=lambda: [STARTER_BIOME_ID])
    items: List[str] = field(default_factory=lambda: list(STARTER_ITEM_IDS))


@dataclass
class MetaStats:
    runs: int = 0
    victories: int = 0
    best_floor: int = 0


@dataclass
class Codex:
    """Discovered ids, in discovery order."""
    items: List[str] = field(default_factory=list)
    bosses: List[str] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)


@dataclass
class MetaSettings:
    reduced_motion: bool = False
    color_palette: str = "default"


@dataclass
class MetaState:
    """The persistent ledger."""
    version: int = META_VERSION
    xp: int = 0
    unlocks: MetaUnlocks = field(default_factory=MetaUnlocks)
    stats: MetaStats = field(default_factory=MetaStats)
    codex: Codex = field(default_factory=Codex)
    settings: MetaSettings = field(default_factory=MetaSettings)

    def is_biome_unlocked(self, biome_id: str) -> bool:
        return biome_id in self.unlocks.biomes

    def is_item_unlocked(self, item_id: str) -> bool:
        return item_id in self.unlocks.items

    def unlock_biome(self, biome_id: str) -> bool:
        return _append_unique(self.unlocks.biomes, biome_id)

    def unlock_item(self, item_id: str) -> bool:
        return _append_unique(self.unlocks.items, item_id)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "xp": self.xp,
            "unlocks": {"biomes": list(self.unlocks.biomes), "items": list(self.unlocks.items)},
            "stats": {
                "runs": self.stats.runs,
                "victories": self.stats.victories,
                "best_floor": self.stats.best_floor,
            },
            "codex": {
                "items": list(self.codex.items),
                "bosses": list(self.codex.bosses),
                "statuses": list(self.codex.statuses),
            },
            "settings": {
                "reduced_motion": self.settings.reduced_motion,
                "color_palette": self.settings.color_palette,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MetaState":
        """Build from a stored payload. Missing sections fall back to defaults."""
        unlocks = data.get("unlocks") or {}
        stats = data.get("stats") or {}
        codex = data.get("codex") or {}
        settings = data.get("settings") or {}
        defaults = MetaUnlocks()
        return cls(
            version=int(data.get("version", META_VERSION)),
            xp=int(data.get("xp", 0)),
            unlocks=MetaUnlocks(
                biomes=list(unlocks.get("biomes", defaults.biomes)),
                items=list(unlocks.get("items", defaults.items)),
            ),
            stats=MetaStats(
                runs=int(stats.get("runs", 0)),
                victories=int(stats.get("victories", 0)),
                best_floor=int(stats.get("best_floor", 0)),
            ),
            codex=Codex(
                items=list(codex.get("items", [])),
                bosses=list(codex.get("bosses", [])),
                statuses=list(codex.get("statuses", [])),
            ),
            settings=MetaSettings(
                reduced_motion=bool(settings.get("reduced_motion", False)),
                color_palette=settings.get("color_palette", "default"),
            ),
        )


def default_meta() -> MetaState:
    """A brand-new profile: starter biome and starter items unlocked."""
    return MetaState()


def migrate_meta(data: dict) -> MetaState:
    """
    Upgrade a stored payload to the current version.

    Starter unlocks are always re-added so an old or hand-edited save can
    never lock the player out of the first biome.
    """
    meta = MetaState.from_dict(data)
    meta.version = META_VERSION
    meta.unlock_biome(STARTER_BIOME_ID)
    for item_id in STARTER_ITEM_IDS:
        meta.unlock_item(item_id)
    return meta


# =============================================================================
# BONUSES READ BY THE RUN STATE MACHINE
# =============================================================================

def heart_bonus(meta: MetaState) -> int:
    """Extra starting hearts: +1 at 25 xp, +2 at 60 xp."""
    if meta.xp >= 60:
        return 2
    if meta.xp >= 25:
        return 1
    return 0


def vision_bonus(meta: MetaState) -> int:
    """Extra preview slots earned through xp."""
    return 1 if meta.xp >= 40 else 0


# =============================================================================
# WRITES
# =============================================================================

def update_codex(meta: MetaState, run: RunState, item_id: Optional[str] = None) -> None:
    """Record items, the current boss and boss statuses as discovered."""
    if item_id:
        _append_unique(meta.codex.items, item_id)
    for entry in run.inventory:
        _append_unique(meta.codex.items, entry.definition.id)
    _append_unique(meta.codex.bosses, run.boss.definition.id)
    for status in run.boss.statuses:
        _append_unique(meta.codex.statuses, status.id)


def apply_unlocks(meta: MetaState) -> List[str]:
    """Grant every threshold unlock the current xp reaches. Returns new ids."""
    unlocked: List[str] = []
    for threshold, biome_id in BIOME_UNLOCKS:
        if meta.xp >= threshold and meta.unlock_biome(biome_id):
            unlocked.append(biome_id)
    for threshold, item_id in ITEM_UNLOCKS:
        if meta.xp >= threshold and meta.unlock_item(item_id):
            unlocked.append(item_id)
    return unlocked


def xp_for_summary(summary: RunSummary) -> int:
    return summary.floors_cleared * XP_PER_FLOOR + (XP_VICTORY_BONUS if summary.victory else 0)


def record_run(meta: MetaState, summary: RunSummary) -> int:
    """
    Fold a finished run into the ledger.

    Updates stats, adds xp and applies threshold unlocks. Returns the xp
    gained. Callers must fold each summary exactly once.
    """
    meta.stats.runs += 1
    if summary.victory:
        meta.stats.victories += 1
    meta.stats.best_floor = max(meta.stats.best_floor, summary.floors_cleared)
    gained = xp_for_summary(summary)
    meta.xp += gained
    apply_unlocks(meta)
    return gained
