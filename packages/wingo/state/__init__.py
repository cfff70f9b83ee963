"""
State module - Run state, meta ledger and RNG.

Contains:
- RNG system (Mulberry32 SeededRng)
- Run state tracking (board, boss, player, shop, events, modifiers)
- Meta-progression ledger (unlocks, stats, codex)
"""

# RNG System
from .rng import SeededRng

# Run State Tracking
from .run import (
    RunState,
    BoardCell,
    StatusEffectState,
    BossState,
    PlayerState,
    InventoryItem,
    ShopOffer,
    ActiveEvent,
    RunMetrics,
    RunSummary,
    EncounterModifierState,
)

# Meta Progression
from .meta import (
    MetaState,
    default_meta,
    migrate_meta,
    update_codex,
    heart_bonus,
    vision_bonus,
    record_run,
    apply_unlocks,
    BIOME_UNLOCKS,
    ITEM_UNLOCKS,
)

__all__ = [
    "SeededRng",
    "RunState",
    "BoardCell",
    "StatusEffectState",
    "BossState",
    "PlayerState",
    "InventoryItem",
    "ShopOffer",
    "ActiveEvent",
    "RunMetrics",
    "RunSummary",
    "EncounterModifierState",
    "MetaState",
    "default_meta",
    "migrate_meta",
    "update_codex",
    "heart_bonus",
    "vision_bonus",
    "record_run",
    "apply_unlocks",
    "BIOME_UNLOCKS",
    "ITEM_UNLOCKS",
]
