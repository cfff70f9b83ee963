"""
WINGO Engine

A deterministic run simulator for WINGO, a roguelite bingo battler: a seeded
deck calls numbers against a bingo board, marks and lines deal damage to a
floor boss, whiffs let the boss counter, and shops, events and modifiers sit
between floors. Every transition is a pure function of (meta, run, rng).

Core subsystems:
- state: Mulberry32 RNG, run state, meta ledger
- content: Items, bosses and biomes, events, statuses, balance tables
- generation: Boards, decks, shops, events, floor/encounter modifiers
- handlers: Shop, item, event and status logic
- calc: Call, counter and bomb damage; boss HP and adaptive threat
- session: Persistent single-player session with pluggable stores
- simulate: Headless and parallel batch play

Usage:
    from packages.wingo import GameService, SeededRng, default_meta

    service = GameService()
    meta = default_meta()
    rng = SeededRng(99)
    run = service.create_run(meta, rng, seed=99, biome_id="crypt")
    while run.summary is None:
        run = service.call_next(meta, run, rng).state
        if run.awaiting_advance:
            run = service.advance_floor(meta, run, rng)
"""

__version__ = "0.1.0"

from .errors import ContentError, RunConfigError

# RNG / state
from .state import (
    SeededRng,
    RunState,
    RunSummary,
    MetaState,
    default_meta,
    migrate_meta,
    record_run,
)

# Content
from .content import (
    ALL_ITEMS,
    BALANCE,
    BIOMES,
    EVENT_LIBRARY,
    DEFAULT_DIFFICULTY_ID,
    STARTER_BIOME_ID,
    validate_content,
)

# Damage
from .calc import compute_call_damage, compute_counter_damage, CallDamage

# Service and session
from .game import GameService, CallResult
from .session import GameSession, RunStore, MemoryStore, FileStore

__all__ = [
    "__version__",
    "ContentError",
    "RunConfigError",
    "SeededRng",
    "RunState",
    "RunSummary",
    "MetaState",
    "default_meta",
    "migrate_meta",
    "record_run",
    "ALL_ITEMS",
    "BALANCE",
    "BIOMES",
    "EVENT_LIBRARY",
    "DEFAULT_DIFFICULTY_ID",
    "STARTER_BIOME_ID",
    "validate_content",
    "compute_call_damage",
    "compute_counter_damage",
    "CallDamage",
    "GameService",
    "CallResult",
    "GameSession",
    "RunStore",
    "MemoryStore",
    "FileStore",
]
