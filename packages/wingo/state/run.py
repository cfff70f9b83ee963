"""
Run State - complete state of a WINGO run in progress.

Tracks everything needed to:
1. Resolve calls and player actions deterministically
2. Save/restore the exact run (together with the RNG's 32-bit state)
3. Produce a terminal summary for the meta-progression ledger

A RunState is never mutated in place by the public operations: every
transition deep-copies its input and returns the copy. Content definitions
(biome, difficulty, boss and item definitions, modifier definitions) are
immutable and shared between copies.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..content.balance import (
    DifficultySettings,
    EncounterModifierDefinition,
    FloorModifierDefinition,
)
from ..content.bosses import BiomeDefinition, BossDefinition
from ..content.items import ItemDefinition
from ..content.statuses import StatusTarget


# =============================================================================
# BOARD / STATUS
# =============================================================================

@dataclass
class BoardCell:
    """One board cell. ``free`` marks the pre-marked center cell."""
    id: str
    number: int
    marked: bool = False
    free: bool = False
    column: str = ""
    status: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "marked": self.marked,
            "free": self.free,
            "column": self.column,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BoardCell":
        return cls(
            id=data["id"],
            number=int(data["number"]),
            marked=bool(data["marked"]),
            free=bool(data.get("free", False)),
            column=data.get("column", ""),
            status=data.get("status"),
        )


@dataclass
class StatusEffectState:
    """
    A status on the boss or the player.

    duration None means the status lasts until consumed; otherwise it is
    removed once duration reaches 0.
    """
    id: str
    stacks: int
    target: StatusTarget
    duration: Optional[int] = None

    def __repr__(self) -> str:
        if self.duration is None:
            return f"{self.id}x{self.stacks}"
        return f"{self.id}x{self.stacks}({self.duration})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "stacks": self.stacks,
            "target": self.target.value,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StatusEffectState":
        return cls(
            id=data["id"],
            stacks=int(data["stacks"]),
            target=StatusTarget(data["target"]),
            duration=data.get("duration"),
        )


def _find_status(statuses: List[StatusEffectState], status_id: str) -> Optional[StatusEffectState]:
    for status in statuses:
        if status.id == status_id:
            return status
    return None


# =============================================================================
# COMBATANTS
# =============================================================================

@dataclass
class BossState:
    """The floor's boss. hp only decreases, never healed; max_hp is fixed at spawn."""
    definition: BossDefinition
    hp: int
    max_hp: int
    statuses: List[StatusEffectState] = field(default_factory=list)

    def get_status(self, status_id: str) -> Optional[StatusEffectState]:
        return _find_status(self.statuses, status_id)

    def status_stacks(self, status_id: str) -> int:
        status = self.get_status(status_id)
        return status.stacks if status else 0

    def to_dict(self) -> dict:
        return {
            "definition": self.definition.to_dict(),
            "hp": self.hp,
            "max_hp": self.max_hp,
            "statuses": [s.to_dict() for s in self.statuses],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BossState":
        return cls(
            definition=BossDefinition.from_dict(data["definition"]),
            hp=int(data["hp"]),
            max_hp=int(data["max_hp"]),
            statuses=[StatusEffectState.from_dict(s) for s in data.get("statuses", [])],
        )


@dataclass
class PlayerState:
    """
    The player.

    hearts can dip to 0 or below on the transition that ends the run; combo
    is kept inside [0, combo max].
    """
    hearts: int
    coins: int
    combo: int = 0
    free_daubers: int = 1
    bomb_ready: bool = True
    statuses: List[StatusEffectState] = field(default_factory=list)

    def get_status(self, status_id: str) -> Optional[StatusEffectState]:
        return _find_status(self.statuses, status_id)

    def status_stacks(self, status_id: str) -> int:
        status = self.get_status(status_id)
        return status.stacks if status else 0

    def to_dict(self) -> dict:
        return {
            "hearts": self.hearts,
            "coins": self.coins,
            "combo": self.combo,
            "free_daubers": self.free_daubers,
            "bomb_ready": self.bomb_ready,
            "statuses": [s.to_dict() for s in self.statuses],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlayerState":
        return cls(
            hearts=int(data["hearts"]),
            coins=int(data["coins"]),
            combo=int(data.get("combo", 0)),
            free_daubers=int(data.get("free_daubers", 0)),
            bomb_ready=bool(data.get("bomb_ready", False)),
            statuses=[StatusEffectState.from_dict(s) for s in data.get("statuses", [])],
        )


# =============================================================================
# INVENTORY / SHOP / EVENTS
# =============================================================================

@dataclass
class InventoryItem:
    """An item stack. Same item id always shares one stack."""
    definition: ItemDefinition
    quantity: int = 1

    def __repr__(self) -> str:
        return f"{self.definition.id}x{self.quantity}"

    def to_dict(self) -> dict:
        return {"definition": self.definition.to_dict(), "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: dict) -> "InventoryItem":
        return cls(
            definition=ItemDefinition.from_dict(data["definition"]),
            quantity=int(data["quantity"]),
        )


@dataclass
class ShopOffer:
    """An item for sale at a fixed price."""
    item: ItemDefinition
    price: int
    sold: bool = False
    locked: bool = False

    def to_dict(self) -> dict:
        return {
            "item": self.item.to_dict(),
            "price": self.price,
            "sold": self.sold,
            "locked": self.locked,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShopOffer":
        return cls(
            item=ItemDefinition.from_dict(data["item"]),
            price=int(data["price"]),
            sold=bool(data.get("sold", False)),
            locked=bool(data.get("locked", False)),
        )


@dataclass
class ActiveEvent:
    """An event offered on this floor."""
    id: str
    resolved: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "resolved": self.resolved}

    @classmethod
    def from_dict(cls, data: dict) -> "ActiveEvent":
        return cls(id=data["id"], resolved=bool(data.get("resolved", False)))


# =============================================================================
# METRICS / SUMMARY
# =============================================================================

@dataclass
class RunMetrics:
    """Whole-run counters."""
    damage_dealt: int = 0
    statuses_applied: int = 0
    items_collected: int = 0
    coins_earned: int = 0

    def to_dict(self) -> dict:
        return {
            "damage_dealt": self.damage_dealt,
            "statuses_applied": self.statuses_applied,
            "items_collected": self.items_collected,
            "coins_earned": self.coins_earned,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RunMetrics":
        return cls(**{key: int(data.get(key, 0)) for key in cls().to_dict()})


@dataclass
class RunSummary:
    """Terminal outcome of a run. Set at most once."""
    victory: bool
    floors_cleared: int
    damage_dealt: int
    calls_made: int
    items_collected: int
    statuses_applied: int
    coins_earned: int

    def to_dict(self) -> dict:
        return {
            "victory": self.victory,
            "floors_cleared": self.floors_cleared,
            "damage_dealt": self.damage_dealt,
            "calls_made": self.calls_made,
            "items_collected": self.items_collected,
            "statuses_applied": self.statuses_applied,
            "coins_earned": self.coins_earned,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RunSummary":
        return cls(
            victory=bool(data["victory"]),
            floors_cleared=int(data["floors_cleared"]),
            damage_dealt=int(data.get("damage_dealt", 0)),
            calls_made=int(data.get("calls_made", 0)),
            items_collected=int(data.get("items_collected", 0)),
            statuses_applied=int(data.get("statuses_applied", 0)),
            coins_earned=int(data.get("coins_earned", 0)),
        )


# =============================================================================
# ENCOUNTER MODIFIER RUNTIME
# =============================================================================

@dataclass
class EncounterModifierState:
    """
    A rolled encounter modifier plus its in-flight countdowns.

    Sequence offset:
        sequence_remaining is None until the first call anchors the sequence.
        sequence_anchor holds the previous draw of the sequence.
    Blocked columns:
        blocked_columns empties once blocked_calls_left reaches 0.
    """
    definition: EncounterModifierDefinition
    sequence_anchor: Optional[int] = None
    sequence_remaining: Optional[int] = None
    blocked_columns: Tuple[str, ...] = ()
    blocked_calls_left: int = 0

    @classmethod
    def start(cls, definition: EncounterModifierDefinition) -> "EncounterModifierState":
        """Fresh runtime state for a just-rolled modifier."""
        blocked = definition.effect.blocked_columns
        return cls(
            definition=definition,
            blocked_columns=blocked.columns if blocked else (),
            blocked_calls_left=blocked.calls if blocked else 0,
        )

    @property
    def blocking(self) -> bool:
        return bool(self.blocked_columns) and self.blocked_calls_left > 0

    def to_dict(self) -> dict:
        return {
            "definition": self.definition.to_dict(),
            "sequence_anchor": self.sequence_anchor,
            "sequence_remaining": self.sequence_remaining,
            "blocked_columns": list(self.blocked_columns),
            "blocked_calls_left": self.blocked_calls_left,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EncounterModifierState":
        """Restore; runtime fields missing from older snapshots are re-derived."""
        state = cls.start(EncounterModifierDefinition.from_dict(data["definition"]))
        if "sequence_anchor" in data:
            state.sequence_anchor = data["sequence_anchor"]
        if "sequence_remaining" in data:
            state.sequence_remaining = data["sequence_remaining"]
        if "blocked_columns" in data:
            state.blocked_columns = tuple(data["blocked_columns"])
        if "blocked_calls_left" in data:
            state.blocked_calls_left = int(data["blocked_calls_left"])
        return state


# =============================================================================
# RUN STATE
# =============================================================================

@dataclass
class RunState:
    """
    Aggregate root of a run.

    Lifecycle:
        active -> awaiting_advance (boss dead, shop open) -> active (next floor)
        active -> summary (victory on the last boss, defeat at hearts <= 0)

    Once ``summary`` is set the run is terminal and every action returns it
    unchanged.
    """
    id: str
    seed: int
    biome: BiomeDefinition
    difficulty: DifficultySettings
    floor_index: int
    call_cap: int
    calls_made: int
    deck: List[int]
    preview: List[int]
    board: List[BoardCell]
    boss: BossState
    player: PlayerState
    inventory: List[InventoryItem] = field(default_factory=list)
    shop: List[ShopOffer] = field(default_factory=list)
    shop_available: bool = True
    events: List[ActiveEvent] = field(default_factory=list)
    log: List[str] = field(default_factory=list)
    defeated_bosses: List[str] = field(default_factory=list)
    adaptive_threat: float = 1.0
    floor_modifier: Optional[FloorModifierDefinition] = None
    encounter_modifier: Optional[EncounterModifierState] = None
    awaiting_advance: bool = False
    summary: Optional[RunSummary] = None
    metrics: RunMetrics = field(default_factory=RunMetrics)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def biome_id(self) -> str:
        return self.biome.id

    @property
    def difficulty_id(self) -> str:
        return self.difficulty.id

    @property
    def board_size(self) -> int:
        return self.difficulty.board_size

    def get_inventory(self, item_id: str) -> Optional[InventoryItem]:
        for entry in self.inventory:
            if entry.definition.id == item_id:
                return entry
        return None

    def has_item(self, item_id: str) -> bool:
        return self.get_inventory(item_id) is not None

    def passives(self) -> List[InventoryItem]:
        """Equipped relic/modifier stacks (curses excluded)."""
        return [entry for entry in self.inventory if entry.definition.is_passive]

    def get_cell(self, cell_id: str) -> Optional[BoardCell]:
        for cell in self.board:
            if cell.id == cell_id:
                return cell
        return None

    def get_event(self, event_id: str) -> Optional[ActiveEvent]:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    # =========================================================================
    # Copy / Serialization
    # =========================================================================

    def copy(self) -> "RunState":
        """Create a deep copy of this run state."""
        return deepcopy(self)

    def to_dict(self) -> dict:
        """Serialize to dictionary (for saving)."""
        return {
            "id": self.id,
            "seed": self.seed,
            "biome_id": self.biome.id,
            "difficulty_id": self.difficulty.id,
            "floor_index": self.floor_index,
            "call_cap": self.call_cap,
            "calls_made": self.calls_made,
            "deck": list(self.deck),
            "preview": list(self.preview),
            "board": [cell.to_dict() for cell in self.board],
            "boss": self.boss.to_dict(),
            "player": self.player.to_dict(),
            "inventory": [entry.to_dict() for entry in self.inventory],
            "shop": [offer.to_dict() for offer in self.shop],
            "shop_available": self.shop_available,
            "events": [event.to_dict() for event in self.events],
            "log": list(self.log),
            "defeated_bosses": list(self.defeated_bosses),
            "adaptive_threat": self.adaptive_threat,
            "floor_modifier": self.floor_modifier.to_dict() if self.floor_modifier else None,
            "encounter_modifier": (
                self.encounter_modifier.to_dict() if self.encounter_modifier else None
            ),
            "awaiting_advance": self.awaiting_advance,
            "summary": self.summary.to_dict() if self.summary else None,
            "metrics": self.metrics.to_dict(),
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        biome: BiomeDefinition,
        difficulty: DifficultySettings,
    ) -> "RunState":
        """
        Deserialize from a dictionary.

        Biome and difficulty are stored by id only; the caller resolves them
        against its content tables and passes the definitions in.
        """
        floor_modifier = data.get("floor_modifier")
        encounter = data.get("encounter_modifier")
        summary = data.get("summary")
        return cls(
            id=data["id"],
            seed=int(data["seed"]),
            biome=biome,
            difficulty=difficulty,
            floor_index=int(data["floor_index"]),
            call_cap=int(data["call_cap"]),
            calls_made=int(data["calls_made"]),
            deck=[int(n) for n in data["deck"]],
            preview=[int(n) for n in data.get("preview", [])],
            board=[BoardCell.from_dict(c) for c in data["board"]],
            boss=BossState.from_dict(data["boss"]),
            player=PlayerState.from_dict(data["player"]),
            inventory=[InventoryItem.from_dict(i) for i in data.get("inventory", [])],
            shop=[ShopOffer.from_dict(o) for o in data.get("shop", [])],
            shop_available=bool(data.get("shop_available", False)),
            events=[ActiveEvent.from_dict(e) for e in data.get("events", [])],
            log=list(data.get("log", [])),
            defeated_bosses=list(data.get("defeated_bosses", [])),
            adaptive_threat=float(data.get("adaptive_threat", 1.0)),
            floor_modifier=(
                FloorModifierDefinition.from_dict(floor_modifier) if floor_modifier else None
            ),
            encounter_modifier=(
                EncounterModifierState.from_dict(encounter) if encounter else None
            ),
            awaiting_advance=bool(data.get("awaiting_advance", False)),
            summary=RunSummary.from_dict(summary) if summary else None,
            metrics=RunMetrics.from_dict(data.get("metrics", {})),
        )

    def __repr__(self) -> str:
        return (
            f"RunState(biome={self.biome.id}, difficulty={self.difficulty.id}, "
            f"floor={self.floor_index}, hp={self.boss.hp}/{self.boss.max_hp}, "
            f"hearts={self.player.hearts}, coins={self.player.coins}, "
            f"calls={self.calls_made}/{self.call_cap})"
        )
