"""
Balance tables - difficulty presets, damage constants, adaptive threat and
floor / encounter modifiers.

Everything here is a frozen dataclass built once at import and validated by
``content.validate_content``. Runs snapshot the modifiers they roll, so edits
to these tables never reach an in-progress run.

Damage constants (per call):
    matched * hit + combo * combo.hit_bonus
    + line_single (>=1 line) + line_double (>=2) + line_triple (>=3) + bingo (>=4)

Adaptive threat (after each boss kill, ratio = calls used / call cap):
    ratio < thresholds[0]  -> threat -= player_reward (floored at 1.0)
    ratio > thresholds[1]  -> threat += boss_multiplier
    otherwise              -> unchanged
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


# =============================================================================
# DIFFICULTY
# =============================================================================

@dataclass(frozen=True)
class DifficultySettings:
    """A difficulty preset."""
    id: str
    label: str
    board_size: int
    starting_hearts: int
    starting_coins: int
    call_cap_base: int
    call_cap_per_floor: int
    distinct_numbers: int
    reward_coins: Tuple[int, int]
    negative_modifier_floors: Tuple[int, ...] = field(default_factory=tuple)

    def __deepcopy__(self, memo):
        return self


EASY = DifficultySettings(
    id="easy", label="Easy", board_size=3,
    starting_hearts=6, starting_coins=6,
    call_cap_base=18, call_cap_per_floor=2, distinct_numbers=5,
    reward_coins=(5, 8), negative_modifier_floors=(),
)

SEMI_EASY = DifficultySettings(
    id="semi-easy", label="Semi-Easy", board_size=4,
    starting_hearts=5, starting_coins=5,
    call_cap_base=24, call_cap_per_floor=2, distinct_numbers=8,
    reward_coins=(5, 7), negative_modifier_floors=(2,),
)

LESS_EASY = DifficultySettings(
    id="less-easy", label="Less-Easy", board_size=5,
    starting_hearts=5, starting_coins=4,
    call_cap_base=30, call_cap_per_floor=3, distinct_numbers=12,
    reward_coins=(4, 7), negative_modifier_floors=(1, 3),
)

HARD = DifficultySettings(
    id="hard", label="Hard", board_size=5,
    starting_hearts=4, starting_coins=3,
    call_cap_base=28, call_cap_per_floor=2, distinct_numbers=14,
    reward_coins=(4, 6), negative_modifier_floors=(1, 2, 3, 4),
)


# =============================================================================
# FLOOR MODIFIERS
# =============================================================================

@dataclass(frozen=True)
class FloorModifierEffect:
    """Light per-floor buff or debuff."""
    preview_delta: int = 0
    tooltip_hidden: bool = False
    wild_magic_chance: float = 0.0
    combo_start: int = 0
    heal: int = 0


@dataclass(frozen=True)
class FloorModifierDefinition:
    """A floor modifier rolled at floor start."""
    id: str
    label: str
    description: str
    effect: FloorModifierEffect = field(default_factory=FloorModifierEffect)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "description": self.description,
            "effect": {
                "preview_delta": self.effect.preview_delta,
                "tooltip_hidden": self.effect.tooltip_hidden,
                "wild_magic_chance": self.effect.wild_magic_chance,
                "combo_start": self.effect.combo_start,
                "heal": self.effect.heal,
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FloorModifierDefinition":
        return cls(
            id=data["id"],
            label=data["label"],
            description=data.get("description", ""),
            effect=FloorModifierEffect(**data.get("effect", {})),
        )


FLOOR_MODIFIERS: Tuple[FloorModifierDefinition, ...] = (
    FloorModifierDefinition(
        "clear-skies", "Clear Skies", "See one extra call ahead.",
        FloorModifierEffect(preview_delta=1),
    ),
    FloorModifierDefinition(
        "fog", "Fog", "Preview shrinks by one and tooltips fade.",
        FloorModifierEffect(preview_delta=-1, tooltip_hidden=True),
    ),
    FloorModifierDefinition(
        "wild-magic", "Wild Magic", "Hits may unleash a random status on either side.",
        FloorModifierEffect(wild_magic_chance=0.5),
    ),
    FloorModifierDefinition(
        "momentum", "Momentum", "Start the floor with 2 combo.",
        FloorModifierEffect(combo_start=2),
    ),
    FloorModifierDefinition(
        "sanctuary", "Sanctuary", "Heal 1 heart on entry.",
        FloorModifierEffect(heal=1),
    ),
)


# =============================================================================
# ENCOUNTER MODIFIERS
# =============================================================================

@dataclass(frozen=True)
class SequenceOffset:
    """Calls follow previous + offset for ``count`` calls after the anchor."""
    offset: int
    count: int


@dataclass(frozen=True)
class BlockedColumns:
    """Matches in these columns are ignored for ``calls`` calls."""
    columns: Tuple[str, ...]
    calls: int


@dataclass(frozen=True)
class StartingStatus:
    """Status applied when the encounter begins."""
    target: str
    id: str
    stacks: int
    duration: Optional[int] = None


@dataclass(frozen=True)
class EncounterModifierEffect:
    """Negative per-floor effect bundle."""
    sequence_offset: Optional[SequenceOffset] = None
    blocked_columns: Optional[BlockedColumns] = None
    preview_penalty: int = 0
    call_cap_modifier: int = 0
    boss_damage_bonus: int = 0
    starting_status: Optional[StartingStatus] = None


@dataclass(frozen=True)
class EncounterModifierDefinition:
    """An encounter modifier rolled on negative-modifier floors."""
    id: str
    name: str
    description: str
    effect: EncounterModifierEffect = field(default_factory=EncounterModifierEffect)

    def to_dict(self) -> dict:
        effect = self.effect
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "effect": {
                "sequence_offset": (
                    {"offset": effect.sequence_offset.offset, "count": effect.sequence_offset.count}
                    if effect.sequence_offset else None
                ),
                "blocked_columns": (
                    {"columns": list(effect.blocked_columns.columns), "calls": effect.blocked_columns.calls}
                    if effect.blocked_columns else None
                ),
                "preview_penalty": effect.preview_penalty,
                "call_cap_modifier": effect.call_cap_modifier,
                "boss_damage_bonus": effect.boss_damage_bonus,
                "starting_status": (
                    {
                        "target": effect.starting_status.target,
                        "id": effect.starting_status.id,
                        "stacks": effect.starting_status.stacks,
                        "duration": effect.starting_status.duration,
                    }
                    if effect.starting_status else None
                ),
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> "EncounterModifierDefinition":
        raw = data.get("effect", {})
        sequence = raw.get("sequence_offset")
        blocked = raw.get("blocked_columns")
        status = raw.get("starting_status")
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            effect=EncounterModifierEffect(
                sequence_offset=SequenceOffset(**sequence) if sequence else None,
                blocked_columns=(
                    BlockedColumns(columns=tuple(blocked["columns"]), calls=blocked["calls"])
                    if blocked else None
                ),
                preview_penalty=raw.get("preview_penalty", 0),
                call_cap_modifier=raw.get("call_cap_modifier", 0),
                boss_damage_bonus=raw.get("boss_damage_bonus", 0),
                starting_status=StartingStatus(**status) if status else None,
            ),
        )


ENCOUNTER_MODIFIERS: Tuple[EncounterModifierDefinition, ...] = (
    EncounterModifierDefinition(
        "numerologist", "Numerologist",
        "After the first call, the next 3 calls climb by 5.",
        EncounterModifierEffect(sequence_offset=SequenceOffset(offset=5, count=3)),
    ),
    EncounterModifierDefinition(
        "sealed-center", "Sealed Center",
        "The N column is sealed for the first 6 calls.",
        EncounterModifierEffect(blocked_columns=BlockedColumns(columns=("N",), calls=6)),
    ),
    EncounterModifierDefinition(
        "blindfold", "Blindfold",
        "Preview shrinks by two.",
        EncounterModifierEffect(preview_penalty=2),
    ),
    EncounterModifierDefinition(
        "hourglass", "Cracked Hourglass",
        "Four fewer calls before the boss enrages.",
        EncounterModifierEffect(call_cap_modifier=-4),
    ),
    EncounterModifierDefinition(
        "bloodlust", "Bloodlust",
        "Counterattacks hit for 1 more.",
        EncounterModifierEffect(boss_damage_bonus=1),
    ),
    EncounterModifierDefinition(
        "hexed", "Hexed",
        "You start the floor cursed.",
        EncounterModifierEffect(
            starting_status=StartingStatus(target="player", id="curse", stacks=1, duration=3)
        ),
    ),
    EncounterModifierDefinition(
        "bulwark", "Bulwark",
        "The boss starts shielded.",
        EncounterModifierEffect(
            starting_status=StartingStatus(target="boss", id="shield", stacks=3)
        ),
    ),
)


# =============================================================================
# AGGREGATE BALANCE TABLE
# =============================================================================

@dataclass(frozen=True)
class BoardConfig:
    columns: Tuple[str, ...]
    numbers_per_column: int


@dataclass(frozen=True)
class ComboConfig:
    hit_bonus: int
    max: int


@dataclass(frozen=True)
class DamageConfig:
    hit: int
    line_single: int
    line_double: int
    line_triple: int
    bingo: int


@dataclass(frozen=True)
class AdaptiveConfig:
    threat_start: float
    thresholds: Tuple[float, float]
    boss_multiplier: float
    player_reward: float


@dataclass(frozen=True)
class BalanceData:
    """Every numeric knob of the run state machine."""
    board: BoardConfig
    difficulties: Dict[str, DifficultySettings]
    preview_base: int
    combo: ComboConfig
    damage: DamageConfig
    adaptive: AdaptiveConfig
    floor_modifiers: Tuple[FloorModifierDefinition, ...] = field(default_factory=tuple)
    encounter_modifiers: Tuple[EncounterModifierDefinition, ...] = field(default_factory=tuple)

    def __deepcopy__(self, memo):
        return self


BALANCE = BalanceData(
    board=BoardConfig(columns=("B", "I", "N", "G", "O", "X"), numbers_per_column=15),
    difficulties={d.id: d for d in (EASY, SEMI_EASY, LESS_EASY, HARD)},
    preview_base=2,
    combo=ComboConfig(hit_bonus=1, max=10),
    damage=DamageConfig(hit=4, line_single=10, line_double=14, line_triple=20, bingo=30),
    adaptive=AdaptiveConfig(
        threat_start=1.0, thresholds=(0.45, 0.85), boss_multiplier=0.1, player_reward=0.1,
    ),
    floor_modifiers=FLOOR_MODIFIERS,
    encounter_modifiers=ENCOUNTER_MODIFIERS,
)

DEFAULT_DIFFICULTY_ID = "easy"
