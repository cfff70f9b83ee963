"""
Content module - immutable WINGO content tables.

Contains:
- Balance: difficulty presets, damage/combo/adaptive constants, modifiers
- Items: relics, modifiers, consumables, curses
- Bosses: biome ladders with shop affinity and event pools
- Events: inter-floor choices
- Statuses: status ids and targets

All tables are validated once at import by ``validate_content``; a malformed
table raises ContentError before any run starts.
"""

from typing import Iterable, Mapping

from ..errors import ContentError
from .balance import (
    BALANCE,
    BalanceData,
    DifficultySettings,
    FloorModifierDefinition,
    EncounterModifierDefinition,
    DEFAULT_DIFFICULTY_ID,
)
from .bosses import BIOMES, BiomeDefinition, BossDefinition, STARTER_BIOME_ID, get_biome
from .events import EVENT_LIBRARY, EventDefinition, get_event
from .items import (
    ALL_ITEMS,
    ItemDefinition,
    ItemType,
    Rarity,
    RARITY_POWER,
    STARTER_ITEM_IDS,
    get_item,
)
from .statuses import ALL_STATUS_IDS, StatusTarget

_TARGETS = {target.value for target in StatusTarget}


def validate_content(
    balance: BalanceData,
    biomes: Mapping[str, BiomeDefinition],
    items: Iterable[ItemDefinition],
    events: Mapping[str, EventDefinition],
) -> None:
    """
    Check cross-table consistency.

    Raises:
        ContentError: on the first inconsistency found
    """
    items = tuple(items)
    item_ids = [item.id for item in items]
    if len(set(item_ids)) != len(item_ids):
        raise ContentError("duplicate item ids in item table")
    known_items = set(item_ids)

    _validate_balance(balance)

    for item in items:
        if item.cost < 0:
            raise ContentError(f"item {item.id} has negative cost")

    if not biomes:
        raise ContentError("no biomes defined")
    for biome_id, biome in biomes.items():
        if biome_id != biome.id:
            raise ContentError(f"biome key {biome_id} does not match id {biome.id}")
        if not biome.floors:
            raise ContentError(f"biome {biome_id} has no floors")
        for boss in biome.floors:
            if boss.base_hp <= 0:
                raise ContentError(f"boss {boss.id} needs positive base HP")
            if boss.damage < 0:
                raise ContentError(f"boss {boss.id} has negative damage")
            for status_id in boss.status:
                if status_id not in ALL_STATUS_IDS:
                    raise ContentError(f"boss {boss.id} has unknown status {status_id}")
        for event_id in biome.events:
            if event_id not in events:
                raise ContentError(f"biome {biome_id} references unknown event {event_id}")

    for event_id, event in events.items():
        if event_id != event.id:
            raise ContentError(f"event key {event_id} does not match id {event.id}")
        if not event.options:
            raise ContentError(f"event {event_id} has no options")
        for option in event.options:
            if option.requires.item and option.requires.item not in known_items:
                raise ContentError(f"event {event_id}/{option.id} requires unknown item")
            for effect in option.effects:
                if effect.item and effect.item not in known_items:
                    raise ContentError(f"event {event_id}/{option.id} grants unknown item {effect.item}")
                if effect.unlock_item and effect.unlock_item not in known_items:
                    raise ContentError(f"event {event_id}/{option.id} unlocks unknown item")
                if effect.unlock_biome and effect.unlock_biome not in biomes:
                    raise ContentError(f"event {event_id}/{option.id} unlocks unknown biome")


def _validate_balance(balance: BalanceData) -> None:
    columns = balance.board.columns
    if len(set(columns)) != len(columns):
        raise ContentError("column labels must be unique")
    if balance.board.numbers_per_column < 1:
        raise ContentError("numbers_per_column must be positive")
    if balance.preview_base < 0:
        raise ContentError("preview_base must not be negative")
    if balance.combo.max < 0:
        raise ContentError("combo max must not be negative")

    adaptive = balance.adaptive
    low, high = adaptive.thresholds
    if not 0 <= low <= high:
        raise ContentError("adaptive thresholds must be ordered low <= high")
    if adaptive.threat_start < 1.0:
        raise ContentError("adaptive threat starts at or above 1.0")

    if not balance.difficulties:
        raise ContentError("no difficulties defined")
    for difficulty_id, difficulty in balance.difficulties.items():
        if difficulty_id != difficulty.id:
            raise ContentError(f"difficulty key {difficulty_id} does not match id {difficulty.id}")
        if not 2 <= difficulty.board_size <= len(columns):
            raise ContentError(f"difficulty {difficulty_id} board size outside column table")
        if difficulty.starting_hearts <= 0:
            raise ContentError(f"difficulty {difficulty_id} needs starting hearts")
        if difficulty.call_cap_base <= 0:
            raise ContentError(f"difficulty {difficulty_id} needs a positive call cap")
        if difficulty.distinct_numbers < 1:
            raise ContentError(f"difficulty {difficulty_id} needs distinct numbers")
        low_coins, high_coins = difficulty.reward_coins
        if not 0 <= low_coins <= high_coins:
            raise ContentError(f"difficulty {difficulty_id} reward range is inverted")

    for modifier in balance.encounter_modifiers:
        effect = modifier.effect
        if effect.blocked_columns:
            for label in effect.blocked_columns.columns:
                if label not in columns:
                    raise ContentError(f"encounter {modifier.id} blocks unknown column {label}")
        if effect.sequence_offset and effect.sequence_offset.count < 1:
            raise ContentError(f"encounter {modifier.id} sequence count must be positive")
        if effect.starting_status and effect.starting_status.target not in _TARGETS:
            raise ContentError(f"encounter {modifier.id} has unknown status target")


validate_content(BALANCE, BIOMES, ALL_ITEMS, EVENT_LIBRARY)


__all__ = [
    "validate_content",
    "ContentError",
    # Balance
    "BALANCE", "BalanceData", "DifficultySettings",
    "FloorModifierDefinition", "EncounterModifierDefinition", "DEFAULT_DIFFICULTY_ID",
    # Bosses
    "BIOMES", "BiomeDefinition", "BossDefinition", "STARTER_BIOME_ID", "get_biome",
    # Events
    "EVENT_LIBRARY", "EventDefinition", "get_event",
    # Items
    "ALL_ITEMS", "ItemDefinition", "ItemType", "Rarity", "RARITY_POWER",
    "STARTER_ITEM_IDS", "get_item",
    # Statuses
    "ALL_STATUS_IDS", "StatusTarget",
]
