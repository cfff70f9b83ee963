"""
WINGO Events Database.

Each event offers options; an option may require coins or an item and applies
an ordered list of effects. Two events are drawn per floor from the biome's
pool, and each resolves at most once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from .statuses import StatusTarget


@dataclass(frozen=True)
class StatusGrant:
    """A status applied by an event effect."""
    target: StatusTarget
    id: str
    stacks: int
    duration: Optional[int] = None


@dataclass(frozen=True)
class EventEffect:
    """One effect entry; unset fields do nothing."""
    coins: int = 0
    hearts: int = 0
    combo: int = 0
    free_daubers: int = 0
    item: Optional[str] = None
    status: Optional[StatusGrant] = None
    unlock_biome: Optional[str] = None
    unlock_item: Optional[str] = None
    reroll_shop: bool = False


@dataclass(frozen=True)
class EventRequirement:
    """Conditions checked before an option resolves."""
    coins: int = 0
    item: Optional[str] = None


@dataclass(frozen=True)
class EventOption:
    """A single choice in an event."""
    id: str
    label: str
    description: str
    effects: Tuple[EventEffect, ...] = field(default_factory=tuple)
    requires: EventRequirement = field(default_factory=EventRequirement)


@dataclass(frozen=True)
class EventDefinition:
    """A complete event."""
    id: str
    name: str
    description: str
    options: Tuple[EventOption, ...] = field(default_factory=tuple)
    icon: str = ""

    def get_option(self, option_id: str) -> Optional[EventOption]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


# =============================================================================
# EVENTS
# =============================================================================

SHRINE = EventDefinition(
    id="shrine",
    name="Star Shrine",
    description="Trade offerings for blessings.",
    options=(
        EventOption(
            id="pray",
            label="Pray (3 coins)",
            description="Heal 1 heart and gain +1 combo.",
            requires=EventRequirement(coins=3),
            effects=(EventEffect(coins=-3), EventEffect(hearts=1), EventEffect(combo=1)),
        ),
        EventOption(
            id="sacrifice",
            label="Sacrifice",
            description="Lose 1 heart, gain a relic.",
            effects=(EventEffect(hearts=-1), EventEffect(item="arcane-dauber")),
        ),
    ),
)

MYSTERY = EventDefinition(
    id="mystery",
    name="Mysterious Door",
    description="Anything could be inside.",
    options=(
        EventOption(
            id="open",
            label="Open the door",
            description="Random reward or curse.",
            effects=(
                EventEffect(coins=5),
                EventEffect(status=StatusGrant(StatusTarget.PLAYER, "curse", stacks=1, duration=3)),
            ),
        ),
        EventOption(
            id="leave",
            label="Leave it",
            description="Gain a free dauber.",
            effects=(EventEffect(free_daubers=1),),
        ),
    ),
)

FORGE = EventDefinition(
    id="forge",
    name="Magma Forge",
    description="Temper your equipment.",
    options=(
        EventOption(
            id="temper",
            label="Temper (2 coins)",
            description="Next line deals +5 damage.",
            requires=EventRequirement(coins=2),
            effects=(
                EventEffect(coins=-2),
                EventEffect(status=StatusGrant(StatusTarget.PLAYER, "fury", stacks=1, duration=1)),
            ),
        ),
        EventOption(
            id="ignite",
            label="Ignite",
            description="Inflict burn on the boss.",
            effects=(EventEffect(status=StatusGrant(StatusTarget.BOSS, "burn", stacks=3, duration=3)),),
        ),
    ),
)

SMUGGLER = EventDefinition(
    id="smuggler",
    name="Gremlin Smuggler",
    description="Rare goods for those who pay.",
    options=(
        EventOption(
            id="buy",
            label="Buy contraband (5 coins)",
            description="Gain a rare item.",
            requires=EventRequirement(coins=5),
            effects=(EventEffect(coins=-5), EventEffect(item="frost-lantern")),
        ),
        EventOption(
            id="threaten",
            label="Threaten",
            description="Unlock Emberforge permanently.",
            effects=(EventEffect(unlock_biome="emberforge"),),
        ),
    ),
)

FORTUNE_TELLER = EventDefinition(
    id="fortune-teller",
    name="Fortune Teller",
    description="She peers into the next draws.",
    options=(
        EventOption(
            id="tip",
            label="Tip 2 coins",
            description="Gain +2 preview for a while.",
            requires=EventRequirement(coins=2),
            effects=(
                EventEffect(coins=-2),
                EventEffect(status=StatusGrant(StatusTarget.PLAYER, "vision", stacks=2, duration=2)),
            ),
        ),
        EventOption(
            id="learn",
            label="Learn a secret",
            description="Unlock the Seer Lens relic.",
            effects=(EventEffect(unlock_item="seer-lens"),),
        ),
        EventOption(
            id="reshuffle",
            label="Read the cards (requires Lucky Charm)",
            description="Restock the shop for free.",
            requires=EventRequirement(item="lucky-charm"),
            effects=(EventEffect(reroll_shop=True),),
        ),
    ),
)

AURORA_BEACON = EventDefinition(
    id="aurora",
    name="Aurora Beacon",
    description="Radiant energy courses through you.",
    options=(
        EventOption(
            id="absorb",
            label="Absorb",
            description="Heal 1 heart and gain chill power.",
            effects=(
                EventEffect(hearts=1),
                EventEffect(status=StatusGrant(StatusTarget.BOSS, "chill", stacks=1, duration=2)),
            ),
        ),
        EventOption(
            id="channel",
            label="Channel outward",
            description="Unlock Aurora Sanctum.",
            effects=(EventEffect(unlock_biome="aurora"),),
        ),
    ),
)


EVENT_LIBRARY: Dict[str, EventDefinition] = {
    event.id: event
    for event in (SHRINE, MYSTERY, FORGE, SMUGGLER, FORTUNE_TELLER, AURORA_BEACON)
}


def get_event(event_id: str) -> Optional[EventDefinition]:
    """Look up an event definition by id."""
    return EVENT_LIBRARY.get(event_id)
