"""
Status effect ids and targets.

Statuses live on either the boss or the player. Same id on the same target
merges on insert (stacks summed, durations accumulated), so every id is
unique within its target's collection.
"""

from enum import Enum


class StatusTarget(Enum):
    """Which collection a status lives in."""
    PLAYER = "player"
    BOSS = "boss"


BURN = "burn"
CHILL = "chill"
OOZE = "ooze"
CURSE = "curse"
VULNERABLE = "vulnerable"
REBIRTH = "rebirth"
SHIELD = "shield"
FURY = "fury"
VISION = "vision"

ALL_STATUS_IDS = (BURN, CHILL, OOZE, CURSE, VULNERABLE, REBIRTH, SHIELD, FURY, VISION)

# Rolled by the wild magic floor modifier
WILD_MAGIC_STATUSES = (BURN, CHILL, VULNERABLE, OOZE)

STATUS_NOTES = {
    BURN: "Deals damage over time to the boss.",
    CHILL: "The boss skips its next counterattack.",
    OOZE: "Sludge clinging to the boss.",
    CURSE: "Harmful omen that fades one miss at a time.",
    VULNERABLE: "The boss is exposed.",
    REBIRTH: "An undying omen.",
    SHIELD: "Armored plating.",
    FURY: "A rush of battle fury.",
    VISION: "Gain additional call previews.",
}
