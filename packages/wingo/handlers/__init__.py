"""
Handlers for WINGO run transitions.

Each handler works on a RunState the caller has already copied:
- ShopHandler: purchases, rerolls, skipping
- ItemHandler: consumable activation
- EventHandler: inter-floor event choices
- statuses: merge-on-insert status bookkeeping and per-call triggers
"""

from .statuses import (
    add_status,
    grant_status,
    remove_status,
    tick_duration,
    tick_boss_burn,
    consume_chill,
    apply_wild_magic,
)
from .shop_handler import ShopHandler, ShopResult, add_to_inventory, SHOP_CLOSED
from .item_handler import ItemHandler, ItemResult
from .event_handler import EventHandler, EventChoiceResult

__all__ = [
    "add_status",
    "grant_status",
    "remove_status",
    "tick_duration",
    "tick_boss_burn",
    "consume_chill",
    "apply_wild_magic",
    "ShopHandler",
    "ShopResult",
    "add_to_inventory",
    "SHOP_CLOSED",
    "ItemHandler",
    "ItemResult",
    "EventHandler",
    "EventChoiceResult",
]
