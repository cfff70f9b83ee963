"""
Generation module - seeded board, deck, shop, event and modifier rolls.

Every function here draws only from the SeededRng it is handed.
"""

from .board import (
    build_board,
    count_lines,
    create_board_numbers,
    deck_size,
    distinct_numbers_for_floor,
    free_index,
    generate_board,
    get_line_indices,
    shuffle_deck,
)
from .modifiers import roll_encounter_modifier, roll_floor_modifier
from .shop import (
    generate_events,
    generate_shop,
    get_price,
    get_reroll_cost,
    get_shop_discount,
)

__all__ = [
    "build_board",
    "count_lines",
    "create_board_numbers",
    "deck_size",
    "distinct_numbers_for_floor",
    "free_index",
    "generate_board",
    "get_line_indices",
    "shuffle_deck",
    "roll_encounter_modifier",
    "roll_floor_modifier",
    "generate_events",
    "generate_shop",
    "get_price",
    "get_reroll_cost",
    "get_shop_discount",
]
