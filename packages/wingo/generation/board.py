"""
Board & line geometry.

Boards are flat lists of ``size * size`` cells in row-major order. The cell at
index ``size*size // 2`` is the free cell: pre-marked, number 0, so no draw
ever matches it.

Number pools:
- Deck: the full sequential range 1..size*numbers_per_column
- Board: ``distinct`` values drawn from that range, repeated to fill the
  non-free cells and shuffled into cell order. ``distinct`` grows with the
  floor: distinct_numbers + ceil(size/2) * floor, capped at size*size.

Winning lines are every row, every column and the two full diagonals.
"""

from __future__ import annotations

import math
from functools import lru_cache
from typing import List, Sequence, Tuple

from ..content.balance import BalanceData, DifficultySettings
from ..state.rng import SeededRng
from ..state.run import BoardCell

FREE_CELL_NUMBER = 0


def free_index(size: int) -> int:
    """Structural center index of a size x size board."""
    return (size * size) // 2


def deck_size(size: int, balance: BalanceData) -> int:
    """Highest callable number; the deck holds 1..deck_size."""
    return size * balance.board.numbers_per_column


@lru_cache(maxsize=None)
def get_line_indices(size: int) -> Tuple[Tuple[int, ...], ...]:
    """
    All winning lines for a board size: rows, columns, main and anti diagonal.

    Cached per size since every call in a run reuses the same geometry.
    """
    lines: List[Tuple[int, ...]] = []
    for row in range(size):
        lines.append(tuple(row * size + col for col in range(size)))
    for col in range(size):
        lines.append(tuple(row * size + col for row in range(size)))
    lines.append(tuple(i * (size + 1) for i in range(size)))
    lines.append(tuple((i + 1) * (size - 1) for i in range(size)))
    return tuple(lines)


def count_lines(board: Sequence[BoardCell], size: int) -> int:
    """Number of fully marked lines."""
    return sum(
        1 for indices in get_line_indices(size)
        if all(board[idx].marked for idx in indices)
    )


def distinct_numbers_for_floor(difficulty: DifficultySettings, floor: int) -> int:
    size = difficulty.board_size
    grown = difficulty.distinct_numbers + math.ceil(size / 2) * floor
    return max(1, min(size * size, grown))


def shuffle_deck(rng: SeededRng, size: int, balance: BalanceData) -> List[int]:
    """Fresh shuffled deck of 1..size*numbers_per_column."""
    deck = list(range(1, deck_size(size, balance) + 1))
    rng.shuffle(deck)
    return deck


def create_board_numbers(
    rng: SeededRng,
    difficulty: DifficultySettings,
    floor: int,
    balance: BalanceData,
) -> List[int]:
    """
    Cell numbers in row-major order, free cell included (as 0).
    """
    size = difficulty.board_size
    pool = list(range(1, deck_size(size, balance) + 1))
    rng.shuffle(pool)
    distinct = pool[:distinct_numbers_for_floor(difficulty, floor)]

    filled = size * size - 1
    numbers = [distinct[i % len(distinct)] for i in range(filled)]
    rng.shuffle(numbers)
    numbers.insert(free_index(size), FREE_CELL_NUMBER)
    return numbers


def build_board(numbers: Sequence[int], size: int, balance: BalanceData) -> List[BoardCell]:
    """Wrap numbers into cells; column labels come from index modulo size."""
    center = free_index(size)
    columns = balance.board.columns
    return [
        BoardCell(
            id=f"cell-{index}",
            number=value,
            marked=index == center,
            free=index == center,
            column=columns[index % size],
        )
        for index, value in enumerate(numbers)
    ]


def generate_board(
    rng: SeededRng,
    difficulty: DifficultySettings,
    floor: int,
    balance: BalanceData,
) -> List[BoardCell]:
    """Build the board for a floor."""
    numbers = create_board_numbers(rng, difficulty, floor, balance)
    return build_board(numbers, difficulty.board_size, balance)
