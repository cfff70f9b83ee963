"""
Shared pytest fixtures for the WINGO engine test suite.

This module provides reusable fixtures for:
- RNG with known seeds
- Fresh and fully unlocked meta ledgers
- A GameService and freshly created runs
- "Quiet" runs with modifiers, statuses and the board cleared so call
  resolution can be checked by hand
"""

import os
import sys

import pytest

# Ensure project root is in path
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from packages.wingo.content import ALL_ITEMS, BIOMES
from packages.wingo.content.items import get_item
from packages.wingo.game import GameService
from packages.wingo.generation.board import free_index
from packages.wingo.state.meta import default_meta
from packages.wingo.state.rng import SeededRng
from packages.wingo.state.run import InventoryItem

# Never drawn: the deck holds 1..size*15
NO_MATCH = 0


# =============================================================================
# Helpers
# =============================================================================

def quiet(run):
    """
    Strip every random per-floor influence from a run in place.

    No floor/encounter modifier, no statuses, empty inventory, zero combo and
    an unmarked board whose non-free cells never match a draw.
    """
    run.floor_modifier = None
    run.encounter_modifier = None
    run.boss.statuses = []
    run.player.statuses = []
    run.player.combo = 0
    run.inventory = []
    center = free_index(run.board_size)
    for index, cell in enumerate(run.board):
        if index == center:
            continue
        cell.number = NO_MATCH
        cell.marked = False
        cell.status = None
    return run


def set_cells(run, indices, number):
    """Put ``number`` on the given cell indices (unmarked)."""
    for index in indices:
        run.board[index].number = number
        run.board[index].marked = False
    return run


def give(run, item_id, quantity=1):
    """Add an item stack straight into the inventory."""
    run.inventory.append(InventoryItem(definition=get_item(item_id), quantity=quantity))
    return run


# =============================================================================
# RNG Fixtures
# =============================================================================

@pytest.fixture
def rng():
    """RNG seeded with 99 for deterministic tests."""
    return SeededRng(99)


@pytest.fixture
def rng_seed_12345():
    return SeededRng(12345)


# =============================================================================
# Meta Fixtures
# =============================================================================

@pytest.fixture
def meta():
    """Brand-new ledger: crypt and starter items only."""
    return default_meta()


@pytest.fixture
def unlocked_meta():
    """Ledger with every biome and item unlocked."""
    ledger = default_meta()
    for biome_id in BIOMES:
        ledger.unlock_biome(biome_id)
    for item in ALL_ITEMS:
        ledger.unlock_item(item.id)
    return ledger


# =============================================================================
# Service / Run Fixtures
# =============================================================================

@pytest.fixture
def service():
    return GameService()


@pytest.fixture
def run(service, meta, rng):
    """Fresh easy crypt run from seed 99."""
    return service.create_run(meta, rng, seed=99, biome_id="crypt", difficulty_id="easy")


@pytest.fixture
def quiet_run(run):
    """Fresh run with modifiers, statuses and board numbers cleared."""
    return quiet(run)
