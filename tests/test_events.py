"""
Event Tests

Requirement checks, effect application and once-only resolution.
"""

import pytest

from packages.wingo.content import BIOMES, EVENT_LIBRARY
from packages.wingo.state.run import ActiveEvent

from conftest import give


@pytest.fixture
def event_run(quiet_run):
    """Quiet run offering every event in the library."""
    quiet_run.events = [ActiveEvent(id=event_id) for event_id in EVENT_LIBRARY]
    quiet_run.player.hearts = 4
    quiet_run.player.coins = 6
    return quiet_run


class TestEventTable:

    def test_biome_pools_reference_known_events(self):
        for biome in BIOMES.values():
            assert all(event_id in EVENT_LIBRARY for event_id in biome.events)

    def test_get_option(self):
        shrine = EVENT_LIBRARY["shrine"]
        assert shrine.get_option("pray").label == "Pray (3 coins)"
        assert shrine.get_option("dance") is None


class TestResolveEvent:
    """Successful choices."""

    def test_shrine_pray(self, service, meta, rng, event_run):
        nxt = service.resolve_event(meta, event_run, "shrine", "pray", rng)
        assert nxt.player.coins == 3
        assert nxt.player.hearts == 5
        assert nxt.player.combo == 1
        assert nxt.get_event("shrine").resolved
        assert nxt.log[-1] == "Star Shrine: Pray (3 coins)."

    def test_shrine_sacrifice(self, service, meta, rng, event_run):
        nxt = service.resolve_event(meta, event_run, "shrine", "sacrifice", rng)
        assert nxt.player.hearts == 3
        assert nxt.has_item("arcane-dauber")
        assert nxt.metrics.items_collected == 1
        assert "arcane-dauber" in meta.codex.items

    def test_sacrifice_last_heart_ends_run(self, service, meta, rng, event_run):
        event_run.player.hearts = 1
        nxt = service.resolve_event(meta, event_run, "shrine", "sacrifice", rng)
        assert nxt.summary is not None
        assert not nxt.summary.victory

    def test_mystery_open_curses(self, service, meta, rng, event_run):
        nxt = service.resolve_event(meta, event_run, "mystery", "open", rng)
        assert nxt.player.coins == 11
        curse = nxt.player.get_status("curse")
        assert curse.stacks == 1 and curse.duration == 3
        assert nxt.metrics.statuses_applied == event_run.metrics.statuses_applied + 1

    def test_forge_ignite(self, service, meta, rng, event_run):
        nxt = service.resolve_event(meta, event_run, "forge", "ignite", rng)
        assert nxt.boss.get_status("burn").stacks == 3

    def test_smuggler_unlocks_biome(self, service, meta, rng, event_run):
        assert not meta.is_biome_unlocked("emberforge")
        nxt = service.resolve_event(meta, event_run, "smuggler", "threaten", rng)
        assert meta.is_biome_unlocked("emberforge")
        assert "Unlocked biome: emberforge." in nxt.log

    def test_fortune_teller_unlocks_item(self, service, meta, rng, event_run):
        service.resolve_event(meta, event_run, "fortune-teller", "learn", rng)
        assert meta.is_item_unlocked("seer-lens")

    def test_fortune_teller_vision_refreshes_preview(self, service, meta, rng, event_run):
        nxt = service.resolve_event(meta, event_run, "fortune-teller", "tip", rng)
        assert nxt.player.coins == 4
        assert nxt.player.status_stacks("vision") == 2
        assert nxt.preview == nxt.deck[:4]

    def test_fortune_teller_reshuffle(self, service, meta, rng, event_run):
        give(event_run, "lucky-charm")
        event_run.shop = []
        nxt = service.resolve_event(meta, event_run, "fortune-teller", "reshuffle", rng)
        assert len(nxt.shop) == 3
        assert nxt.player.coins == 6

    def test_input_untouched(self, service, meta, rng, event_run):
        before = event_run.to_dict()
        service.resolve_event(meta, event_run, "shrine", "pray", rng)
        assert event_run.to_dict() == before


class TestEventRefusals:
    """Every refusal logs and changes nothing else."""

    def test_not_offered(self, service, meta, rng, quiet_run):
        quiet_run.events = []
        nxt = service.resolve_event(meta, quiet_run, "shrine", "pray", rng)
        assert nxt.log[-1] == "That event is not available."

    def test_already_resolved(self, service, meta, rng, event_run):
        once = service.resolve_event(meta, event_run, "mystery", "leave", rng)
        twice = service.resolve_event(meta, once, "mystery", "leave", rng)
        assert twice.player.free_daubers == once.player.free_daubers
        assert twice.log[-1] == "Mysterious Door has already been resolved."

    def test_unknown_option(self, service, meta, rng, event_run):
        nxt = service.resolve_event(meta, event_run, "shrine", "dance", rng)
        assert nxt.log[-1] == "That choice is not available."
        assert not nxt.get_event("shrine").resolved

    def test_cannot_afford(self, service, meta, rng, event_run):
        event_run.player.coins = 2
        nxt = service.resolve_event(meta, event_run, "shrine", "pray", rng)
        assert nxt.log[-1] == "You cannot afford that choice."
        assert nxt.player.hearts == 4

    def test_missing_item(self, service, meta, rng, event_run):
        nxt = service.resolve_event(meta, event_run, "fortune-teller", "reshuffle", rng)
        assert nxt.log[-1] == "You lack the required item."
