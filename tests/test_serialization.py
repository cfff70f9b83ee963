"""
Serialization Tests

Snapshots survive JSON, re-link content and replay identically with the
saved RNG state.
"""

import json

import pytest

from packages.wingo.content import BALANCE
from packages.wingo.errors import RunConfigError
from packages.wingo.game import SNAPSHOT_VERSION
from packages.wingo.state.meta import default_meta
from packages.wingo.state.rng import SeededRng
from packages.wingo.state.run import EncounterModifierState, RunState

from conftest import give


def play(service, meta, run, rng, calls):
    for _ in range(calls):
        if run.summary is not None:
            break
        if run.awaiting_advance:
            run = service.advance_floor(meta, run, rng)
        else:
            run = service.call_next(meta, run, rng).state
    return run


class TestSnapshot:
    """serialize / deserialize."""

    def test_snapshot_shape(self, service, run, rng):
        snapshot = service.serialize(run, rng)
        assert snapshot["version"] == SNAPSHOT_VERSION
        assert snapshot["rng"] == rng.serialize()
        assert snapshot["state"]["biome_id"] == "crypt"
        assert snapshot["state"]["difficulty_id"] == "easy"

    def test_rng_optional(self, service, run):
        snapshot = service.serialize(run)
        assert "rng" not in snapshot
        assert service.restore_rng(snapshot) is None

    def test_json_roundtrip(self, service, meta, run, rng):
        give(run, "lucky-charm", quantity=2)
        snapshot = json.loads(json.dumps(service.serialize(run, rng)))
        restored = service.deserialize(snapshot, meta)
        assert restored.to_dict() == run.to_dict()
        assert restored.biome is run.biome
        assert restored.difficulty is run.difficulty

    def test_mid_run_roundtrip(self, service, meta, run, rng):
        run = play(service, meta, run, rng, 12)
        snapshot = json.loads(json.dumps(service.serialize(run, rng)))
        assert service.deserialize(snapshot, meta).to_dict() == run.to_dict()

    def test_replay_matches(self, service, meta, run, rng):
        run = play(service, meta, run, rng, 5)
        snapshot = json.loads(json.dumps(service.serialize(run, rng)))

        original = play(service, meta, run, rng, 30)

        restored = service.deserialize(snapshot, default_meta())
        restored_rng = service.restore_rng(snapshot)
        replayed = play(service, default_meta(), restored, restored_rng, 30)

        assert replayed.to_dict() == original.to_dict()
        assert restored_rng.serialize() == rng.serialize()

    def test_unknown_biome(self, service, meta, run):
        snapshot = service.serialize(run)
        snapshot["state"]["biome_id"] = "moon"
        with pytest.raises(RunConfigError):
            service.deserialize(snapshot, meta)

    def test_unknown_difficulty(self, service, meta, run):
        snapshot = service.serialize(run)
        snapshot["state"]["difficulty_id"] = "nightmare"
        with pytest.raises(RunConfigError):
            service.deserialize(snapshot, meta)

    def test_missing_state(self, service, meta):
        with pytest.raises(RunConfigError):
            service.deserialize({"version": SNAPSHOT_VERSION}, meta)

    def test_summary_survives(self, service, meta, quiet_run, rng):
        quiet_run.deck = [33]
        quiet_run.player.hearts = 1
        dead = service.call_next(meta, quiet_run, rng).state
        restored = service.deserialize(service.serialize(dead), meta)
        assert restored.summary == dead.summary


class TestEncounterState:
    """Runtime countdowns of encounter modifiers."""

    def _sealed(self):
        definition = next(m for m in BALANCE.encounter_modifiers if m.id == "sealed-center")
        return EncounterModifierState.start(definition)

    def test_start(self):
        state = self._sealed()
        assert state.blocked_columns == ("N",)
        assert state.blocked_calls_left == 6
        assert state.blocking
        assert state.sequence_remaining is None

    def test_roundtrip_keeps_countdown(self):
        state = self._sealed()
        state.blocked_calls_left = 2
        assert EncounterModifierState.from_dict(state.to_dict()).blocked_calls_left == 2

    def test_missing_runtime_fields_rederived(self):
        data = self._sealed().to_dict()
        del data["blocked_columns"]
        del data["blocked_calls_left"]
        restored = EncounterModifierState.from_dict(data)
        assert restored.blocked_columns == ("N",)
        assert restored.blocked_calls_left == 6

    def test_run_state_roundtrip_with_encounter(self, run):
        run.encounter_modifier = self._sealed()
        restored = RunState.from_dict(run.to_dict(), run.biome, run.difficulty)
        assert restored.encounter_modifier.definition == run.encounter_modifier.definition


class TestCopy:

    def test_copy_shares_definitions(self, run):
        clone = run.copy()
        assert clone.biome is run.biome
        assert clone.boss.definition is run.boss.definition
        assert clone.board is not run.board

    def test_copy_is_deep(self, run):
        clone = run.copy()
        clone.board[0].marked = True
        clone.player.coins += 10
        assert not run.board[0].marked
        assert run.player.coins != clone.player.coins

    def test_rng_snapshot_independent(self, service, run):
        rng = SeededRng(5)
        snapshot = service.serialize(run, rng)
        rng.take(3)
        assert service.restore_rng(snapshot).serialize() != rng.serialize()
