"""
Meta Progression Tests

Ledger defaults, migration, xp folding and threshold unlocks.
"""

from packages.wingo.content.events import StatusGrant
from packages.wingo.content.items import STARTER_ITEM_IDS
from packages.wingo.content.statuses import StatusTarget
from packages.wingo.handlers.statuses import grant_status
from packages.wingo.state.meta import (
    META_VERSION,
    MetaState,
    apply_unlocks,
    default_meta,
    heart_bonus,
    migrate_meta,
    record_run,
    update_codex,
    vision_bonus,
    xp_for_summary,
)
from packages.wingo.state.run import RunSummary

from conftest import give


def summary(victory, floors):
    return RunSummary(
        victory=victory, floors_cleared=floors, damage_dealt=0, calls_made=0,
        items_collected=0, statuses_applied=0, coins_earned=0,
    )


class TestDefaults:

    def test_default_meta(self):
        meta = default_meta()
        assert meta.version == META_VERSION
        assert meta.xp == 0
        assert meta.unlocks.biomes == ["crypt"]
        assert meta.unlocks.items == list(STARTER_ITEM_IDS)

    def test_unlock_is_unique(self):
        meta = default_meta()
        assert meta.unlock_biome("aurora")
        assert not meta.unlock_biome("aurora")
        assert meta.unlocks.biomes.count("aurora") == 1

    def test_roundtrip(self):
        meta = default_meta()
        meta.xp = 33
        meta.unlock_item("embershard")
        meta.settings.reduced_motion = True
        assert MetaState.from_dict(meta.to_dict()).to_dict() == meta.to_dict()


class TestMigration:

    def test_empty_payload(self):
        meta = migrate_meta({})
        assert meta.is_biome_unlocked("crypt")
        assert all(meta.is_item_unlocked(i) for i in STARTER_ITEM_IDS)

    def test_starters_restored(self):
        meta = migrate_meta({"version": 0, "xp": 12, "unlocks": {"biomes": ["aurora"], "items": []}})
        assert meta.version == META_VERSION
        assert meta.xp == 12
        assert meta.is_biome_unlocked("aurora")
        assert meta.is_biome_unlocked("crypt")
        assert meta.is_item_unlocked("healing-brew")


class TestBonuses:

    def test_heart_bonus(self):
        meta = default_meta()
        assert heart_bonus(meta) == 0
        meta.xp = 25
        assert heart_bonus(meta) == 1
        meta.xp = 60
        assert heart_bonus(meta) == 2

    def test_vision_bonus(self):
        meta = default_meta()
        meta.xp = 39
        assert vision_bonus(meta) == 0
        meta.xp = 40
        assert vision_bonus(meta) == 1


class TestRecordRun:
    """Folding a summary into the ledger."""

    def test_xp(self):
        assert xp_for_summary(summary(False, 0)) == 0
        assert xp_for_summary(summary(False, 2)) == 10
        assert xp_for_summary(summary(True, 3)) == 25

    def test_stats(self):
        meta = default_meta()
        assert record_run(meta, summary(True, 3)) == 25
        record_run(meta, summary(False, 1))
        assert meta.stats.runs == 2
        assert meta.stats.victories == 1
        assert meta.stats.best_floor == 3
        assert meta.xp == 30

    def test_threshold_unlocks(self):
        meta = default_meta()
        record_run(meta, summary(True, 3))
        assert meta.is_biome_unlocked("emberforge")
        assert meta.is_item_unlocked("embershard")
        assert meta.is_item_unlocked("seer-lens")
        assert not meta.is_item_unlocked("frost-lantern")
        assert not meta.is_biome_unlocked("aurora")

    def test_apply_unlocks_reports_new_ids_once(self):
        meta = default_meta()
        meta.xp = 16
        assert apply_unlocks(meta) == ["emberforge", "embershard"]
        assert apply_unlocks(meta) == []


class TestCodex:

    def test_codex_collects_boss_items_and_statuses(self, meta, quiet_run):
        give(quiet_run, "whetstone")
        grant_status(quiet_run, StatusGrant(StatusTarget.BOSS, "ooze", stacks=1))
        update_codex(meta, quiet_run, "hex-vial")
        assert "hex-vial" in meta.codex.items
        assert "whetstone" in meta.codex.items
        assert "grave-counter" in meta.codex.bosses
        assert "ooze" in meta.codex.statuses

    def test_codex_has_no_duplicates(self, meta, quiet_run):
        update_codex(meta, quiet_run)
        update_codex(meta, quiet_run)
        assert meta.codex.bosses.count("grave-counter") == 1
