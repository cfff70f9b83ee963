"""
Status Tests

Merge-on-insert bookkeeping and the per-call status triggers.
"""

from packages.wingo.content.events import StatusGrant
from packages.wingo.content.statuses import StatusTarget, WILD_MAGIC_STATUSES
from packages.wingo.handlers.statuses import (
    add_status,
    apply_wild_magic,
    consume_chill,
    grant_status,
    tick_boss_burn,
    tick_duration,
)
from packages.wingo.state.rng import SeededRng
from packages.wingo.state.run import StatusEffectState


def status(status_id, stacks, duration=None, target=StatusTarget.BOSS):
    return StatusEffectState(id=status_id, stacks=stacks, target=target, duration=duration)


class TestMerge:
    """Same id on the same target merges."""

    def test_merge_sums_stacks_and_durations(self):
        collection = []
        add_status(collection, status("burn", 2, duration=2))
        add_status(collection, status("burn", 3, duration=1))
        assert len(collection) == 1
        assert collection[0].stacks == 5
        assert collection[0].duration == 3

    def test_untimed_merge_keeps_no_duration(self):
        collection = []
        add_status(collection, status("shield", 1))
        add_status(collection, status("shield", 2))
        assert collection[0].stacks == 3
        assert collection[0].duration is None

    def test_grant_routes_by_target(self, quiet_run):
        grant_status(quiet_run, StatusGrant(StatusTarget.PLAYER, "fury", stacks=1, duration=1))
        grant_status(quiet_run, StatusGrant(StatusTarget.BOSS, "ooze", stacks=2))
        assert quiet_run.player.get_status("fury") is not None
        assert quiet_run.boss.status_stacks("ooze") == 2
        assert quiet_run.player.get_status("ooze") is None

    def test_grant_counts_stacks(self, quiet_run):
        before = quiet_run.metrics.statuses_applied
        grant_status(quiet_run, StatusGrant(StatusTarget.BOSS, "burn", stacks=3, duration=3))
        assert quiet_run.metrics.statuses_applied == before + 3


class TestTicks:

    def test_tick_duration_removes_at_zero(self):
        collection = [status("vision", 2, duration=1, target=StatusTarget.PLAYER)]
        assert tick_duration(collection, "vision") is None
        assert collection == []

    def test_tick_ignores_untimed(self):
        collection = [status("shield", 2)]
        assert tick_duration(collection, "shield").stacks == 2

    def test_tick_missing_status(self):
        assert tick_duration([], "curse") is None

    def test_burn_tick(self, quiet_run):
        quiet_run.boss.statuses.append(status("burn", 3, duration=2))
        assert tick_boss_burn(quiet_run) == 3
        assert quiet_run.boss.hp == 57
        assert tick_boss_burn(quiet_run) == 3
        assert quiet_run.boss.get_status("burn") is None
        assert tick_boss_burn(quiet_run) == 0

    def test_burn_cannot_overkill(self, quiet_run):
        quiet_run.boss.hp = 2
        quiet_run.boss.statuses.append(status("burn", 5, duration=3))
        assert tick_boss_burn(quiet_run) == 2
        assert quiet_run.boss.hp == 0

    def test_chill_with_duration(self, quiet_run):
        quiet_run.boss.statuses.append(status("chill", 1, duration=1))
        assert consume_chill(quiet_run)
        assert quiet_run.boss.get_status("chill") is None
        assert not consume_chill(quiet_run)

    def test_untimed_chill_is_inert(self, quiet_run):
        quiet_run.boss.statuses.append(status("chill", 2))
        assert not consume_chill(quiet_run)
        assert quiet_run.boss.status_stacks("chill") == 2

    def test_longer_chill_ticks_duration(self, quiet_run):
        quiet_run.boss.statuses.append(status("chill", 1, duration=2))
        assert consume_chill(quiet_run)
        assert quiet_run.boss.get_status("chill").duration == 1


class TestWildMagic:

    def test_zero_chance_draws_nothing(self, quiet_run):
        rng = SeededRng(3)
        state = rng.serialize()
        assert apply_wild_magic(quiet_run, rng, 0.0) is None
        assert rng.serialize() == state

    def test_certain_chance_lands_a_status(self, quiet_run):
        grant = apply_wild_magic(quiet_run, SeededRng(3), 1.0)
        assert grant is not None
        assert grant.id in WILD_MAGIC_STATUSES
        owner = quiet_run.boss if grant.target == StatusTarget.BOSS else quiet_run.player
        assert owner.status_stacks(grant.id) == 1
        assert quiet_run.log[-1].startswith("Wild magic")

    def test_deterministic(self, service, meta):
        runs = []
        for _ in range(2):
            run = service.create_run(meta, SeededRng(6), seed=6, biome_id="crypt")
            runs.append(apply_wild_magic(run, SeededRng(10), 1.0))
        assert runs[0] == runs[1]
