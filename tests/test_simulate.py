"""
Simulation Tests

Headless runs, the greedy policy's decisions and batch reporting.
"""

import csv

import pytest

from packages.wingo.content import get_item
from packages.wingo.content.items import HEALING_BREW
from packages.wingo.simulate import (
    CSV_COLUMNS,
    Action,
    SimResult,
    apply_action,
    call_only_policy,
    default_policy,
    main,
    run_headless,
    run_parallel,
    summarize_results,
    write_csv,
)
from packages.wingo.state.run import ShopOffer

from conftest import give


def result(seed, victory, floors, damage, finished=True):
    return SimResult(
        seed=seed, biome="crypt", difficulty="easy", victory=victory,
        floors_cleared=floors, damage_dealt=damage, calls_made=10,
        coins_earned=3, actions=12, finished=finished,
    )


class TestRunHeadless:

    def test_finishes(self):
        outcome = run_headless(42)
        assert outcome.finished
        assert outcome.actions > 0
        assert outcome.log_tail
        if outcome.victory:
            assert outcome.floors_cleared == 3
        else:
            assert outcome.floors_cleared < 3

    def test_deterministic(self):
        assert run_headless(7) == run_headless(7)

    def test_call_only_policy(self):
        outcome = run_headless(3, policy=call_only_policy)
        assert outcome.finished
        assert outcome.calls_made > 0

    def test_action_cap(self):
        outcome = run_headless(5, max_actions=2)
        assert not outcome.finished
        assert outcome.actions == 2
        assert not outcome.victory

    def test_meta_is_mutated_only_by_play(self, meta):
        run_headless(11, meta=meta)
        assert meta.stats.runs == 0


class TestDefaultPolicy:
    """Greedy decision order."""

    def test_calls_by_default(self, meta, quiet_run):
        assert default_policy(meta, quiet_run) == Action(Action.CALL)

    def test_bombs_low_boss(self, meta, quiet_run):
        quiet_run.boss.hp = 10
        assert default_policy(meta, quiet_run) == Action(Action.BOMB)

    def test_no_bomb_when_spent(self, meta, quiet_run):
        quiet_run.boss.hp = 10
        quiet_run.player.bomb_ready = False
        assert default_policy(meta, quiet_run) == Action(Action.CALL)

    def test_heals_at_one_heart(self, meta, quiet_run):
        give(quiet_run, HEALING_BREW)
        quiet_run.player.hearts = 1
        assert default_policy(meta, quiet_run) == Action(Action.USE, HEALING_BREW)

    def test_buys_cheapest_relic_between_floors(self, meta, quiet_run):
        quiet_run.awaiting_advance = True
        quiet_run.shop_available = True
        quiet_run.player.coins = 10
        quiet_run.shop = [
            ShopOffer(item=get_item("lucky-charm"), price=6),
            ShopOffer(item=get_item("whetstone"), price=2),
            ShopOffer(item=get_item(HEALING_BREW), price=1),
        ]
        assert not meta.is_item_unlocked("whetstone")
        assert default_policy(meta, quiet_run) == Action(Action.BUY, "lucky-charm")

    def test_advances_when_broke(self, meta, quiet_run):
        quiet_run.awaiting_advance = True
        quiet_run.player.coins = 0
        assert default_policy(meta, quiet_run) == Action(Action.ADVANCE)

    def test_unknown_action(self, service, meta, quiet_run, rng):
        with pytest.raises(ValueError):
            apply_action(service, meta, quiet_run, rng, Action("dance"))

    def test_apply_call(self, service, meta, quiet_run, rng):
        nxt = apply_action(service, meta, quiet_run, rng, Action(Action.CALL))
        assert nxt.calls_made == quiet_run.calls_made + 1


class TestReporting:

    def test_summary(self):
        stats = summarize_results([
            result(1, True, 3, 300),
            result(2, False, 1, 100),
            result(3, False, 0, 20, finished=False),
            result(4, True, 3, 260),
        ])
        assert stats["runs"] == 4
        assert stats["win_rate"] == pytest.approx(0.5)
        assert stats["mean_floors"] == pytest.approx(1.75)
        assert stats["mean_damage"] == pytest.approx(170.0)
        assert stats["p50_damage"] == pytest.approx(180.0)
        assert stats["unfinished"] == 1

    def test_empty_summary(self):
        assert summarize_results([])["runs"] == 0

    def test_write_csv(self, tmp_path):
        path = tmp_path / "out" / "runs.csv"
        write_csv([result(1, True, 3, 300), result(2, False, 1, 90)], path)
        with path.open(newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert tuple(rows[0].keys()) == CSV_COLUMNS
        assert rows[0]["victory"] == "1"
        assert rows[1]["damage"] == "90"

    def test_main(self, tmp_path):
        path = tmp_path / "sim.csv"
        assert main(["--seeds", "2", "--csv", str(path)]) == 0
        with path.open(newline="", encoding="utf-8") as f:
            assert len(list(csv.DictReader(f))) == 2


class TestParallel:

    def test_matches_sequential(self):
        seeds = [1, 2, 3]
        parallel = run_parallel(seeds, max_workers=2)
        sequential = [run_headless(seed) for seed in seeds]
        assert parallel == sequential
