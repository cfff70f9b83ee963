"""
Damage Calculation Tests

Call, counter and bomb damage against hand-built run states, plus boss HP
scaling and adaptive threat.
"""

import pytest

from packages.wingo.calc.damage import (
    adjust_threat,
    boss_max_hp,
    compute_bomb_damage,
    compute_call_damage,
    compute_counter_damage,
    line_bonus,
    passive_power,
    round_half_up,
)
from packages.wingo.content import BALANCE
from packages.wingo.content.events import StatusGrant
from packages.wingo.content.statuses import BURN, CHILL, StatusTarget, VULNERABLE
from packages.wingo.handlers.statuses import grant_status

from conftest import give


def boss_status(run, status_id, stacks, duration=None):
    grant_status(run, StatusGrant(StatusTarget.BOSS, status_id, stacks=stacks, duration=duration))


def player_status(run, status_id, stacks, duration=None):
    grant_status(run, StatusGrant(StatusTarget.PLAYER, status_id, stacks=stacks, duration=duration))


class TestRounding:

    def test_half_rounds_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_regular_rounding(self):
        assert round_half_up(4.8) == 5
        assert round_half_up(4.4) == 4


class TestBaseDamage:
    """matched * hit + combo * combo bonus + line tiers."""

    def test_single_hit(self, quiet_run):
        assert compute_call_damage(quiet_run, 1, 0, BALANCE).total == 4

    def test_multiple_matches(self, quiet_run):
        assert compute_call_damage(quiet_run, 3, 0, BALANCE).total == 12

    def test_combo_adds(self, quiet_run):
        quiet_run.player.combo = 3
        assert compute_call_damage(quiet_run, 1, 0, BALANCE).total == 7

    def test_line_tiers_are_additive(self):
        assert line_bonus(0, BALANCE) == 0
        assert line_bonus(1, BALANCE) == 10
        assert line_bonus(2, BALANCE) == 24
        assert line_bonus(3, BALANCE) == 44
        assert line_bonus(4, BALANCE) == 74
        assert line_bonus(8, BALANCE) == 74

    def test_line_damage(self, quiet_run):
        result = compute_call_damage(quiet_run, 1, 2, BALANCE)
        assert result.total == 4 + 24
        assert result.line_bonus == 24


class TestRelicBonuses:
    """Passive item contributions."""

    def test_damage_relic_uses_rarity_power(self, quiet_run):
        give(quiet_run, "whetstone")
        assert compute_call_damage(quiet_run, 1, 0, BALANCE).total == 5

    def test_damage_relic_stacks_by_quantity(self, quiet_run):
        give(quiet_run, "whetstone", quantity=2)
        assert compute_call_damage(quiet_run, 1, 0, BALANCE).total == 6

    def test_modifier_counts_as_passive(self, quiet_run):
        give(quiet_run, "starlit-ink")
        assert compute_call_damage(quiet_run, 1, 0, BALANCE).total == 7

    def test_combo_tag_adds_per_match(self, quiet_run):
        give(quiet_run, "war-drum")
        # 2 * 4 base + 2 (uncommon damage) + 2 matched
        assert compute_call_damage(quiet_run, 2, 0, BALANCE).total == 12

    def test_arcane_dauber(self, quiet_run):
        give(quiet_run, "arcane-dauber")
        quiet_run.player.combo = 2
        # 4 + 2 combo, +1 combo tag, +4 arcane
        result = compute_call_damage(quiet_run, 1, 0, BALANCE)
        assert result.total == 11
        assert result.total > BALANCE.damage.hit

    def test_consumables_are_not_passive(self, quiet_run):
        give(quiet_run, "fire-bomb")
        assert passive_power(quiet_run.inventory, "damage") == 0
        assert compute_call_damage(quiet_run, 1, 0, BALANCE).total == 4


class TestStatusesLeaveCallDamageAlone:
    """Statuses are tracked but never change the call formula."""

    @pytest.mark.parametrize("status_id", [VULNERABLE, "shield", "ooze", "rebirth"])
    def test_boss_status(self, quiet_run, status_id):
        boss_status(quiet_run, status_id, 3, duration=2)
        assert compute_call_damage(quiet_run, 1, 1, BALANCE).total == 4 + 10

    def test_player_fury(self, quiet_run):
        player_status(quiet_run, "fury", 2, duration=1)
        assert compute_call_damage(quiet_run, 1, 1, BALANCE).total == 4 + 10


class TestNamedItems:
    """Embershard, Frost Lantern, Cursed Brand."""

    def test_cursed_brand_multiplies(self, quiet_run):
        give(quiet_run, "cursed-brand")
        result = compute_call_damage(quiet_run, 1, 0, BALANCE)
        # round(4 * 1.2) = 5
        assert result.total == 5
        assert any(g.id == VULNERABLE for g in result.inflicted)

    def test_embershard_burns_on_line(self, quiet_run):
        give(quiet_run, "embershard")
        assert compute_call_damage(quiet_run, 1, 0, BALANCE).inflicted == ()
        result = compute_call_damage(quiet_run, 1, 1, BALANCE)
        assert [g.id for g in result.inflicted] == [BURN]
        assert result.total == 4 + 10 + 2

    def test_frost_lantern_chills_on_line(self, quiet_run):
        give(quiet_run, "frost-lantern")
        result = compute_call_damage(quiet_run, 1, 1, BALANCE)
        assert [g.id for g in result.inflicted] == [CHILL]
        assert result.inflicted[0].target == StatusTarget.BOSS


class TestCounterDamage:
    """Boss counterattacks."""

    def test_base_counter(self, quiet_run):
        assert compute_counter_damage(quiet_run) == 1

    def test_shield_relic_floors_at_one(self, quiet_run):
        give(quiet_run, "bone-ward")
        assert compute_counter_damage(quiet_run) == 1

    def test_statuses_do_not_change_counter(self, quiet_run):
        player_status(quiet_run, "curse", 2, duration=3)
        boss_status(quiet_run, "ooze", 3)
        assert compute_counter_damage(quiet_run) == 1


class TestScaling:
    """Bomb, boss HP and adaptive threat."""

    def test_bomb(self):
        assert compute_bomb_damage(60) == 15
        assert compute_bomb_damage(62) == 16

    def test_boss_hp(self):
        assert boss_max_hp(60, 0, 1.0) == 60
        assert boss_max_hp(80, 1, 1.0) == 94
        assert boss_max_hp(110, 2, 1.1) == 165

    def test_fast_kill_lowers_threat_but_not_below_one(self):
        adaptive = BALANCE.adaptive
        assert adjust_threat(1.0, 5, 20, adaptive) == 1.0
        assert adjust_threat(1.2, 5, 20, adaptive) == pytest.approx(1.1)

    def test_slow_kill_raises_threat(self):
        assert adjust_threat(1.0, 19, 20, BALANCE.adaptive) == pytest.approx(1.1)

    def test_middle_band_unchanged(self):
        assert adjust_threat(1.3, 12, 20, BALANCE.adaptive) == 1.3
