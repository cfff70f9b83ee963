"""
Game Service - the WINGO run state machine.

Pure transitions from (meta, run, rng, action) to a new run. Every public
operation deep-copies the run it is given and returns the copy; the caller
always continues with the returned value. The only other side effects are
the RNG's 32-bit counter and appends to the meta ledger's codex/unlock lists.

Lifecycle:
    create_run -> active
    active --boss hp 0--> awaiting_advance (shop open)    [not last floor]
    active --boss hp 0--> summary(victory)                [last floor]
    active --hearts <= 0--> summary(defeat)
    awaiting_advance --advance_floor--> active (next floor)

A run with ``summary`` set is terminal: every action returns it unchanged,
without even a log entry.

Usage:
    service = GameService()
    meta = default_meta()
    rng = SeededRng(99)
    run = service.create_run(meta, rng, seed=99, biome_id="crypt")
    while run.summary is None:
        result = service.call_next(meta, run, rng)
        run = result.state
        if run.awaiting_advance:
            run = service.advance_floor(meta, run, rng)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .calc.damage import (
    adjust_threat,
    boss_max_hp,
    compute_bomb_damage,
    compute_call_damage,
    compute_counter_damage,
    passive_power,
    passive_presence_power,
)
from .content import (
    ALL_ITEMS,
    BALANCE,
    BIOMES,
    DEFAULT_DIFFICULTY_ID,
    EVENT_LIBRARY,
    validate_content,
)
from .content.balance import BalanceData
from .content.bosses import BiomeDefinition, BossDefinition
from .content.events import EventDefinition, StatusGrant
from .content.items import CURSED_BRAND, FREE_SPACE_CHARM, ItemDefinition
from .content.statuses import CURSE, StatusTarget, VISION
from .errors import RunConfigError
from .generation.board import (
    count_lines,
    deck_size,
    free_index,
    generate_board,
    shuffle_deck,
)
from .generation.modifiers import roll_encounter_modifier, roll_floor_modifier
from .generation.shop import generate_events, generate_shop
from .handlers.event_handler import EventHandler
from .handlers.item_handler import ItemHandler
from .handlers.shop_handler import CHARMED_STATUS, ShopHandler
from .handlers.statuses import (
    apply_wild_magic,
    consume_chill,
    grant_status,
    tick_boss_burn,
    tick_duration,
)
from .state.meta import MetaState, heart_bonus, update_codex, vision_bonus
from .state.rng import SeededRng
from .state.run import BoardCell, BossState, PlayerState, RunState, RunSummary

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

CURSED_BRAND_WHIFF_DAMAGE = 1
FREE_DAUBERS_PER_FLOOR = 1
RUN_ID_RANGE = 1_000_000


@dataclass
class CallResult:
    """Outcome of one call_next."""
    draw: int
    damage: int
    matched: int
    state: RunState


class GameService:
    """
    Public operations of the run state machine.

    Content tables default to the built-in ones and can be replaced per
    service (they are validated here, raising ContentError when malformed).
    """

    def __init__(
        self,
        balance: BalanceData = BALANCE,
        biomes: Mapping[str, BiomeDefinition] = BIOMES,
        items: Iterable[ItemDefinition] = ALL_ITEMS,
        events: Mapping[str, EventDefinition] = EVENT_LIBRARY,
    ):
        items = tuple(items)
        validate_content(balance, biomes, items, events)
        self.balance = balance
        self.biomes = dict(biomes)
        self.items = items
        self.events = dict(events)
        self.event_handler = EventHandler(self.events, self.items, balance)

    # =========================================================================
    # RUN CREATION
    # =========================================================================

    def create_run(
        self,
        meta: MetaState,
        rng: SeededRng,
        seed: int,
        biome_id: str,
        difficulty_id: str = DEFAULT_DIFFICULTY_ID,
    ) -> RunState:
        """
        Start a new run on floor 0.

        Raises:
            RunConfigError: unknown biome or difficulty id
        """
        biome = self.biomes.get(biome_id)
        if biome is None:
            raise RunConfigError(f"Unknown biome: {biome_id}")
        difficulty = self.balance.difficulties.get(difficulty_id)
        if difficulty is None:
            raise RunConfigError(f"Unknown difficulty: {difficulty_id}")

        threat = self.balance.adaptive.threat_start
        run = RunState(
            id=f"run-{seed}-{rng.int(RUN_ID_RANGE)}",
            seed=seed,
            biome=biome,
            difficulty=difficulty,
            floor_index=0,
            call_cap=difficulty.call_cap_base,
            calls_made=0,
            deck=[],
            preview=[],
            board=[],
            boss=self._create_boss(biome.floors[0], 0, threat),
            player=PlayerState(
                hearts=difficulty.starting_hearts + heart_bonus(meta),
                coins=difficulty.starting_coins,
                free_daubers=FREE_DAUBERS_PER_FLOOR,
            ),
            adaptive_threat=threat,
            log=[f"You enter the {biome.name}."],
        )
        self._start_floor(meta, run, rng)
        run.shop = generate_shop(
            meta, rng, self.items, biome, 0, run.inventory, difficulty,
        )
        run.shop_available = True
        update_codex(meta, run)
        logger.debug("Created %s (%s/%s)", run.id, biome.id, difficulty.id)
        return run

    def _create_boss(self, definition: BossDefinition, floor: int, threat: float) -> BossState:
        hp = boss_max_hp(definition.base_hp, floor, threat)
        return BossState(definition=definition, hp=hp, max_hp=hp)

    def _start_floor(self, meta: MetaState, run: RunState, rng: SeededRng) -> None:
        """
        Roll everything floor-scoped onto ``run``. The boss must already be set.

        RNG order: deck, board, floor modifier, encounter modifier, events.
        """
        difficulty = run.difficulty
        floor = run.floor_index

        run.deck = shuffle_deck(rng, difficulty.board_size, self.balance)
        run.board = generate_board(rng, difficulty, floor, self.balance)
        run.floor_modifier = roll_floor_modifier(rng, floor, self.balance)
        run.encounter_modifier = roll_encounter_modifier(rng, floor, difficulty, self.balance)

        for status_id in run.boss.definition.status:
            grant_status(run, StatusGrant(StatusTarget.BOSS, status_id, stacks=1))

        call_cap = difficulty.call_cap_base + difficulty.call_cap_per_floor * floor
        run.player.combo = 0
        if run.floor_modifier:
            effect = run.floor_modifier.effect
            run.log.append(f"Floor modifier: {run.floor_modifier.label}.")
            if effect.heal:
                run.player.hearts += effect.heal
            if effect.combo_start:
                run.player.combo = min(self.balance.combo.max, effect.combo_start)
        if run.encounter_modifier:
            modifier = run.encounter_modifier.definition
            run.log.append(f"Encounter: {modifier.name}. {modifier.description}")
            call_cap += modifier.effect.call_cap_modifier
            start = modifier.effect.starting_status
            if start:
                grant_status(run, StatusGrant(StatusTarget(start.target), start.id,
                                              stacks=start.stacks, duration=start.duration))
        run.call_cap = max(1, call_cap)
        run.calls_made = 0

        if run.has_item(FREE_SPACE_CHARM):
            run.board[free_index(difficulty.board_size)].status = CHARMED_STATUS

        run.events = generate_events(run.biome, rng)
        run.preview = self.compute_preview(meta, run)

    # =========================================================================
    # PREVIEW
    # =========================================================================

    def vision_score(self, meta: MetaState, run: RunState) -> int:
        """Preview length before clamping at 0."""
        vision = self.balance.preview_base
        vision += passive_presence_power(run.inventory, "vision")
        vision += vision_bonus(meta)
        vision += run.player.status_stacks(VISION)
        if run.floor_modifier:
            vision += run.floor_modifier.effect.preview_delta
        if run.encounter_modifier:
            vision -= run.encounter_modifier.definition.effect.preview_penalty
        return vision

    def compute_preview(self, meta: MetaState, run: RunState) -> List[int]:
        return list(run.deck[:max(0, self.vision_score(meta, run))])

    # =========================================================================
    # CALL RESOLUTION
    # =========================================================================

    def call_next(self, meta: MetaState, run: RunState, rng: SeededRng) -> CallResult:
        """
        Draw and resolve the next call.

        Returns the input run unchanged (draw 0) when the run is terminal or
        waiting for advance_floor.
        """
        if run.summary is not None or run.awaiting_advance:
            return CallResult(draw=0, damage=0, matched=0, state=run)

        nxt = run.copy()
        if not nxt.deck:
            nxt.deck = shuffle_deck(rng, nxt.board_size, self.balance)
            nxt.log.append("The deck is reshuffled.")
        draw = self._sequenced_draw(nxt, nxt.deck.pop(0))
        nxt.calls_made += 1

        matches = [cell for cell in nxt.board if not cell.marked and cell.number == draw]
        matches = self._filter_blocked(nxt, matches)

        damage = 0
        if matches:
            for cell in matches:
                cell.marked = True
            lines = count_lines(nxt.board, nxt.board_size)
            result = compute_call_damage(nxt, len(matches), lines, self.balance)
            damage = result.total
            for grant in result.inflicted:
                grant_status(nxt, grant)
            nxt.player.combo = min(self.balance.combo.max, nxt.player.combo + 1)
            nxt.boss.hp = max(0, nxt.boss.hp - damage)
            nxt.metrics.damage_dealt += damage
            plural = "s" if len(matches) > 1 else ""
            nxt.log.append(f"Call {draw} hits {len(matches)} cell{plural} for {damage} damage.")

            nxt.metrics.damage_dealt += tick_boss_burn(nxt)
            if nxt.floor_modifier:
                apply_wild_magic(nxt, rng, nxt.floor_modifier.effect.wild_magic_chance)
            if nxt.boss.hp == 0:
                self._on_boss_defeated(meta, nxt, rng)
        else:
            nxt.log.append(f"Call {draw} finds no match.")
            self._on_whiff(nxt)

        tick_duration(nxt.player.statuses, VISION)
        nxt.preview = self.compute_preview(meta, nxt)
        if nxt.summary is None and not nxt.awaiting_advance and nxt.calls_made >= nxt.call_cap:
            self._on_call_cap(nxt)

        update_codex(meta, nxt)
        return CallResult(draw=draw, damage=damage, matched=len(matches), state=nxt)

    def _sequenced_draw(self, run: RunState, natural: int) -> int:
        """
        Apply a sequence-offset encounter to the naturally drawn value.

        The first call anchors the sequence; each of the next ``count`` calls
        is previous + offset, wrapped into 1..deck size.
        """
        encounter = run.encounter_modifier
        if encounter is None or encounter.definition.effect.sequence_offset is None:
            return natural
        sequence = encounter.definition.effect.sequence_offset
        if encounter.sequence_remaining is None:
            encounter.sequence_anchor = natural
            encounter.sequence_remaining = sequence.count
            return natural
        if encounter.sequence_remaining <= 0:
            return natural
        top = deck_size(run.board_size, self.balance)
        draw = (encounter.sequence_anchor + sequence.offset - 1) % top + 1
        encounter.sequence_anchor = draw
        encounter.sequence_remaining -= 1
        return draw

    def _filter_blocked(self, run: RunState, matches: List[BoardCell]) -> List[BoardCell]:
        encounter = run.encounter_modifier
        if encounter is None or not encounter.blocking:
            return matches
        allowed = [cell for cell in matches if cell.column not in encounter.blocked_columns]
        if len(allowed) < len(matches):
            run.log.append(f"Sealed columns ignore the call ({', '.join(encounter.blocked_columns)}).")
        encounter.blocked_calls_left -= 1
        if encounter.blocked_calls_left <= 0:
            encounter.blocked_columns = ()
            encounter.blocked_calls_left = 0
            run.log.append("The seal breaks.")
        return allowed

    # =========================================================================
    # WHIFF / ENRAGE / DEFEAT
    # =========================================================================

    def _on_whiff(self, run: RunState) -> None:
        """
        Failed call: combo resets, then Cursed Brand lashes out, then the boss
        counters unless chill negates it.
        """
        run.player.combo = 0
        if run.has_item(CURSED_BRAND):
            run.player.hearts -= CURSED_BRAND_WHIFF_DAMAGE
            run.log.append("The curse lashes out for missing a call.")
            if run.player.hearts <= 0:
                self._finish(run, victory=False)
                return

        if consume_chill(run):
            run.log.append("The boss is chilled and misses a counter attack.")
        else:
            damage = compute_counter_damage(run)
            run.player.hearts -= damage
            run.log.append(f"{run.boss.definition.name} counters for {damage} damage.")
        tick_duration(run.player.statuses, CURSE)
        if run.player.hearts <= 0:
            self._finish(run, victory=False)

    def _on_call_cap(self, run: RunState) -> None:
        """Calls ran out: an enraged counter that ignores chill."""
        damage = compute_counter_damage(run)
        run.player.hearts -= damage
        run.log.append(f"{run.boss.definition.name} enrages as calls run out for {damage} damage!")
        if run.player.hearts <= 0:
            self._finish(run, victory=False)
            return
        run.calls_made = 0
        run.player.combo = 0

    def _on_boss_defeated(self, meta: MetaState, run: RunState, rng: SeededRng) -> None:
        boss = run.boss
        run.log.append(f"{boss.definition.name} is defeated!")
        run.defeated_bosses.append(boss.definition.id)

        low, high = run.difficulty.reward_coins
        coins = low + rng.int(high - low + 1) + passive_power(run.inventory, "economy", "luck")
        run.player.coins += coins
        run.metrics.coins_earned += coins
        run.log.append(f"You collect {coins} coins.")

        run.adaptive_threat = adjust_threat(
            run.adaptive_threat, run.calls_made, run.call_cap, self.balance.adaptive,
        )
        logger.debug(
            "%s: %s defeated on floor %d (threat %.2f)",
            run.id, boss.definition.id, run.floor_index, run.adaptive_threat,
        )

        if run.floor_index + 1 >= len(run.biome.floors):
            self._finish(run, victory=True)
            return

        run.awaiting_advance = True
        run.shop_available = True
        run.shop = generate_shop(
            meta, rng, self.items, run.biome, run.floor_index + 1, run.inventory, run.difficulty,
        )
        run.events = []
        run.log.append("The shop opens while you catch your breath.")

    def _finish(self, run: RunState, victory: bool) -> None:
        """Set the terminal summary. Never called twice for one run."""
        if run.summary is not None:
            return
        run.summary = RunSummary(
            victory=victory,
            floors_cleared=run.floor_index + (1 if victory else 0),
            damage_dealt=run.metrics.damage_dealt,
            calls_made=run.calls_made,
            items_collected=run.metrics.items_collected,
            statuses_applied=run.metrics.statuses_applied,
            coins_earned=run.metrics.coins_earned,
        )
        run.log.append("Victory! The biome is cleared." if victory else "Defeat. Your hearts give out.")
        logger.debug("%s finished: victory=%s floors=%d", run.id, victory, run.summary.floors_cleared)

    # =========================================================================
    # PLAYER ACTIONS
    # =========================================================================

    def free_mark(self, run: RunState, cell_id: str) -> RunState:
        """Spend a free dauber to mark any unmarked cell."""
        if run.summary is not None:
            return run
        nxt = run.copy()
        if nxt.player.free_daubers <= 0:
            nxt.log.append("No free daubers left.")
            return nxt
        cell = nxt.get_cell(cell_id)
        if cell is None:
            nxt.log.append("There is no such cell.")
            return nxt
        if cell.marked:
            nxt.log.append("That cell is already marked.")
            return nxt
        cell.marked = True
        nxt.player.free_daubers -= 1
        nxt.log.append("Free dauber used.")
        return nxt

    def use_bomb(self, meta: MetaState, run: RunState, rng: SeededRng) -> RunState:
        """Once per floor: 25% of the boss's max HP."""
        if run.summary is not None:
            return run
        nxt = run.copy()
        if nxt.awaiting_advance:
            nxt.log.append("The boss is already defeated.")
            return nxt
        if not nxt.player.bomb_ready:
            nxt.log.append("Your bomb is spent for this floor.")
            return nxt
        nxt.player.bomb_ready = False
        damage = min(nxt.boss.hp, compute_bomb_damage(nxt.boss.max_hp))
        nxt.boss.hp -= damage
        nxt.metrics.damage_dealt += damage
        nxt.log.append(f"Bomb deals {damage} damage!")
        if nxt.boss.hp == 0:
            self._on_boss_defeated(meta, nxt, rng)
            nxt.preview = self.compute_preview(meta, nxt)
        return nxt

    def buy_item(self, meta: MetaState, run: RunState, item_id: str) -> RunState:
        if run.summary is not None:
            return run
        nxt = run.copy()
        if ShopHandler.buy_item(meta, nxt, item_id).success:
            nxt.preview = self.compute_preview(meta, nxt)
        return nxt

    def use_item(self, meta: MetaState, run: RunState, item_id: str, rng: SeededRng) -> RunState:
        if run.summary is not None:
            return run
        nxt = run.copy()
        result = ItemHandler.use_item(meta, nxt, item_id, self.balance)
        if result.boss_damage and nxt.boss.hp == 0 and not nxt.awaiting_advance:
            self._on_boss_defeated(meta, nxt, rng)
        nxt.preview = self.compute_preview(meta, nxt)
        return nxt

    def reroll_shop(self, meta: MetaState, run: RunState, rng: SeededRng) -> RunState:
        if run.summary is not None:
            return run
        nxt = run.copy()
        ShopHandler.reroll_shop(meta, nxt, rng, self.items)
        return nxt

    def skip_shop(self, run: RunState) -> RunState:
        if run.summary is not None:
            return run
        nxt = run.copy()
        ShopHandler.skip_shop(nxt)
        return nxt

    def resolve_event(
        self,
        meta: MetaState,
        run: RunState,
        event_id: str,
        option_id: str,
        rng: SeededRng,
    ) -> RunState:
        """Resolve an event option. Losing the last heart here ends the run."""
        if run.summary is not None:
            return run
        nxt = run.copy()
        result = self.event_handler.resolve(meta, nxt, event_id, option_id, rng)
        if result.success:
            if nxt.player.hearts <= 0:
                self._finish(nxt, victory=False)
            nxt.preview = self.compute_preview(meta, nxt)
            update_codex(meta, nxt)
        return nxt

    def advance_floor(self, meta: MetaState, run: RunState, rng: SeededRng) -> RunState:
        """Leave the shop and start the next floor."""
        if run.summary is not None:
            return run
        nxt = run.copy()
        if not nxt.awaiting_advance:
            nxt.log.append("Defeat the boss before moving on.")
            return nxt

        nxt.floor_index += 1
        nxt.awaiting_advance = False
        nxt.shop_available = False
        definition = nxt.biome.floors[nxt.floor_index]
        nxt.boss = self._create_boss(definition, nxt.floor_index, nxt.adaptive_threat)
        nxt.player.free_daubers += FREE_DAUBERS_PER_FLOOR
        nxt.player.bomb_ready = True
        nxt.log.append(f"Floor {nxt.floor_index + 1}: {definition.name} approaches.")
        self._start_floor(meta, nxt, rng)
        update_codex(meta, nxt)
        logger.debug("%s advanced to floor %d", nxt.id, nxt.floor_index)
        return nxt

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def serialize(self, run: RunState, rng: Optional[SeededRng] = None) -> Dict[str, Any]:
        """JSON-safe snapshot of the run, plus the RNG state when given."""
        snapshot: Dict[str, Any] = {"version": SNAPSHOT_VERSION, "state": run.to_dict()}
        if rng is not None:
            snapshot["rng"] = rng.serialize()
        return snapshot

    def deserialize(self, snapshot: Mapping[str, Any], meta: MetaState) -> RunState:
        """
        Rebuild a run from serialize() output.

        Biome and difficulty are re-linked against this service's tables and
        the codex is refreshed.

        Raises:
            RunConfigError: the snapshot names an unknown biome or difficulty
        """
        data = snapshot.get("state")
        if not isinstance(data, Mapping):
            raise RunConfigError("Snapshot has no run state")
        biome = self.biomes.get(data.get("biome_id"))
        if biome is None:
            raise RunConfigError(f"Unknown biome: {data.get('biome_id')}")
        difficulty = self.balance.difficulties.get(data.get("difficulty_id"))
        if difficulty is None:
            raise RunConfigError(f"Unknown difficulty: {data.get('difficulty_id')}")
        run = RunState.from_dict(dict(data), biome, difficulty)
        update_codex(meta, run)
        return run

    @staticmethod
    def restore_rng(snapshot: Mapping[str, Any]) -> Optional[SeededRng]:
        """The RNG saved alongside a snapshot, if any."""
        if "rng" not in snapshot:
            return None
        return SeededRng.from_state(int(snapshot["rng"]))
