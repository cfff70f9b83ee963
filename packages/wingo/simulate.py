"""
Headless simulation - play whole WINGO runs without a UI.

A policy looks at (meta, run) and returns an Action. ``run_headless`` drives
one seeded run to its summary (or an action cap); ``run_parallel`` fans seeds
out over worker processes. Results summarize into win rate and damage
percentiles and can be written to CSV for balance work.

Usage:
    python -m packages.wingo.simulate --biome crypt --difficulty easy --seeds 200
"""

from __future__ import annotations

import argparse
import csv
import logging
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np

from .content import DEFAULT_DIFFICULTY_ID, STARTER_BIOME_ID
from .content.items import HEALING_BREW, ItemType
from .game import GameService
from .state.meta import MetaState, default_meta
from .state.rng import SeededRng
from .state.run import RunState

logger = logging.getLogger(__name__)

DEFAULT_MAX_ACTIONS = 5000
BOMB_HP_FRACTION = 0.25

CSV_COLUMNS = ("seed", "biome", "victory", "floors", "damage", "calls", "coins")


# =============================================================================
# ACTIONS AND POLICIES
# =============================================================================

@dataclass(frozen=True)
class Action:
    """One player decision. ``arg`` carries an item id for buy/use."""
    kind: str
    arg: Optional[str] = None

    CALL = "call"
    ADVANCE = "advance"
    BOMB = "bomb"
    BUY = "buy"
    USE = "use"


Policy = Callable[[MetaState, RunState], Action]


def default_policy(meta: MetaState, run: RunState) -> Action:
    """
    Simple greedy play.

    Priority:
    1. Between floors: buy the cheapest affordable relic, then advance
    2. Drink a healing consumable at one heart
    3. Bomb once the boss is at or below a quarter of its HP
    4. Otherwise call
    """
    if run.awaiting_advance:
        offer = _affordable_relic(meta, run)
        if offer is not None:
            return Action(Action.BUY, offer)
        return Action(Action.ADVANCE)

    if run.player.hearts <= 1:
        entry = run.get_inventory(HEALING_BREW)
        if entry is not None and entry.quantity > 0:
            return Action(Action.USE, HEALING_BREW)

    if run.player.bomb_ready and run.boss.hp <= run.boss.max_hp * BOMB_HP_FRACTION:
        return Action(Action.BOMB)

    return Action(Action.CALL)


def call_only_policy(meta: MetaState, run: RunState) -> Action:
    """Never shops or bombs; advances when it has to."""
    if run.awaiting_advance:
        return Action(Action.ADVANCE)
    return Action(Action.CALL)


def _affordable_relic(meta: MetaState, run: RunState) -> Optional[str]:
    if not run.shop_available:
        return None
    candidates = [
        offer for offer in run.shop
        if not offer.sold
        and not offer.locked
        and offer.item.type != ItemType.CURSE
        and offer.item.is_passive
        and offer.price <= run.player.coins
        and meta.is_item_unlocked(offer.item.id)
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda o: o.price).item.id


def apply_action(
    service: GameService,
    meta: MetaState,
    run: RunState,
    rng: SeededRng,
    action: Action,
) -> RunState:
    """Dispatch an Action to the matching GameService operation."""
    if action.kind == Action.CALL:
        return service.call_next(meta, run, rng).state
    if action.kind == Action.ADVANCE:
        return service.advance_floor(meta, run, rng)
    if action.kind == Action.BOMB:
        return service.use_bomb(meta, run, rng)
    if action.kind == Action.BUY:
        return service.buy_item(meta, run, action.arg)
    if action.kind == Action.USE:
        return service.use_item(meta, run, action.arg, rng)
    raise ValueError(f"Unknown action: {action.kind}")


# =============================================================================
# HEADLESS RUNS
# =============================================================================

@dataclass
class SimResult:
    """Result of a headless run."""
    seed: int
    biome: str
    difficulty: str
    victory: bool
    floors_cleared: int
    damage_dealt: int
    calls_made: int
    coins_earned: int
    actions: int
    finished: bool = True
    log_tail: List[str] = field(default_factory=list)

    def to_row(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "biome": self.biome,
            "victory": int(self.victory),
            "floors": self.floors_cleared,
            "damage": self.damage_dealt,
            "calls": self.calls_made,
            "coins": self.coins_earned,
        }


def run_headless(
    seed: int,
    biome_id: str = STARTER_BIOME_ID,
    difficulty_id: str = DEFAULT_DIFFICULTY_ID,
    policy: Optional[Policy] = None,
    max_actions: int = DEFAULT_MAX_ACTIONS,
    meta: Optional[MetaState] = None,
) -> SimResult:
    """
    Play one run to its summary with a policy.

    Args:
        seed: Run seed
        biome_id: Biome to play
        difficulty_id: Difficulty preset
        policy: Callable(meta, run) -> Action; default_policy when None
        max_actions: Safety limit; an unfinished run reports finished=False
        meta: Ledger to play with (a fresh one when None; it is mutated)

    Returns:
        SimResult with the run outcome
    """
    if policy is None:
        policy = default_policy
    if meta is None:
        meta = default_meta()

    service = GameService()
    rng = SeededRng(seed)
    run = service.create_run(meta, rng, seed=seed, biome_id=biome_id, difficulty_id=difficulty_id)

    actions = 0
    while run.summary is None and actions < max_actions:
        run = apply_action(service, meta, run, rng, policy(meta, run))
        actions += 1

    summary = run.summary
    if summary is None:
        logger.warning("Seed %d hit the action cap (%d) on floor %d", seed, max_actions, run.floor_index)
        return SimResult(
            seed=seed,
            biome=biome_id,
            difficulty=difficulty_id,
            victory=False,
            floors_cleared=run.floor_index,
            damage_dealt=run.metrics.damage_dealt,
            calls_made=run.calls_made,
            coins_earned=run.metrics.coins_earned,
            actions=actions,
            finished=False,
            log_tail=run.log[-5:],
        )

    return SimResult(
        seed=seed,
        biome=biome_id,
        difficulty=difficulty_id,
        victory=summary.victory,
        floors_cleared=summary.floors_cleared,
        damage_dealt=summary.damage_dealt,
        calls_made=summary.calls_made,
        coins_earned=summary.coins_earned,
        actions=actions,
        log_tail=run.log[-5:],
    )


def run_parallel(
    seeds: Sequence[int],
    biome_id: str = STARTER_BIOME_ID,
    difficulty_id: str = DEFAULT_DIFFICULTY_ID,
    policy: Optional[Policy] = None,
    max_workers: int = 4,
) -> List[SimResult]:
    """
    Run many seeds in worker processes.

    The policy must be picklable (a module-level function, not a lambda).
    Results come back in the order of ``seeds``.
    """
    from concurrent.futures import ProcessPoolExecutor

    job = partial(run_headless, biome_id=biome_id, difficulty_id=difficulty_id, policy=policy)
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(job, seeds))


# =============================================================================
# REPORTING
# =============================================================================

def summarize_results(results: Sequence[SimResult]) -> Dict[str, float]:
    """Win rate, floor and damage statistics over a batch."""
    if not results:
        return {"runs": 0, "win_rate": 0.0, "mean_floors": 0.0,
                "mean_damage": 0.0, "p50_damage": 0.0, "p90_damage": 0.0, "unfinished": 0}
    victories = np.array([r.victory for r in results], dtype=float)
    floors = np.array([r.floors_cleared for r in results], dtype=float)
    damage = np.array([r.damage_dealt for r in results], dtype=float)
    return {
        "runs": len(results),
        "win_rate": float(victories.mean()),
        "mean_floors": float(floors.mean()),
        "mean_damage": float(damage.mean()),
        "p50_damage": float(np.percentile(damage, 50)),
        "p90_damage": float(np.percentile(damage, 90)),
        "unfinished": sum(1 for r in results if not r.finished),
    }


def write_csv(results: Sequence[SimResult], path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for result in results:
            writer.writerow(result.to_row())


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Simulate WINGO runs headlessly")
    parser.add_argument("--biome", default=STARTER_BIOME_ID, help="Biome id")
    parser.add_argument("--difficulty", default=DEFAULT_DIFFICULTY_ID, help="Difficulty id")
    parser.add_argument("--seeds", type=int, default=100, help="Number of seeds to play")
    parser.add_argument("--start-seed", type=int, default=1, help="First seed")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes")
    parser.add_argument("--csv", type=Path, default=None, help="Write per-run rows here")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    seeds = list(range(args.start_seed, args.start_seed + args.seeds))
    if args.workers > 1:
        results = run_parallel(seeds, args.biome, args.difficulty, max_workers=args.workers)
    else:
        results = [run_headless(s, args.biome, args.difficulty) for s in seeds]

    stats = summarize_results(results)
    logger.info(
        "%s/%s: %d runs, win rate %.1f%%, mean floors %.2f, damage p50 %.0f p90 %.0f",
        args.biome, args.difficulty, stats["runs"], stats["win_rate"] * 100,
        stats["mean_floors"], stats["p50_damage"], stats["p90_damage"],
    )
    if args.csv is not None:
        write_csv(results, args.csv)
        logger.info("Wrote %s", args.csv)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
