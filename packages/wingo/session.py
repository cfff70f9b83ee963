"""
Game Session - the caller-owned context around a GameService.

A session holds ``(meta, run, rng)`` for one player, mirrors the service's
public operations, and persists both the ledger and the in-flight run after
every action through an injected RunStore. It also folds a finished run's
summary into the ledger exactly once.

Stores:
- MemoryStore: dicts in memory (tests, simulations)
- FileStore:   ``meta.json`` and ``run.json`` in a directory

A corrupt stored payload is logged and treated as absent; it never blocks
starting a new session.
"""

from __future__ import annotations

import json
import logging
import random
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .content import DEFAULT_DIFFICULTY_ID
from .errors import RunConfigError
from .game import CallResult, GameService
from .state.meta import MetaState, default_meta, migrate_meta, record_run
from .state.rng import SeededRng
from .state.run import RunState

logger = logging.getLogger(__name__)


class RunStore(ABC):
    """Abstract interface for session persistence."""

    @abstractmethod
    def load_meta(self) -> Optional[Dict[str, Any]]:
        """Stored ledger payload, or None."""

    @abstractmethod
    def save_meta(self, payload: Dict[str, Any]) -> None:
        """Persist the ledger payload."""

    @abstractmethod
    def load_run(self) -> Optional[Dict[str, Any]]:
        """Stored run payload (``{"run": snapshot, "rng": state}``), or None."""

    @abstractmethod
    def save_run(self, payload: Dict[str, Any]) -> None:
        """Persist the run payload."""

    @abstractmethod
    def delete_run(self) -> None:
        """Forget the stored run."""


class MemoryStore(RunStore):
    """Holds payloads in memory only."""

    def __init__(self) -> None:
        self.meta: Optional[Dict[str, Any]] = None
        self.run: Optional[Dict[str, Any]] = None

    def load_meta(self) -> Optional[Dict[str, Any]]:
        return json.loads(json.dumps(self.meta)) if self.meta is not None else None

    def save_meta(self, payload: Dict[str, Any]) -> None:
        self.meta = json.loads(json.dumps(payload))

    def load_run(self) -> Optional[Dict[str, Any]]:
        return json.loads(json.dumps(self.run)) if self.run is not None else None

    def save_run(self, payload: Dict[str, Any]) -> None:
        self.run = json.loads(json.dumps(payload))

    def delete_run(self) -> None:
        self.run = None


class FileStore(RunStore):
    """
    JSON files in one directory.

    File structure:
        <root>/meta.json   ledger payload
        <root>/run.json    {"run": snapshot, "rng": 32-bit state}
    """

    META_FILE = "meta.json"
    RUN_FILE = "run.json"

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def meta_path(self) -> Path:
        return self.root / self.META_FILE

    @property
    def run_path(self) -> Path:
        return self.root / self.RUN_FILE

    def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.warning("Failed to read %s; ignoring it", path, exc_info=True)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: expected a JSON object", path)
            return None
        return data

    def _write(self, path: Path, payload: Dict[str, Any]) -> None:
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    def load_meta(self) -> Optional[Dict[str, Any]]:
        return self._read(self.meta_path)

    def save_meta(self, payload: Dict[str, Any]) -> None:
        self._write(self.meta_path, payload)

    def load_run(self) -> Optional[Dict[str, Any]]:
        return self._read(self.run_path)

    def save_run(self, payload: Dict[str, Any]) -> None:
        self._write(self.run_path, payload)

    def delete_run(self) -> None:
        if self.run_path.exists():
            self.run_path.unlink()


class GameSession:
    """
    One player's session: ledger, current run and RNG.

    Usage:
        session = GameSession(FileStore("~/.wingo"))
        session.start_new_run("crypt", "easy")
        while session.run.summary is None:
            session.call_next()
            if session.run.awaiting_advance:
                session.advance_floor()
    """

    def __init__(self, store: Optional[RunStore] = None, service: Optional[GameService] = None):
        self.store = store if store is not None else MemoryStore()
        self.service = service if service is not None else GameService()
        self.meta: MetaState = self._load_meta()
        self.run: Optional[RunState] = None
        self.rng = SeededRng(0)
        self.summary_granted = False
        self._restore_run()

    # =========================================================================
    # LOADING
    # =========================================================================

    def _load_meta(self) -> MetaState:
        payload = self.store.load_meta()
        if payload is None:
            return default_meta()
        try:
            return migrate_meta(payload)
        except (KeyError, TypeError, ValueError):
            logger.warning("Failed to load meta progression; starting fresh", exc_info=True)
            return default_meta()

    def _restore_run(self) -> None:
        payload = self.store.load_run()
        if payload is None:
            return
        try:
            run = self.service.deserialize(payload["run"], self.meta)
            rng = SeededRng.from_state(int(payload["rng"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("Failed to load saved run; discarding it", exc_info=True)
            return
        self.run = run
        self.rng = rng
        self.summary_granted = run.summary is not None

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def _save_meta(self) -> None:
        self.store.save_meta(self.meta.to_dict())

    def _save_run(self) -> None:
        if self.run is None:
            self.store.delete_run()
            self.summary_granted = False
            return
        self.store.save_run({
            "run": self.service.serialize(self.run),
            "rng": self.rng.serialize(),
        })

    def _check_summary(self) -> None:
        """Fold a new summary into the ledger, once."""
        if self.run is None or self.run.summary is None or self.summary_granted:
            return
        gained = record_run(self.meta, self.run.summary)
        self.summary_granted = True
        logger.debug("Recorded %s: +%d xp (total %d)", self.run.id, gained, self.meta.xp)

    def _after_action(self) -> None:
        self._check_summary()
        self._save_run()
        self._save_meta()

    # =========================================================================
    # RUN LIFECYCLE
    # =========================================================================

    def start_new_run(
        self,
        biome_id: str,
        difficulty_id: str = DEFAULT_DIFFICULTY_ID,
        seed: Optional[int] = None,
    ) -> RunState:
        """
        Replace any current run with a fresh one.

        Raises:
            RunConfigError: unknown ids, or a biome still locked in the ledger
        """
        if not self.meta.is_biome_unlocked(biome_id):
            raise RunConfigError(f"Biome {biome_id} is locked")
        if seed is None:
            seed = random.getrandbits(32)
        rng = SeededRng(seed)
        run = self.service.create_run(self.meta, rng, seed=seed, biome_id=biome_id,
                                      difficulty_id=difficulty_id)
        self.rng = rng
        self.run = run
        self.summary_granted = False
        self._after_action()
        return run

    def delete_run(self) -> None:
        self.run = None
        self.summary_granted = False
        self.store.delete_run()

    def acknowledge_summary(self) -> None:
        """Close a finished run: make sure it is recorded, then drop it."""
        if self.run is None or self.run.summary is None:
            return
        self._check_summary()
        self._save_meta()
        self.delete_run()

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def call_next(self) -> Optional[CallResult]:
        if self.run is None:
            return None
        result = self.service.call_next(self.meta, self.run, self.rng)
        self.run = result.state
        self._after_action()
        return result

    def use_free_dauber(self, cell_id: str) -> None:
        if self.run is None:
            return
        self.run = self.service.free_mark(self.run, cell_id)
        self._after_action()

    def use_bomb(self) -> None:
        if self.run is None:
            return
        self.run = self.service.use_bomb(self.meta, self.run, self.rng)
        self._after_action()

    def advance_floor(self) -> None:
        if self.run is None:
            return
        self.run = self.service.advance_floor(self.meta, self.run, self.rng)
        self._after_action()

    def buy_item(self, item_id: str) -> None:
        if self.run is None:
            return
        self.run = self.service.buy_item(self.meta, self.run, item_id)
        self._after_action()

    def use_item(self, item_id: str) -> None:
        if self.run is None:
            return
        self.run = self.service.use_item(self.meta, self.run, item_id, self.rng)
        self._after_action()

    def reroll_shop(self) -> None:
        if self.run is None:
            return
        self.run = self.service.reroll_shop(self.meta, self.run, self.rng)
        self._after_action()

    def skip_shop(self) -> None:
        if self.run is None:
            return
        self.run = self.service.skip_shop(self.run)
        self._after_action()

    def resolve_event(self, event_id: str, option_id: str) -> None:
        if self.run is None:
            return
        self.run = self.service.resolve_event(self.meta, self.run, event_id, option_id, self.rng)
        self._after_action()

    def update_settings(self, **settings: Any) -> None:
        """Update known settings fields; unknown names raise AttributeError."""
        for name, value in settings.items():
            if not hasattr(self.meta.settings, name):
                raise AttributeError(f"Unknown setting: {name}")
            setattr(self.meta.settings, name, value)
        self._save_meta()

    # =========================================================================
    # IMPORT / EXPORT
    # =========================================================================

    def export_save(self) -> str:
        """Ledger plus current run as a JSON string."""
        payload = {
            "meta": self.meta.to_dict(),
            "run": (
                {"run": self.service.serialize(self.run), "rng": self.rng.serialize()}
                if self.run is not None else None
            ),
        }
        return json.dumps(payload, indent=2)

    def import_save(self, serialized: str) -> None:
        """
        Replace the ledger (and run, if present) with an exported save.

        Raises:
            ValueError: malformed JSON
            RunConfigError: the run names unknown content
        """
        data = json.loads(serialized)
        meta = migrate_meta(data.get("meta") or {})
        run_payload = data.get("run")
        if run_payload and run_payload.get("run"):
            self.run = self.service.deserialize(run_payload["run"], meta)
            self.rng = SeededRng.from_state(int(run_payload["rng"]))
            self.summary_granted = self.run.summary is not None
        self.meta = meta
        self._save_meta()
        self._save_run()
