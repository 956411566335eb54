"""Snapshot persistence — the whole empire as one JSON document."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from colonysim.core.state import EmpireState, default_state

logger = logging.getLogger(__name__)

_STATE_ADAPTER = TypeAdapter(EmpireState)

SNAPSHOT_VERSION = "1.0"


def dump_state(state: EmpireState) -> dict[str, Any]:
    """Opaque snapshot-out: a JSON-compatible dict."""
    return _STATE_ADAPTER.dump_python(state, mode="json")


def load_state(snapshot: dict[str, Any]) -> EmpireState:
    """Opaque snapshot-in.  Raises ``ValidationError`` on a malformed document."""
    return _STATE_ADAPTER.validate_python(snapshot)


class StateStore:
    """Saves and restores the empire at a fixed path."""

    __slots__ = ("_path",)

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def save(self, state: EmpireState) -> None:
        document = {"version": SNAPSHOT_VERSION, "state": dump_state(state)}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(document, indent=2), encoding="utf-8")
        tmp.replace(self._path)
        logger.debug("Empire saved to %s", self._path)

    def load(self, now: float, seed: int = 42, boost_duration: float = 86_400.0) -> EmpireState:
        """Restore the saved empire, or a fresh one if nothing usable is on disk."""
        if not self._path.exists():
            logger.info("No saved empire at %s; starting fresh", self._path)
            return default_state(now, seed=seed, boost_duration=boost_duration)
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
            state = load_state(document["state"])
        except (OSError, ValueError, KeyError, TypeError, ValidationError) as exc:
            logger.warning("Discarding unreadable empire snapshot %s: %s", self._path, exc)
            return default_state(now, seed=seed, boost_duration=boost_duration)
        logger.info("Empire loaded from %s (%d colonies)", self._path, len(state.colonies))
        return state
