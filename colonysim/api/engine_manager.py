"""EngineManager — runs the TickOrchestrator on a background thread.

The orchestrator is the only writer of empire state.  Ticks and player
commands are serialized through one lock, so a command never observes a
half-applied tick.  Readers get deep copies.
"""

from __future__ import annotations

import copy
import logging
import threading
import time
from typing import TYPE_CHECKING, Callable, Mapping

from colonysim.core.registry import DEFAULT_REGISTRY, EntityRegistry
from colonysim.core.state import default_state
from colonysim.engine import commands
from colonysim.engine.orchestrator import TickOrchestrator
from colonysim.systems.rng import DeterministicRNG
from colonysim.utils.persistence import StateStore

if TYPE_CHECKING:
    from colonysim.config import SimulationConfig
    from colonysim.core.enums import EventKind, MissionType
    from colonysim.core.models import Coordinate, FleetMission, Resources
    from colonysim.core.state import EmpireState

logger = logging.getLogger(__name__)


class EngineManager:
    """Manages the simulation lifecycle on a background thread.

    Provides thread-safe access to:
      - state copies for readers
      - player commands (admit, launch, profile, logs)
      - control commands (start / pause / resume / step / reset)
    """

    def __init__(
        self,
        config: SimulationConfig,
        registry: EntityRegistry = DEFAULT_REGISTRY,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self.config = config
        self._registry = registry
        self._clock = clock
        self._tick_rate: float = config.tick_interval_seconds

        self._store: StateStore | None = StateStore(config.state_file) if config.state_file else None
        self._lock = threading.Lock()
        self._state = self._load()
        self._orchestrator = self._new_orchestrator(self._state.seed)
        self._ticks = 0

        self._thread: threading.Thread | None = None
        self._running = threading.Event()
        self._paused = threading.Event()
        self._step_requested = threading.Event()
        self._stop_requested = threading.Event()

    # -- properties --

    @property
    def running(self) -> bool:
        return self._running.is_set()

    @property
    def paused(self) -> bool:
        return self._paused.is_set()

    @property
    def tick_rate(self) -> float:
        return self._tick_rate

    @property
    def registry(self) -> EntityRegistry:
        return self._registry

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def seed(self) -> int:
        """Seed of the random streams driving combat and colonization."""
        return self._orchestrator.rng.seed

    @property
    def persistent(self) -> bool:
        """False when no state file is configured."""
        return self._store is not None

    def now(self) -> float:
        return self._clock()

    def get_state(self) -> EmpireState:
        """Deep copy of the current empire, safe to read without the lock."""
        with self._lock:
            return self._state.copy()

    # -- lifecycle --

    def start(self) -> None:
        if self._running.is_set():
            return
        self._stop_requested.clear()
        self._paused.clear()
        self._running.set()
        self._thread = threading.Thread(target=self._run_loop, name="engine-loop", daemon=True)
        self._thread.start()
        logger.info("EngineManager started (tick_rate=%.3fs)", self._tick_rate)

    def pause(self) -> None:
        self._paused.set()
        logger.info("EngineManager paused at tick %d", self._ticks)

    def resume(self) -> None:
        self._paused.clear()
        logger.info("EngineManager resumed at tick %d", self._ticks)

    def step(self) -> None:
        """Execute exactly one tick (must be paused)."""
        if not self._paused.is_set():
            self.pause()
        self._step_requested.set()

    def stop(self) -> None:
        self._stop_requested.set()
        self._paused.clear()
        self._running.clear()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
        self.save()
        logger.info("EngineManager stopped.")

    def reset(self) -> None:
        """Stop and replace the empire with a fresh default one."""
        self.stop()
        with self._lock:
            self._state = default_state(
                self._clock(),
                seed=self._config.world_seed,
                boost_duration=self._config.boost_duration_seconds,
            )
            self._orchestrator = self._new_orchestrator(self._state.seed)
            self._ticks = 0
        self.save()
        logger.info("EngineManager reset.")

    def tick_once(self) -> int:
        """Run one tick synchronously; returns the tick counter."""
        with self._lock:
            self._orchestrator.advance(self._state, self._clock())
            self._ticks += 1
            ticks = self._ticks
        every = self._config.autosave_every_ticks
        if every > 0 and ticks % every == 0:
            self.save()
        return ticks

    def save(self) -> None:
        if self._store is None:
            return
        with self._lock:
            snapshot = self._state.copy()
        try:
            self._store.save(snapshot)
        except OSError as exc:
            logger.warning("Autosave to %s failed: %s", self._store.path, exc)

    # -- commands --

    def admit_event(
        self,
        kind: EventKind,
        target_id: str,
        count: int = 1,
        colony_id: str | None = None,
    ) -> str | None:
        with self._lock:
            return commands.enqueue(
                self._state, kind, target_id, self._clock(), count, colony_id,
                self._config, self._registry,
            )

    def launch_mission(
        self,
        mission_type: MissionType,
        origin_id: str,
        target: Coordinate,
        ships: Mapping[str, int],
        resources: Resources | None = None,
        percentage: float = 100,
    ) -> FleetMission | None:
        with self._lock:
            mission = commands.launch_mission(
                self._state, mission_type, origin_id, target, ships, resources,
                self._clock(), percentage, self._config, self._registry,
            )
            return copy.deepcopy(mission)

    def set_active_colony(self, colony_id: str) -> bool:
        with self._lock:
            return commands.set_active_colony(self._state, colony_id)

    def clear_logs(self) -> None:
        with self._lock:
            commands.clear_logs(self._state)

    def mark_logs_seen(self) -> None:
        with self._lock:
            commands.mark_logs_seen(self._state, self._clock())

    def update_profile(self, name: str | None = None, bio: str | None = None) -> bool:
        with self._lock:
            return commands.update_profile(self._state, name, bio)

    # -- internals --

    def _new_orchestrator(self, seed: int) -> TickOrchestrator:
        # A restored empire keeps replaying from the seed it was created with
        return TickOrchestrator(self._config, self._registry, rng=DeterministicRNG(seed))

    def _load(self) -> EmpireState:
        now = self._clock()
        if self._store is None:
            return default_state(now, seed=self._config.world_seed, boost_duration=self._config.boost_duration_seconds)
        return self._store.load(now, seed=self._config.world_seed, boost_duration=self._config.boost_duration_seconds)

    def _run_loop(self) -> None:
        """Background thread main loop."""
        logger.info("Engine thread started.")

        while not self._stop_requested.is_set():
            # Handle pause
            if self._paused.is_set() and not self._step_requested.is_set():
                time.sleep(0.01)
                continue

            single_step = self._step_requested.is_set()
            if single_step:
                self._step_requested.clear()

            self.tick_once()

            # Rate limiting
            if not single_step:
                self._stop_requested.wait(self._tick_rate)

        self._running.clear()
        logger.info("Engine thread exited.")
