"""TickOrchestrator — the authoritative once-per-second empire update.

Phase cycle (all phases see the same ``now``):
  1. Accrual — advance every colony's stockpiles toward its storage caps
  2. Events — drain finished construction, research and shipyard tasks
  3. Missions — resolve arrivals (possibly combat) and homecomings
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from colonysim.actions import EmpireTargets, ResolutionContext
from colonysim.core.enums import ResourceType
from colonysim.core.registry import DEFAULT_REGISTRY, EntityRegistry
from colonysim.engine.combat import CombatEngine
from colonysim.engine.event_queue import EventQueue
from colonysim.engine.missions import drain_missions
from colonysim.systems.production import accrue, colony_rates, storage_capacities
from colonysim.systems.rng import DeterministicRNG

if TYPE_CHECKING:
    from colonysim.actions.base import TargetDirectory
    from colonysim.config import SimulationConfig
    from colonysim.core.models import Colony
    from colonysim.core.state import EmpireState

logger = logging.getLogger(__name__)


class TickOrchestrator:
    """Sole writer of empire state during a tick.

    ``advance`` mutates the state in place; ``tick`` is the pure form
    and returns an updated copy.
    """

    __slots__ = ("_config", "_registry", "_ctx", "_events", "_tick_count")

    def __init__(
        self,
        config: SimulationConfig,
        registry: EntityRegistry = DEFAULT_REGISTRY,
        rng: DeterministicRNG | None = None,
        targets: TargetDirectory | None = None,
    ) -> None:
        self._config = config
        self._registry = registry
        self._events = EventQueue(config, registry)
        self._ctx = ResolutionContext(
            config=config,
            registry=registry,
            rng=rng or DeterministicRNG(config.world_seed),
            combat=CombatEngine(config, registry),
            targets=targets or EmpireTargets(),
        )
        self._tick_count = 0

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def registry(self) -> EntityRegistry:
        return self._registry

    @property
    def rng(self) -> DeterministicRNG:
        return self._ctx.rng

    @property
    def events(self) -> EventQueue:
        return self._events

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def advance(self, state: EmpireState, now: float) -> None:
        """Run one full tick against *state* at wall-clock *now*."""
        multiplier = self._config.boost_multiplier if state.is_boosted(now) else 1.0

        # Phase 1: accrual
        for colony in state.colonies:
            self._accrue_colony(colony, now, multiplier)

        # Phase 2: events
        finished = self._events.drain(state, now)

        # Phase 3: missions
        moved = drain_missions(state, now, self._ctx)

        self._tick_count += 1
        if finished or moved:
            logger.debug(
                "Tick %d @ %.0f: %d event(s) finished, %d mission transition(s)",
                self._tick_count, now, len(finished), moved,
            )

    def tick(self, state: EmpireState, now: float) -> EmpireState:
        """Pure variant: return the next state, leaving *state* untouched."""
        nxt = state.copy()
        self.advance(nxt, now)
        return nxt

    def _accrue_colony(self, colony: Colony, now: float, multiplier: float) -> None:
        elapsed = min(max(0.0, now - colony.last_update), self._config.max_catchup_seconds)
        rates = colony_rates(colony, self._registry)
        caps = storage_capacities(colony)
        res = colony.resources
        if elapsed > 0:
            res.metal = accrue(res.metal, caps[ResourceType.METAL], rates.metal, elapsed, multiplier)
            res.crystal = accrue(res.crystal, caps[ResourceType.CRYSTAL], rates.crystal, elapsed, multiplier)
            res.deuterium = accrue(res.deuterium, caps[ResourceType.DEUTERIUM], rates.deuterium, elapsed, multiplier)
        res.energy = rates.energy
        colony.last_update = max(colony.last_update, now)
