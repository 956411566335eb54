"""EventQueue — admission and completion of construction, research and shipyard tasks.

Admission enforces the per-colony building limit and the empire-wide
research limit.  Completion drains every task whose finish time has
passed and applies its effect to the owning colony or the empire.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from colonysim.core.enums import EntityKind, EventKind, LogKind
from colonysim.core.models import EventTask
from colonysim.core.registry import DEFAULT_REGISTRY, EntityRegistry

if TYPE_CHECKING:
    from colonysim.config import SimulationConfig
    from colonysim.core.state import EmpireState

logger = logging.getLogger(__name__)


class EventQueue:
    """Stateless operations over ``EmpireState.events``."""

    __slots__ = ("_config", "_registry")

    def __init__(self, config: SimulationConfig, registry: EntityRegistry = DEFAULT_REGISTRY) -> None:
        self._config = config
        self._registry = registry

    def has_capacity(self, state: EmpireState, kind: EventKind, colony_id: str) -> bool:
        cfg = self._config
        if kind is EventKind.BUILDING:
            return state.queued(EventKind.BUILDING, colony_id) < cfg.max_building_queue
        if kind is EventKind.RESEARCH:
            return state.queued(EventKind.RESEARCH) < cfg.max_research_queue
        return True

    def admit(
        self,
        state: EmpireState,
        kind: EventKind,
        target_id: str,
        colony_id: str,
        now: float,
        duration: float,
        count: int = 1,
    ) -> EventTask | None:
        """Append a task if the queue limits allow it.

        The caller has already validated and deducted the cost.
        """
        if not self.has_capacity(state, kind, colony_id):
            logger.debug("Admission rejected: %s queue full for %s", kind.value, colony_id)
            return None
        task = EventTask(
            id=state.allocate_id("evt-"),
            kind=kind,
            target_id=target_id,
            colony_id=colony_id,
            start_time=now,
            finish_time=now + duration,
            count=max(1, count),
        )
        state.events.append(task)
        logger.debug("Queued %s %s x%d on %s (done at %.0f)", kind.value, target_id, task.count, colony_id, task.finish_time)
        return task

    def drain(self, state: EmpireState, now: float) -> list[EventTask]:
        """Resolve every task finished by *now*, oldest finish first."""
        finished = sorted((e for e in state.events if e.finish_time <= now), key=lambda e: e.finish_time)
        if not finished:
            return []
        state.events = [e for e in state.events if e.finish_time > now]
        for task in finished:
            self._complete(state, task, now)
        return finished

    def _complete(self, state: EmpireState, task: EventTask, now: float) -> None:
        cap = self._config.system_log_cap
        name = self._registry.name_of(task.target_id)

        if task.kind is EventKind.RESEARCH:
            state.research[task.target_id] = state.research_level(task.target_id) + (task.count or 1)
            state.add_log(now, LogKind.RESEARCH, f"{name} research sequence finalized", "Empire Hub", cap=cap)
            logger.info("Research %s reached level %d", task.target_id, state.research[task.target_id])
            return

        colony = state.colony(task.colony_id)
        if colony is None:
            logger.warning("Dropping %s task %s: colony %s no longer exists", task.kind.value, task.id, task.colony_id)
            return

        if task.kind is EventKind.BUILDING:
            level = colony.building_level(task.target_id) + 1
            colony.buildings[task.target_id] = level
            state.add_log(now, LogKind.CONSTRUCTION, f"{name} upgraded to level {level}", colony.name, cap=cap)
            logger.info("%s: %s upgraded to level %d", colony.name, task.target_id, level)
            return

        count = task.count or 1
        is_defense = self._registry.get(EntityKind.DEFENSE, task.target_id) is not None
        holding = colony.defense if is_defense else colony.ships
        holding[task.target_id] = holding.get(task.target_id, 0) + count
        state.add_log(now, LogKind.PRODUCTION, f"Fabricated {count}x {name}", colony.name, cap=cap)
        logger.info("%s: fabricated %dx %s", colony.name, count, task.target_id)
