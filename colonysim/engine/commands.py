"""Command surface — the atomic state transitions accepted between ticks.

Each command validates its preconditions and either mutates the state
completely or not at all.  Rejections are reported by return value
(``None`` / ``False``) and a DEBUG log line, never by exception.

``apply_command`` wraps the same operations as a pure
``(state, command, now) -> state`` transition for callers that want to
keep the previous state around.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Mapping, Union

from colonysim.config import SimulationConfig
from colonysim.core.enums import EntityKind, EventKind, MissionType
from colonysim.core.models import Coordinate, Resources
from colonysim.core.registry import DEFAULT_REGISTRY, EntityDef, EntityRegistry
from colonysim.engine.event_queue import EventQueue
from colonysim.engine.missions import launch_mission as _launch_mission
from colonysim.systems.production import calculate_build_time, calculate_cost

if TYPE_CHECKING:
    from colonysim.core.models import FleetMission
    from colonysim.core.state import EmpireState

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = SimulationConfig()

# Registry partition each task kind draws from
_KIND_SOURCES: dict[EventKind, tuple[EntityKind, ...]] = {
    EventKind.BUILDING: (EntityKind.BUILDING,),
    EventKind.RESEARCH: (EntityKind.RESEARCH,),
    EventKind.SHIPYARD: (EntityKind.SHIP, EntityKind.DEFENSE),
}


def _entity_for(kind: EventKind, target_id: str, registry: EntityRegistry) -> EntityDef | None:
    return next(
        (e for src in _KIND_SOURCES[kind] if (e := registry.get(src, target_id)) is not None),
        None,
    )


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EventPlan:
    """Cost and duration of a task before it is admitted."""

    kind: EventKind
    target_id: str
    colony_id: str
    cost: Resources
    duration: int
    count: int = 1


def requirements_met(
    state: EmpireState,
    colony_id: str,
    requirements: Mapping[str, int],
) -> bool:
    """Every requirement is satisfied by building level plus research level."""
    colony = state.colony(colony_id)
    if colony is None:
        return False
    return all(
        colony.building_level(req_id) + state.research_level(req_id) >= level
        for req_id, level in requirements.items()
    )


def plan_event(
    state: EmpireState,
    kind: EventKind,
    target_id: str,
    now: float,
    count: int = 1,
    colony_id: str | None = None,
    config: SimulationConfig = _DEFAULT_CONFIG,
    registry: EntityRegistry = DEFAULT_REGISTRY,
) -> EventPlan | None:
    """Price a task for *colony_id* (the active colony by default)."""
    colony_id = colony_id or state.active_colony_id
    colony = state.colony(colony_id)
    ent = _entity_for(kind, target_id, registry)
    if colony is None or ent is None:
        return None

    count = max(1, count) if kind is EventKind.SHIPYARD else 1
    if kind is EventKind.BUILDING:
        cost = calculate_cost(ent.base_cost, ent.multiplier, colony.building_level(target_id))
    elif kind is EventKind.RESEARCH:
        cost = calculate_cost(ent.base_cost, ent.multiplier, state.research_level(target_id))
    else:
        cost = ent.base_cost.scaled(count)

    unit_cost = ent.base_cost if kind is EventKind.SHIPYARD else cost
    duration = calculate_build_time(
        unit_cost,
        colony.building_level("robotics_factory"),
        colony.building_level("nanite_factory"),
        boosted=state.is_boosted(now),
        boost_factor=config.boost_build_time_factor,
    )
    if kind is EventKind.SHIPYARD:
        duration *= count
    return EventPlan(kind, target_id, colony_id, cost, duration, count)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def admit_event(
    state: EmpireState,
    kind: EventKind,
    target_id: str,
    cost: Resources,
    duration: float,
    now: float,
    count: int = 1,
    colony_id: str | None = None,
    config: SimulationConfig = _DEFAULT_CONFIG,
    registry: EntityRegistry = DEFAULT_REGISTRY,
) -> str | None:
    """Deduct *cost* and queue the task in one step; returns the task id."""
    colony_id = colony_id or state.active_colony_id
    colony = state.colony(colony_id)
    if colony is None:
        logger.debug("Admission rejected: unknown colony %s", colony_id)
        return None
    queue = EventQueue(config, registry)
    if not queue.has_capacity(state, kind, colony_id):
        logger.debug("Admission rejected: %s queue full for %s", kind.value, colony_id)
        return None
    ent = _entity_for(kind, target_id, registry)
    if ent is None:
        logger.debug("Admission rejected: %s is not a %s target", target_id, kind.value)
        return None
    if not requirements_met(state, colony_id, ent.requirements):
        logger.debug("Admission rejected: requirements for %s not met", target_id)
        return None
    if not colony.resources.covers(cost):
        logger.debug("Admission rejected: %s cannot afford %s", colony.name, target_id)
        return None

    colony.resources.subtract(cost)
    task = queue.admit(state, kind, target_id, colony_id, now, duration, count)
    return task.id if task else None


def enqueue(
    state: EmpireState,
    kind: EventKind,
    target_id: str,
    now: float,
    count: int = 1,
    colony_id: str | None = None,
    config: SimulationConfig = _DEFAULT_CONFIG,
    registry: EntityRegistry = DEFAULT_REGISTRY,
) -> str | None:
    """Plan and admit a task using registry-derived cost and duration."""
    plan = plan_event(state, kind, target_id, now, count, colony_id, config, registry)
    if plan is None:
        logger.debug("Admission rejected: cannot plan %s %s", kind.value, target_id)
        return None
    return admit_event(
        state, kind, target_id, plan.cost, plan.duration, now,
        count=plan.count, colony_id=plan.colony_id, config=config, registry=registry,
    )


def launch_mission(
    state: EmpireState,
    mission_type: MissionType,
    origin_id: str,
    target: Coordinate,
    ships: Mapping[str, int],
    resources: Resources | None,
    now: float,
    percentage: float = 100,
    config: SimulationConfig = _DEFAULT_CONFIG,
    registry: EntityRegistry = DEFAULT_REGISTRY,
) -> FleetMission | None:
    return _launch_mission(
        state, mission_type, origin_id, target, ships, resources, now,
        percentage=percentage, config=config, registry=registry,
    )


def set_active_colony(state: EmpireState, colony_id: str) -> bool:
    if state.colony(colony_id) is None:
        logger.debug("Cannot activate unknown colony %s", colony_id)
        return False
    state.active_colony_id = colony_id
    return True


def clear_logs(state: EmpireState) -> None:
    state.system_logs.clear()
    state.combat_reports.clear()


def mark_logs_seen(state: EmpireState, now: float) -> None:
    state.last_logs_seen = now


def update_profile(state: EmpireState, name: str | None = None, bio: str | None = None) -> bool:
    """Change the bio freely; the commander name may change only once."""
    new_name = name.strip() if name else ""
    if new_name and new_name != state.player_name:
        if not state.name_change_available:
            logger.debug("Rename rejected: name change already used")
            return False
        state.player_name = new_name
        state.name_change_available = False
    if bio is not None:
        state.bio = bio
    return True


# ---------------------------------------------------------------------------
# Pure transition form
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AdmitEvent:
    kind: EventKind
    target_id: str
    count: int = 1
    colony_id: str | None = None


@dataclass(frozen=True, slots=True)
class LaunchMission:
    mission_type: MissionType
    origin_id: str
    target: Coordinate
    ships: Mapping[str, int]
    resources: Resources = field(default_factory=Resources)
    percentage: float = 100


@dataclass(frozen=True, slots=True)
class SetActiveColony:
    colony_id: str


@dataclass(frozen=True, slots=True)
class ClearLogs:
    pass


@dataclass(frozen=True, slots=True)
class MarkLogsSeen:
    pass


@dataclass(frozen=True, slots=True)
class UpdateProfile:
    name: str | None = None
    bio: str | None = None


Command = Union[AdmitEvent, LaunchMission, SetActiveColony, ClearLogs, MarkLogsSeen, UpdateProfile]


def apply_command(
    state: EmpireState,
    command: Command,
    now: float,
    config: SimulationConfig = _DEFAULT_CONFIG,
    registry: EntityRegistry = DEFAULT_REGISTRY,
) -> EmpireState:
    """Return the state after *command*; the input state is never modified.

    A rejected command yields an unchanged copy.
    """
    nxt = state.copy()
    if isinstance(command, AdmitEvent):
        enqueue(nxt, command.kind, command.target_id, now, command.count, command.colony_id, config, registry)
    elif isinstance(command, LaunchMission):
        launch_mission(
            nxt, command.mission_type, command.origin_id, command.target,
            command.ships, command.resources, now, command.percentage, config, registry,
        )
    elif isinstance(command, SetActiveColony):
        set_active_colony(nxt, command.colony_id)
    elif isinstance(command, ClearLogs):
        clear_logs(nxt)
    elif isinstance(command, MarkLogsSeen):
        mark_logs_seen(nxt, now)
    elif isinstance(command, UpdateProfile):
        update_profile(nxt, command.name, command.bio)
    else:
        raise TypeError(f"Unknown command: {command!r}")
    return nxt
