"""Fleet mission state machine: launch, arrival dispatch, homecoming.

A mission moves ``outbound -> returning -> removed``.  Transitions fire
only from wall-clock comparisons made by the tick orchestrator.
Arrival resolution is delegated to the handler registered for the
mission type (see ``colonysim.actions``).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Mapping

from colonysim.actions import get_mission_handler
from colonysim.core.enums import LogKind, MissionType
from colonysim.core.models import FleetMission, Resources
from colonysim.core.registry import COLONY_SHIP, DEFAULT_REGISTRY, EntityRegistry
from colonysim.systems.spatial import (
    calculate_distance,
    calculate_flight_time,
    fleet_cargo,
    fleet_speed,
)

if TYPE_CHECKING:
    from colonysim.actions.base import ResolutionContext
    from colonysim.config import SimulationConfig
    from colonysim.core.models import Coordinate
    from colonysim.core.state import EmpireState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Launch
# ---------------------------------------------------------------------------

def _launch_rejection(
    state: EmpireState,
    mission_type: MissionType,
    origin_id: str,
    target: Coordinate,
    ships: Mapping[str, int],
    resources: Resources,
    registry: EntityRegistry,
) -> str | None:
    """Reason the launch cannot proceed, or None when it can."""
    origin = state.colony(origin_id)
    if origin is None:
        return f"unknown origin {origin_id}"
    if not target.in_bounds:
        return f"target {target} is outside the galaxy"
    if not ships or not any(n > 0 for n in ships.values()):
        return "no ships selected"
    for sid, count in ships.items():
        if count < 0:
            return f"negative count for {sid}"
        if registry.get("ship", sid) is None:
            return f"{sid} is not a ship"
        if origin.ships.get(sid, 0) < count:
            return f"not enough {sid} ({origin.ships.get(sid, 0)} < {count})"
    if min(resources.metal, resources.crystal, resources.deuterium) < 0:
        return "negative cargo"
    if not origin.resources.covers(resources):
        return "cargo exceeds origin stockpile"
    if resources.total > fleet_cargo(ships, registry):
        return "cargo exceeds fleet capacity"
    if mission_type is MissionType.COLONIZE and ships.get(COLONY_SHIP, 0) < 1:
        return "colonization requires a colony ship"
    return None


def launch_mission(
    state: EmpireState,
    mission_type: MissionType,
    origin_id: str,
    target: Coordinate,
    ships: Mapping[str, int],
    resources: Resources | None,
    now: float,
    percentage: float = 100,
    config: SimulationConfig | None = None,
    registry: EntityRegistry = DEFAULT_REGISTRY,
) -> FleetMission | None:
    """Dispatch a fleet from *origin_id* to *target*.

    Ships and carried resources leave the origin in the same step the
    mission is recorded.  Returns None (state untouched) if any
    precondition fails.
    """
    resources = resources or Resources()
    reason = _launch_rejection(state, mission_type, origin_id, target, ships, resources, registry)
    if reason is not None:
        logger.debug("Launch rejected: %s", reason)
        return None

    origin = state.colony(origin_id)
    composition = {sid: n for sid, n in ships.items() if n > 0}
    for sid, count in composition.items():
        origin.ships[sid] -= count
    origin.resources.subtract(resources)

    default_speed = config.default_fleet_speed if config else 2500
    speed = fleet_speed(composition, registry, default_speed)
    duration = calculate_flight_time(calculate_distance(origin.coords, target), speed, percentage)

    mission = FleetMission(
        id=state.allocate_id("msn-"),
        mission_type=mission_type,
        origin_id=origin_id,
        target=target,
        ships=composition,
        resources=Resources(resources.metal, resources.crystal, resources.deuterium),
        start_time=now,
        arrival_time=now + duration,
    )
    state.missions.append(mission)
    logger.info(
        "Mission %s launched: %s %s -> %s, arriving in %ds",
        mission.id, mission_type.value, origin.coords, target, duration,
    )
    return mission


# ---------------------------------------------------------------------------
# Per-tick resolution
# ---------------------------------------------------------------------------

def _return_home(state: EmpireState, mission: FleetMission, now: float, log_cap: int) -> None:
    origin = state.colony(mission.origin_id)
    if origin is None:
        logger.warning("Mission %s returned to missing colony %s; fleet lost", mission.id, mission.origin_id)
        return
    for sid, count in mission.ships.items():
        origin.ships[sid] = origin.ships.get(sid, 0) + count
    # Uncapped: a returning hold may push a stockpile past storage
    origin.resources.metal += mission.resources.metal
    origin.resources.crystal += mission.resources.crystal
    origin.resources.deuterium += mission.resources.deuterium
    state.add_log(
        now, LogKind.MISSION,
        f"Fleet returned from {mission.target} ({mission.mission_type.value})",
        origin.name, cap=log_cap,
    )
    logger.info("Mission %s returned to %s", mission.id, origin.name)


def drain_missions(state: EmpireState, now: float, ctx: ResolutionContext) -> int:
    """Fire every due transition; returns how many missions changed state.

    Arrivals are resolved in arrival-time order so that two fleets hitting
    the same target see each other's aftermath.
    """
    due = sorted(
        (m for m in state.missions if m.is_due(now)),
        key=lambda m: m.return_time if m.is_returning else m.arrival_time,
    )
    if not due:
        return 0

    due_ids = {m.id for m in due}
    survivors = [m for m in state.missions if m.id not in due_ids]
    state.missions = survivors

    for mission in due:
        if mission.is_returning:
            _return_home(state, mission, now, ctx.config.system_log_cap)
            continue
        handler = get_mission_handler(mission.mission_type)
        returning = handler.on_arrival(mission, state, now, ctx)
        if returning is not None:
            state.missions.append(returning)

    return len(due)
