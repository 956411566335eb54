"""RecycleHandler — salvages a debris field up to the fleet's cargo capacity."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from colonysim.actions.base import (
    MissionHandler,
    ResolutionContext,
    origin_name,
    register_handler,
    returning_leg,
)
from colonysim.core.enums import LogKind, MissionType
from colonysim.core.models import DebrisField, Resources
from colonysim.systems.spatial import (
    calculate_distance,
    calculate_flight_time,
    fleet_cargo,
    fleet_speed,
)

if TYPE_CHECKING:
    from colonysim.core.models import FleetMission
    from colonysim.core.state import EmpireState

logger = logging.getLogger(__name__)


def collect_debris(debris: DebrisField | None, capacity: float) -> Resources:
    """Share of *debris* a hold of *capacity* can carry, proportional per resource."""
    if debris is None:
        return Resources()
    ratio = min(1.0, capacity / (debris.total or 1))
    return Resources(
        metal=math.floor(debris.metal * ratio),
        crystal=math.floor(debris.crystal * ratio),
    )


class RecycleHandler(MissionHandler):

    @property
    def mission_type(self) -> MissionType | None:
        return MissionType.RECYCLE

    def on_arrival(
        self,
        mission: FleetMission,
        state: EmpireState,
        now: float,
        ctx: ResolutionContext,
    ) -> FleetMission | None:
        key = mission.target.key
        debris = state.debris_fields.get(key)
        collected = collect_debris(debris, fleet_cargo(mission.ships, ctx.registry))

        if debris is not None:
            debris.metal = max(0.0, debris.metal - collected.metal)
            debris.crystal = max(0.0, debris.crystal - collected.crystal)
            if debris.exhausted:
                del state.debris_fields[key]

        state.add_log(
            now, LogKind.MISSION,
            f"Debris extraction finalized at {key}. "
            f"Salvaged: {collected.metal:,.0f} metal, {collected.crystal:,.0f} crystal",
            origin_name(state, mission), cap=ctx.config.system_log_cap,
        )
        logger.info(
            "Mission %s: recycled %.0f metal / %.0f crystal at %s",
            mission.id, collected.metal, collected.crystal, key,
        )

        origin = state.colony(mission.origin_id)
        distance = calculate_distance(origin.coords if origin else mission.target, mission.target)
        speed = fleet_speed(mission.ships, ctx.registry, ctx.config.default_fleet_speed)
        return returning_leg(mission, now, calculate_flight_time(distance, speed), resources=collected)


register_handler(RecycleHandler())
