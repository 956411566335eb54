"""ColonizeHandler — settles a new colony or turns the fleet around."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from colonysim.actions.base import (
    MissionHandler,
    ResolutionContext,
    origin_name,
    register_handler,
    returning_leg,
)
from colonysim.core.enums import Domain, LogKind, MissionType
from colonysim.core.models import Colony, Resources
from colonysim.core.registry import COLONY_SHIP
from colonysim.systems.generator import generate_planet_properties

if TYPE_CHECKING:
    from colonysim.core.models import FleetMission
    from colonysim.core.state import EmpireState

logger = logging.getLogger(__name__)


def max_colonies(astrophysics_level: int) -> int:
    return astrophysics_level // 2 + 2


class ColonizeHandler(MissionHandler):

    @property
    def mission_type(self) -> MissionType | None:
        return MissionType.COLONIZE

    def on_arrival(
        self,
        mission: FleetMission,
        state: EmpireState,
        now: float,
        ctx: ResolutionContext,
    ) -> FleetMission | None:
        cap = max_colonies(state.research_level("astrophysics"))
        occupied = ctx.targets.colony_at(state, mission.target) is not None

        if len(state.colonies) >= cap or occupied:
            reason = "coordinate already settled" if occupied else "empire cap reached"
            state.add_log(
                now, LogKind.MISSION,
                f"Colonization aborted: {reason}. Returning to origin.",
                origin_name(state, mission), cap=ctx.config.system_log_cap,
            )
            logger.info("Mission %s: colonization of %s aborted (%s)", mission.id, mission.target, reason)
            return returning_leg(mission, now, mission.outbound_duration)

        props = generate_planet_properties(
            mission.target.slot, ctx.rng.stream(Domain.PLANET_GEN, mission.id),
        )

        ships = {sid: n for sid, n in mission.ships.items() if n > 0}
        remaining = ships.get(COLONY_SHIP, 1) - 1
        if remaining > 0:
            ships[COLONY_SHIP] = remaining
        else:
            ships.pop(COLONY_SHIP, None)

        cargo = mission.resources
        colony = Colony(
            id=state.allocate_id("col-"),
            owner_id=state.player_id,
            name="Colony",
            coords=mission.target,
            resources=Resources(cargo.metal, cargo.crystal, cargo.deuterium, 0.0),
            last_update=now,
            ships=ships,
            max_temp=props.max_temp,
            max_fields=props.max_fields,
        )
        state.colonies.append(colony)
        state.add_log(
            now, LogKind.MISSION,
            f"New world initialized at {mission.target}",
            "Expansion Command", cap=ctx.config.system_log_cap,
        )
        logger.info(
            "Mission %s: colony %s founded at %s (maxTemp=%d, fields=%d)",
            mission.id, colony.id, mission.target, props.max_temp, props.max_fields,
        )
        return None


register_handler(ColonizeHandler())
