"""Mission arrival handlers — strategy pattern keyed by MissionType.

Abstract MissionHandler with one concrete subclass per mission that needs
special resolution.  To add a new mission behaviour:
  1. Create a new MissionHandler subclass.
  2. Register it in MISSION_HANDLERS.
Mission types without a handler fall back to ``GenericMissionHandler``:
announce the arrival and fly home unchanged.
"""

from __future__ import annotations

import dataclasses
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from colonysim.core.enums import LogKind, MissionType

if TYPE_CHECKING:
    from colonysim.config import SimulationConfig
    from colonysim.core.models import Colony, Coordinate, FleetMission, Resources
    from colonysim.core.registry import EntityRegistry
    from colonysim.core.state import EmpireState
    from colonysim.engine.combat import CombatEngine
    from colonysim.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)


class TargetDirectory(Protocol):
    """Resolves the colony (if any) sitting at a coordinate."""

    def colony_at(self, state: EmpireState, coords: Coordinate) -> Colony | None: ...


class EmpireTargets:
    """Default directory: only the empire's own colonies are known."""

    def colony_at(self, state: EmpireState, coords: Coordinate) -> Colony | None:
        return state.colony_at(coords)


@dataclass(slots=True)
class ResolutionContext:
    """Collaborators shared by every handler during one tick."""

    config: SimulationConfig
    registry: EntityRegistry
    rng: DeterministicRNG
    combat: CombatEngine
    targets: TargetDirectory


def returning_leg(
    mission: FleetMission,
    now: float,
    duration: float,
    ships: dict[str, int] | None = None,
    resources: Resources | None = None,
) -> FleetMission:
    """The same mission turned around, due back after *duration* seconds."""
    return dataclasses.replace(
        mission,
        ships=dict(mission.ships) if ships is None else ships,
        resources=mission.resources.copy() if resources is None else resources,
        is_returning=True,
        return_time=now + duration,
    )


def origin_name(state: EmpireState, mission: FleetMission) -> str | None:
    origin = state.colony(mission.origin_id)
    return origin.name if origin else None


class MissionHandler(ABC):
    """Base class for arrival resolution.

    Subclass and implement:
      - mission_type: the MissionType this handles
      - on_arrival(): mutate state and return the returning leg, or None
        when the fleet does not come back
    """

    @property
    @abstractmethod
    def mission_type(self) -> MissionType | None:
        """The MissionType this handler resolves (None for the fallback)."""

    @abstractmethod
    def on_arrival(
        self,
        mission: FleetMission,
        state: EmpireState,
        now: float,
        ctx: ResolutionContext,
    ) -> FleetMission | None:
        """Resolve *mission* at its target."""


class GenericMissionHandler(MissionHandler):
    """Transport, deploy, destroy and espionage: arrive, then return as sent."""

    @property
    def mission_type(self) -> MissionType | None:
        return None

    def on_arrival(self, mission, state, now, ctx):
        state.add_log(
            now, LogKind.MISSION,
            f"Mission reached target: {mission.mission_type.value} at {mission.target}",
            origin_name(state, mission), cap=ctx.config.system_log_cap,
        )
        logger.info("Mission %s (%s) reached %s", mission.id, mission.mission_type.value, mission.target)
        return returning_leg(mission, now, mission.outbound_duration)


# ---------------------------------------------------------------------------
# Registry: MissionType -> handler instance
# ---------------------------------------------------------------------------

MISSION_HANDLERS: dict[MissionType, MissionHandler] = {}

DEFAULT_HANDLER: MissionHandler = GenericMissionHandler()


def register_handler(handler: MissionHandler) -> MissionHandler:
    MISSION_HANDLERS[handler.mission_type] = handler
    return handler


def get_mission_handler(mission_type: MissionType) -> MissionHandler:
    """Look up the handler for a mission type, falling back to the generic one."""
    return MISSION_HANDLERS.get(mission_type, DEFAULT_HANDLER)
