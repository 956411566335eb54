"""Core data models, entity registry and empire state."""

from colonysim.core.enums import Domain, EntityKind, EventKind, MissionType, UnitClass, Winner
from colonysim.core.models import Colony, Coordinate, FleetMission, Resources
from colonysim.core.registry import DEFAULT_REGISTRY, EntityDef, EntityRegistry
from colonysim.core.state import EmpireState, default_state

__all__ = [
    "Colony",
    "Coordinate",
    "DEFAULT_REGISTRY",
    "Domain",
    "EmpireState",
    "EntityDef",
    "EntityKind",
    "EntityRegistry",
    "EventKind",
    "FleetMission",
    "MissionType",
    "Resources",
    "UnitClass",
    "Winner",
    "default_state",
]
