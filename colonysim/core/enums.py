"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import Enum, IntEnum, unique


@unique
class EntityKind(str, Enum):
    """Registry partitions. Values double as the registry lookup keys."""

    BUILDING = "building"
    RESEARCH = "research"
    SHIP = "ship"
    DEFENSE = "defense"


@unique
class UnitClass(str, Enum):
    """Combat-capable entity classes."""

    SHIP = "ship"
    DEFENSE = "defense"


@unique
class EventKind(str, Enum):
    """Queued task categories."""

    BUILDING = "BUILDING"
    RESEARCH = "RESEARCH"
    SHIPYARD = "SHIPYARD"


@unique
class MissionType(str, Enum):
    """Fleet mission orders."""

    ATTACK = "ATTACK"
    COLONIZE = "COLONIZE"
    RECYCLE = "RECYCLE"
    TRANSPORT = "TRANSPORT"
    DEPLOY = "DEPLOY"
    DESTROY = "DESTROY"
    ESPIONAGE = "ESPIONAGE"


@unique
class Winner(str, Enum):
    """Outcome of a resolved battle."""

    ATTACKER = "attacker"
    DEFENDER = "defender"
    DRAW = "draw"


@unique
class LogKind(str, Enum):
    """Categories of player-facing system log entries."""

    CONSTRUCTION = "CONSTRUCTION"
    RESEARCH = "RESEARCH"
    PRODUCTION = "PRODUCTION"
    MISSION = "MISSION"


@unique
class ResourceType(str, Enum):
    """Stockpiled resources (energy is never stockpiled)."""

    METAL = "metal"
    CRYSTAL = "crystal"
    DEUTERIUM = "deuterium"


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    COMBAT = 0
    MOON = 1
    PLANET_GEN = 2
    NAMING = 3
