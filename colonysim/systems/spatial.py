"""Spatial model — distances between coordinates and flight durations."""

from __future__ import annotations

import math
from typing import Mapping

from colonysim.core.models import Coordinate
from colonysim.core.registry import DEFAULT_REGISTRY, EntityRegistry

DEFAULT_FLEET_SPEED = 2500


def calculate_distance(origin: Coordinate, target: Coordinate) -> int:
    """Distance units between two coordinates; 5 for the same spot."""
    if origin.galaxy != target.galaxy:
        return 20_000 * abs(origin.galaxy - target.galaxy)
    if origin.system != target.system:
        return 2700 + 95 * abs(origin.system - target.system)
    if origin.slot != target.slot:
        return 1000 + 5 * abs(origin.slot - target.slot)
    return 5


def calculate_flight_time(distance: float, speed: float, percentage: float = 100) -> int:
    """One-way flight duration in seconds; 0 when the fleet cannot move."""
    if speed <= 0:
        return 0
    percentage = percentage or 100
    return math.floor((35_000 / percentage) * math.sqrt(distance * 10 / speed) + 10)


def fleet_speed(
    ships: Mapping[str, int],
    registry: EntityRegistry = DEFAULT_REGISTRY,
    default: float = DEFAULT_FLEET_SPEED,
) -> float:
    """Slowest speed among the ships present; *default* when none can move."""
    speeds = [
        ent.stats.speed
        for sid, count in ships.items()
        if count > 0
        and (ent := registry.get("ship", sid)) is not None
        and ent.stats is not None
        and ent.stats.speed > 0
    ]
    return min(speeds) if speeds else default


def fleet_cargo(ships: Mapping[str, int], registry: EntityRegistry = DEFAULT_REGISTRY) -> float:
    """Total cargo capacity of a ship composition."""
    total = 0.0
    for sid, count in ships.items():
        ent = registry.get("ship", sid)
        if ent is not None and ent.stats is not None:
            total += ent.stats.cargo * count
    return total
