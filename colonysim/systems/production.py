"""Production model — yields, storage, protection, energy balance, costs.

All functions are pure: they read building levels and registry formulas
and return numbers, never touching colony state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from colonysim.core.enums import ResourceType
from colonysim.core.models import Colony, Resources
from colonysim.core.registry import (
    DEFAULT_REGISTRY,
    SOLAR_SATELLITE,
    STORAGE_BUILDINGS,
    EntityRegistry,
)

# Passive hourly yield every colony gets before any mine
BASE_RATES: dict[ResourceType, float] = {
    ResourceType.METAL: 30.0,
    ResourceType.CRYSTAL: 20.0,
    ResourceType.DEUTERIUM: 10.0,
}


@dataclass(frozen=True, slots=True)
class ProductionRates:
    """Hourly yields and energy balance of one colony."""

    metal: float
    crystal: float
    deuterium: float
    energy: float               # net balance, may be negative
    energy_production: float
    energy_consumption: float
    efficiency: float

    def rate(self, resource: ResourceType) -> float:
        return getattr(self, resource.value)


def deuterium_temperature_factor(max_temp: float) -> float:
    """Colder worlds synthesize more deuterium."""
    return 1.28 - 0.002 * max_temp


def satellite_energy(max_temp: float) -> int:
    """Energy per solar satellite."""
    return math.floor((max_temp + 140) / 6)


def get_production_rates(
    buildings: dict[str, int],
    ships: dict[str, int],
    max_temp: float,
    slot: int,
    registry: EntityRegistry = DEFAULT_REGISTRY,
) -> ProductionRates:
    """Compute hourly resource rates and energy for a colony.

    *slot* is accepted for position-dependent bonuses; the current formulas
    only depend on temperature.
    """
    mined = {r: 0.0 for r in ResourceType}
    energy_prod = 0.0
    energy_cons = 0.0

    for building_id, level in buildings.items():
        ent = registry.get("building", building_id)
        if ent is None or level <= 0:
            continue
        economy = ent.economy
        if economy.resource is not None:
            amount = economy.production(level)
            if economy.resource is ResourceType.DEUTERIUM:
                amount *= deuterium_temperature_factor(max_temp)
            mined[economy.resource] += amount
        energy_prod += economy.energy_production(level)
        energy_cons += economy.energy_consumption(level)

    satellites = ships.get(SOLAR_SATELLITE, 0)
    if satellites > 0:
        energy_prod += satellites * satellite_energy(max_temp)

    efficiency = 1.0
    if energy_cons > energy_prod:
        efficiency = 0.0 if energy_prod == 0 else max(0.0, energy_prod / energy_cons)

    return ProductionRates(
        metal=(BASE_RATES[ResourceType.METAL] + mined[ResourceType.METAL]) * efficiency,
        crystal=(BASE_RATES[ResourceType.CRYSTAL] + mined[ResourceType.CRYSTAL]) * efficiency,
        deuterium=(BASE_RATES[ResourceType.DEUTERIUM] + mined[ResourceType.DEUTERIUM]) * efficiency,
        energy=energy_prod - energy_cons,
        energy_production=energy_prod,
        energy_consumption=energy_cons,
        efficiency=efficiency,
    )


def colony_rates(colony: Colony, registry: EntityRegistry = DEFAULT_REGISTRY) -> ProductionRates:
    return get_production_rates(colony.buildings, colony.ships, colony.max_temp, colony.coords.slot, registry)


# ---------------------------------------------------------------------------
# Storage & protection
# ---------------------------------------------------------------------------

def calculate_capacity(level: int) -> int:
    """Storage capacity; 12,500 at level 0."""
    return math.floor(5000 * 2.5 * math.exp(20 * level / 33))


def calculate_protection(level: int) -> int:
    """Amount that cannot be looted; 1,250 at level 0."""
    if level == 0:
        return 1250
    return math.floor(1250 + calculate_capacity(level) * 0.12 + level * 500)


def storage_capacities(colony: Colony) -> dict[ResourceType, int]:
    return {r: calculate_capacity(colony.building_level(b)) for r, b in STORAGE_BUILDINGS.items()}


def protected_amounts(colony: Colony) -> Resources:
    return Resources(
        metal=calculate_protection(colony.building_level(STORAGE_BUILDINGS[ResourceType.METAL])),
        crystal=calculate_protection(colony.building_level(STORAGE_BUILDINGS[ResourceType.CRYSTAL])),
        deuterium=calculate_protection(colony.building_level(STORAGE_BUILDINGS[ResourceType.DEUTERIUM])),
    )


def accrue(current: float, cap: float, rate: float, seconds: float, multiplier: float = 1.0) -> float:
    """Advance one stockpile by *seconds* of production, never past *cap*.

    A stockpile already at or over the cap (e.g. from a fleet return) is
    left untouched rather than clipped.
    """
    if current >= cap:
        return current
    return min(cap, current + rate * multiplier * seconds / 3600)


# ---------------------------------------------------------------------------
# Costs & build times
# ---------------------------------------------------------------------------

def calculate_cost(base_cost: Resources, multiplier: float, level: int) -> Resources:
    """Cost of building the next level; energy is not scaled."""
    factor = multiplier ** level
    return Resources(
        metal=math.floor(base_cost.metal * factor) if base_cost.metal else 0,
        crystal=math.floor(base_cost.crystal * factor) if base_cost.crystal else 0,
        deuterium=math.floor(base_cost.deuterium * factor) if base_cost.deuterium else 0,
        energy=base_cost.energy,
    )


def calculate_build_time(
    cost: Resources,
    robotics_level: int,
    nanite_level: int,
    boosted: bool = False,
    boost_factor: float = 0.25,
) -> int:
    """Seconds to complete a task costing *cost*; at least one second."""
    base_hours = (cost.metal + cost.crystal) / 2500
    robot_factor = 1 / (robotics_level + 1)
    nanite_factor = 0.5 ** nanite_level
    speedup = boost_factor if boosted else 1.0
    return max(1, math.floor(base_hours * robot_factor * nanite_factor * 3600 * speedup))
