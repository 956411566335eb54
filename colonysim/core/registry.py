"""Entity registry — static building / research / ship / defense definitions.

The simulation core only reads from the registry.  Every definition is a
frozen ``EntityDef`` keyed by a stable string id.  Buildings carry a
``BuildingEconomy`` strategy; non-economic buildings get ``NO_ECONOMY`` so
that production code never has to test for missing formulas.

To add a new economic building category:
  1. Create a new BuildingEconomy subclass.
  2. Attach an instance to the building's EntityDef.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from colonysim.core.enums import EntityKind, ResourceType, UnitClass
from colonysim.core.models import Resources


# ---------------------------------------------------------------------------
# Building economy strategies
# ---------------------------------------------------------------------------

class BuildingEconomy(ABC):
    """Per-level production and energy behaviour of a building."""

    @property
    @abstractmethod
    def resource(self) -> ResourceType | None:
        """The stockpile this building feeds, if any."""

    @abstractmethod
    def production(self, level: int) -> float:
        """Hourly yield added to ``resource`` at *level*."""

    @abstractmethod
    def energy_production(self, level: int) -> float:
        """Energy produced at *level*."""

    @abstractmethod
    def energy_consumption(self, level: int) -> float:
        """Energy drawn at *level*."""


class NoEconomy(BuildingEconomy):
    """Facilities, storages and anything else that neither mines nor powers."""

    @property
    def resource(self) -> ResourceType | None:
        return None

    def production(self, level: int) -> float:
        return 0.0

    def energy_production(self, level: int) -> float:
        return 0.0

    def energy_consumption(self, level: int) -> float:
        return 0.0


@dataclass(frozen=True, slots=True)
class Mine(BuildingEconomy):
    """Resource extractor: ``base * L * 1.1^L`` per hour, draws energy."""

    mined: ResourceType
    base: float
    consumption_base: float

    @property
    def resource(self) -> ResourceType | None:
        return self.mined

    def production(self, level: int) -> float:
        if level <= 0:
            return 0.0
        return self.base * level * 1.1 ** level

    def energy_production(self, level: int) -> float:
        return 0.0

    def energy_consumption(self, level: int) -> float:
        if level <= 0:
            return 0.0
        return float(math.ceil(self.consumption_base * level * 1.1 ** level))


@dataclass(frozen=True, slots=True)
class PowerPlant(BuildingEconomy):
    """Energy source: ``floor(base * L * growth^L)``."""

    base: float
    growth: float = 1.1

    @property
    def resource(self) -> ResourceType | None:
        return None

    def production(self, level: int) -> float:
        return 0.0

    def energy_production(self, level: int) -> float:
        if level <= 0:
            return 0.0
        return float(math.floor(self.base * level * self.growth ** level))

    def energy_consumption(self, level: int) -> float:
        return 0.0


NO_ECONOMY: BuildingEconomy = NoEconomy()


# ---------------------------------------------------------------------------
# Entity definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class UnitStats:
    """Combat and logistics stats of a ship or defense structure."""

    hull: float
    shield: float
    attack: float
    cargo: float = 0.0
    speed: float = 0.0


@dataclass(frozen=True, slots=True)
class EntityDef:
    """Immutable blueprint for any registry entity."""

    entity_id: str
    name: str
    kind: EntityKind
    base_cost: Resources
    multiplier: float = 1.0
    requirements: Mapping[str, int] = field(default_factory=dict)
    stats: UnitStats | None = None
    rapid_fire: Mapping[str, float] = field(default_factory=dict)
    economy: BuildingEconomy = NO_ECONOMY
    description: str = ""

    @property
    def unit_class(self) -> UnitClass | None:
        if self.kind is EntityKind.SHIP:
            return UnitClass.SHIP
        if self.kind is EntityKind.DEFENSE:
            return UnitClass.DEFENSE
        return None


class EntityRegistry:
    """Read-only lookup from (kind, id) to ``EntityDef``."""

    __slots__ = ("_by_kind", "_by_id")

    def __init__(self, entities: Iterable[EntityDef]) -> None:
        by_kind: dict[EntityKind, dict[str, EntityDef]] = {k: {} for k in EntityKind}
        by_id: dict[str, EntityDef] = {}
        for ent in entities:
            if ent.entity_id in by_id:
                raise ValueError(f"Duplicate entity id: {ent.entity_id}")
            by_kind[ent.kind][ent.entity_id] = ent
            by_id[ent.entity_id] = ent
        self._by_kind = {k: MappingProxyType(v) for k, v in by_kind.items()}
        self._by_id = MappingProxyType(by_id)

    def get(self, kind: EntityKind | str, entity_id: str) -> EntityDef | None:
        return self._by_kind[EntityKind(kind)].get(entity_id)

    def find(self, entity_id: str) -> EntityDef | None:
        """Look up an id across every partition."""
        return self._by_id.get(entity_id)

    def of_kind(self, kind: EntityKind | str) -> Mapping[str, EntityDef]:
        return self._by_kind[EntityKind(kind)]

    def unit(self, entity_id: str) -> EntityDef | None:
        """Return the definition if *entity_id* is a ship or defense."""
        ent = self._by_id.get(entity_id)
        if ent is None or ent.unit_class is None:
            return None
        return ent

    def name_of(self, entity_id: str) -> str:
        ent = self._by_id.get(entity_id)
        return ent.name if ent else entity_id

    def __iter__(self):
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


# ---------------------------------------------------------------------------
# Default content
# ---------------------------------------------------------------------------

def _cost(metal: float = 0, crystal: float = 0, deuterium: float = 0, energy: float = 0) -> Resources:
    return Resources(float(metal), float(crystal), float(deuterium), float(energy))


# Rapid fire every armed ship has against espionage craft and satellites
_FODDER_RF = {"espionage_probe": 5, "solar_satellite": 5}

_B = EntityKind.BUILDING
_R = EntityKind.RESEARCH
_S = EntityKind.SHIP
_D = EntityKind.DEFENSE

_DEFAULT_ENTITIES: list[EntityDef] = [
    # ---- Mines & power ----
    EntityDef("metal_mine", "Metal Mine", _B, _cost(60, 15), 1.5,
              economy=Mine(ResourceType.METAL, 30, 10)),
    EntityDef("crystal_mine", "Crystal Mine", _B, _cost(48, 24), 1.6,
              economy=Mine(ResourceType.CRYSTAL, 20, 10)),
    EntityDef("deut_synthesizer", "Deuterium Synthesizer", _B, _cost(225, 75), 1.5,
              economy=Mine(ResourceType.DEUTERIUM, 10, 20)),
    EntityDef("solar_plant", "Solar Plant", _B, _cost(75, 30), 1.5,
              economy=PowerPlant(20)),
    EntityDef("fusion_reactor", "Fusion Reactor", _B, _cost(900, 360, 180), 1.8,
              requirements={"deut_synthesizer": 5, "energy_tech": 3},
              economy=PowerPlant(30, growth=1.05)),
    # ---- Storage ----
    EntityDef("metal_storage", "Metal Storage", _B, _cost(1000), 2.0),
    EntityDef("crystal_storage", "Crystal Storage", _B, _cost(1000, 500), 2.0),
    EntityDef("deut_tank", "Deuterium Tank", _B, _cost(1000, 1000), 2.0),
    # ---- Facilities ----
    EntityDef("robotics_factory", "Robotics Factory", _B, _cost(400, 120, 200), 2.0),
    EntityDef("shipyard", "Shipyard", _B, _cost(400, 200, 100), 2.0,
              requirements={"robotics_factory": 2}),
    EntityDef("research_lab", "Research Lab", _B, _cost(200, 400, 200), 2.0),
    EntityDef("nanite_factory", "Nanite Factory", _B, _cost(1_000_000, 500_000, 100_000), 2.0,
              requirements={"robotics_factory": 10, "computer_tech": 10}),

    # ---- Research ----
    EntityDef("energy_tech", "Energy Technology", _R, _cost(0, 800, 400), 2.0,
              requirements={"research_lab": 1}),
    EntityDef("computer_tech", "Computer Technology", _R, _cost(0, 400, 600), 2.0,
              requirements={"research_lab": 1}),
    EntityDef("espionage_tech", "Espionage Technology", _R, _cost(200, 1000, 200), 2.0,
              requirements={"research_lab": 3}),
    EntityDef("combustion_drive", "Combustion Drive", _R, _cost(400, 0, 600), 2.0,
              requirements={"energy_tech": 1}),
    EntityDef("impulse_drive", "Impulse Drive", _R, _cost(2000, 4000, 600), 2.0,
              requirements={"energy_tech": 1, "research_lab": 2}),
    EntityDef("hyperspace_drive", "Hyperspace Drive", _R, _cost(10_000, 20_000, 6000), 2.0,
              requirements={"research_lab": 7}),
    EntityDef("astrophysics", "Astrophysics", _R, _cost(4000, 8000, 4000), 1.75,
              requirements={"espionage_tech": 4, "impulse_drive": 3}),
    EntityDef("weapons_tech", "Weapons Technology", _R, _cost(800, 200), 2.0,
              requirements={"research_lab": 4}),
    EntityDef("shielding_tech", "Shielding Technology", _R, _cost(200, 600), 2.0,
              requirements={"energy_tech": 3, "research_lab": 6}),
    EntityDef("armour_tech", "Armour Technology", _R, _cost(1000), 2.0,
              requirements={"research_lab": 2}),

    # ---- Ships ----
    EntityDef("small_cargo", "Small Cargo", _S, _cost(2000, 2000), 1.0,
              requirements={"shipyard": 2, "combustion_drive": 2},
              stats=UnitStats(hull=400, shield=10, attack=5, cargo=5000, speed=5000),
              rapid_fire=_FODDER_RF),
    EntityDef("large_cargo", "Large Cargo", _S, _cost(6000, 6000), 1.0,
              requirements={"shipyard": 4, "combustion_drive": 6},
              stats=UnitStats(hull=1200, shield=25, attack=5, cargo=25_000, speed=7500),
              rapid_fire=_FODDER_RF),
    EntityDef("light_fighter", "Light Fighter", _S, _cost(3000, 1000), 1.0,
              requirements={"shipyard": 1, "combustion_drive": 1},
              stats=UnitStats(hull=400, shield=10, attack=50, cargo=50, speed=12_500),
              rapid_fire=_FODDER_RF),
    EntityDef("heavy_fighter", "Heavy Fighter", _S, _cost(6000, 4000), 1.0,
              requirements={"shipyard": 3, "armour_tech": 2, "impulse_drive": 2},
              stats=UnitStats(hull=1000, shield=25, attack=150, cargo=100, speed=10_000),
              rapid_fire={"small_cargo": 3, **_FODDER_RF}),
    EntityDef("cruiser", "Cruiser", _S, _cost(20_000, 7000, 2000), 1.0,
              requirements={"shipyard": 5, "impulse_drive": 4},
              stats=UnitStats(hull=2700, shield=50, attack=400, cargo=800, speed=15_000),
              rapid_fire={"light_fighter": 6, "rocket_launcher": 10, **_FODDER_RF}),
    EntityDef("battleship", "Battleship", _S, _cost(45_000, 15_000), 1.0,
              requirements={"shipyard": 7, "hyperspace_drive": 4},
              stats=UnitStats(hull=6000, shield=200, attack=1000, cargo=1500, speed=10_000),
              rapid_fire=_FODDER_RF),
    EntityDef("colony_ship", "Colony Ship", _S, _cost(10_000, 20_000, 10_000), 1.0,
              requirements={"shipyard": 4, "impulse_drive": 3},
              stats=UnitStats(hull=3000, shield=100, attack=50, cargo=7500, speed=2500),
              rapid_fire=_FODDER_RF),
    EntityDef("recycler", "Recycler", _S, _cost(10_000, 6000, 2000), 1.0,
              requirements={"shipyard": 4, "combustion_drive": 6},
              stats=UnitStats(hull=1600, shield=10, attack=1, cargo=20_000, speed=2000),
              rapid_fire=_FODDER_RF),
    EntityDef("espionage_probe", "Espionage Probe", _S, _cost(0, 1000), 1.0,
              requirements={"shipyard": 3, "combustion_drive": 3, "espionage_tech": 2},
              stats=UnitStats(hull=100, shield=0, attack=0, cargo=5, speed=100_000_000)),
    EntityDef("solar_satellite", "Solar Satellite", _S, _cost(0, 2000, 500), 1.0,
              requirements={"shipyard": 1},
              stats=UnitStats(hull=200, shield=1, attack=1, cargo=0, speed=0)),

    # ---- Defense ----
    EntityDef("rocket_launcher", "Rocket Launcher", _D, _cost(2000), 1.0,
              requirements={"shipyard": 1},
              stats=UnitStats(hull=200, shield=20, attack=80)),
    EntityDef("light_laser", "Light Laser", _D, _cost(1500, 500), 1.0,
              requirements={"shipyard": 2, "energy_tech": 1},
              stats=UnitStats(hull=200, shield=25, attack=100)),
    EntityDef("heavy_laser", "Heavy Laser", _D, _cost(6000, 2000), 1.0,
              requirements={"shipyard": 4, "energy_tech": 3},
              stats=UnitStats(hull=800, shield=100, attack=250)),
    EntityDef("ion_cannon", "Ion Cannon", _D, _cost(5000, 3000), 1.0,
              requirements={"shipyard": 4},
              stats=UnitStats(hull=800, shield=500, attack=150)),
    EntityDef("gauss_cannon", "Gauss Cannon", _D, _cost(20_000, 15_000, 2000), 1.0,
              requirements={"shipyard": 6, "weapons_tech": 3, "shielding_tech": 1},
              stats=UnitStats(hull=3500, shield=200, attack=1100)),
    EntityDef("plasma_turret", "Plasma Turret", _D, _cost(50_000, 50_000, 30_000), 1.0,
              requirements={"shipyard": 8},
              stats=UnitStats(hull=10_000, shield=300, attack=3000)),
    EntityDef("small_shield_dome", "Small Shield Dome", _D, _cost(10_000, 10_000), 1.0,
              requirements={"shipyard": 1, "shielding_tech": 2},
              stats=UnitStats(hull=2000, shield=2000, attack=1)),
]

DEFAULT_REGISTRY = EntityRegistry(_DEFAULT_ENTITIES)

# Storage building guarding each stockpile
STORAGE_BUILDINGS: dict[ResourceType, str] = {
    ResourceType.METAL: "metal_storage",
    ResourceType.CRYSTAL: "crystal_storage",
    ResourceType.DEUTERIUM: "deut_tank",
}

SOLAR_SATELLITE = "solar_satellite"
COLONY_SHIP = "colony_ship"
BANDIT_GARRISON: dict[str, int] = {"light_fighter": 1}
