"""Core data models: Coordinate, Resources, Colony, events, missions, reports."""

from __future__ import annotations

from dataclasses import dataclass, field

from colonysim.core.enums import EventKind, LogKind, MissionType, Winner


# Slot 16 is the reserved bandit outpost
MAX_SLOT = 16


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Immutable galaxy:system:slot position."""

    galaxy: int = 1
    system: int = 1
    slot: int = 1

    @property
    def key(self) -> str:
        """Debris-field key, e.g. ``"1:42:7"``."""
        return f"{self.galaxy}:{self.system}:{self.slot}"

    @classmethod
    def parse(cls, key: str) -> Coordinate:
        galaxy, system, slot = (int(part) for part in key.split(":"))
        return cls(galaxy, system, slot)

    @property
    def in_bounds(self) -> bool:
        return self.galaxy >= 1 and self.system >= 1 and 1 <= self.slot <= MAX_SLOT

    def __str__(self) -> str:
        return self.key


@dataclass(slots=True)
class Resources:
    """Resource amounts. Also used for costs and carried cargo."""

    metal: float = 0.0
    crystal: float = 0.0
    deuterium: float = 0.0
    energy: float = 0.0

    @property
    def total(self) -> float:
        """Sum of the three stockpiled resources (energy excluded)."""
        return self.metal + self.crystal + self.deuterium

    def covers(self, cost: Resources) -> bool:
        return (
            self.metal >= cost.metal
            and self.crystal >= cost.crystal
            and self.deuterium >= cost.deuterium
        )

    def subtract(self, cost: Resources) -> None:
        """Deduct *cost*, clamping each stockpile at zero."""
        self.metal = max(0.0, self.metal - cost.metal)
        self.crystal = max(0.0, self.crystal - cost.crystal)
        self.deuterium = max(0.0, self.deuterium - cost.deuterium)

    def add(self, other: Resources) -> None:
        self.metal += other.metal
        self.crystal += other.crystal
        self.deuterium += other.deuterium

    def scaled(self, factor: float) -> Resources:
        return Resources(
            metal=self.metal * factor,
            crystal=self.crystal * factor,
            deuterium=self.deuterium * factor,
            energy=self.energy,
        )

    def copy(self) -> Resources:
        return Resources(self.metal, self.crystal, self.deuterium, self.energy)


@dataclass(slots=True)
class Moon:
    """Secondary holding attached to a colony; shares the parent's coordinate."""

    size: int
    resources: Resources = field(default_factory=Resources)
    last_update: float = 0.0
    buildings: dict[str, int] = field(default_factory=dict)
    ships: dict[str, int] = field(default_factory=dict)
    defense: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class Colony:
    """A player-owned world."""

    id: str
    owner_id: str
    name: str
    coords: Coordinate
    resources: Resources = field(default_factory=Resources)
    last_update: float = 0.0
    buildings: dict[str, int] = field(default_factory=dict)
    ships: dict[str, int] = field(default_factory=dict)
    defense: dict[str, int] = field(default_factory=dict)
    max_temp: int = 40
    max_fields: int = 160
    moon: Moon | None = None

    def building_level(self, building_id: str) -> int:
        return self.buildings.get(building_id, 0)


@dataclass(slots=True)
class EventTask:
    """A queued construction / research / shipyard task."""

    id: str
    kind: EventKind
    target_id: str
    colony_id: str
    start_time: float
    finish_time: float
    count: int = 1


@dataclass(slots=True)
class FleetMission:
    """A fleet in flight, outbound or returning."""

    id: str
    mission_type: MissionType
    origin_id: str
    target: Coordinate
    ships: dict[str, int]
    resources: Resources = field(default_factory=Resources)
    start_time: float = 0.0
    arrival_time: float = 0.0
    return_time: float | None = None
    is_returning: bool = False

    @property
    def outbound_duration(self) -> float:
        return self.arrival_time - self.start_time

    def is_due(self, now: float) -> bool:
        """True when the mission's next transition should fire at *now*."""
        if self.is_returning:
            return self.return_time is not None and self.return_time <= now
        return self.arrival_time <= now


@dataclass(slots=True)
class DebrisField:
    """Salvageable metal/crystal at a coordinate."""

    metal: float = 0.0
    crystal: float = 0.0

    @property
    def total(self) -> float:
        return self.metal + self.crystal

    @property
    def exhausted(self) -> bool:
        return self.metal <= 0 and self.crystal <= 0


@dataclass(slots=True)
class CombatRound:
    """Per-round damage breakdown for both sides.

    ``attacker_dodges`` counts defender shots evaded by attacking units,
    ``defender_dodges`` the attacker shots evaded by defending units.
    """

    attacker_units: int = 0
    defender_units: int = 0
    attacker_damage: float = 0.0
    attacker_shield_damage: float = 0.0
    attacker_hull_damage: float = 0.0
    attacker_rapid_fires: int = 0
    attacker_dodges: int = 0
    defender_damage: float = 0.0
    defender_shield_damage: float = 0.0
    defender_hull_damage: float = 0.0
    defender_rapid_fires: int = 0
    defender_dodges: int = 0


@dataclass(slots=True)
class CombatReport:
    """Immutable record of one resolved attack."""

    id: str
    time: float
    attacker_id: str
    defender_id: str
    defender_name: str
    target: Coordinate
    winner: Winner
    rounds: list[CombatRound] = field(default_factory=list)
    total_attacker_damage: float = 0.0
    total_defender_damage: float = 0.0
    initial_attacker_hull: float = 0.0
    initial_defender_hull: float = 0.0
    final_attacker_hull: float = 0.0
    final_defender_hull: float = 0.0
    attacker_shields_remaining: float = 0.0
    defender_shields_remaining: float = 0.0
    loot: Resources = field(default_factory=Resources)
    debris: DebrisField = field(default_factory=DebrisField)
    initial_cargo_capacity: float = 0.0
    surviving_cargo_capacity: float = 0.0
    repaired_defense: dict[str, int] = field(default_factory=dict)
    moon_formed: bool = False


@dataclass(slots=True)
class SystemLog:
    """A player-facing notice."""

    id: str
    time: float
    kind: LogKind
    message: str
    colony_name: str | None = None
