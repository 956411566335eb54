"""Pydantic request/response models for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from colonysim.core.enums import EventKind, LogKind, MissionType, Winner
from colonysim.core.models import MAX_SLOT


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --- Shared ---

class CoordinateSchema(_FromAttributes):
    galaxy: int = Field(1, ge=1)
    system: int = Field(1, ge=1)
    slot: int = Field(1, ge=1, le=MAX_SLOT)


class ResourcesSchema(_FromAttributes):
    metal: float = 0.0
    crystal: float = 0.0
    deuterium: float = 0.0
    energy: float = 0.0


# --- Empire ---

class ColonySummarySchema(BaseModel):
    id: str
    name: str
    coords: CoordinateSchema
    resources: ResourcesSchema
    points: int
    max_temp: float
    max_fields: int
    has_moon: bool


class EmpireStateResponse(BaseModel):
    now: float
    tick: int
    player_id: str
    player_name: str
    bio: str
    name_change_available: bool
    active_colony_id: str
    research: dict[str, int]
    colonies: list[ColonySummarySchema]
    boosted: bool
    boost_end_time: float
    unread_count: int
    queued_events: int
    active_missions: int


# --- Colony ---

class ProductionSchema(_FromAttributes):
    metal: float
    crystal: float
    deuterium: float
    energy: float
    energy_production: float
    energy_consumption: float
    efficiency: float


class EventSchema(BaseModel):
    id: str
    kind: EventKind
    target_id: str
    name: str
    colony_id: str
    start_time: float
    finish_time: float
    count: int
    seconds_remaining: float


class MoonSchema(_FromAttributes):
    size: int
    buildings: dict[str, int] = Field(default_factory=dict)
    ships: dict[str, int] = Field(default_factory=dict)
    defense: dict[str, int] = Field(default_factory=dict)


class ColonyDetailResponse(BaseModel):
    id: str
    name: str
    coords: CoordinateSchema
    resources: ResourcesSchema
    buildings: dict[str, int]
    ships: dict[str, int]
    defense: dict[str, int]
    max_temp: float
    max_fields: int
    production: ProductionSchema
    capacity: dict[str, int]
    protection: ResourcesSchema
    queue: list[EventSchema] = Field(default_factory=list)
    moon: MoonSchema | None = None


# --- Missions ---

class MissionSchema(BaseModel):
    id: str
    mission_type: MissionType
    origin_id: str
    target: CoordinateSchema
    ships: dict[str, int]
    resources: ResourcesSchema
    start_time: float
    arrival_time: float
    return_time: float | None = None
    is_returning: bool
    seconds_remaining: float


# --- Reports & logs ---

class CombatRoundSchema(_FromAttributes):
    attacker_units: int
    defender_units: int
    attacker_damage: float
    attacker_shield_damage: float
    attacker_hull_damage: float
    attacker_rapid_fires: int
    attacker_dodges: int
    defender_damage: float
    defender_shield_damage: float
    defender_hull_damage: float
    defender_rapid_fires: int
    defender_dodges: int


class DebrisSchema(_FromAttributes):
    metal: float = 0.0
    crystal: float = 0.0


class CombatReportSchema(_FromAttributes):
    id: str
    time: float
    attacker_id: str
    defender_id: str
    defender_name: str
    target: CoordinateSchema
    winner: Winner
    rounds: list[CombatRoundSchema]
    total_attacker_damage: float
    total_defender_damage: float
    initial_attacker_hull: float
    initial_defender_hull: float
    final_attacker_hull: float
    final_defender_hull: float
    loot: ResourcesSchema
    debris: DebrisSchema
    repaired_defense: dict[str, int] = Field(default_factory=dict)
    moon_formed: bool = False


class SystemLogSchema(_FromAttributes):
    id: str
    time: float
    kind: LogKind
    message: str
    colony_name: str | None = None


class ReportsPage(BaseModel):
    page: int
    size: int
    total: int
    unread_count: int
    items: list[CombatReportSchema]


class LogsPage(BaseModel):
    page: int
    size: int
    total: int
    unread_count: int
    items: list[SystemLogSchema]


# --- Commands ---

class EventCommandRequest(BaseModel):
    kind: EventKind
    target_id: str
    count: int = Field(1, ge=1)
    colony_id: str | None = None


class MissionCommandRequest(BaseModel):
    mission_type: MissionType
    origin_id: str
    target: CoordinateSchema
    ships: dict[str, int]
    resources: ResourcesSchema = Field(default_factory=ResourcesSchema)
    percentage: float = Field(100, gt=0, le=100)


class ActiveColonyRequest(BaseModel):
    colony_id: str


class ProfileRequest(BaseModel):
    name: str | None = Field(None, max_length=32)
    bio: str | None = Field(None, max_length=500)


class CommandResponse(BaseModel):
    status: str
    message: str
    id: str | None = None


# --- Control ---

class ControlResponse(BaseModel):
    status: str
    message: str
    tick: int = 0


# --- Config ---

class SimulationConfigResponse(BaseModel):
    world_seed: int
    tick_interval_seconds: float
    max_catchup_seconds: float
    boost_multiplier: float
    boost_duration_seconds: float
    max_rounds: int
    debris_ratio: float
    moon_max_chance: float
    default_fleet_speed: int
    bandit_slot: int
    max_building_queue: int
    max_research_queue: int
    autosave_every_ticks: int
