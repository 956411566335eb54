"""Metadata endpoints — expose the entity registry so clients hardcode nothing.

Economy strategies are not serialized; clients get the first few levels
of each economic building's output instead.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from colonysim.api.dependencies import get_engine_manager
from colonysim.api.engine_manager import EngineManager
from colonysim.api.schemas import ResourcesSchema
from colonysim.core.enums import EntityKind, EventKind, LogKind, MissionType
from colonysim.core.registry import EntityDef

router = APIRouter(prefix="/metadata", tags=["Metadata"])

_PREVIEW_LEVELS = 5


# ---------------------------------------------------------------------------
# Pydantic response schemas
# ---------------------------------------------------------------------------

class UnitStatsEntry(BaseModel):
    hull: float
    shield: float
    attack: float
    cargo: float = 0.0
    speed: float = 0.0


class EconomyPreview(BaseModel):
    resource: str | None = None
    production: list[float] = Field(default_factory=list)
    energy_production: list[float] = Field(default_factory=list)
    energy_consumption: list[float] = Field(default_factory=list)


class EntityEntry(BaseModel):
    entity_id: str
    name: str
    kind: EntityKind
    unit_class: str | None = None
    base_cost: ResourcesSchema
    multiplier: float
    requirements: dict[str, int] = Field(default_factory=dict)
    stats: UnitStatsEntry | None = None
    rapid_fire: dict[str, float] = Field(default_factory=dict)
    economy: EconomyPreview | None = None
    description: str = ""


class RegistryResponse(BaseModel):
    buildings: list[EntityEntry]
    research: list[EntityEntry]
    ships: list[EntityEntry]
    defense: list[EntityEntry]


class EnumsResponse(BaseModel):
    event_kinds: list[str]
    mission_types: list[str]
    log_kinds: list[str]


def _entry(ent: EntityDef) -> EntityEntry:
    economy = None
    if ent.kind is EntityKind.BUILDING and (
        ent.economy.resource is not None or ent.economy.energy_production(1) > 0
    ):
        levels = range(1, _PREVIEW_LEVELS + 1)
        economy = EconomyPreview(
            resource=ent.economy.resource.value if ent.economy.resource else None,
            production=[ent.economy.production(lv) for lv in levels],
            energy_production=[ent.economy.energy_production(lv) for lv in levels],
            energy_consumption=[ent.economy.energy_consumption(lv) for lv in levels],
        )
    stats = None
    if ent.stats is not None:
        s = ent.stats
        stats = UnitStatsEntry(hull=s.hull, shield=s.shield, attack=s.attack, cargo=s.cargo, speed=s.speed)
    return EntityEntry(
        entity_id=ent.entity_id,
        name=ent.name,
        kind=ent.kind,
        unit_class=ent.unit_class.value if ent.unit_class else None,
        base_cost=ResourcesSchema.model_validate(ent.base_cost),
        multiplier=ent.multiplier,
        requirements=dict(ent.requirements),
        stats=stats,
        rapid_fire=dict(ent.rapid_fire),
        economy=economy,
        description=ent.description,
    )


@router.get("/registry", response_model=RegistryResponse)
def get_registry(
    manager: EngineManager = Depends(get_engine_manager),
) -> RegistryResponse:
    """Every building, research, ship and defense definition."""
    reg = manager.registry
    return RegistryResponse(
        buildings=[_entry(e) for e in reg.of_kind(EntityKind.BUILDING).values()],
        research=[_entry(e) for e in reg.of_kind(EntityKind.RESEARCH).values()],
        ships=[_entry(e) for e in reg.of_kind(EntityKind.SHIP).values()],
        defense=[_entry(e) for e in reg.of_kind(EntityKind.DEFENSE).values()],
    )


@router.get("/enums", response_model=EnumsResponse)
def get_enums() -> EnumsResponse:
    return EnumsResponse(
        event_kinds=[k.value for k in EventKind],
        mission_types=[m.value for m in MissionType],
        log_kinds=[k.value for k in LogKind],
    )
