"""GET /api/v1/state, colonies, missions, reports, logs — read-only views."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from colonysim.api.dependencies import get_engine_manager
from colonysim.api.engine_manager import EngineManager
from colonysim.api.schemas import (
    ColonyDetailResponse,
    ColonySummarySchema,
    CombatReportSchema,
    CoordinateSchema,
    EmpireStateResponse,
    EventSchema,
    LogsPage,
    MissionSchema,
    MoonSchema,
    ProductionSchema,
    ReportsPage,
    ResourcesSchema,
    SystemLogSchema,
)
from colonysim.core.state import calculate_points
from colonysim.systems.production import colony_rates, protected_amounts, storage_capacities

router = APIRouter()


def _paginate(items: list, page: int, size: int) -> list:
    start = (page - 1) * size
    return items[start:start + size]


@router.get("/state", response_model=EmpireStateResponse)
def get_state(
    manager: EngineManager = Depends(get_engine_manager),
) -> EmpireStateResponse:
    state = manager.get_state()
    now = manager.now()
    return EmpireStateResponse(
        now=now,
        tick=manager.ticks,
        player_id=state.player_id,
        player_name=state.player_name,
        bio=state.bio,
        name_change_available=state.name_change_available,
        active_colony_id=state.active_colony_id,
        research=dict(state.research),
        colonies=[
            ColonySummarySchema(
                id=c.id,
                name=c.name,
                coords=CoordinateSchema.model_validate(c.coords),
                resources=ResourcesSchema.model_validate(c.resources),
                points=calculate_points(c, state.research),
                max_temp=c.max_temp,
                max_fields=c.max_fields,
                has_moon=c.moon is not None,
            )
            for c in state.colonies
        ],
        boosted=state.is_boosted(now),
        boost_end_time=state.boost_end_time,
        unread_count=state.unread_count(),
        queued_events=len(state.events),
        active_missions=len(state.missions),
    )


@router.get("/colonies/{colony_id}", response_model=ColonyDetailResponse)
def get_colony(
    colony_id: str,
    manager: EngineManager = Depends(get_engine_manager),
) -> ColonyDetailResponse:
    state = manager.get_state()
    colony = state.colony(colony_id)
    if colony is None:
        raise HTTPException(status_code=404, detail=f"Colony {colony_id} not found")
    now = manager.now()
    registry = manager.registry
    queue = sorted((e for e in state.events if e.colony_id == colony_id), key=lambda e: e.finish_time)
    return ColonyDetailResponse(
        id=colony.id,
        name=colony.name,
        coords=CoordinateSchema.model_validate(colony.coords),
        resources=ResourcesSchema.model_validate(colony.resources),
        buildings=dict(colony.buildings),
        ships=dict(colony.ships),
        defense=dict(colony.defense),
        max_temp=colony.max_temp,
        max_fields=colony.max_fields,
        production=ProductionSchema.model_validate(colony_rates(colony, registry)),
        capacity={r.value: cap for r, cap in storage_capacities(colony).items()},
        protection=ResourcesSchema.model_validate(protected_amounts(colony)),
        queue=[
            EventSchema(
                id=e.id,
                kind=e.kind,
                target_id=e.target_id,
                name=registry.name_of(e.target_id),
                colony_id=e.colony_id,
                start_time=e.start_time,
                finish_time=e.finish_time,
                count=e.count,
                seconds_remaining=max(0.0, e.finish_time - now),
            )
            for e in queue
        ],
        moon=MoonSchema.model_validate(colony.moon) if colony.moon else None,
    )


@router.get("/missions", response_model=list[MissionSchema])
def get_missions(
    manager: EngineManager = Depends(get_engine_manager),
) -> list[MissionSchema]:
    state = manager.get_state()
    now = manager.now()
    out: list[MissionSchema] = []
    for m in state.missions:
        due = m.return_time if m.is_returning and m.return_time is not None else m.arrival_time
        out.append(MissionSchema(
            id=m.id,
            mission_type=m.mission_type,
            origin_id=m.origin_id,
            target=CoordinateSchema.model_validate(m.target),
            ships=dict(m.ships),
            resources=ResourcesSchema.model_validate(m.resources),
            start_time=m.start_time,
            arrival_time=m.arrival_time,
            return_time=m.return_time,
            is_returning=m.is_returning,
            seconds_remaining=max(0.0, due - now),
        ))
    return out


@router.get("/reports", response_model=ReportsPage)
def get_reports(
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=50),
    manager: EngineManager = Depends(get_engine_manager),
) -> ReportsPage:
    state = manager.get_state()
    return ReportsPage(
        page=page,
        size=size,
        total=len(state.combat_reports),
        unread_count=state.unread_count(),
        items=[CombatReportSchema.model_validate(r) for r in _paginate(state.combat_reports, page, size)],
    )


@router.get("/logs", response_model=LogsPage)
def get_logs(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    manager: EngineManager = Depends(get_engine_manager),
) -> LogsPage:
    state = manager.get_state()
    return LogsPage(
        page=page,
        size=size,
        total=len(state.system_logs),
        unread_count=state.unread_count(),
        items=[SystemLogSchema.model_validate(entry) for entry in _paginate(state.system_logs, page, size)],
    )
