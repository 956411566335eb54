"""POST /api/v1/commands/* — player commands applied between ticks."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from colonysim.api.dependencies import get_engine_manager
from colonysim.api.engine_manager import EngineManager
from colonysim.api.schemas import (
    ActiveColonyRequest,
    CommandResponse,
    EventCommandRequest,
    MissionCommandRequest,
    ProfileRequest,
)
from colonysim.core.models import Coordinate, Resources

router = APIRouter(prefix="/commands")


@router.post("/events", response_model=CommandResponse)
def admit_event(
    body: EventCommandRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> CommandResponse:
    task_id = manager.admit_event(body.kind, body.target_id, body.count, body.colony_id)
    if task_id is None:
        raise HTTPException(status_code=409, detail=f"Cannot queue {body.kind.value} {body.target_id}")
    return CommandResponse(status="ok", message=f"Queued {body.target_id}.", id=task_id)


@router.post("/missions", response_model=CommandResponse)
def launch_mission(
    body: MissionCommandRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> CommandResponse:
    target = Coordinate(body.target.galaxy, body.target.system, body.target.slot)
    cargo = Resources(body.resources.metal, body.resources.crystal, body.resources.deuterium)
    mission = manager.launch_mission(
        body.mission_type, body.origin_id, target, body.ships, cargo, body.percentage,
    )
    if mission is None:
        raise HTTPException(status_code=409, detail="Fleet cannot be dispatched")
    return CommandResponse(
        status="ok",
        message=f"{body.mission_type.value} fleet en route to {target}.",
        id=mission.id,
    )


@router.post("/active-colony", response_model=CommandResponse)
def set_active_colony(
    body: ActiveColonyRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> CommandResponse:
    if not manager.set_active_colony(body.colony_id):
        raise HTTPException(status_code=404, detail=f"Colony {body.colony_id} not found")
    return CommandResponse(status="ok", message=f"Active colony set to {body.colony_id}.")


@router.post("/logs/clear", response_model=CommandResponse)
def clear_logs(
    manager: EngineManager = Depends(get_engine_manager),
) -> CommandResponse:
    manager.clear_logs()
    return CommandResponse(status="ok", message="Logs cleared.")


@router.post("/logs/seen", response_model=CommandResponse)
def mark_logs_seen(
    manager: EngineManager = Depends(get_engine_manager),
) -> CommandResponse:
    manager.mark_logs_seen()
    return CommandResponse(status="ok", message="Logs marked as seen.")


@router.post("/profile", response_model=CommandResponse)
def update_profile(
    body: ProfileRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> CommandResponse:
    if not manager.update_profile(body.name, body.bio):
        raise HTTPException(status_code=409, detail="Name change already used")
    return CommandResponse(status="ok", message="Profile updated.")
