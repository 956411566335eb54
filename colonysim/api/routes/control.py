"""POST /api/v1/control/{action}: lifecycle controls plus an on-demand save."""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Depends

from colonysim.api.dependencies import get_engine_manager
from colonysim.api.engine_manager import EngineManager
from colonysim.api.schemas import ControlResponse

router = APIRouter()


class ControlAction(str, Enum):
    start = "start"
    pause = "pause"
    resume = "resume"
    step = "step"
    reset = "reset"
    save = "save"


@router.post("/control/{action}", response_model=ControlResponse)
def control(
    action: ControlAction,
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    tick = manager.ticks

    match action:
        case ControlAction.start:
            if manager.running:
                return ControlResponse(status="noop", message="Already running.", tick=tick)
            manager.start()
            return ControlResponse(status="ok", message="Simulation started.", tick=tick)

        case ControlAction.pause:
            if not manager.running:
                return ControlResponse(status="error", message="Not running.", tick=tick)
            manager.pause()
            return ControlResponse(status="ok", message="Simulation paused.", tick=tick)

        case ControlAction.resume:
            if not manager.running:
                return ControlResponse(status="error", message="Not running.", tick=tick)
            manager.resume()
            return ControlResponse(status="ok", message="Simulation resumed.", tick=tick)

        case ControlAction.step:
            if manager.running:
                manager.step()
                return ControlResponse(status="ok", message="Single tick requested.", tick=tick)
            new_tick = manager.tick_once()
            return ControlResponse(status="ok", message="Single tick executed.", tick=new_tick)

        case ControlAction.reset:
            manager.reset()
            return ControlResponse(status="ok", message="Simulation reset.", tick=manager.ticks)

        case ControlAction.save:
            if not manager.persistent:
                return ControlResponse(status="noop", message="Persistence disabled.", tick=tick)
            manager.save()
            return ControlResponse(status="ok", message="Empire saved.", tick=tick)
