"""GET /api/v1/config — expose simulation configuration."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from colonysim.api.dependencies import get_engine_manager
from colonysim.api.engine_manager import EngineManager
from colonysim.api.schemas import SimulationConfigResponse

router = APIRouter()


@router.get("/config", response_model=SimulationConfigResponse)
def get_config(
    manager: EngineManager = Depends(get_engine_manager),
) -> SimulationConfigResponse:
    cfg = manager.config
    return SimulationConfigResponse(
        world_seed=cfg.world_seed,
        tick_interval_seconds=manager.tick_rate,
        max_catchup_seconds=cfg.max_catchup_seconds,
        boost_multiplier=cfg.boost_multiplier,
        boost_duration_seconds=cfg.boost_duration_seconds,
        max_rounds=cfg.max_rounds,
        debris_ratio=cfg.debris_ratio,
        moon_max_chance=cfg.moon_max_chance,
        default_fleet_speed=cfg.default_fleet_speed,
        bandit_slot=cfg.bandit_slot,
        max_building_queue=cfg.max_building_queue,
        max_research_queue=cfg.max_research_queue,
        autosave_every_ticks=cfg.autosave_every_ticks,
    )
