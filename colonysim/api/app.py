"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from colonysim.api.dependencies import set_engine_manager
from colonysim.api.engine_manager import EngineManager
from colonysim.api.routes import api_router
from colonysim.config import SimulationConfig
from colonysim.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: SimulationConfig | None = None) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if config is None:
        config = SimulationConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = EngineManager(_config)
        set_engine_manager(manager)
        manager.start()
        logger.info("API server started — empire ticking.")
        yield
        manager.stop()
        set_engine_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Colony Simulation Engine",
        description=(
            "Tick-driven space strategy simulation core.\n\n"
            "## API Groups\n\n"
            "- **State** — Empire summary, colony detail, missions, combat reports, system logs\n"
            "- **Commands** — Queue construction/research/shipyard tasks, launch fleets, profile\n"
            "- **Control** — Simulation lifecycle: start, pause, resume, step, reset, save\n"
            "- **Config** — Read-only simulation configuration\n"
            "- **Metadata** — Entity registry definitions\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Live empire state with per-colony rates, capacities and countdowns."},
            {"name": "Commands", "description": "Player commands applied atomically between ticks. Rejections return 409."},
            {"name": "Control", "description": "Simulation lifecycle controls: start, pause, resume, single-step, reset and save."},
            {"name": "Config", "description": "Read-only simulation configuration parameters."},
            {"name": "Metadata", "description": "Buildings, research, ships and defenses from the entity registry."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    return app
