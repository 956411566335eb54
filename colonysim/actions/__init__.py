"""Mission arrival handlers. Importing this package registers all of them."""

from colonysim.actions.base import (
    EmpireTargets,
    MissionHandler,
    ResolutionContext,
    TargetDirectory,
    get_mission_handler,
)
from colonysim.actions.attack import AttackHandler
from colonysim.actions.colonize import ColonizeHandler
from colonysim.actions.recycle import RecycleHandler

__all__ = [
    "AttackHandler",
    "ColonizeHandler",
    "EmpireTargets",
    "MissionHandler",
    "RecycleHandler",
    "ResolutionContext",
    "TargetDirectory",
    "get_mission_handler",
]
