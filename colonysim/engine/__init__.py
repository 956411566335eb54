"""Engine layer: combat, event queue, missions, commands, tick orchestrator."""

from colonysim.engine.combat import CombatEngine, CombatResult
from colonysim.engine.event_queue import EventQueue
from colonysim.engine.orchestrator import TickOrchestrator

__all__ = ["CombatEngine", "CombatResult", "EventQueue", "TickOrchestrator"]
