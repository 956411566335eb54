"""Simulation configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable configuration for the simulation run."""

    # World
    world_seed: int = 42

    # Timing
    tick_interval_seconds: float = 1.0
    max_catchup_seconds: float = 43_200.0    # 12h cap on offline accrual per tick

    # New-player boost window
    boost_multiplier: float = 15.0
    boost_duration_seconds: float = 86_400.0
    boost_build_time_factor: float = 0.25

    # Combat
    max_rounds: int = 6
    debris_ratio: float = 0.30               # share of metal/crystal cost left as debris
    moon_max_chance: float = 0.20
    moon_debris_divisor: float = 100_000.0
    defense_repair_ratio: float = 0.7
    loot_ratio: float = 0.5
    evasion_cap: float = 0.15
    evasion_speed_divisor: float = 250_000.0
    explosion_threshold: float = 0.7         # hull ratio below which units may explode

    # Fleets
    default_fleet_speed: int = 2500
    bandit_slot: int = 16
    bandit_resources: tuple = (25_000.0, 15_000.0, 5_000.0)

    # Queues
    max_building_queue: int = 2
    max_research_queue: int = 1

    # Logs
    system_log_cap: int = 100
    combat_report_cap: int = 50

    # Persistence
    state_file: str = "empire_state.json"
    autosave_every_ticks: int = 30

    # Logging
    log_level: str = "INFO"
