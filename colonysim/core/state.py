"""Mutable authoritative empire state — the single persisted document."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from colonysim.core.enums import EventKind, LogKind
from colonysim.core.models import (
    Colony,
    CombatReport,
    Coordinate,
    DebrisField,
    EventTask,
    FleetMission,
    Resources,
    SystemLog,
)

PLAYER_ID = "u1-player"
HOME_COLONY_ID = "p1"


@dataclass(slots=True)
class EmpireState:
    """Everything one player owns.

    Only the tick orchestrator and the command functions mutate it, and
    never concurrently.
    """

    player_id: str
    player_name: str
    seed: int = 42
    bio: str = ""
    name_change_available: bool = True
    research: dict[str, int] = field(default_factory=dict)
    colonies: list[Colony] = field(default_factory=list)
    active_colony_id: str = HOME_COLONY_ID
    events: list[EventTask] = field(default_factory=list)
    missions: list[FleetMission] = field(default_factory=list)
    combat_reports: list[CombatReport] = field(default_factory=list)
    system_logs: list[SystemLog] = field(default_factory=list)
    debris_fields: dict[str, DebrisField] = field(default_factory=dict)
    last_logs_seen: float = 0.0
    boost_end_time: float = 0.0
    next_id: int = 1

    # -- ids --

    def allocate_id(self, prefix: str) -> str:
        nid = self.next_id
        self.next_id += 1
        return f"{prefix}{nid}"

    # -- lookups --

    def colony(self, colony_id: str) -> Colony | None:
        for c in self.colonies:
            if c.id == colony_id:
                return c
        return None

    def colony_at(self, coords: Coordinate) -> Colony | None:
        for c in self.colonies:
            if c.coords == coords:
                return c
        return None

    @property
    def active_colony(self) -> Colony | None:
        return self.colony(self.active_colony_id)

    def research_level(self, research_id: str) -> int:
        return self.research.get(research_id, 0)

    def queued(self, kind: EventKind, colony_id: str | None = None) -> int:
        """Count queued events of *kind*, optionally for one colony."""
        return sum(
            1 for e in self.events
            if e.kind == kind and (colony_id is None or e.colony_id == colony_id)
        )

    def is_boosted(self, now: float) -> bool:
        return now < self.boost_end_time

    def unread_count(self) -> int:
        logs = sum(1 for entry in self.system_logs if entry.time > self.last_logs_seen)
        reports = sum(1 for r in self.combat_reports if r.time > self.last_logs_seen)
        return logs + reports

    # -- append-only feeds --

    def add_log(
        self,
        now: float,
        kind: LogKind,
        message: str,
        colony_name: str | None = None,
        cap: int = 100,
    ) -> SystemLog:
        """Prepend a log entry, dropping the oldest beyond *cap*."""
        entry = SystemLog(
            id=self.allocate_id("log-"),
            time=now,
            kind=kind,
            message=message,
            colony_name=colony_name,
        )
        self.system_logs.insert(0, entry)
        del self.system_logs[cap:]
        return entry

    def add_report(self, report: CombatReport, cap: int = 50) -> None:
        self.combat_reports.insert(0, report)
        del self.combat_reports[cap:]

    def copy(self) -> EmpireState:
        return copy.deepcopy(self)


def default_state(now: float, seed: int = 42, boost_duration: float = 86_400.0) -> EmpireState:
    """Fresh empire: one home colony and an active new-player boost."""
    home = Colony(
        id=HOME_COLONY_ID,
        owner_id=PLAYER_ID,
        name="Prime Core",
        coords=Coordinate(1, 42, 1),
        resources=Resources(metal=10_000, crystal=8000, deuterium=5000),
        last_update=now,
        max_temp=140,
    )
    return EmpireState(
        player_id=PLAYER_ID,
        player_name="Commander",
        seed=seed,
        bio="Status: Active. Awakening in the prime sector.",
        colonies=[home],
        active_colony_id=home.id,
        last_logs_seen=now,
        boost_end_time=now + boost_duration,
    )


def calculate_points(colony: Colony, research: dict[str, int]) -> int:
    """Score: 100 per building level, 50 per ship/defense, 150 per research level."""

    def _holding(buildings: dict[str, int], ships: dict[str, int], defense: dict[str, int]) -> int:
        return sum(buildings.values()) * 100 + sum(ships.values()) * 50 + sum(defense.values()) * 50

    total = _holding(colony.buildings, colony.ships, colony.defense)
    if colony.moon is not None:
        total += _holding(colony.moon.buildings, colony.moon.ships, colony.moon.defense)
    return total + sum(research.values()) * 150
