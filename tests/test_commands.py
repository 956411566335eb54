"""Tests for the command surface and the pure state-transition form."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from colonysim.config import SimulationConfig
from colonysim.core.enums import EventKind, LogKind, MissionType, Winner
from colonysim.core.models import CombatReport, Coordinate, Resources
from colonysim.engine.commands import (
    AdmitEvent,
    ClearLogs,
    LaunchMission,
    MarkLogsSeen,
    SetActiveColony,
    UpdateProfile,
    admit_event,
    apply_command,
    clear_logs,
    enqueue,
    mark_logs_seen,
    plan_event,
    requirements_met,
    set_active_colony,
    update_profile,
)
from colonysim.systems.production import calculate_build_time
from tests.helpers.empire import NOW, add_colony, make_state


class TestPlanning:

    def test_building_plan_uses_next_level(self):
        state = make_state()
        state.colonies[0].buildings["metal_mine"] = 2
        plan = plan_event(state, EventKind.BUILDING, "metal_mine", NOW)
        assert plan.cost.metal == 135
        assert plan.cost.crystal == 33
        assert plan.colony_id == "p1"

    def test_shipyard_plan_multiplies_by_count(self):
        state = make_state(boosted=True)
        plan = plan_event(state, EventKind.SHIPYARD, "light_fighter", NOW, count=3)
        assert plan.cost.metal == 9000
        assert plan.cost.crystal == 3000
        unit_time = calculate_build_time(Resources(3000, 1000), 0, 0, boosted=True)
        assert plan.duration == unit_time * 3
        assert plan.count == 3

    def test_boost_shortens_duration(self):
        slow = plan_event(make_state(boosted=False), EventKind.BUILDING, "shipyard", NOW)
        fast = plan_event(make_state(boosted=True), EventKind.BUILDING, "shipyard", NOW)
        assert fast.duration < slow.duration

    def test_unknown_entity_cannot_be_planned(self):
        assert plan_event(make_state(), EventKind.BUILDING, "light_fighter", NOW) is None

    def test_requirements_combine_buildings_and_research(self):
        state = make_state()
        reqs = {"shipyard": 1, "combustion_drive": 1}
        assert not requirements_met(state, "p1", reqs)
        state.colonies[0].buildings["shipyard"] = 1
        state.research["combustion_drive"] = 1
        assert requirements_met(state, "p1", reqs)


class TestAdmitEvent:

    def test_enqueue_deducts_and_queues(self):
        state = make_state()
        task_id = enqueue(state, EventKind.BUILDING, "metal_mine", NOW)
        assert task_id is not None
        home = state.colonies[0]
        assert home.resources.metal == 10_000 - 60
        assert home.resources.crystal == 8000 - 15
        task = state.events[0]
        assert task.id == task_id
        assert task.finish_time == NOW + calculate_build_time(Resources(60, 15), 0, 0)

    def test_unaffordable_rejected_untouched(self):
        state = make_state(metal=10, crystal=10, deuterium=10)
        assert enqueue(state, EventKind.BUILDING, "metal_mine", NOW) is None
        assert state.events == []
        assert state.colonies[0].resources.metal == 10

    def test_locked_entity_rejected(self):
        state = make_state()
        assert enqueue(state, EventKind.BUILDING, "shipyard", NOW) is None
        assert state.colonies[0].resources.metal == 10_000

    def test_full_queue_keeps_resources(self):
        state = make_state()
        enqueue(state, EventKind.BUILDING, "metal_mine", NOW)
        enqueue(state, EventKind.BUILDING, "crystal_mine", NOW)
        before = state.colonies[0].resources.copy()
        assert enqueue(state, EventKind.BUILDING, "solar_plant", NOW) is None
        assert state.colonies[0].resources == before

    def test_explicit_cost_and_duration(self):
        state = make_state()
        task_id = admit_event(state, EventKind.SHIPYARD, "small_cargo", Resources(500), 42, NOW, count=2)
        assert task_id is None  # shipyard and combustion drive missing
        home = state.colonies[0]
        home.buildings["shipyard"] = 2
        state.research["combustion_drive"] = 2
        task_id = admit_event(state, EventKind.SHIPYARD, "small_cargo", Resources(500), 42, NOW, count=2)
        assert state.events[0].finish_time == NOW + 42
        assert home.resources.metal == 9500

    def test_unknown_target_rejected_uncharged(self):
        state = make_state()
        assert admit_event(state, EventKind.BUILDING, "warp_gate", Resources(100), 10, NOW) is None
        assert state.events == []
        assert state.colonies[0].resources.metal == 10_000

    def test_target_must_match_task_kind(self):
        state = make_state()
        state.colonies[0].buildings["shipyard"] = 1
        state.research.update({"combustion_drive": 1, "espionage_tech": 4, "impulse_drive": 3})
        assert admit_event(state, EventKind.BUILDING, "light_fighter", Resources(100), 10, NOW) is None
        assert admit_event(state, EventKind.RESEARCH, "metal_mine", Resources(100), 10, NOW) is None
        assert admit_event(state, EventKind.SHIPYARD, "astrophysics", Resources(100), 10, NOW) is None
        assert state.events == []
        assert state.colonies[0].resources.metal == 10_000
        assert admit_event(state, EventKind.SHIPYARD, "light_fighter", Resources(100), 10, NOW) is not None

    def test_targets_other_colony(self):
        state = make_state()
        c2 = add_colony(state, "c2", (1, 42, 8), resources=Resources(1000, 1000, 1000))
        enqueue(state, EventKind.BUILDING, "metal_mine", NOW, colony_id="c2")
        assert c2.resources.metal == 940
        assert state.colonies[0].resources.metal == 10_000


class TestProfileAndLogs:

    def test_active_colony(self):
        state = make_state()
        add_colony(state, "c2", (1, 42, 8))
        assert set_active_colony(state, "c2")
        assert state.active_colony.id == "c2"
        assert not set_active_colony(state, "nowhere")
        assert state.active_colony_id == "c2"

    def test_single_rename(self):
        state = make_state()
        assert update_profile(state, name="Vega")
        assert state.player_name == "Vega"
        assert not state.name_change_available
        assert not update_profile(state, name="Rigel")
        assert state.player_name == "Vega"

    def test_bio_always_editable(self):
        state = make_state()
        update_profile(state, name="Vega")
        assert update_profile(state, bio="Quiet expansionist.")
        assert state.bio == "Quiet expansionist."

    def test_clear_logs_empties_reports_too(self):
        state = make_state()
        state.add_log(NOW, LogKind.MISSION, "hello")
        state.add_report(CombatReport(
            id="rep-1", time=NOW, attacker_id="a", defender_id="b",
            defender_name="x", target=Coordinate(1, 1, 1), winner=Winner.DRAW,
        ))
        clear_logs(state)
        assert state.system_logs == [] and state.combat_reports == []

    def test_system_log_keeps_newest_hundred(self):
        state = make_state()
        for i in range(101):
            state.add_log(NOW + i, LogKind.MISSION, f"entry {i}")
        assert len(state.system_logs) == 100
        assert state.system_logs[0].message == "entry 100"
        assert state.system_logs[-1].message == "entry 1"

    def test_combat_reports_keep_newest_fifty(self):
        state = make_state()
        for i in range(51):
            state.add_report(CombatReport(
                id=f"rep-{i}", time=NOW + i, attacker_id="a", defender_id="b",
                defender_name="x", target=Coordinate(1, 1, 1), winner=Winner.DRAW,
            ))
        assert len(state.combat_reports) == 50
        assert state.combat_reports[0].id == "rep-50"
        assert state.combat_reports[-1].id == "rep-1"

    def test_unread_counter(self):
        state = make_state()
        state.add_log(NOW + 1, LogKind.MISSION, "one")
        state.add_log(NOW + 2, LogKind.MISSION, "two")
        assert state.unread_count() == 2
        mark_logs_seen(state, NOW + 2)
        assert state.unread_count() == 0


class TestApplyCommand:

    def test_input_state_untouched(self):
        state = make_state()
        nxt = apply_command(state, AdmitEvent(EventKind.BUILDING, "metal_mine"), NOW)
        assert state.events == []
        assert len(nxt.events) == 1
        assert state.colonies[0].resources.metal == 10_000

    def test_rejected_command_yields_equal_state(self):
        state = make_state()
        nxt = apply_command(state, SetActiveColony("nowhere"), NOW)
        assert nxt == state
        assert nxt is not state

    def test_launch_via_transition(self):
        state = make_state()
        state.colonies[0].ships["light_fighter"] = 3
        cmd = LaunchMission(MissionType.ATTACK, "p1", Coordinate(1, 42, 16), {"light_fighter": 3})
        nxt = apply_command(state, cmd, NOW, SimulationConfig())
        assert len(nxt.missions) == 1
        assert nxt.colonies[0].ships["light_fighter"] == 0
        assert state.colonies[0].ships["light_fighter"] == 3

    def test_profile_and_log_commands(self):
        state = make_state()
        state.add_log(NOW + 5, LogKind.MISSION, "ping")
        nxt = apply_command(state, UpdateProfile(name="Vega", bio="hi"), NOW)
        nxt = apply_command(nxt, MarkLogsSeen(), NOW + 5)
        assert nxt.unread_count() == 0
        nxt = apply_command(nxt, ClearLogs(), NOW + 6)
        assert nxt.player_name == "Vega"
        assert nxt.system_logs == []
