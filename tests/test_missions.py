"""Tests for fleet launch, arrival handlers and homecoming."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from colonysim.config import SimulationConfig
from colonysim.core.enums import Domain, MissionType, Winner
from colonysim.core.models import Colony, Coordinate, DebrisField, FleetMission, Moon, Resources
from colonysim.engine.missions import drain_missions, launch_mission
from colonysim.systems.spatial import calculate_distance, calculate_flight_time
from tests.helpers.empire import (
    NOW,
    FixedTargets,
    ScriptedRNG,
    add_colony,
    make_context,
    make_mission,
    make_state,
)

ARRIVAL = NOW + 100


def _enemy(**kwargs) -> Colony:
    return Colony(
        id="e1", owner_id="npc-7", name="Hostile Rock",
        coords=Coordinate(1, 43, 5), last_update=NOW, **kwargs,
    )


class TestLaunch:

    def test_launch_deducts_and_times_flight(self):
        state = make_state()
        state.colonies[0].ships["light_fighter"] = 5
        target = Coordinate(1, 42, 16)
        mission = launch_mission(
            state, MissionType.ATTACK, "p1", target, {"light_fighter": 5}, None, NOW,
            config=SimulationConfig(),
        )
        assert mission is not None
        assert state.colonies[0].ships["light_fighter"] == 0
        expected = calculate_flight_time(calculate_distance(Coordinate(1, 42, 1), target), 12_500)
        assert mission.arrival_time == NOW + expected
        assert state.missions == [mission]

    def test_cargo_leaves_origin(self):
        state = make_state()
        state.colonies[0].ships["small_cargo"] = 1
        launch_mission(
            state, MissionType.TRANSPORT, "p1", Coordinate(1, 42, 5),
            {"small_cargo": 1}, Resources(3000, 1000), NOW,
        )
        assert state.colonies[0].resources.metal == 7000
        assert state.missions[0].resources.metal == 3000

    def test_slower_fleet_takes_longer(self):
        state = make_state()
        state.colonies[0].ships.update({"light_fighter": 1, "recycler": 1})
        fast = launch_mission(state, MissionType.TRANSPORT, "p1", Coordinate(1, 50, 1), {"light_fighter": 1}, None, NOW)
        slow = launch_mission(state, MissionType.TRANSPORT, "p1", Coordinate(1, 50, 1), {"recycler": 1}, None, NOW)
        assert slow.arrival_time > fast.arrival_time

    @pytest.mark.parametrize("ships,cargo,mission_type,target", [
        ({"light_fighter": 6}, None, MissionType.ATTACK, (1, 42, 9)),
        ({"light_fighter": 1}, Resources(100), MissionType.TRANSPORT, (1, 42, 9)),
        ({"small_cargo": 1}, Resources(20_000), MissionType.TRANSPORT, (1, 42, 9)),
        ({"small_cargo": 1}, None, MissionType.COLONIZE, (1, 42, 9)),
        ({}, None, MissionType.ATTACK, (1, 42, 9)),
        ({"rocket_launcher": 1}, None, MissionType.ATTACK, (1, 42, 9)),
        ({"colony_ship": 1}, None, MissionType.COLONIZE, (1, 42, 40)),
        ({"light_fighter": 1}, None, MissionType.ATTACK, (1, 42, 0)),
        ({"light_fighter": 1}, None, MissionType.ATTACK, (0, 42, 5)),
        ({"light_fighter": 1}, None, MissionType.ATTACK, (1, 0, 5)),
    ])
    def test_rejections_leave_state_untouched(self, ships, cargo, mission_type, target):
        state = make_state()
        home = state.colonies[0]
        home.ships.update({"light_fighter": 5, "small_cargo": 1, "colony_ship": 1})
        home.defense["rocket_launcher"] = 1
        before = state.copy()
        assert launch_mission(state, mission_type, "p1", Coordinate(*target), ships, cargo, NOW) is None
        assert state == before

    def test_unknown_origin(self):
        state = make_state()
        assert launch_mission(state, MissionType.ATTACK, "nope", Coordinate(1, 1, 1), {"light_fighter": 1}, None, NOW) is None


class TestColonize:

    def test_cap_reached_turns_fleet_around(self):
        state = make_state()
        add_colony(state, "c2", (1, 50, 3))
        ships = {"colony_ship": 1, "small_cargo": 1}
        state.missions.append(make_mission(MissionType.COLONIZE, (1, 42, 9), ships))
        drain_missions(state, ARRIVAL, make_context())

        assert len(state.colonies) == 2
        mission = state.missions[0]
        assert mission.is_returning
        assert mission.ships == ships
        assert mission.return_time == ARRIVAL + 100

    def test_founds_colony(self):
        state = make_state()
        state.missions.append(make_mission(
            MissionType.COLONIZE, (1, 42, 9), {"colony_ship": 1, "small_cargo": 1},
            resources=Resources(500, 200, 100),
        ))
        drain_missions(state, ARRIVAL, make_context())

        assert state.missions == []
        colony = state.colonies[1]
        assert colony.id.startswith("col-")
        assert colony.coords == Coordinate(1, 42, 9)
        assert colony.ships == {"small_cargo": 1}
        assert (colony.resources.metal, colony.resources.crystal, colony.resources.deuterium) == (500, 200, 100)
        assert 20 <= colony.max_temp < 60
        assert 200 <= colony.max_fields < 250
        assert colony.last_update == ARRIVAL
        assert state.system_logs[0].message == "New world initialized at 1:42:9"

    def test_astrophysics_raises_cap(self):
        state = make_state()
        add_colony(state, "c2", (1, 50, 3))
        state.research["astrophysics"] = 2
        state.missions.append(make_mission(MissionType.COLONIZE, (1, 42, 9), {"colony_ship": 2}))
        drain_missions(state, ARRIVAL, make_context())
        assert len(state.colonies) == 3
        assert state.colonies[2].ships == {"colony_ship": 1}

    def test_occupied_coordinate_aborts(self):
        state = make_state()
        state.missions.append(make_mission(MissionType.COLONIZE, (1, 42, 1), {"colony_ship": 1}))
        drain_missions(state, ARRIVAL, make_context())
        assert len(state.colonies) == 1
        assert state.missions[0].is_returning


class TestRecycle:

    def test_empty_field_collects_nothing(self):
        state = make_state()
        state.missions.append(make_mission(MissionType.RECYCLE, (1, 42, 5), {"recycler": 1}))
        drain_missions(state, ARRIVAL, make_context())

        mission = state.missions[0]
        assert mission.is_returning
        assert mission.resources.metal == 0 and mission.resources.crystal == 0
        assert "1:42:5" not in state.debris_fields
        expected = calculate_flight_time(calculate_distance(Coordinate(1, 42, 1), Coordinate(1, 42, 5)), 2000)
        assert mission.return_time == ARRIVAL + expected

    def test_partial_collection_is_proportional(self):
        state = make_state()
        state.debris_fields["1:42:5"] = DebrisField(30_000, 10_000)
        state.missions.append(make_mission(MissionType.RECYCLE, (1, 42, 5), {"recycler": 1}))
        drain_missions(state, ARRIVAL, make_context())

        cargo = state.missions[0].resources
        assert (cargo.metal, cargo.crystal) == (15_000, 5000)
        assert state.debris_fields["1:42:5"] == DebrisField(15_000, 5000)

    def test_full_collection_removes_field(self):
        state = make_state()
        state.debris_fields["1:42:5"] = DebrisField(1000, 500)
        state.missions.append(make_mission(MissionType.RECYCLE, (1, 42, 5), {"recycler": 1}))
        drain_missions(state, ARRIVAL, make_context())
        assert "1:42:5" not in state.debris_fields
        assert state.missions[0].resources.metal == 1000


class TestGenericAndReturn:

    def test_transport_returns_unchanged(self):
        state = make_state()
        cargo = Resources(100, 50, 25)
        state.missions.append(make_mission(MissionType.TRANSPORT, (1, 42, 5), {"small_cargo": 1}, resources=cargo))
        drain_missions(state, ARRIVAL, make_context())

        mission = state.missions[0]
        assert mission.is_returning
        assert mission.ships == {"small_cargo": 1}
        assert mission.resources == cargo
        assert mission.return_time == ARRIVAL + 100
        assert state.system_logs[0].message == "Mission reached target: TRANSPORT at 1:42:5"

    def test_not_yet_arrived(self):
        state = make_state()
        state.missions.append(make_mission(MissionType.TRANSPORT, (1, 42, 5), {"small_cargo": 1}))
        assert drain_missions(state, ARRIVAL - 1, make_context()) == 0
        assert not state.missions[0].is_returning

    def test_homecoming_merges_uncapped(self):
        state = make_state()
        home = state.colonies[0]
        home.ships["light_fighter"] = 1
        state.missions.append(FleetMission(
            id="msn-9", mission_type=MissionType.ATTACK, origin_id="p1",
            target=Coordinate(1, 42, 16), ships={"light_fighter": 2},
            resources=Resources(50_000, 0, 0), start_time=NOW, arrival_time=NOW + 5,
            return_time=NOW + 10, is_returning=True,
        ))
        drain_missions(state, NOW + 10, make_context())

        assert state.missions == []
        assert home.ships["light_fighter"] == 3
        assert home.resources.metal == 60_000

    def test_homecoming_to_lost_colony(self):
        state = make_state()
        state.missions.append(FleetMission(
            id="msn-9", mission_type=MissionType.TRANSPORT, origin_id="gone",
            target=Coordinate(1, 42, 16), ships={"light_fighter": 2},
            start_time=NOW, arrival_time=NOW + 5, return_time=NOW + 10, is_returning=True,
        ))
        drain_missions(state, NOW + 10, make_context())
        assert state.missions == []


class TestAttack:

    def test_bandit_outpost(self):
        state = make_state()
        state.missions.append(make_mission(MissionType.ATTACK, (1, 42, 16), {"battleship": 5}))
        drain_missions(state, ARRIVAL, make_context())

        report = state.combat_reports[0]
        assert report.defender_name == "Bandit Outpost"
        assert report.winner is Winner.ATTACKER
        field = state.debris_fields["1:42:16"]
        assert field.metal == pytest.approx(900)
        assert field.crystal == pytest.approx(300)

        mission = state.missions[0]
        assert mission.is_returning
        assert mission.ships == {"battleship": 5}
        assert 0 < mission.resources.total <= 7500
        assert "Result: ATTACKER" in state.system_logs[0].message

    def test_empty_space(self):
        state = make_state()
        state.missions.append(make_mission(MissionType.ATTACK, (1, 42, 5), {"light_fighter": 2}))
        drain_missions(state, ARRIVAL, make_context())
        report = state.combat_reports[0]
        assert report.defender_name == "Deep Space"
        assert report.rounds == []
        assert state.debris_fields == {}
        assert state.missions[0].is_returning

    def test_defended_colony_written_back(self):
        state = make_state()
        enemy = _enemy(resources=Resources(20_000, 10_000, 0), defense={"rocket_launcher": 10})
        state.missions.append(make_mission(MissionType.ATTACK, (1, 43, 5), {"battleship": 20}))
        drain_missions(state, ARRIVAL, make_context(targets=FixedTargets(enemy)))

        report = state.combat_reports[0]
        assert report.defender_id == "npc-7"
        assert report.winner is Winner.ATTACKER
        assert enemy.defense == {"rocket_launcher": 7}
        assert enemy.ships == {}
        assert enemy.resources.metal == 20_000 - 9375
        assert enemy.resources.crystal == 10_000 - 4375
        assert state.missions[0].resources.metal == 9375
        assert state.debris_fields["1:43:5"].metal == pytest.approx(6000)

    def test_wiped_out_fleet_does_not_return(self):
        state = make_state()
        enemy = _enemy(defense={"plasma_turret": 1})
        state.missions.append(make_mission(MissionType.ATTACK, (1, 43, 5), {"light_fighter": 1}))
        drain_missions(state, ARRIVAL, make_context(targets=FixedTargets(enemy)))

        assert state.missions == []
        assert state.combat_reports[0].winner is Winner.DEFENDER
        assert enemy.defense == {"plasma_turret": 1}
        assert state.debris_fields["1:43:5"].metal == pytest.approx(900)


def _skirmish(state, enemy, moon_rolls):
    # One battleship against one rocket launcher: 600 metal of debris, 0.6% moon chance
    state.missions.append(make_mission(MissionType.ATTACK, (1, 43, 5), {"battleship": 1}))
    ctx = make_context(rng=ScriptedRNG(domains={Domain.MOON: moon_rolls}), targets=FixedTargets(enemy))
    drain_missions(state, ARRIVAL, ctx)
    return state.combat_reports[0]


class TestMoonFormation:

    def test_low_roll_forms_moon(self):
        state = make_state()
        enemy = _enemy(defense={"rocket_launcher": 1})
        report = _skirmish(state, enemy, [0.0, 0.5])

        assert state.debris_fields["1:43:5"].metal == pytest.approx(600)
        assert report.moon_formed
        assert enemy.moon is not None
        assert enemy.moon.size == 6500
        assert enemy.moon.last_update == ARRIVAL
        assert any("A moon has formed in the debris of Hostile Rock!" == log.message
                   for log in state.system_logs)

    def test_high_roll_forms_nothing(self):
        state = make_state()
        enemy = _enemy(defense={"rocket_launcher": 1})
        report = _skirmish(state, enemy, [0.5])

        assert not report.moon_formed
        assert enemy.moon is None
        assert not any("moon" in log.message for log in state.system_logs)

    def test_existing_moon_is_kept(self):
        state = make_state()
        enemy = _enemy(defense={"rocket_launcher": 1}, moon=Moon(size=5000, last_update=NOW))
        report = _skirmish(state, enemy, [0.0, 0.0])

        assert not report.moon_formed
        assert enemy.moon.size == 5000
        assert enemy.moon.last_update == NOW

    def test_bandit_outpost_never_gets_moon(self):
        state = make_state()
        state.missions.append(make_mission(MissionType.ATTACK, (1, 42, 16), {"battleship": 5}))
        ctx = make_context(rng=ScriptedRNG(domains={Domain.MOON: [0.0, 0.0]}))
        drain_missions(state, ARRIVAL, ctx)

        assert state.debris_fields["1:42:16"].metal > 0
        assert not state.combat_reports[0].moon_formed
        assert not any("moon" in log.message for log in state.system_logs)
