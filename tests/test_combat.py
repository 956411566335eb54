"""Tests for unit-level combat: evasion, shields, explosions, rapid fire, outcomes."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from colonysim.config import SimulationConfig
from colonysim.core.enums import Domain, UnitClass, Winner
from colonysim.core.models import Resources
from colonysim.engine.combat import (
    CombatEngine,
    CombatFleet,
    CombatUnit,
    SalvoStats,
    calculate_debris,
    calculate_loot,
    count_by_type,
)
from colonysim.systems.rng import DeterministicRNG
from tests.helpers.empire import ScriptedRandom


def _unit(type_id: str = "light_fighter", hull: float = 400, shield: float = 10,
          attack: float = 50, speed: float = 0.0) -> CombatUnit:
    return CombatUnit(
        type_id=type_id, unit_class=UnitClass.SHIP,
        hull=hull, max_hull=hull, shield=shield, max_shield=shield,
        attack=attack, speed=speed,
    )


def _engine() -> CombatEngine:
    return CombatEngine(SimulationConfig())


def _stream(key: str = "battle"):
    return DeterministicRNG(42).stream(Domain.COMBAT, key)


class TestEvasion:

    def test_immobile_unit_never_dodges(self):
        assert _unit(speed=0).evasion_chance() == 0.0

    def test_dodge_cap_reached_at_375k(self):
        assert _unit(speed=375_000).evasion_chance() == 0.15

    def test_dodge_cap_holds_beyond(self):
        assert _unit(speed=100_000_000).evasion_chance() == 0.15

    def test_dodge_proportional_below_cap(self):
        assert _unit(speed=12_500).evasion_chance() == pytest.approx(0.05)

    def test_dodged_shot_changes_nothing(self):
        u = _unit(speed=375_000)
        hit = u.take_hit(50, ScriptedRandom([0.0]))
        assert hit.dodged
        assert (u.hull, u.shield) == (400, 10)

    def test_no_dodge_roll_for_immobile_unit(self):
        u = _unit(speed=0)
        rng = ScriptedRandom()
        u.take_hit(50, rng)
        assert rng.calls == 0


class TestHitResolution:

    def test_shield_absorbs_small_hit(self):
        u = _unit()
        hit = u.take_hit(8, ScriptedRandom())
        assert hit.shield_damage == 8 and hit.hull_damage == 0
        assert u.shield == 2 and u.hull == 400

    def test_spillover_hits_hull(self):
        u = _unit()
        hit = u.take_hit(50, ScriptedRandom())
        assert hit.shield_damage == 10 and hit.hull_damage == 40
        assert u.shield == 0 and u.hull == 360

    def test_lethal_hit_kills_without_roll(self):
        u = _unit()
        rng = ScriptedRandom()
        u.take_hit(1000, rng)
        assert u.dead and u.hull == 0
        assert rng.calls == 0

    def test_explosion_below_threshold(self):
        u = _unit(shield=0)
        u.take_hit(200, ScriptedRandom([0.4]))
        assert u.dead

    def test_survives_failed_explosion_roll(self):
        u = _unit(shield=0)
        u.take_hit(200, ScriptedRandom([0.6]))
        assert not u.dead and u.hull == 200

    def test_no_explosion_roll_above_threshold(self):
        u = _unit(shield=0)
        rng = ScriptedRandom()
        u.take_hit(100, rng)
        assert rng.calls == 0

    def test_shield_recharge_only_for_living(self):
        alive, dead = _unit(), _unit()
        alive.shield = 0
        dead.shield = 0
        dead.dead = True
        alive.reset_shield()
        dead.reset_shield()
        assert alive.shield == 10 and dead.shield == 0


class TestRapidFire:

    def test_chained_shot_on_success(self):
        cruisers = CombatFleet({"cruiser": 1})
        fighters = CombatFleet({"light_fighter": 2})
        stats = SalvoStats()
        # target 0, no dodge, explodes, rapid fire, target 1, no dodge, survives, stop
        rng = ScriptedRandom([0.0, 0.9, 0.9, 0.1, 0.99, 0.9, 0.99, 0.99])
        cruisers.fire_at(fighters, stats, rng)

        first, second = fighters.units
        assert first.dead
        assert not second.dead and second.hull == 10
        assert stats.rapid_fires == 1
        assert stats.total == 800
        assert stats.shield == 20
        assert stats.hull == 780

    def test_dead_target_ends_shooter_turn(self):
        fighters = CombatFleet({"light_fighter": 2})
        spy = CombatFleet({"espionage_probe": 1})
        stats = SalvoStats()
        # first hit detonates the spy, the second fighter draws the wreck
        fighters.fire_at(spy, stats, ScriptedRandom([0.0, 0.99, 0.0]))
        assert spy.count == 0
        assert stats.total == 50


class TestOutcome:

    def test_attack_on_empty_target(self):
        result = _engine().simulate({"light_fighter": 10}, {}, {}, _stream())
        assert result.winner is Winner.ATTACKER
        assert result.rounds == []
        assert result.defender_survivors == []
        assert len(result.attacker_survivors) == 10
        assert result.debris.total == 0

    def test_empty_target_is_looted_within_cargo(self):
        result = _engine().simulate(
            {"light_fighter": 10}, {}, {}, _stream(),
            target_resources=Resources(10_000, 0, 0),
        )
        assert result.loot.metal == 500
        assert result.loot.crystal == 0

    def test_never_more_than_six_rounds(self):
        # Shields absorb every shot on both sides
        result = _engine().simulate({"solar_satellite": 3}, {}, {"small_shield_dome": 1}, _stream())
        assert len(result.rounds) == 6
        assert result.winner is Winner.DRAW

    def test_defender_wins(self):
        result = _engine().simulate({"light_fighter": 1}, {}, {"plasma_turret": 1}, _stream())
        assert result.winner is Winner.DEFENDER
        assert result.attacker_survivors == []
        assert result.loot.total == 0

    def test_overwhelming_attack_repairs_defense(self):
        result = _engine().simulate(
            {"battleship": 20}, {}, {"rocket_launcher": 10}, _stream(),
            target_resources=Resources(20_000, 10_000, 0),
            target_protection=Resources(1250, 1250, 1250),
        )
        assert result.winner is Winner.ATTACKER
        assert result.repaired_defense == {"rocket_launcher": 7}
        assert result.debris.metal == pytest.approx(6000)
        assert result.debris.crystal == 0
        assert result.loot.metal == 9375
        assert result.loot.crystal == 4375
        assert result.loot.deuterium == 0

    def test_bandit_garrison_defends_empty_slot(self):
        plain = _engine().simulate({"battleship": 1}, {}, {}, _stream())
        bandit = _engine().simulate({"battleship": 1}, {}, {}, _stream(), is_bandit=True)
        assert plain.rounds == []
        assert len(bandit.rounds) >= 1
        assert bandit.initial_defender_hull == 400

    def test_same_stream_same_battle(self):
        a = _engine().simulate({"cruiser": 4}, {"light_fighter": 12}, {"rocket_launcher": 5}, _stream("x"))
        b = _engine().simulate({"cruiser": 4}, {"light_fighter": 12}, {"rocket_launcher": 5}, _stream("x"))
        assert a.winner == b.winner
        assert a.rounds == b.rounds
        assert a.debris == b.debris

    def test_mission_speed_from_survivors(self):
        result = _engine().simulate({"light_fighter": 2, "recycler": 1}, {}, {}, _stream())
        assert result.mission_speed == 2000


class TestLootAndDebris:

    def test_zero_cargo_never_loots(self):
        loot = calculate_loot(Resources(1e9, 1e9, 1e9), Resources(), 0)
        assert (loot.metal, loot.crystal, loot.deuterium) == (0, 0, 0)

    def test_protected_stock_is_safe(self):
        loot = calculate_loot(Resources(1000, 1000, 1000), Resources(1250, 1250, 1250), 10_000)
        assert loot.total == 0

    def test_scaled_to_cargo(self):
        loot = calculate_loot(Resources(4000, 2000, 0), Resources(), 1500)
        assert loot.metal == 1000
        assert loot.crystal == 500

    def test_debris_from_destroyed_units_only(self):
        units = [_unit(), _unit(), _unit()]
        units[0].dead = True
        units[1].dead = True
        debris = calculate_debris(units)
        assert debris.metal == pytest.approx(1800)
        assert debris.crystal == pytest.approx(600)

    def test_count_by_type(self):
        fleet = CombatFleet({"light_fighter": 2}, {"rocket_launcher": 3})
        assert count_by_type(fleet.units, UnitClass.SHIP) == {"light_fighter": 2}
        assert count_by_type(fleet.units, UnitClass.DEFENSE) == {"rocket_launcher": 3}
        assert count_by_type(fleet.units) == {"light_fighter": 2, "rocket_launcher": 3}
