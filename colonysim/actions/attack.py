"""AttackHandler — runs combat at the target and settles its aftermath.

Aftermath, in order: debris lands in the coordinate's field, a moon may
coalesce around the target, the target's survivors (plus repaired
defense) and plundered stockpile are written back, a report is filed, and
the surviving fleet heads home with its loot.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from colonysim.actions.base import (
    MissionHandler,
    ResolutionContext,
    origin_name,
    register_handler,
    returning_leg,
)
from colonysim.core.enums import Domain, LogKind, MissionType, UnitClass
from colonysim.core.models import CombatReport, DebrisField, Resources
from colonysim.engine.combat import count_by_type
from colonysim.systems.generator import generate_moon, moon_chance
from colonysim.systems.production import protected_amounts
from colonysim.systems.spatial import calculate_distance, calculate_flight_time

if TYPE_CHECKING:
    from colonysim.core.models import Colony, FleetMission
    from colonysim.core.state import EmpireState
    from colonysim.engine.combat import CombatResult

logger = logging.getLogger(__name__)


class AttackHandler(MissionHandler):

    @property
    def mission_type(self) -> MissionType | None:
        return MissionType.ATTACK

    def on_arrival(
        self,
        mission: FleetMission,
        state: EmpireState,
        now: float,
        ctx: ResolutionContext,
    ) -> FleetMission | None:
        cfg = ctx.config
        is_bandit = mission.target.slot == cfg.bandit_slot
        target = ctx.targets.colony_at(state, mission.target)

        if target is not None:
            defender_res = target.resources.copy()
            protection = protected_amounts(target)
        elif is_bandit:
            metal, crystal, deut = cfg.bandit_resources
            defender_res = Resources(metal, crystal, deut)
            protection = Resources()
        else:
            defender_res = Resources()
            protection = Resources()

        result = ctx.combat.simulate(
            mission.ships,
            target.ships if target else {},
            target.defense if target else {},
            ctx.rng.stream(Domain.COMBAT, mission.id),
            target_resources=defender_res,
            target_protection=protection,
            is_bandit=is_bandit,
        )

        self._deposit_debris(state, mission, result.debris)
        moon_formed = False
        if target is not None:
            moon_formed = self._maybe_form_moon(state, mission, target, result, now, ctx)
            garrisoned = is_bandit and not any(n > 0 for n in target.ships.values())
            self._write_back(target, result, keep_ships=not garrisoned)

        if is_bandit and target is None:
            defender_name = "Bandit Outpost"
        else:
            defender_name = target.name if target else "Deep Space"

        report = CombatReport(
            id=state.allocate_id("rep-"),
            time=now,
            attacker_id=state.player_id,
            defender_id=target.owner_id if target else "NPC",
            defender_name=defender_name,
            target=mission.target,
            winner=result.winner,
            rounds=result.rounds,
            total_attacker_damage=result.total_attacker_damage,
            total_defender_damage=result.total_defender_damage,
            initial_attacker_hull=result.initial_attacker_hull,
            initial_defender_hull=result.initial_defender_hull,
            final_attacker_hull=result.final_attacker_hull,
            final_defender_hull=result.final_defender_hull,
            attacker_shields_remaining=result.attacker_shields_remaining,
            defender_shields_remaining=result.defender_shields_remaining,
            loot=result.loot.copy(),
            debris=DebrisField(result.debris.metal, result.debris.crystal),
            initial_cargo_capacity=result.initial_cargo_capacity,
            surviving_cargo_capacity=result.surviving_cargo_capacity,
            repaired_defense=dict(result.repaired_defense),
            moon_formed=moon_formed,
        )
        state.add_report(report, cap=cfg.combat_report_cap)
        state.add_log(
            now, LogKind.MISSION,
            f"Combat finalized at {mission.target}. Result: {result.winner.value.upper()}",
            origin_name(state, mission), cap=cfg.system_log_cap,
        )

        survivors = count_by_type(result.attacker_survivors)
        if not survivors:
            logger.info("Mission %s: attacking fleet destroyed at %s", mission.id, mission.target)
            return None

        origin = state.colony(mission.origin_id)
        distance = calculate_distance(origin.coords if origin else mission.target, mission.target)
        duration = calculate_flight_time(distance, result.mission_speed or cfg.default_fleet_speed)
        return returning_leg(mission, now, duration, ships=survivors, resources=result.loot.copy())

    @staticmethod
    def _deposit_debris(state: EmpireState, mission: FleetMission, debris: DebrisField) -> None:
        if debris.total <= 0:
            return
        key = mission.target.key
        field = state.debris_fields.get(key)
        if field is None:
            state.debris_fields[key] = DebrisField(debris.metal, debris.crystal)
        else:
            field.metal += debris.metal
            field.crystal += debris.crystal

    @staticmethod
    def _maybe_form_moon(
        state: EmpireState,
        mission: FleetMission,
        target: Colony,
        result: CombatResult,
        now: float,
        ctx: ResolutionContext,
    ) -> bool:
        if target.moon is not None:
            return False
        chance = moon_chance(result.debris.total, ctx.config.moon_max_chance, ctx.config.moon_debris_divisor)
        if chance <= 0:
            return False
        rng = ctx.rng.stream(Domain.MOON, mission.id)
        if rng.random() >= chance:
            return False
        target.moon = generate_moon(now, rng)
        state.add_log(
            now, LogKind.MISSION,
            f"A moon has formed in the debris of {target.name}!",
            target.name, cap=ctx.config.system_log_cap,
        )
        logger.info("Moon (size %d) formed at %s", target.moon.size, mission.target)
        return True

    @staticmethod
    def _write_back(target: Colony, result: CombatResult, keep_ships: bool = True) -> None:
        # A bandit garrison defends an empty slot-16 colony but never stays there
        ships = count_by_type(result.defender_survivors, UnitClass.SHIP) if keep_ships else {}
        defense = count_by_type(result.defender_survivors, UnitClass.DEFENSE)
        for type_id, repaired in result.repaired_defense.items():
            if repaired > 0:
                defense[type_id] = defense.get(type_id, 0) + repaired
        target.ships = ships
        target.defense = defense
        target.resources.subtract(result.loot)


register_handler(AttackHandler())
