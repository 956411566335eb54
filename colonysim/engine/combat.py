"""CombatEngine — multi-round battle resolution between two unit collections.

Combat works on individual unit instances, not aggregate pools.  Each
round the attacking side fires, then the defending side fires, then every
surviving unit's shield recharges.  Hull damage persists.

Per shot:
  1. Evasion — ``min(evasion_cap, speed / evasion_speed_divisor)``.
  2. Shield absorbs first, the remainder hits the hull.
  3. Explosion — a hit unit below 70% hull blows up with
     probability ``1 - hull / max_hull``.
  4. Rapid fire — on a landed shot, ``(RF - 1) / RF`` chance to fire again
     at a fresh random target within the same round.

Targets are drawn from the opposing units alive when the salvo starts.
A shooter that draws a unit already destroyed earlier in that salvo loses
the shot and stops firing for the round.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Mapping

from colonysim.core.enums import UnitClass, Winner
from colonysim.core.models import CombatRound, DebrisField, Resources
from colonysim.core.registry import BANDIT_GARRISON, DEFAULT_REGISTRY, EntityRegistry

if TYPE_CHECKING:
    from colonysim.config import SimulationConfig
    from colonysim.systems.rng import RandomSource

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Units
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class HitResult:
    shield_damage: float = 0.0
    hull_damage: float = 0.0
    dodged: bool = False


@dataclass(slots=True)
class CombatUnit:
    """One ship or defense structure taking part in a battle."""

    type_id: str
    unit_class: UnitClass
    hull: float
    max_hull: float
    shield: float
    max_shield: float
    attack: float
    cargo: float = 0.0
    speed: float = 0.0
    dead: bool = False

    def evasion_chance(self, cap: float = 0.15, divisor: float = 250_000.0) -> float:
        return min(cap, self.speed / divisor)

    def reset_shield(self) -> None:
        if not self.dead:
            self.shield = self.max_shield

    def take_hit(
        self,
        damage: float,
        rng: RandomSource,
        evasion_cap: float = 0.15,
        evasion_divisor: float = 250_000.0,
        explosion_threshold: float = 0.7,
    ) -> HitResult:
        """Apply one incoming shot and report how it was absorbed."""
        if self.dead or damage <= 0:
            return HitResult()

        evasion = self.evasion_chance(evasion_cap, evasion_divisor)
        if evasion > 0 and rng.random() < evasion:
            return HitResult(dodged=True)

        if damage > self.shield:
            shield_dmg = self.shield
            hull_dmg = damage - self.shield
            self.shield = 0.0
            self.hull -= hull_dmg
        else:
            shield_dmg = damage
            hull_dmg = 0.0
            self.shield -= damage

        if self.hull <= 0:
            self.hull = 0.0
            self.dead = True
        elif self.hull < self.max_hull * explosion_threshold:
            risk = 1 - self.hull / (self.max_hull or 1)
            if rng.random() < risk:
                self.dead = True

        return HitResult(shield_damage=shield_dmg, hull_damage=hull_dmg)


@dataclass(slots=True)
class SalvoStats:
    """Accumulated figures for one side's fire during one round."""

    total: float = 0.0
    shield: float = 0.0
    hull: float = 0.0
    rapid_fires: int = 0
    dodges: int = 0


class CombatFleet:
    """A side in the battle: ships plus (for defenders) static defense."""

    __slots__ = ("units", "_rapid_fire", "_config")

    def __init__(
        self,
        ships: Mapping[str, int],
        defense: Mapping[str, int] | None = None,
        registry: EntityRegistry = DEFAULT_REGISTRY,
        config: SimulationConfig | None = None,
    ) -> None:
        self.units: list[CombatUnit] = []
        self._rapid_fire: dict[str, Mapping[str, float]] = {}
        self._config = config
        self._enlist(ships, "ship", registry)
        self._enlist(defense or {}, "defense", registry)

    def _enlist(self, composition: Mapping[str, int], kind: str, registry: EntityRegistry) -> None:
        for type_id, count in composition.items():
            proto = registry.get(kind, type_id)
            if proto is None or proto.stats is None:
                continue
            self._rapid_fire[type_id] = proto.rapid_fire
            stats = proto.stats
            for _ in range(max(0, count)):
                self.units.append(CombatUnit(
                    type_id=type_id,
                    unit_class=proto.unit_class,
                    hull=stats.hull,
                    max_hull=stats.hull,
                    shield=stats.shield,
                    max_shield=stats.shield,
                    attack=stats.attack,
                    cargo=stats.cargo,
                    speed=stats.speed,
                ))

    # -- aggregates --

    def alive(self) -> list[CombatUnit]:
        return [u for u in self.units if not u.dead]

    @property
    def count(self) -> int:
        return sum(1 for u in self.units if not u.dead)

    @property
    def total_hull(self) -> float:
        return sum(u.hull for u in self.units if not u.dead)

    @property
    def total_shield(self) -> float:
        return sum(u.shield for u in self.units if not u.dead)

    @property
    def cargo_capacity(self) -> float:
        return sum(u.cargo for u in self.units if not u.dead)

    def slowest_speed(self, default: float = 2500) -> float:
        speeds = [u.speed for u in self.units if not u.dead and u.speed > 0]
        return min(speeds) if speeds else default

    # -- fire --

    def fire_at(self, enemy: CombatFleet, stats: SalvoStats, rng: RandomSource) -> None:
        """Every living unit fires at *enemy*, chaining rapid-fire shots."""
        shooters = self.alive()
        targets = enemy.alive()
        if not shooters or not targets:
            return

        cfg = self._config
        cap = cfg.evasion_cap if cfg else 0.15
        divisor = cfg.evasion_speed_divisor if cfg else 250_000.0
        threshold = cfg.explosion_threshold if cfg else 0.7

        for shooter in shooters:
            rapid_fire = self._rapid_fire.get(shooter.type_id, {})
            while True:
                index = min(int(rng.random() * len(targets)), len(targets) - 1)
                target = targets[index]
                if target.dead:
                    break

                hit = target.take_hit(shooter.attack, rng, cap, divisor, threshold)
                if hit.dodged:
                    stats.dodges += 1
                    break

                stats.total += shooter.attack
                stats.shield += hit.shield_damage
                stats.hull += hit.hull_damage

                rf = rapid_fire.get(target.type_id, 0)
                if rf > 1 and rng.random() < (rf - 1) / rf:
                    stats.rapid_fires += 1
                    continue
                break

    def recharge_shields(self) -> None:
        for u in self.units:
            u.reset_shield()


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class CombatResult:
    """Everything the mission layer needs after a battle."""

    winner: Winner
    rounds: list[CombatRound] = field(default_factory=list)
    total_attacker_damage: float = 0.0
    total_defender_damage: float = 0.0
    initial_attacker_hull: float = 0.0
    initial_defender_hull: float = 0.0
    final_attacker_hull: float = 0.0
    final_defender_hull: float = 0.0
    attacker_shields_remaining: float = 0.0
    defender_shields_remaining: float = 0.0
    loot: Resources = field(default_factory=Resources)
    debris: DebrisField = field(default_factory=DebrisField)
    repaired_defense: dict[str, int] = field(default_factory=dict)
    attacker_survivors: list[CombatUnit] = field(default_factory=list)
    defender_survivors: list[CombatUnit] = field(default_factory=list)
    initial_cargo_capacity: float = 0.0
    surviving_cargo_capacity: float = 0.0
    mission_speed: float = 2500


def count_by_type(units: Iterable[CombatUnit], unit_class: UnitClass | None = None) -> dict[str, int]:
    """Collapse unit instances back into a ``{type_id: count}`` composition."""
    counts: dict[str, int] = {}
    for u in units:
        if unit_class is not None and u.unit_class is not unit_class:
            continue
        counts[u.type_id] = counts.get(u.type_id, 0) + 1
    return counts


def calculate_loot(
    target_resources: Resources,
    protection: Resources,
    cargo_capacity: float,
    loot_ratio: float = 0.5,
) -> Resources:
    """Plunder half of the unprotected stock, scaled down to fit the cargo hold."""
    if cargo_capacity <= 0:
        return Resources()
    avail_metal = max(0.0, (target_resources.metal - protection.metal) * loot_ratio)
    avail_crystal = max(0.0, (target_resources.crystal - protection.crystal) * loot_ratio)
    avail_deut = max(0.0, (target_resources.deuterium - protection.deuterium) * loot_ratio)

    total = avail_metal + avail_crystal + avail_deut
    ratio = cargo_capacity / total if total > cargo_capacity else 1.0
    return Resources(
        metal=math.floor(avail_metal * ratio),
        crystal=math.floor(avail_crystal * ratio),
        deuterium=math.floor(avail_deut * ratio),
    )


def calculate_debris(
    units: Iterable[CombatUnit],
    registry: EntityRegistry = DEFAULT_REGISTRY,
    debris_ratio: float = 0.3,
) -> DebrisField:
    """Debris left by destroyed units: a share of their metal/crystal cost."""
    debris = DebrisField()
    for u in units:
        if not u.dead:
            continue
        proto = registry.unit(u.type_id)
        if proto is None:
            continue
        debris.metal += proto.base_cost.metal * debris_ratio
        debris.crystal += proto.base_cost.crystal * debris_ratio
    return debris


class CombatEngine:
    """Stateless battle simulator; randomness comes from the caller's source."""

    __slots__ = ("_config", "_registry")

    def __init__(self, config: SimulationConfig, registry: EntityRegistry = DEFAULT_REGISTRY) -> None:
        self._config = config
        self._registry = registry

    def simulate(
        self,
        attacker_ships: Mapping[str, int],
        defender_ships: Mapping[str, int],
        defender_defense: Mapping[str, int],
        rng: RandomSource,
        target_resources: Resources | None = None,
        target_protection: Resources | None = None,
        is_bandit: bool = False,
    ) -> CombatResult:
        cfg = self._config
        target_resources = target_resources or Resources()
        target_protection = target_protection or Resources()

        attackers = CombatFleet(attacker_ships, registry=self._registry, config=cfg)
        initial_cargo = attackers.cargo_capacity
        initial_attacker_hull = attackers.total_hull

        ships = dict(defender_ships)
        if is_bandit and not any(n > 0 for n in ships.values()):
            ships = dict(BANDIT_GARRISON)
        defenders = CombatFleet(ships, defender_defense, registry=self._registry, config=cfg)
        initial_defender_hull = defenders.total_hull

        rounds: list[CombatRound] = []
        total_attacker_damage = 0.0
        total_defender_damage = 0.0

        for round_no in range(cfg.max_rounds):
            a_count = attackers.count
            d_count = defenders.count
            if a_count == 0 or d_count == 0:
                break

            a_stats = SalvoStats()
            d_stats = SalvoStats()
            attackers.fire_at(defenders, a_stats, rng)
            defenders.fire_at(attackers, d_stats, rng)

            attackers.recharge_shields()
            defenders.recharge_shields()

            total_attacker_damage += a_stats.total
            total_defender_damage += d_stats.total

            rounds.append(CombatRound(
                attacker_units=a_count,
                defender_units=d_count,
                attacker_damage=a_stats.total,
                attacker_shield_damage=a_stats.shield,
                attacker_hull_damage=a_stats.hull,
                attacker_rapid_fires=a_stats.rapid_fires,
                attacker_dodges=d_stats.dodges,
                defender_damage=d_stats.total,
                defender_shield_damage=d_stats.shield,
                defender_hull_damage=d_stats.hull,
                defender_rapid_fires=d_stats.rapid_fires,
                defender_dodges=a_stats.dodges,
            ))
            logger.debug(
                "Round %d: attackers %d→%d, defenders %d→%d (dmg %.0f / %.0f)",
                round_no + 1, a_count, attackers.count, d_count, defenders.count,
                a_stats.total, d_stats.total,
            )

        final_a = attackers.count
        final_d = defenders.count
        if final_a > 0 and final_d == 0:
            winner = Winner.ATTACKER
        elif final_d > 0 and final_a == 0:
            winner = Winner.DEFENDER
        else:
            winner = Winner.DRAW

        surviving_cargo = attackers.cargo_capacity
        loot = Resources()
        if winner is Winner.ATTACKER:
            loot = calculate_loot(target_resources, target_protection, surviving_cargo, cfg.loot_ratio)

        debris = calculate_debris(attackers.units + defenders.units, self._registry, cfg.debris_ratio)

        repaired: dict[str, int] = {}
        for type_id, original in defender_defense.items():
            if self._registry.get("defense", type_id) is None:
                continue
            survived = sum(1 for u in defenders.units if u.type_id == type_id and not u.dead)
            destroyed = original - survived
            if destroyed > 0:
                repaired[type_id] = math.floor(destroyed * cfg.defense_repair_ratio)

        logger.info(
            "Combat resolved: %s after %d round(s); attackers %d/%d, defenders %d/%d",
            winner.value, len(rounds), final_a, len(attackers.units), final_d, len(defenders.units),
        )

        return CombatResult(
            winner=winner,
            rounds=rounds,
            total_attacker_damage=total_attacker_damage,
            total_defender_damage=total_defender_damage,
            initial_attacker_hull=initial_attacker_hull,
            initial_defender_hull=initial_defender_hull,
            final_attacker_hull=attackers.total_hull,
            final_defender_hull=defenders.total_hull,
            attacker_shields_remaining=attackers.total_shield,
            defender_shields_remaining=defenders.total_shield,
            loot=loot,
            debris=debris,
            repaired_defense=repaired,
            attacker_survivors=attackers.alive(),
            defender_survivors=defenders.alive(),
            initial_cargo_capacity=initial_cargo,
            surviving_cargo_capacity=surviving_cargo,
            mission_speed=attackers.slowest_speed(cfg.default_fleet_speed),
        )
