"""World generators — planet properties on colonization and moon formation."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from colonysim.core.models import Moon

if TYPE_CHECKING:
    from colonysim.systems.rng import RandomSource


# Slot bands: (first_slot, last_slot, temp_low, temp_span)
_TEMPERATURE_BANDS: tuple[tuple[int, int, int, int], ...] = (
    (1, 3, 80, 60),       # hot inner worlds
    (4, 12, 20, 40),      # temperate
    (13, 15, -120, 110),  # cold / volatile outer worlds
)
_DEFAULT_TEMP = 40

# Slot bands: (first_slot, last_slot, fields_low, fields_span); checked in order
_FIELD_BANDS: tuple[tuple[int, int, int, int], ...] = (
    (7, 9, 200, 50),
    (1, 3, 120, 40),
    (13, 15, 120, 40),
)
_DEFAULT_FIELDS = (160, 40)


@dataclass(frozen=True, slots=True)
class PlanetProperties:
    """Environmental parameters rolled for a newly settled world."""

    max_temp: int
    max_fields: int


def generate_planet_properties(slot: int, rng: RandomSource) -> PlanetProperties:
    """Roll temperature and field count for *slot*, jittered within its band.

    Draws exactly two values from *rng* (temperature first) whatever the slot.
    """
    temp_roll = rng.random()
    field_roll = rng.random()

    max_temp = _DEFAULT_TEMP
    for first, last, low, span in _TEMPERATURE_BANDS:
        if first <= slot <= last:
            max_temp = math.floor(low + temp_roll * span)
            break

    low, span = _DEFAULT_FIELDS
    for first, last, band_low, band_span in _FIELD_BANDS:
        if first <= slot <= last:
            low, span = band_low, band_span
            break
    max_fields = math.floor(low + field_roll * span)

    return PlanetProperties(max_temp=max_temp, max_fields=max_fields)


def moon_chance(total_debris: float, max_chance: float, divisor: float = 100_000.0) -> float:
    """Probability that *total_debris* coalesces into a moon."""
    if total_debris <= 0:
        return 0.0
    return min(max_chance, total_debris / divisor)


def generate_moon(now: float, rng: RandomSource) -> Moon:
    """A bare moon between 4,000 and 8,999 km across."""
    return Moon(size=math.floor(4000 + rng.random() * 5000), last_update=now)
