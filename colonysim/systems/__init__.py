"""Engine systems: production, spatial model, planet generation, RNG."""

from colonysim.systems.generator import generate_moon, generate_planet_properties
from colonysim.systems.rng import DeterministicRNG, RandomSource
from colonysim.systems.spatial import calculate_distance, calculate_flight_time

__all__ = [
    "DeterministicRNG",
    "RandomSource",
    "calculate_distance",
    "calculate_flight_time",
    "generate_moon",
    "generate_planet_properties",
]
