"""Domain-separated deterministic RNG using xxhash.

The outcome of a tick depends ONLY on seed + empire state + now.
Every random draw is keyed by (seed, domain, key, counter), so combat and
colonization replay identically for a fixed seed.

Formula: RNG_Value = Hash(Seed, Domain, Key, Counter)
"""

from __future__ import annotations

import struct
from typing import Protocol, runtime_checkable

import xxhash

from colonysim.core.enums import Domain


@runtime_checkable
class RandomSource(Protocol):
    """Anything that yields uniform floats in [0.0, 1.0)."""

    def random(self) -> float: ...


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator.

    Each call is a pure function of (seed, domain, key, counter) — no
    internal mutable state.
    """

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    @staticmethod
    def key_of(key: int | str) -> int:
        """Fold string ids (mission ids, colony ids) into a 63-bit key."""
        if isinstance(key, int):
            return key
        return xxhash.xxh64_intdigest(key.encode("utf-8")) >> 1

    def _hash(self, domain: Domain, key: int, counter: int) -> int:
        payload = struct.pack("<qiqq", self._seed, domain.value, key, counter)
        return xxhash.xxh64(payload).intdigest()

    def next_float(self, domain: Domain, key: int | str, counter: int) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, self.key_of(key), counter) / (self._MAX_UINT64 + 1)

    def next_int(self, domain: Domain, key: int | str, counter: int, low: int, high: int) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        f = self.next_float(domain, key, counter)
        return low + int(f * (high - low + 1))

    def stream(self, domain: Domain, key: int | str) -> RandomStream:
        """Open a sequential ``RandomSource`` over one (domain, key) pair."""
        return RandomStream(self, domain, self.key_of(key))


class RandomStream:
    """Sequential draws from a ``DeterministicRNG``; implements ``RandomSource``."""

    __slots__ = ("_rng", "_domain", "_key", "_counter")

    def __init__(self, rng: DeterministicRNG, domain: Domain, key: int) -> None:
        self._rng = rng
        self._domain = domain
        self._key = key
        self._counter = 0

    @property
    def draws(self) -> int:
        return self._counter

    def random(self) -> float:
        value = self._rng.next_float(self._domain, self._key, self._counter)
        self._counter += 1
        return value
