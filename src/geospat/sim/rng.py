# sim/rng.py
from __future__ import annotations

from functools import cache
from zlib import crc32

import numpy as np


def _u32(x: int) -> int:
    return int(x & 0xFFFFFFFF)


def _crc32_u32(s: str) -> int:
    return _u32(crc32(s.encode("utf-8")))


def _norm(part: object) -> int:
    if isinstance(part, (int, np.integer)):
        return _u32(int(part))
    if isinstance(part, str):
        return _crc32_u32(part)
    return _crc32_u32(repr(part))


def as_generator(seed: int | np.random.Generator | None) -> np.random.Generator:
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


class RNGRegistry:
    """
    Deterministic named numpy Generator streams.
    Derivation path: [master_seed, scenario, *parts]; independent of the
    order in which streams are requested.
    """

    def __init__(self, master_seed: int, *, scenario: str | int = 0):
        self.master_seed = _u32(master_seed)
        self.scenario_tag = _crc32_u32(str(scenario))

    @cache
    def _generator(self, parts: tuple[int, ...]) -> np.random.Generator:
        ss = np.random.SeedSequence(entropy=[self.master_seed, self.scenario_tag, *parts])
        return np.random.Generator(np.random.PCG64(ss))

    def stream(self, name: str) -> np.random.Generator:
        return self._generator((_crc32_u32(name),))

    def substream(self, name: str, *parts: object) -> np.random.Generator:
        return self._generator((_crc32_u32(name), *(_norm(p) for p in parts)))

    def seed_for(self, name: str, *parts: object) -> int:
        """Plain int seed for APIs that take one, e.g. kmeans(seed=...)."""
        parts = (_crc32_u32(name), *(_norm(p) for p in parts))
        ss = np.random.SeedSequence(entropy=[self.master_seed, self.scenario_tag, *parts])
        return int(ss.generate_state(1, dtype=np.uint32)[0])
