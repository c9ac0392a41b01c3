"""
===========================================================
sampling.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================

Description:
    Turns an expected number of transitions (rate x state x dt)
    into the number actually moved in one step.

    - deterministic: the expected value itself (fractional
      counts allowed, this is plain forward Euler)
    - stochastic: one Poisson draw with that mean

Notes:
    - Uses a numpy Generator; pass `seed` for reproducible runs.
      Identical seeds and the same sequence of draws give
      identical trajectories.
    - A zero mean returns 0 without touching the generator.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from .errors import InvalidRate


class RateSampler:
    def __init__(self,
                 stochastic: bool = True,
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None):
        self.stochastic = bool(stochastic)
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    @classmethod
    def deterministic(cls) -> "RateSampler":
        return cls(stochastic=False)

    def reseed(self, seed: Optional[int]) -> None:
        self.rng = np.random.default_rng(seed)

    def sample(self, expected: float) -> float:
        expected = float(expected)
        # `not >=` also rejects NaN
        if not expected >= 0.0:
            raise InvalidRate(f"expected transition count must be non-negative, got {expected}")
        if not self.stochastic or expected == 0.0:
            return expected
        return float(self.rng.poisson(expected))

    def __repr__(self) -> str:
        mode = "stochastic" if self.stochastic else "deterministic"
        return f"RateSampler({mode})"
