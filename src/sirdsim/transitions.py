"""
===========================================================
transitions.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================
Per-step transition models for SIRD dynamics

Model Structure (one population):

    S -> I -> R
    ^    |    |
    |    v    |
    |    D    |
    +---------+   (immunity loss R -> S)

Per step of length dt the model draws, in this order,

    nI  ~ Rate(beta * I * S / N * dt)        new infections     S -> I
    nIL ~ Rate(delta * R * dt)               immunity loss      R -> S
    nR  ~ Rate(gamma * (1 - rho) * I * dt)   recoveries         I -> R
    nD  ~ Rate(gamma * rho * I * dt)         deaths             I -> D

and returns the increment

    dS = -nI + nIL,  dI = nI - nR - nD,  dR = nR - nIL,  dD = nD

(plus dC = nI when cumulative infections are tracked).

The draws are independent given the current state. There is
no multinomial split of the individuals leaving I, so for a
large dt one step may remove more individuals from I (or R)
than it holds. The integrator clamps the next state at zero;
keep dt small if conservation matters.

Two populations double the system and add the mixing term

    nI12 ~ Rate(beta_2->1 * S1 * I2 / (N1 + N2) * dt)
    nI21 ~ Rate(beta_1->2 * S2 * I1 / (N1 + N2) * dt)

moving nI12 from S1 to I1 and nI21 from S2 to I2.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

from typing import Tuple

import numpy as np

from .errors import DimensionMismatch, InvalidTimeRange
from .parameters import CoupledParameters, ParameterSet
from .sampling import RateSampler

COMPARTMENTS = ("S", "I", "R", "D")
CUMULATIVE = "C"


class SinglePopulationModel:
    """
    Transition model for one SIRD population.

    Parameters:
    sampler: RateSampler. Deterministic or Poisson draws
    dt: float. Time step, threaded into every expected count
    track_cumulative: bool. If True the state has a fifth column
        holding the cumulative number of new infections
    """

    def __init__(self, sampler: RateSampler, dt: float, track_cumulative: bool = False):
        if not dt > 0:
            raise InvalidTimeRange(f"time step must be positive, got {dt}")
        self.sampler = sampler
        self.dt = float(dt)
        self.track_cumulative = bool(track_cumulative)

    @property
    def n_components(self) -> int:
        return 5 if self.track_cumulative else 4

    @property
    def columns(self) -> Tuple[str, ...]:
        return COMPARTMENTS + ((CUMULATIVE,) if self.track_cumulative else ())

    def transition_counts(self, state: np.ndarray, params: ParameterSet) -> Tuple[float, float, float, float]:
        """Draw (nI, nIL, nR, nD) for one step"""
        S, I, R = state[0], state[1], state[2]
        beta = params.infection_rate
        gamma = params.recovery_rate
        delta = params.immunity_loss_rate
        rho = params.death_fraction
        N = params.total_population
        dt = self.dt

        nI = self.sampler.sample(beta * I * S / N * dt)
        nIL = self.sampler.sample(delta * R * dt)
        nR = self.sampler.sample(gamma * (1 - rho) * I * dt)
        nD = self.sampler.sample(gamma * rho * I * dt)
        return nI, nIL, nR, nD

    def increment(self, state: np.ndarray, params: ParameterSet) -> np.ndarray:
        state = np.asarray(state, dtype=float)
        if state.shape != (self.n_components,):
            raise DimensionMismatch(
                f"expected a state of length {self.n_components} "
                f"({', '.join(self.columns)}), got shape {state.shape}"
            )
        nI, nIL, nR, nD = self.transition_counts(state, params)
        delta = [-nI + nIL, nI - nR - nD, nR - nIL, nD]
        if self.track_cumulative:
            delta.append(nI)
        return np.array(delta, dtype=float)

    def __call__(self, t: float, trajectory: np.ndarray, n: int, params: ParameterSet) -> np.ndarray:
        return self.increment(trajectory[n], params)


class TwoPopulationModel:
    """
    Two SIRD populations with their own parameters, coupled by
    cross-infection. The state is the concatenation of one block
    per population (4 or 5 columns each).
    """

    def __init__(self, sampler: RateSampler, dt: float, track_cumulative: bool = False):
        self.block = SinglePopulationModel(sampler, dt, track_cumulative)

    @property
    def sampler(self) -> RateSampler:
        return self.block.sampler

    @property
    def dt(self) -> float:
        return self.block.dt

    @property
    def track_cumulative(self) -> bool:
        return self.block.track_cumulative

    @property
    def n_components(self) -> int:
        return 2 * self.block.n_components

    @property
    def columns(self) -> Tuple[str, ...]:
        return (tuple(f"{c}1" for c in self.block.columns)
                + tuple(f"{c}2" for c in self.block.columns))

    def mixing_counts(self, x1: np.ndarray, x2: np.ndarray, params: CoupledParameters) -> Tuple[float, float]:
        """Draw (nI12, nI21): new infections in population 1 caused by
        population 2, and in population 2 caused by population 1"""
        S1, I1 = x1[0], x1[1]
        S2, I2 = x2[0], x2[1]
        N = params.combined_population
        dt = self.dt
        nI12 = self.sampler.sample(params.mixing.rate_2_to_1 * S1 * I2 / N * dt)
        nI21 = self.sampler.sample(params.mixing.rate_1_to_2 * S2 * I1 / N * dt)
        return nI12, nI21

    def increment(self, state: np.ndarray, params: CoupledParameters) -> np.ndarray:
        state = np.asarray(state, dtype=float)
        if state.shape != (self.n_components,):
            raise DimensionMismatch(
                f"expected a two-population state of length {self.n_components}, "
                f"got shape {state.shape}"
            )
        w = self.block.n_components
        x1, x2 = state[:w], state[w:]
        d1 = self.block.increment(x1, params.first)
        d2 = self.block.increment(x2, params.second)

        nI12, nI21 = self.mixing_counts(x1, x2, params)
        d1[0] -= nI12
        d1[1] += nI12
        d2[0] -= nI21
        d2[1] += nI21
        if self.track_cumulative:
            d1[4] += nI12
            d2[4] += nI21
        return np.concatenate([d1, d2])

    def __call__(self, t: float, trajectory: np.ndarray, n: int, params: CoupledParameters) -> np.ndarray:
        return self.increment(trajectory[n], params)
