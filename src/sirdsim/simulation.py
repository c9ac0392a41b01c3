"""
===========================================================
simulation.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================

Description:
    Convenience wrappers around sampler, transition model and
    integrator, in the style of SIRModel.simulate()/summary().

API:
    SIRDSimulation(params, dt, stochastic=False, seed=None,
                   track_cumulative=True, feedback=None)
      - simulate(t_end, t_start=0, initial=None, feedback=None) -> IntegrationResult
      - incidence(result, ndays=7, scale=100_000, head="raw") -> np.ndarray
      - summary(result) -> dict of peak day, peak infected, final sizes

    TwoPopulationSimulation(params, dt, ...)
      same API for two coupled populations; incidence() and
      summary() take / report per population.

Example Usage:
    from sirdsim import SIRDSimulation
    sim = SIRDSimulation({"rate of infection": 0.14, ...}, dt=0.25)
    result = sim.simulate(t_end=300)
    df = result.to_frame()

Notes:
    - params may be a ParameterSet or the string-keyed mapping.
    - Each simulate() call runs on a copy of the configured
      parameters (the copy, as left by the feedback policy, is
      returned in the result) and, when a seed was given,
      restarts the random stream from that seed.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .errors import DimensionMismatch
from .incidence import incidence_series
from .integrator import integrate, time_grid
from .parameters import CoupledParameters, ParameterSet
from .sampling import RateSampler
from .transitions import SinglePopulationModel, TwoPopulationModel

logger = logging.getLogger(__name__)


def initial_state(params: ParameterSet, track_cumulative: bool = False) -> np.ndarray:
    """[N - I0, I0, 0, 0] (plus a zero cumulative column)"""
    N, I0 = params.total_population, params.initial_infected
    x0 = [N - I0, I0, 0.0, 0.0]
    if track_cumulative:
        x0.append(0.0)
    return np.array(x0, dtype=float)


def coupled_initial_state(params: CoupledParameters, track_cumulative: bool = False) -> np.ndarray:
    return np.concatenate([initial_state(params.first, track_cumulative),
                           initial_state(params.second, track_cumulative)])


def _warn_if_unbalanced(block: np.ndarray, params: ParameterSet, label: str = "") -> None:
    total = float(np.sum(block[:4]))
    if not np.isclose(total, params.total_population):
        warnings.warn(
            f"Initial compartments{label} sum to {total:.0f}, "
            f"but total population is {params.total_population:.0f}."
        )


@dataclass
class IntegrationResult:
    """Trajectory of one run with its time grid and column names"""
    t: np.ndarray
    trajectory: np.ndarray
    columns: Tuple[str, ...]
    params: Any
    dt: float

    def column(self, name: str) -> np.ndarray:
        if name not in self.columns:
            raise KeyError(f"Expected column '{name}' not found. Available: {list(self.columns)}")
        return self.trajectory[:, self.columns.index(name)]

    def to_frame(self) -> pd.DataFrame:
        """Tidy DataFrame with a 't' column and one column per compartment"""
        df = pd.DataFrame(self.trajectory, columns=list(self.columns))
        df.insert(0, "t", self.t)
        return df


def _summarize(t: np.ndarray, S: np.ndarray, I: np.ndarray, R: np.ndarray,
               D: np.ndarray, C: Optional[np.ndarray] = None) -> Dict[str, float]:
    peak_idx = int(np.argmax(I))
    N0 = S[0] + I[0] + R[0] + D[0]
    out = {
        "peak_day": float(t[peak_idx]),
        "peak_infected": float(I[peak_idx]),
        "peak_prevalence": float(I[peak_idx] / N0) if N0 else 0.0,
        "final_susceptible": float(S[-1]),
        "final_recovered": float(R[-1]),
        "final_deaths": float(D[-1]),
        "final_size": float((N0 - S[-1]) / N0) if N0 else 0.0,
    }
    if C is not None:
        out["total_infections"] = float(C[-1] - C[0])
    return out


class SIRDSimulation:
    """Single-population SIRD run"""

    def __init__(self,
                 params: Union[ParameterSet, Mapping[str, Any]],
                 dt: float,
                 stochastic: bool = False,
                 seed: Optional[int] = None,
                 track_cumulative: bool = True,
                 feedback=None):
        self.params = self._coerce_params(params)
        self.seed = seed
        self.sampler = RateSampler(stochastic=stochastic, seed=seed)
        self.model = self._build_model(dt, track_cumulative)
        self.feedback = feedback

    @staticmethod
    def _coerce_params(params):
        if isinstance(params, ParameterSet):
            return params
        return ParameterSet.from_mapping(params)

    def _build_model(self, dt, track_cumulative):
        return SinglePopulationModel(self.sampler, dt, track_cumulative)

    def _default_initial(self, params) -> np.ndarray:
        return initial_state(params, self.model.track_cumulative)

    def _check_initial(self, x0: np.ndarray, params) -> None:
        _warn_if_unbalanced(x0, params)

    @property
    def dt(self) -> float:
        return self.model.dt

    def simulate(self, t_end: float, t_start: float = 0.0, initial=None, feedback=None) -> IntegrationResult:
        params = self.params.copy()
        if self.seed is not None:
            self.sampler.reseed(self.seed)
        if initial is None:
            x0 = self._default_initial(params)
        else:
            x0 = np.asarray(initial, dtype=float)
            if x0.shape != (self.model.n_components,):
                raise DimensionMismatch(
                    f"expected an initial state of length {self.model.n_components}, got shape {x0.shape}"
                )
            self._check_initial(x0, params)

        policy = feedback if feedback is not None else self.feedback
        logger.info("running %s (%s) from t=%g to t=%g, dt=%g",
                    type(self).__name__, self.sampler, t_start, t_end, self.dt)
        F = integrate(self.model, policy, t_start, t_end, self.dt, x0, params)
        return IntegrationResult(
            t=time_grid(t_start, t_end, self.dt),
            trajectory=F,
            columns=self.model.columns,
            params=params,
            dt=self.dt,
        )

    def incidence(self, result: IntegrationResult, ndays: float = 7,
                  scale: float = 100_000, head: str = "raw") -> np.ndarray:
        return incidence_series(result.column("C"), result.params.total_population,
                                result.dt, ndays=ndays, scale=scale, head=head)

    @staticmethod
    def summary(result: IntegrationResult) -> Dict[str, float]:
        c = result.column("C") if "C" in result.columns else None
        return _summarize(result.t, result.column("S"), result.column("I"),
                          result.column("R"), result.column("D"), c)


class TwoPopulationSimulation(SIRDSimulation):
    """Two coupled SIRD populations; columns are suffixed 1 and 2"""

    def __init__(self,
                 params: CoupledParameters,
                 dt: float,
                 stochastic: bool = True,
                 seed: Optional[int] = None,
                 track_cumulative: bool = False,
                 feedback=None):
        super().__init__(params, dt, stochastic=stochastic, seed=seed,
                         track_cumulative=track_cumulative, feedback=feedback)

    @staticmethod
    def _coerce_params(params):
        if not isinstance(params, CoupledParameters):
            raise TypeError(f"expected CoupledParameters, got {type(params).__name__}")
        return params

    def _build_model(self, dt, track_cumulative):
        return TwoPopulationModel(self.sampler, dt, track_cumulative)

    def _default_initial(self, params) -> np.ndarray:
        return coupled_initial_state(params, self.model.track_cumulative)

    def _check_initial(self, x0: np.ndarray, params) -> None:
        w = self.model.block.n_components
        _warn_if_unbalanced(x0[:w], params.first, " of population 1")
        _warn_if_unbalanced(x0[w:], params.second, " of population 2")

    def incidence(self, result: IntegrationResult, ndays: float = 7,
                  scale: float = 100_000, head: str = "raw", population: int = 1) -> np.ndarray:
        if population not in (1, 2):
            raise ValueError(f"population must be 1 or 2, got {population}")
        pop = result.params.first if population == 1 else result.params.second
        return incidence_series(result.column(f"C{population}"), pop.total_population,
                                result.dt, ndays=ndays, scale=scale, head=head)

    @staticmethod
    def summary(result: IntegrationResult) -> Dict[int, Dict[str, float]]:
        out = {}
        for k in (1, 2):
            c = result.column(f"C{k}") if f"C{k}" in result.columns else None
            out[k] = _summarize(result.t, result.column(f"S{k}"), result.column(f"I{k}"),
                                result.column(f"R{k}"), result.column(f"D{k}"), c)
        return out
