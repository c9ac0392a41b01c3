"""
===========================================================
scenarios.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================

Description:
    Preset parameters and ready-made runs for the two worked
    scenarios:

    - run_incidence_dependent_recovery(): one population, Euler
      with dt = 1/400, recovery rate raised by a factor 2.8 while
      the 7-day incidence (5 days ago) exceeds 200 per 100 000
      and reset below 40.
    - run_two_populations(): a large main population and a small
      subpopulation with asymmetric mixing, Poisson noise,
      dt = 1/40.

    Presets are string-keyed mappings so they can be edited and
    fed to ParameterSet.from_mapping() like any config.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from .feedback import IncidenceDependentRecovery
from .parameters import CoupledParameters, ParameterSet
from .simulation import IntegrationResult, SIRDSimulation, TwoPopulationSimulation

DEFAULT_PARAMETERS = {
    "rate of infection": 0.14,
    "rate of recovery": 0.07,
    "rate of immunity loss": 0.0,
    "rate of death of infected": 0.001,
    "total population": 600,
    "initial number of infected": 10.0,
}

MAIN_POPULATION_PARAMETERS = {
    "rate of infection": 0.14,
    "rate of recovery": 0.07,
    "rate of immunity loss": 0.01,
    "rate of death of infected": 0.001,
    "total population": 1e8,
    "initial number of infected": 10,
}

SUBPOPULATION_PARAMETERS = {
    "rate of infection": 0.14,
    "rate of recovery": 0.035,
    "rate of immunity loss": 0.02,
    "rate of death of infected": 0.01,
    "total population": 100,
    "initial number of infected": 0.0,
}

DEFAULT_MIXING = {
    "rate of infection 1 -> 2": 0.00014,
    "rate of infection 2 -> 1": 0.14,
}

INCIDENCE_FEEDBACK = {
    "high factor": 2.8,
    "low incidence": 40,
    "high incidence": 200,
    "delay": 5.0,
}


def run_incidence_dependent_recovery(t_end: float = 38 * 30,
                                     dt: float = 1 / 400,
                                     parameters: Optional[Mapping[str, Any]] = None,
                                     feedback: Optional[Mapping[str, Any]] = None,
                                     stochastic: bool = False,
                                     seed: Optional[int] = None) -> IntegrationResult:
    """Single population with incidence-dependent recovery rate"""
    params = ParameterSet.from_mapping(parameters if parameters is not None else DEFAULT_PARAMETERS)
    cfg = dict(INCIDENCE_FEEDBACK)
    cfg.update(feedback or {})
    policy = IncidenceDependentRecovery(
        dt,
        delay=cfg["delay"],
        low_incidence=cfg["low incidence"],
        high_incidence=cfg["high incidence"],
        high_factor=cfg["high factor"],
    )
    sim = SIRDSimulation(params, dt, stochastic=stochastic, seed=seed,
                         track_cumulative=True, feedback=policy)
    return sim.simulate(t_end)


def run_two_populations(t_end: float = 3000,
                        dt: float = 1 / 40,
                        first: Optional[Mapping[str, Any]] = None,
                        second: Optional[Mapping[str, Any]] = None,
                        mixing: Optional[Mapping[str, Any]] = None,
                        stochastic: bool = True,
                        seed: Optional[int] = None) -> IntegrationResult:
    """Main population and subpopulation with cross-infection"""
    params = CoupledParameters.from_mappings(
        first if first is not None else MAIN_POPULATION_PARAMETERS,
        second if second is not None else SUBPOPULATION_PARAMETERS,
        mixing if mixing is not None else DEFAULT_MIXING,
    )
    sim = TwoPopulationSimulation(params, dt, stochastic=stochastic, seed=seed)
    return sim.simulate(t_end)
