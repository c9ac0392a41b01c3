"""Stochastic and deterministic SIRD simulation for one or two populations."""

from .errors import (
    SIRDError,
    InvalidRate,
    InvalidTimeRange,
    MissingParameter,
    InvalidParameter,
    DimensionMismatch,
    InvalidState,
)
from .parameters import ParameterSet, MixingParameterSet, CoupledParameters
from .sampling import RateSampler
from .transitions import SinglePopulationModel, TwoPopulationModel
from .feedback import no_change, IncidenceDependentRecovery, ScheduledParameterChange
from .integrator import integrate, n_steps, time_grid
from .incidence import incidence_at, incidence_series
from .simulation import (
    IntegrationResult,
    SIRDSimulation,
    TwoPopulationSimulation,
    initial_state,
    coupled_initial_state,
)

__version__ = "0.1.0"

__all__ = [
    "SIRDError",
    "InvalidRate",
    "InvalidTimeRange",
    "MissingParameter",
    "InvalidParameter",
    "DimensionMismatch",
    "InvalidState",
    "ParameterSet",
    "MixingParameterSet",
    "CoupledParameters",
    "RateSampler",
    "SinglePopulationModel",
    "TwoPopulationModel",
    "no_change",
    "IncidenceDependentRecovery",
    "ScheduledParameterChange",
    "integrate",
    "n_steps",
    "time_grid",
    "incidence_at",
    "incidence_series",
    "IntegrationResult",
    "SIRDSimulation",
    "TwoPopulationSimulation",
    "initial_state",
    "coupled_initial_state",
]
