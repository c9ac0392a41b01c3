"""
===========================================================
parameters.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================
Parameter records for the SIRD model

Parameters are plain dataclasses with named numeric fields,
validated once at construction. A run receives them by
reference; the only code allowed to change them mid-run is
the feedback policy (see feedback.py).

Configuration files describe parameters as
string-keyed mappings:

    "rate of infection"            -> infection_rate     (beta)
    "rate of recovery"             -> recovery_rate      (gamma)
    "rate of immunity loss"        -> immunity_loss_rate (delta)
    "rate of death of infected"    -> death_fraction     (rho)
    "total population"             -> total_population   (N)
    "initial number of infected"   -> initial_infected   (I0)

and, for two mixing populations,

    "rate of infection 1 -> 2"     -> rate_1_to_2
    "rate of infection 2 -> 1"     -> rate_2_to_1

"rate of infection i -> j" is the rate at which the infected
of population i infect the susceptibles of population j.

All rates are per unit of time (days in the presets).
-----------------------------------------------------------
License: MIT
===========================================================
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import numpy as np

from .errors import InvalidParameter, MissingParameter

PARAMETER_KEYS: Dict[str, str] = {
    "infection_rate": "rate of infection",
    "recovery_rate": "rate of recovery",
    "immunity_loss_rate": "rate of immunity loss",
    "death_fraction": "rate of death of infected",
    "total_population": "total population",
    "initial_infected": "initial number of infected",
}

MIXING_KEYS: Dict[str, str] = {
    "rate_1_to_2": "rate of infection 1 -> 2",
    "rate_2_to_1": "rate of infection 2 -> 1",
}

# older configs spell this key without the "n"
KEY_ALIASES: Dict[str, str] = {
    "rate of immuity loss": "rate of immunity loss",
}


def _lookup(mapping: Mapping[str, Any], key: str) -> float:
    if key in mapping:
        return float(mapping[key])
    for alias, canonical in KEY_ALIASES.items():
        if canonical == key and alias in mapping:
            return float(mapping[alias])
    raise MissingParameter(
        f"Expected parameter '{key}' not found. Available: {sorted(mapping)}"
    )


def check_field(name: str, value: float) -> None:
    """Raise InvalidParameter if `value` is out of bounds for ParameterSet field `name`."""
    if name == "death_fraction":
        if not 0.0 <= value <= 1.0:
            raise InvalidParameter(f"death_fraction must lie in [0, 1], got {value}")
    elif name == "total_population":
        if not np.isfinite(value) or value <= 0:
            raise InvalidParameter(f"total_population must be positive, got {value}")
    elif not np.isfinite(value) or value < 0:
        raise InvalidParameter(f"{name} must be non-negative, got {value}")


@dataclass
class ParameterSet:
    """
    Parameters of one SIRD population.

    Attributes:
    infection_rate: float. beta, effective contacts per day
    recovery_rate: float. gamma, rate at which infected leave I (recover or die)
    immunity_loss_rate: float. delta, rate at which recovered become susceptible again
    death_fraction: float. rho, fraction of those leaving I who die, in [0, 1]
    total_population: float. N, used as the mixing denominator
    initial_infected: float. I0, number of infected at t_start
    baseline_recovery_rate: float. gamma as configured; feedback policies
        scale and reset recovery_rate relative to it. Defaults to recovery_rate.
    """
    infection_rate: float
    recovery_rate: float
    immunity_loss_rate: float = 0.0
    death_fraction: float = 0.0
    total_population: float = 1000.0
    initial_infected: float = 0.0
    baseline_recovery_rate: Optional[float] = None

    def __post_init__(self):
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is not None:
                setattr(self, f.name, float(value))
        if self.baseline_recovery_rate is None:
            self.baseline_recovery_rate = self.recovery_rate
        self._validate_parameters()

    def _validate_parameters(self):
        """Validate that all parameters are physically reasonable"""
        for f in dataclasses.fields(self):
            check_field(f.name, getattr(self, f.name))
        if self.initial_infected > self.total_population:
            raise InvalidParameter(
                f"initial_infected ({self.initial_infected}) exceeds "
                f"total_population ({self.total_population})"
            )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ParameterSet":
        """Build from the string-keyed form. Unknown keys are ignored."""
        values = {name: _lookup(mapping, key) for name, key in PARAMETER_KEYS.items()}
        return cls(**values)

    def to_mapping(self) -> Dict[str, float]:
        return {key: getattr(self, name) for name, key in PARAMETER_KEYS.items()}

    def copy(self) -> "ParameterSet":
        return dataclasses.replace(self)

    @property
    def R0(self) -> float:
        """Basic reproduction number beta / gamma"""
        return self.infection_rate / self.recovery_rate if self.recovery_rate else np.inf


@dataclass
class MixingParameterSet:
    """
    Cross-infection rates between two populations.

    rate_1_to_2: infected of population 1 infecting susceptibles of population 2
    rate_2_to_1: infected of population 2 infecting susceptibles of population 1
    """
    rate_1_to_2: float = 0.0
    rate_2_to_1: float = 0.0

    def __post_init__(self):
        self.rate_1_to_2 = float(self.rate_1_to_2)
        self.rate_2_to_1 = float(self.rate_2_to_1)
        for name in ("rate_1_to_2", "rate_2_to_1"):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise InvalidParameter(f"{name} must be non-negative, got {value}")

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "MixingParameterSet":
        return cls(**{name: _lookup(mapping, key) for name, key in MIXING_KEYS.items()})

    def to_mapping(self) -> Dict[str, float]:
        return {key: getattr(self, name) for name, key in MIXING_KEYS.items()}

    def copy(self) -> "MixingParameterSet":
        return dataclasses.replace(self)


@dataclass
class CoupledParameters:
    """Parameters of a two-population run: one set per population plus mixing"""
    first: ParameterSet
    second: ParameterSet
    mixing: MixingParameterSet = field(default_factory=MixingParameterSet)

    @property
    def combined_population(self) -> float:
        return self.first.total_population + self.second.total_population

    @classmethod
    def from_mappings(cls,
                      first: Mapping[str, Any],
                      second: Mapping[str, Any],
                      mixing: Optional[Mapping[str, Any]] = None) -> "CoupledParameters":
        return cls(
            first=ParameterSet.from_mapping(first),
            second=ParameterSet.from_mapping(second),
            mixing=MixingParameterSet.from_mapping(mixing) if mixing is not None
            else MixingParameterSet(),
        )

    def copy(self) -> "CoupledParameters":
        return CoupledParameters(self.first.copy(), self.second.copy(), self.mixing.copy())
