"""
===========================================================
feedback.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================
Parameter feedback policies

A feedback policy is called by the integrator once per step,
before the transition model, as

    policy(params, t, trajectory, n)

where `trajectory` is the read-only prefix of rows 0..n. It
may change `params` in place and returns nothing. It is the
only code that writes to the parameters during a run.

Policies:
    - no_change: identity (default)
    - IncidenceDependentRecovery: recovery rate raised while the
      (delayed) incidence is high, reset once it is low again
    - ScheduledParameterChange: piecewise-constant parameters
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from .errors import DimensionMismatch, InvalidParameter, InvalidTimeRange
from .incidence import incidence_at, window_steps
from .parameters import CoupledParameters, ParameterSet, check_field

logger = logging.getLogger(__name__)


def no_change(params, t, trajectory, n) -> None:
    """Leave the parameters as they are"""


class IncidenceDependentRecovery:
    """
    Recovery rate that reacts to incidence with a delay.

    Once more than `delay` time units have elapsed, the incidence
    of the cumulative-infection column is evaluated `delay` time
    units in the past. Above `high_incidence` the recovery rate
    becomes baseline * high_factor, below `low_incidence` it goes
    back to the baseline. Between the two thresholds nothing
    changes, so the rate switches with hysteresis.

    Parameters:
    dt: float. Time step of the run (converts delay and ndays to steps)
    delay: float. Reporting delay in time units
    low_incidence, high_incidence: float. Thresholds, low <= high
    high_factor: float. Multiplier of the baseline recovery rate
    ndays, scale: incidence window and normalisation (see incidence.py)
    column: int or None. Index of the cumulative-infection column.
        Defaults to C (single population) or C1 / C2 (two populations)
    population: 1, 2 or None. Which block of CoupledParameters the
        policy observes and adjusts; required for two-population runs
    """

    def __init__(self,
                 dt: float,
                 delay: float = 5.0,
                 low_incidence: float = 40.0,
                 high_incidence: float = 200.0,
                 high_factor: float = 2.8,
                 ndays: float = 7,
                 scale: float = 100_000,
                 column: Optional[int] = None,
                 population: Optional[int] = None):
        if not dt > 0:
            raise InvalidTimeRange(f"time step must be positive, got {dt}")
        if delay < 0:
            raise InvalidParameter(f"delay must be non-negative, got {delay}")
        if low_incidence > high_incidence:
            raise InvalidParameter(
                f"low_incidence ({low_incidence}) must not exceed high_incidence ({high_incidence})"
            )
        if high_factor < 0:
            raise InvalidParameter(f"high_factor must be non-negative, got {high_factor}")
        if population not in (None, 1, 2):
            raise InvalidParameter(f"population must be 1 or 2, got {population}")
        self.dt = float(dt)
        self.delay_steps = window_steps(delay, dt)
        self.low_incidence = float(low_incidence)
        self.high_incidence = float(high_incidence)
        self.high_factor = float(high_factor)
        self.ndays = ndays
        self.scale = scale
        self.column = column
        self.population = population

    def _observed(self, params, trajectory: np.ndarray) -> Tuple[ParameterSet, int]:
        """The ParameterSet being adjusted and the cumulative column it is judged on"""
        if isinstance(params, CoupledParameters):
            if self.population is None:
                raise InvalidParameter(
                    "two-population parameters need population=1 or population=2"
                )
            target = params.first if self.population == 1 else params.second
            column = self.column
            if column is None:
                width = trajectory.shape[-1] // 2
                if width < 5:
                    raise DimensionMismatch(
                        f"incidence feedback needs C1 / C2 columns, "
                        f"trajectory has shape {trajectory.shape}; track cumulative infections"
                    )
                column = (self.population - 1) * width + 4
        elif isinstance(params, ParameterSet):
            if self.population is not None:
                raise InvalidParameter(
                    f"population={self.population} given, but parameters describe one population"
                )
            target = params
            column = 4 if self.column is None else self.column
        else:
            raise InvalidParameter(
                f"expected ParameterSet or CoupledParameters, got {type(params).__name__}"
            )
        if trajectory.ndim != 2 or trajectory.shape[1] <= column:
            raise DimensionMismatch(
                f"incidence feedback reads column {column}, "
                f"trajectory has shape {trajectory.shape}; track cumulative infections"
            )
        return target, column

    def observed_incidence(self, params, trajectory: np.ndarray, n: int) -> float:
        target, column = self._observed(params, trajectory)
        return incidence_at(trajectory[:, column], n - self.delay_steps,
                            target.total_population, self.dt,
                            ndays=self.ndays, scale=self.scale)

    def __call__(self, params, t: float, trajectory: np.ndarray, n: int) -> None:
        # checked from the first step so a misconfigured run fails before integrating
        target, _ = self._observed(params, trajectory)
        if n <= self.delay_steps:
            return
        incidence = self.observed_incidence(params, trajectory, n)
        if incidence > self.high_incidence:
            rate = target.baseline_recovery_rate * self.high_factor
        elif incidence < self.low_incidence:
            rate = target.baseline_recovery_rate
        else:
            return
        if rate != target.recovery_rate:
            logger.info("t=%g: incidence %.1f, recovery rate %g -> %g",
                        t, incidence, target.recovery_rate, rate)
            target.recovery_rate = rate


class ScheduledParameterChange:
    """
    Piecewise-constant parameters. `changes` is an iterable of
    (time, field, value): from `time` on, `field` of the
    ParameterSet takes `value`. For each field the latest change
    whose time has been reached wins; fields with no change due
    are left alone. Values are checked against the ParameterSet
    bounds when the schedule is built.
    """

    def __init__(self, changes: Iterable[Tuple[float, str, float]]):
        names = {f.name for f in dataclasses.fields(ParameterSet)}
        by_field: Dict[str, List[Tuple[float, float]]] = {}
        for when, name, value in changes:
            if name not in names:
                raise InvalidParameter(f"unknown parameter '{name}'. Available: {sorted(names)}")
            check_field(name, float(value))
            by_field.setdefault(name, []).append((float(when), float(value)))
        self.schedule = {name: sorted(entries, key=lambda e: e[0]) for name, entries in by_field.items()}

    def __call__(self, params: ParameterSet, t: float, trajectory: np.ndarray, n: int) -> None:
        for name, entries in self.schedule.items():
            due = [value for when, value in entries if when <= t + 1e-12]
            if due and getattr(params, name) != due[-1]:
                logger.info("t=%g: %s %g -> %g", t, name, getattr(params, name), due[-1])
                setattr(params, name, due[-1])
