"""
===========================================================
integrator.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================

Description:
    Forward-Euler time loop shared by all transition models.

    Defines:
        - n_steps(): number of rows for a horizon
        - time_grid(): time value of every row
        - integrate(): runs the loop and returns the trajectory

    Per step n (time t_n = t_start + n*dt):
        1. feedback_fn(params, t_n, trajectory, n)   may change params
        2. increment = transition_fn(t_n, trajectory, n, params)
        3. row n+1 = max(row n + increment, 0)       per component

    Both callbacks see the read-only prefix trajectory[:n+1].

Notes:
    - The clamp at zero catches stochastic overshoot. It is applied
      per component, so S+I+R+D is not guaranteed constant for
      steps in which it kicks in.
    - A failed precondition aborts the whole run; nothing is
      returned for a partial trajectory.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import numpy as np

from .errors import DimensionMismatch, InvalidState, InvalidTimeRange
from .feedback import no_change

logger = logging.getLogger(__name__)

TransitionFn = Callable[[float, np.ndarray, int, Any], np.ndarray]
FeedbackFn = Callable[[Any, float, np.ndarray, int], None]

# absorbs float error in (t_end - t_start) / dt, e.g. 5 / 0.1 = 49.999...
_GRID_TOL = 1e-9


def n_steps(t_start: float, t_end: float, dt: float) -> int:
    """Trajectory length floor((t_end - t_start)/dt) + 1"""
    if not dt > 0:
        raise InvalidTimeRange(f"time step must be positive, got {dt}")
    if not t_end >= t_start:
        raise InvalidTimeRange(f"t_end ({t_end}) is before t_start ({t_start})")
    return int(np.floor((t_end - t_start) / dt + _GRID_TOL)) + 1


def time_grid(t_start: float, t_end: float, dt: float) -> np.ndarray:
    return t_start + dt * np.arange(n_steps(t_start, t_end, dt))


def _check_initial_state(initial_state) -> np.ndarray:
    x0 = np.array(initial_state, dtype=float)
    if x0.ndim != 1:
        raise DimensionMismatch(f"initial state must be one-dimensional, got shape {x0.shape}")
    if not np.all(np.isfinite(x0)):
        raise InvalidState(f"initial state has non-finite components: {x0}")
    if np.any(x0 < 0):
        raise InvalidState(f"initial state has negative components: {x0}")
    return x0


def integrate(transition_fn: TransitionFn,
              feedback_fn: Optional[FeedbackFn],
              t_start: float,
              t_end: float,
              dt: float,
              initial_state,
              params,
              clamp: bool = True) -> np.ndarray:
    """
    Integrate a transition model over [t_start, t_end] with step dt.

    Parameters:
    transition_fn: callable (t, trajectory, n, params) -> increment
    feedback_fn: callable (params, t, trajectory, n) or None for no_change
    t_start, t_end, dt: float. Horizon and step
    initial_state: array-like. Row 0 of the trajectory
    params: parameter record handed to both callbacks (mutated only by feedback_fn)
    clamp: bool. Clamp each new row at zero (default)

    A transition model or feedback policy carrying its own `dt`
    must have been built for the same step, else InvalidTimeRange.

    Returns:
    trajectory: np.ndarray of shape (n_steps, len(initial_state))
    """
    L = n_steps(t_start, t_end, dt)
    x0 = _check_initial_state(initial_state)
    expected = getattr(transition_fn, "n_components", None)
    if expected is not None and expected != x0.size:
        raise DimensionMismatch(
            f"transition model expects {expected} components, initial state has {x0.size}"
        )
    for role, fn in (("transition model", transition_fn), ("feedback policy", feedback_fn)):
        own_dt = getattr(fn, "dt", None)
        if own_dt is not None and not np.isclose(own_dt, dt, rtol=1e-12, atol=0.0):
            raise InvalidTimeRange(f"{role} was built for dt={own_dt}, integrating with dt={dt}")
    if feedback_fn is None:
        feedback_fn = no_change

    F = np.empty((L, x0.size), dtype=float)
    F[0] = x0
    clamped = 0
    logger.debug("integrating %d steps of dt=%g from t=%g", L - 1, dt, t_start)

    for n in range(L - 1):
        t = t_start + n * dt
        prefix = F[:n + 1]
        prefix.flags.writeable = False

        feedback_fn(params, t, prefix, n)
        step = np.asarray(transition_fn(t, prefix, n, params), dtype=float)
        if step.shape != x0.shape:
            raise DimensionMismatch(
                f"increment has shape {step.shape}, state has shape {x0.shape}"
            )

        nxt = F[n] + step
        if clamp and np.any(nxt < 0):
            clamped += 1
            np.maximum(nxt, 0.0, out=nxt)
        F[n + 1] = nxt

    logger.debug("integration finished, %d of %d steps clamped at zero", clamped, L - 1)
    return F
