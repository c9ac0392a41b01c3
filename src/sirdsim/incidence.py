"""
===========================================================
incidence.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================

Description:
    Rolling-window incidence from a cumulative-infection series:
    new cases within the last `ndays`, per `scale` inhabitants
    (7-day incidence per 100 000 by default).

API:
    - incidence_at(cumulative, t, pop_size, dt) -> float
    - incidence_series(cumulative, pop_size, dt, head="raw") -> np.ndarray

Notes:
    - The window length in steps is round(ndays / dt).
    - Near the start of the series the window for incidence_at
      shrinks to the available history instead of failing.
    - incidence_series copies the first round(ndays / dt) entries
      of the cumulative series verbatim, without differencing or
      scaling (head="raw", the documented default). Use
      head="windowed" for the shrinking-window values instead.
-----------------------------------------------------------
License: MIT
===========================================================
"""
from __future__ import annotations

import numpy as np

from .errors import InvalidParameter, InvalidTimeRange

HEAD_MODES = ("raw", "windowed")


def window_steps(ndays: float, dt: float) -> int:
    """Number of steps covering `ndays` time units"""
    if not dt > 0:
        raise InvalidTimeRange(f"time step must be positive, got {dt}")
    if ndays < 0:
        raise InvalidParameter(f"ndays must be non-negative, got {ndays}")
    return int(round(ndays / dt))


def _check_population(pop_size: float) -> None:
    if not pop_size > 0:
        raise InvalidParameter(f"pop_size must be positive, got {pop_size}")


def incidence_at(cumulative, t: int, pop_size: float, dt: float,
                 ndays: float = 7, scale: float = 100_000) -> float:
    """Incidence at step t: (C[t] - C[t0]) * scale / pop_size with
    t0 = max(t - round(ndays/dt), 0)"""
    _check_population(pop_size)
    c = np.asarray(cumulative, dtype=float)
    if not 0 <= t < len(c):
        raise IndexError(f"step {t} outside series of length {len(c)}")
    t0 = max(t - window_steps(ndays, dt), 0)
    return float((c[t] - c[t0]) * (scale / pop_size))


def incidence_series(cumulative, pop_size: float, dt: float,
                     ndays: float = 7, scale: float = 100_000,
                     head: str = "raw") -> np.ndarray:
    """Incidence for every step of a cumulative-infection series"""
    if head not in HEAD_MODES:
        raise ValueError(f"head must be one of {HEAD_MODES}, got {head!r}")
    _check_population(pop_size)
    c = np.asarray(cumulative, dtype=float)
    k = window_steps(ndays, dt)
    factor = scale / pop_size

    out = np.empty_like(c)
    if len(c) == 0:
        return out
    n_head = min(k, len(c))
    if head == "raw":
        out[:n_head] = c[:n_head]
    else:
        out[:n_head] = (c[:n_head] - c[0]) * factor
    if k == 0:
        out[:] = 0.0
    elif k < len(c):
        out[k:] = (c[k:] - c[:-k]) * factor
    return out
