"""
===========================================================
errors.py
Author: Veronica Scerra
Last Updated: 2026-10-19
===========================================================

Description:
    Exceptions raised by the SIRD simulation engine. Every one
    of them is a precondition failure: it is raised before or
    at the start of a run and the run is aborted.

    The classes also derive from the matching builtin
    (ValueError / KeyError) so callers that already catch
    those keep working.
-----------------------------------------------------------
License: MIT
===========================================================
"""


class SIRDError(Exception):
    """Base class for all sirdsim errors"""


class InvalidRate(SIRDError, ValueError):
    """A negative (or NaN) expected transition count reached the sampler"""


class InvalidTimeRange(SIRDError, ValueError):
    """Non-positive time step or t_end < t_start"""


class MissingParameter(SIRDError, KeyError):
    """A required key is absent from a parameter mapping"""

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the message readable
        return str(self.args[0]) if self.args else ""


class InvalidParameter(SIRDError, ValueError):
    """A parameter value is outside its admissible range"""


class DimensionMismatch(SIRDError, ValueError):
    """State vector length does not match the transition model layout"""


class InvalidState(SIRDError, ValueError):
    """Initial state has negative or non-finite components"""
