"""
Exception hierarchy for erc5564.

A view-tag mismatch is not represented here: it is the ordinary outcome
of scanning someone else's announcement and is reported as ``None``.
"""

from __future__ import annotations


class StealthError(Exception):
    """Base class for every error raised by this package."""


class EntropyUnavailableError(StealthError, RuntimeError):
    """The OS random source could not produce bytes.  Always fatal."""


class CurveConfigurationError(StealthError, ValueError):
    """Unknown curve backend, or a second backend selected while one is active."""


class CurveMismatchError(StealthError, ValueError):
    """Arithmetic mixed values bound to different curve backends."""


class InvalidInputError(StealthError, ValueError):
    """Malformed hash input, encoding, or out-of-range value."""
