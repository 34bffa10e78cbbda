"""Exceptions raised by the seed pipeline."""

from __future__ import annotations


class SeedError(RuntimeError):
    """Base class for failures that should abort a seed run."""


class UnsafeDatabaseError(SeedError):
    """Raised when the configured database is not a local development database."""


class MissingSeedDataError(SeedError):
    """Raised when a teacher, group or module the run depends on does not exist."""


class SchedulingInvariantError(SeedError):
    """Raised when the pacing scheduler and its lesson input disagree."""


class PacingApiError(SeedError):
    """Raised when the pacing configuration API cannot be reached at all."""


__all__ = [
    "MissingSeedDataError",
    "PacingApiError",
    "SchedulingInvariantError",
    "SeedError",
    "UnsafeDatabaseError",
]
