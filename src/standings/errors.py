"""Error taxonomy for the standings engine."""

from __future__ import annotations


class StandingsError(ValueError):
    """Base class for every error raised by the standings engine."""


class ConfigurationError(StandingsError):
    """Scoring configuration is unusable; nothing has been aggregated."""


class ShapeError(StandingsError):
    """Match input is not a well-formed sequence of player records."""


class IdentityError(ShapeError):
    """A player identity is missing, empty or duplicated within a team."""


__all__ = ["ConfigurationError", "IdentityError", "ShapeError", "StandingsError"]
