"""Custom exceptions for MonteGo.

This module defines the exception hierarchy for invalid simulation input,
event resolution failures and local persistence problems.
"""


class MonteGoError(Exception):
    """Base exception for all MonteGo errors."""

    pass


class InvalidInputError(MonteGoError, ValueError):
    """Exception raised when simulation input is unusable.

    Covers an empty outcome set, a non-positive iteration count and outcome
    fields outside their allowed range. Always raised before any simulation
    work begins.
    """

    pass


class ResolverError(MonteGoError):
    """Base exception for event resolution failures."""

    pass


class EventNotFoundError(ResolverError):
    """Exception raised when a resolver has no analysis for an event."""

    pass


class RateLimitError(ResolverError):
    """Exception raised when the resolver's quota is exhausted."""

    def __init__(self, message: str = "Resolver quota exceeded. Please try again in a few minutes."):
        super().__init__(message)


class HistoryError(MonteGoError):
    """Exception raised when the history file cannot be written."""

    pass


class SettingsError(MonteGoError):
    """Exception raised for unknown or invalid preferences."""

    pass
