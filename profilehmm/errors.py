"""
Exceptions raised by profilehmm.

All errors derive from ProfileHMMError, which is itself a ValueError so that
callers catching ValueError around model calls keep working.
"""

from typing import Optional


class ProfileHMMError(ValueError):
    """Base exception for invalid model or observation input."""


class EmptyObservationSequence(ProfileHMMError):
    """Raised when an inference call receives zero observations."""

    def __init__(self, message: str = "Observation sequence is empty"):
        super().__init__(message)


class ObservationOutOfRange(ProfileHMMError):
    """
    Raised when an observation is not a valid symbol of the model alphabet.

    Args:
        position: Index of the first offending observation
        symbol: The offending value
        observation_count: Size of the model alphabet
    """

    def __init__(self, position: int, symbol, observation_count: int):
        self.position = position
        self.symbol = symbol
        self.observation_count = observation_count
        super().__init__(
            f"Observation {symbol!r} at position {position} is not a symbol "
            f"in [0, {observation_count})"
        )


class MalformedModel(ProfileHMMError):
    """
    Raised when the model tables are missing or their dimensions disagree.

    Args:
        message: What is wrong
        table: Name of the offending table, if a single one is to blame
    """

    def __init__(self, message: str, table: Optional[str] = None):
        self.table = table
        if table is not None:
            message = f"{table}: {message}"
        super().__init__(message)
