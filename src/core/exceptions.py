"""
Custom exceptions.

Every exception raised on purpose by this package derives from BlindChessError,
so the service layer (and its callers) can catch a single top-level type.
"""


class BlindChessError(Exception):
    """Top level exception for anything going wrong in the blind phase."""


# --- DOMAIN ---
class IllegalMoveError(BlindChessError):
    """The chess rules oracle rejected a move."""


class SequenceError(BlindChessError):
    """A move was recorded out of order (sequence index is not the next one in the log)."""


class ReplayError(BlindChessError):
    """Replaying a persisted move log failed part way."""

    def __init__(self, message: str, sequence_index: int, replayed: int) -> None:
        super().__init__(message)
        self.sequence_index = sequence_index
        self.replayed = replayed


class SessionStateError(BlindChessError):
    """Operation requires a session state it is not in (e.g. no color assigned yet)."""


class ConfigurationError(BlindChessError):
    """Blind phase configuration is inconsistent."""


# --- BOUNDARIES ---
class InvalidRequestError(BlindChessError):
    """Incoming data cannot be interpreted."""


class RepositoryError(BlindChessError):
    """Persistence layer could not do what was asked."""
