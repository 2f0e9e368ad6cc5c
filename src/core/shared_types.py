"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def letter(self) -> str:
        """'w' or 'b', as used in FEN strings and piece codes."""
        return self.value[0]


class SessionStatus(StrEnum):
    UNINITIALIZED = "uninitialized"
    FRESH = "fresh"
    IN_PROGRESS = "in progress"
    READY_TO_SUBMIT = "ready to submit"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class ViolationKind(StrEnum):
    MOVE_LIMIT = "move limit"
    PIECE_EXHAUSTED = "piece exhausted"
    ILLEGAL_MOVE = "illegal move"
    TURN_VIOLATION = "turn violation"


class IndicatorStatus(StrEnum):
    AVAILABLE = "available"
    WARNING = "warning"
    EXHAUSTED = "exhausted"
