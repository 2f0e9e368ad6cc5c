"""Requests and Response models"""

from typing import Optional

from pydantic import BaseModel, field_validator

from src.blind_phase.moves import is_algebraic_square
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, IndicatorStatus, SessionStatus, ViolationKind

PIECE_LETTERS = "PNBRQK"


# --- REQUEST MODELS ---
class DropRequest(BaseModel):
    from_square: str
    to_square: str
    piece: str  # e.g. "wP" / "bN"

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        if not is_algebraic_square(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    @field_validator("piece")
    @classmethod
    def validate_piece(cls, value: str) -> str:
        def _is_piece_code(value: str) -> bool:
            if len(value) != 2:
                return False
            return value[0] in "wb" and value[1] in PIECE_LETTERS

        if not _is_piece_code(value):
            raise InvalidRequestError(
                f"Cannot interpret piece: {value!r}. Expected color + piece letter, like 'wN'."
            )
        return value


# --- RESPONSE MODELS ---
class ViolationResponse(BaseModel):
    kind: ViolationKind
    square: Optional[str] = None
    current: Optional[int] = None
    limit: Optional[int] = None
    reason: Optional[str] = None
    expected_color: Optional[Color] = None


class IndicatorResponse(BaseModel):
    label: str
    status: IndicatorStatus
    color: str


class RecordedMoveResponse(BaseModel):
    from_square: str
    to_square: str
    san: str
    sequence_index: int


class BlindPhaseView(BaseModel):
    status: SessionStatus
    color: Optional[Color]
    fen: str
    moves: list[RecordedMoveResponse]
    total_moves: int
    per_piece_move_counts: dict[str, int]
    remaining_moves: int
    is_complete: bool
    is_submit_disabled: bool
    violations: list[ViolationResponse]
    indicators: dict[str, IndicatorResponse]


class DropResponse(BaseModel):
    accepted: bool
    state: BlindPhaseView


class RevealEntryResponse(BaseModel):
    color: Color
    san: str
    from_square: str
    to_square: str
    is_invalid: bool


class RevealResponse(BaseModel):
    fen: str
    log: list[RevealEntryResponse]
    valid_moves: int
    invalid_moves: int
