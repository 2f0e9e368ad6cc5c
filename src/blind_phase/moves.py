"""
Definition of a (candidate) blind move.

Squares are kept in algebraic notation ('a1' - 'h8'), which is what both the board UI and the rules library speak.
"""

from dataclasses import dataclass
from typing import Optional, Self

import chess

from src.core.config import PROMOTION_LETTERS
from src.core.exceptions import InvalidRequestError

FILES = "abcdefgh"
RANKS = "12345678"


def is_algebraic_square(value: str) -> bool:
    """'e4' yes, 'e9' / 'i1' / 'e44' no."""
    return len(value) == 2 and value[0] in FILES and value[1] in RANKS


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: str
    to_square: str
    promotion: Optional[str] = None

    def __post_init__(self) -> None:
        for square in (self.from_square, self.to_square):
            if not is_algebraic_square(square):
                raise InvalidRequestError(
                    f"Cannot interpret {square!r} as a valid square name."
                )
        if self.promotion is not None and self.promotion not in PROMOTION_LETTERS:
            raise InvalidRequestError(
                f"Cannot promote to {self.promotion!r}. Pick one from {','.join(PROMOTION_LETTERS)}"
            )

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        if len(uci) not in (4, 5):
            raise InvalidRequestError(f"Cannot interpret {uci!r} as a UCI move.")
        promotion = uci[4] if len(uci) == 5 else None
        return cls(uci[:2], uci[2:4], promotion)

    def to_uci(self) -> str:
        return f"{self.from_square}{self.to_square}{self.promotion or ''}"

    def to_chess(self) -> chess.Move:
        """Translate into the rules library's own move type."""
        return chess.Move.from_uci(self.to_uci())


def build_move(
    position: chess.Board,
    from_square: str,
    to_square: str,
    default_promotion: str = "q",
) -> Move:
    """
    Candidate move for a drag & drop from 'from_square' onto 'to_square'.

    A pawn dropped on the last rank gets the default promotion attached, any other move gets none.
    (The board UI never asks which piece to promote into.)
    """
    move = Move(from_square, to_square)
    piece = position.piece_at(chess.parse_square(from_square))
    if piece is None or piece.piece_type != chess.PAWN:
        return move

    last_rank = "8" if piece.color == chess.WHITE else "1"
    if to_square[1] == last_rank:
        return Move(from_square, to_square, default_promotion)
    return move
