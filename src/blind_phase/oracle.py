"""
Chess Position Oracle

Standard chess legality and position updates, delegated to python-chess.
This stays a faithful standard chess component: anything blind phase specific (move limits, turn spoofing)
is done by the callers.
"""

from dataclasses import dataclass
from typing import Optional

import chess

from src.blind_phase.moves import Move
from src.core.config import INITIAL_FEN
from src.core.exceptions import IllegalMoveError


@dataclass(frozen=True)
class AppliedMove:
    """Outcome of applying a move: the new position (a fresh board) and the move in SAN."""

    position: chess.Board
    san: str


class ChessOracle:
    """Legality checker / position updater."""

    def starting_position(self, fen: str = INITIAL_FEN) -> chess.Board:
        try:
            return chess.Board(fen)
        except ValueError as e:
            raise IllegalMoveError(f"Cannot set up a position from FEN {fen!r}") from e

    def is_legal(self, position: chess.Board, move: Move) -> bool:
        return self.rejection_reason(position, move) is None

    def rejection_reason(self, position: chess.Board, move: Move) -> Optional[str]:
        """None if the move is legal, otherwise a short description why it is not."""
        piece = position.piece_at(chess.parse_square(move.from_square))
        if piece is None:
            return f"No piece found at {move.from_square}"
        if piece.color != position.turn:
            return f"Piece on {move.from_square} cannot move: it is not its side's turn"
        if move.to_chess() not in position.legal_moves:
            return f"{move.to_uci()} is not a legal move"
        return None

    def apply_move(self, position: chess.Board, move: Move) -> AppliedMove:
        """
        Make the move on a copy of the position.
        ---

        The input position is never changed. Raises IllegalMoveError if the move is not legal.
        """
        reason = self.rejection_reason(position, move)
        if reason is not None:
            raise IllegalMoveError(reason)

        board = position.copy(stack=False)
        chess_move = move.to_chess()
        san = board.san(chess_move)
        board.push(chess_move)
        return AppliedMove(position=board, san=san)
