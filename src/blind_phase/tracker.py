"""
Piece Movement Tracker

Bookkeeping of the blind moves of one player: the chronological move log and how often every piece has moved.
No legality judgement happens here; that is the rule engine's job.

Pieces do not carry an ID. A piece is identified by the chain of squares it has occupied:
a pawn going e2 -> e4 -> e5 is one and the same piece on all three squares (its lineage starts at e2).
NOTE the lineage follows the square, not the piece type. A promoted pawn keeps counting from where the pawn left off.
"""

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Optional, Self

import chess

from src.core.exceptions import SequenceError
from src.core.models import MovementSummary, RecordedMove

logger = logging.getLogger(__name__)

SquareName = str


@dataclass
class PieceMovement:
    """All recorded moves of one piece (lineage), starting from the square it first moved from."""

    origin: SquareName
    color: Optional[chess.Color]
    moves: list[RecordedMove] = field(default_factory=list)

    @property
    def move_count(self) -> int:
        return len(self.moves)

    @property
    def current_square(self) -> SquareName:
        return self.moves[-1].to_square if self.moves else self.origin


class PieceMovementTracker:
    """Move log + per piece move counts for a single player."""

    def __init__(self, max_per_piece: int = 2, max_moves: int = 5) -> None:
        self.max_per_piece = max_per_piece
        self.max_moves = max_moves
        self._log: list[RecordedMove] = []
        # key = current square, value = lineage (index into _movements)
        self._lineage_by_square: dict[SquareName, int] = {}
        self._movements: list[PieceMovement] = []

    # --- STATE ---
    def reset(self) -> None:
        self._log.clear()
        self._lineage_by_square.clear()
        self._movements.clear()

    def clone(self) -> Self:
        return deepcopy(self)

    @property
    def log(self) -> list[RecordedMove]:
        return list(self._log)

    # --- RECORDING ---
    def record_move(
        self,
        position_after_move: chess.Board,
        from_square: SquareName,
        to_square: SquareName,
        san: str,
        sequence_index: int,
    ) -> RecordedMove:
        """
        Append a move to the log and attribute it to the piece now standing on 'to_square'.
        ----

        ----
        The caller is responsible for having validated the move.
        The only thing enforced is the order: sequence_index must be the next index in the log (1-based).
        """
        expected_index = len(self._log) + 1
        if sequence_index != expected_index:
            raise SequenceError(
                f"Cannot record move {from_square}{to_square} as #{sequence_index}. Expected #{expected_index}."
            )

        recorded = RecordedMove(from_square, to_square, san, sequence_index)
        self._log.append(recorded)

        # A piece that moved before keeps its lineage. Otherwise it starts a new one.
        lineage = self._lineage_by_square.pop(from_square, None)

        mover = position_after_move.piece_at(chess.parse_square(to_square))
        if mover is None:
            logger.warning(
                "No piece on %s after recording move #%d (%s)",
                to_square,
                sequence_index,
                san,
            )

        if lineage is None:
            lineage = len(self._movements)
            self._movements.append(
                PieceMovement(origin=from_square, color=mover.color if mover else None)
            )
        self._lineage_by_square[to_square] = lineage
        self._movements[lineage].moves.append(recorded)
        return recorded

    # --- QUERIES ---
    def get_piece_move_count(
        self, piece: Optional[chess.Piece], square: SquareName
    ) -> int:
        """
        How often did the piece currently standing on 'square' move?

        NOTE a piece that never moved has no lineage yet (count 0), even if some other piece
        once started from the same square (e.g. a rook that castled onto the square the bishop left). The optional piece descriptor guards against asking
        about a piece of the other color.
        """
        movement = self._movement_on(square)
        if movement is None:
            return 0
        if piece is not None and movement.color is not None:
            if piece.color != movement.color:
                return 0
        return movement.move_count

    def can_piece_move(self, piece: Optional[chess.Piece], square: SquareName) -> bool:
        return self.get_piece_move_count(piece, square) < self.max_per_piece

    def is_piece_exhausted(
        self, piece: Optional[chess.Piece], square: SquareName
    ) -> bool:
        return not self.can_piece_move(piece, square)

    @property
    def total_moves(self) -> int:
        return len(self._log)

    @property
    def remaining_moves(self) -> int:
        return max(0, self.max_moves - self.total_moves)

    def can_add_more_moves(self) -> bool:
        return self.total_moves < self.max_moves

    def movements(self) -> list[PieceMovement]:
        """Per piece details (copies), in the order the pieces first moved."""
        return [deepcopy(movement) for movement in self._movements]

    def get_movement_summary(self) -> MovementSummary:
        per_piece = {
            square: self._movements[lineage].move_count
            for square, lineage in self._lineage_by_square.items()
        }
        exhausted = sum(
            1
            for movement in self._movements
            if movement.move_count >= self.max_per_piece
        )
        return MovementSummary(
            total_moves=self.total_moves,
            per_piece_move_counts=per_piece,
            pieces_moved=len(self._movements),
            exhausted_pieces=exhausted,
            remaining_moves=self.remaining_moves,
        )

    def debug_state(self) -> None:
        logger.debug(
            "Piece tracker: %d/%d moves, %d remaining, %d pieces moved",
            self.total_moves,
            self.max_moves,
            self.remaining_moves,
            len(self._movements),
        )
        for movement in self._movements:
            logger.debug(
                "  %s (now on %s): %d/%d",
                movement.origin,
                movement.current_square,
                movement.move_count,
                self.max_per_piece,
            )

    # --- HELPERS ---
    def _movement_on(self, square: SquareName) -> Optional[PieceMovement]:
        lineage = self._lineage_by_square.get(square)
        if lineage is None:
            return None
        return self._movements[lineage]
