"""Per square annotations (move counters) for the pieces of the local player."""

from dataclasses import dataclass

import chess

from src.blind_phase.tracker import PieceMovementTracker
from src.core.shared_types import Color, IndicatorStatus

INDICATOR_COLORS = {
    IndicatorStatus.AVAILABLE: "green",
    IndicatorStatus.WARNING: "yellow",
    IndicatorStatus.EXHAUSTED: "red",
}


@dataclass(frozen=True)
class SquareIndicator:
    move_count: int
    limit: int
    status: IndicatorStatus

    @property
    def label(self) -> str:
        """e.g. '1/2'"""
        return f"{self.move_count}/{self.limit}"

    @property
    def color(self) -> str:
        return INDICATOR_COLORS[self.status]


def piece_indicators(
    position: chess.Board, tracker: PieceMovementTracker, color: Color
) -> dict[str, SquareIndicator]:
    """
    Indicator for every piece of 'color' that has moved (or can no longer move).

    Pieces that did not move yet get no indicator.
    """
    limit = tracker.max_per_piece
    indicators: dict[str, SquareIndicator] = {}
    own_color = color == Color.WHITE
    for square, piece in position.piece_map().items():
        if piece.color != own_color:
            continue

        name = chess.square_name(square)
        move_count = tracker.get_piece_move_count(piece, name)
        can_move = tracker.can_piece_move(piece, name)
        if move_count == 0 and can_move:
            continue

        if not can_move:
            status = IndicatorStatus.EXHAUSTED
        elif move_count == limit - 1:
            status = IndicatorStatus.WARNING
        else:
            status = IndicatorStatus.AVAILABLE
        indicators[name] = SquareIndicator(move_count, limit, status)

    return dict(sorted(indicators.items()))
