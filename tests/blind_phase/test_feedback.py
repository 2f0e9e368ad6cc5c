"""Unit tests for src/blind_phase/feedback.py"""

import chess

from src.blind_phase.feedback import SquareIndicator, piece_indicators
from src.blind_phase.tracker import PieceMovementTracker
from src.core.shared_types import Color, IndicatorStatus


def play(tracker: PieceMovementTracker, board: chess.Board, *ucis: str) -> chess.Board:
    for uci in ucis:
        move = chess.Move.from_uci(uci)
        san = board.san(move)
        board = board.copy()
        board.push(move)
        board.turn = chess.WHITE
        board.ep_square = None
        tracker.record_move(board, uci[:2], uci[2:4], san, tracker.total_moves + 1)
    return board


def test_no_moves_no_indicators() -> None:
    assert piece_indicators(chess.Board(), PieceMovementTracker(), Color.WHITE) == {}


def test_indicator_per_moved_piece() -> None:
    tracker = PieceMovementTracker(max_per_piece=2)
    board = play(tracker, chess.Board(), "e2e4", "e4e5", "g1f3")

    indicators = piece_indicators(board, tracker, Color.WHITE)

    assert list(indicators) == ["e5", "f3"]
    assert indicators["e5"] == SquareIndicator(2, 2, IndicatorStatus.EXHAUSTED)
    assert indicators["e5"].label == "2/2"
    assert indicators["e5"].color == "red"
    assert indicators["f3"] == SquareIndicator(1, 2, IndicatorStatus.WARNING)
    assert indicators["f3"].color == "yellow"


def test_available_below_warning_threshold() -> None:
    tracker = PieceMovementTracker(max_per_piece=3)
    board = play(tracker, chess.Board(), "g1f3")

    indicator = piece_indicators(board, tracker, Color.WHITE)["f3"]

    assert indicator.status == IndicatorStatus.AVAILABLE
    assert indicator.label == "1/3"
    assert indicator.color == "green"


def test_opponent_pieces_are_skipped() -> None:
    tracker = PieceMovementTracker()
    board = play(tracker, chess.Board(), "e2e4")
    assert piece_indicators(board, tracker, Color.BLACK) == {}
