"""Unit tests for src/blind_phase/tracker.py"""

import chess
import pytest

from src.blind_phase.tracker import PieceMovementTracker
from src.core.exceptions import SequenceError
from src.core.models import MovementSummary, RecordedMove

WHITE_PAWN = chess.Piece(chess.PAWN, chess.WHITE)
BLACK_PAWN = chess.Piece(chess.PAWN, chess.BLACK)


def play(
    tracker: PieceMovementTracker, board: chess.Board, *ucis: str
) -> chess.Board:
    """Make the moves for white only (the turn is handed back to white every time) and record them."""
    for uci in ucis:
        move = chess.Move.from_uci(uci)
        san = board.san(move)
        board = board.copy()
        board.push(move)
        board.turn = chess.WHITE
        board.ep_square = None
        tracker.record_move(
            board,
            uci[:2],
            uci[2:4],
            san,
            tracker.total_moves + 1,
        )
    return board


@pytest.fixture
def tracker() -> PieceMovementTracker:
    return PieceMovementTracker(max_per_piece=2, max_moves=5)


def test_empty_tracker(tracker: PieceMovementTracker) -> None:
    assert tracker.get_movement_summary() == MovementSummary(remaining_moves=5)
    assert tracker.total_moves == 0
    assert tracker.log == []
    assert tracker.get_piece_move_count(WHITE_PAWN, "e2") == 0


def test_record_single_move(tracker: PieceMovementTracker) -> None:
    play(tracker, chess.Board(), "e2e4")

    assert tracker.log == [RecordedMove("e2", "e4", "e4", 1)]
    assert tracker.get_piece_move_count(WHITE_PAWN, "e4") == 1
    # the pawn left e2: nothing there has moved
    assert tracker.get_piece_move_count(WHITE_PAWN, "e2") == 0


def test_same_piece_across_squares(tracker: PieceMovementTracker) -> None:
    """e2 -> e4 -> e5 is one piece that moved twice."""
    play(tracker, chess.Board(), "e2e4", "e4e5")

    summary = tracker.get_movement_summary()
    assert summary.total_moves == 2
    assert summary.per_piece_move_counts == {"e5": 2}
    assert summary.pieces_moved == 1
    assert summary.exhausted_pieces == 1
    assert summary.remaining_moves == 3
    assert tracker.get_piece_move_count(WHITE_PAWN, "e5") == 2
    assert tracker.is_piece_exhausted(WHITE_PAWN, "e5")
    assert not tracker.can_piece_move(WHITE_PAWN, "e5")


def test_distinct_pieces(tracker: PieceMovementTracker) -> None:
    play(tracker, chess.Board(), "e2e4", "d2d4", "g1f3")

    summary = tracker.get_movement_summary()
    assert summary.total_moves == 3
    assert summary.per_piece_move_counts == {"e4": 1, "d4": 1, "f3": 1}
    assert summary.exhausted_pieces == 0
    assert [movement.origin for movement in tracker.movements()] == ["e2", "d2", "g1"]


def test_total_moves_matches_log(tracker: PieceMovementTracker) -> None:
    play(tracker, chess.Board(), "e2e4", "e4e5", "g1f3", "f3g5")
    assert tracker.get_movement_summary().total_moves == len(tracker.log) == 4
    assert tracker.remaining_moves == 1
    assert tracker.can_add_more_moves()

    play(tracker, chess.Board(), "d2d4")
    assert tracker.remaining_moves == 0
    assert not tracker.can_add_more_moves()


def test_promoted_piece_keeps_counting(tracker: PieceMovementTracker) -> None:
    """A pawn promoting to a queen is still the same piece."""
    board = chess.Board("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    board = play(tracker, board, "e7e8q")
    assert board.piece_at(chess.E8) == chess.Piece(chess.QUEEN, chess.WHITE)

    play(tracker, board, "e8e4")
    queen = chess.Piece(chess.QUEEN, chess.WHITE)
    assert tracker.get_piece_move_count(queen, "e4") == 2
    assert tracker.get_movement_summary().per_piece_move_counts == {"e4": 2}


def test_castled_rook_does_not_inherit_bishop_moves(
    tracker: PieceMovementTracker,
) -> None:
    """The rook lands on f1 (which the bishop left) without a recorded move of its own."""
    board = chess.Board("4k3/8/8/8/8/8/8/4KB1R w K - 0 1")
    board = play(tracker, board, "f1c4", "e1g1")

    rook = chess.Piece(chess.ROOK, chess.WHITE)
    assert board.piece_at(chess.F1) == rook
    assert tracker.get_piece_move_count(rook, "f1") == 0
    assert tracker.get_piece_move_count(None, "c4") == 1
    assert tracker.get_piece_move_count(None, "g1") == 1


def test_piece_of_other_color_is_not_the_tracked_piece(
    tracker: PieceMovementTracker,
) -> None:
    play(tracker, chess.Board(), "e2e4")
    assert tracker.get_piece_move_count(BLACK_PAWN, "e4") == 0
    assert tracker.get_piece_move_count(None, "e4") == 1


def test_out_of_order_sequence_index(tracker: PieceMovementTracker) -> None:
    board = chess.Board()
    board.push_uci("e2e4")
    with pytest.raises(SequenceError):
        tracker.record_move(board, "e2", "e4", "e4", 2)
    assert tracker.total_moves == 0


def test_reset_clears_everything(tracker: PieceMovementTracker) -> None:
    play(tracker, chess.Board(), "e2e4", "e4e5")
    assert tracker.is_piece_exhausted(WHITE_PAWN, "e5")

    tracker.reset()

    assert tracker.get_movement_summary() == MovementSummary(
        total_moves=0, per_piece_move_counts={}, remaining_moves=5
    )
    assert tracker.log == []
    assert tracker.can_piece_move(WHITE_PAWN, "e5")


def test_clone_is_independent(tracker: PieceMovementTracker) -> None:
    play(tracker, chess.Board(), "e2e4")
    cloned = tracker.clone()

    play(tracker, chess.Board("rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR w KQkq - 0 1"), "e4e5")

    assert cloned.total_moves == 1
    assert cloned.get_movement_summary().per_piece_move_counts == {"e4": 1}
    assert tracker.get_movement_summary().per_piece_move_counts == {"e5": 2}


def test_recording_without_piece_on_destination_is_logged(
    tracker: PieceMovementTracker, caplog: pytest.LogCaptureFixture
) -> None:
    """The tracker does not judge: it records whatever it is told and only warns."""
    tracker.record_move(chess.Board(), "e2", "e4", "e4", 1)
    assert tracker.total_moves == 1
    assert "No piece on e4" in caplog.text


def test_movement_details(tracker: PieceMovementTracker) -> None:
    play(tracker, chess.Board(), "g1f3", "f3g5")
    (knight,) = tracker.movements()
    assert knight.origin == "g1"
    assert knight.current_square == "g5"
    assert knight.color == chess.WHITE
    assert [move.san for move in knight.moves] == ["Nf3", "Ng5"]
