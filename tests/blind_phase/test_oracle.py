"""Unit tests for src/blind_phase/oracle.py"""

import chess
import pytest

from src.blind_phase.moves import Move
from src.blind_phase.oracle import AppliedMove, ChessOracle
from src.core.exceptions import IllegalMoveError


@pytest.fixture
def oracle() -> ChessOracle:
    return ChessOracle()


def test_starting_position(oracle: ChessOracle) -> None:
    board = oracle.starting_position()
    assert board.fen() == chess.STARTING_FEN


def test_starting_position_from_invalid_fen(oracle: ChessOracle) -> None:
    with pytest.raises(IllegalMoveError):
        oracle.starting_position("definitely not a FEN")


def test_legal_pawn_push(oracle: ChessOracle) -> None:
    board = oracle.starting_position()
    assert oracle.is_legal(board, Move("e2", "e4"))
    assert oracle.rejection_reason(board, Move("e2", "e4")) is None


@pytest.mark.parametrize(
    "move, reason",
    [
        (Move("e2", "e5"), "e2e5 is not a legal move"),
        (Move("e3", "e4"), "No piece found at e3"),
        (Move("e7", "e5"), "Piece on e7 cannot move: it is not its side's turn"),
    ],
)
def test_rejection_reasons(oracle: ChessOracle, move: Move, reason: str) -> None:
    board = oracle.starting_position()
    assert not oracle.is_legal(board, move)
    assert oracle.rejection_reason(board, move) == reason


def test_apply_move_returns_new_position(oracle: ChessOracle) -> None:
    """The input board is left untouched and the SAN of the move is reported."""
    board = oracle.starting_position()
    applied = oracle.apply_move(board, Move("g1", "f3"))

    assert isinstance(applied, AppliedMove)
    assert applied.san == "Nf3"
    assert applied.position.piece_at(chess.F3) == chess.Piece(chess.KNIGHT, chess.WHITE)
    assert applied.position.turn == chess.BLACK
    assert board.fen() == chess.STARTING_FEN


def test_apply_illegal_move_raises(oracle: ChessOracle) -> None:
    board = oracle.starting_position()
    with pytest.raises(IllegalMoveError, match="not a legal move"):
        oracle.apply_move(board, Move("e2", "e5"))
    assert board.fen() == chess.STARTING_FEN


def test_apply_promotion(oracle: ChessOracle) -> None:
    board = chess.Board("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    applied = oracle.apply_move(board, Move("e7", "e8", "q"))
    assert applied.position.piece_at(chess.E8) == chess.Piece(chess.QUEEN, chess.WHITE)
    assert applied.san.startswith("e8=Q")


def test_promotion_without_piece_is_not_legal(oracle: ChessOracle) -> None:
    """The oracle is plain chess: a pawn reaching the last rank has to say what it becomes."""
    board = chess.Board("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    assert not oracle.is_legal(board, Move("e7", "e8"))
