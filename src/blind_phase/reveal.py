"""
Reveal of the blind phase: play both blind sequences against each other on one board.

Each player made their moves on a board without the opponent's moves, so once both sequences are combined
some moves may no longer be legal. Moves are played in strict chess turn order (white first):

* a legal move is played normally
* an illegal move is logged as invalid and the turn passes to the other side
* a side without moves left passes its turn
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Optional, Sequence

import chess

from src.blind_phase.moves import build_move
from src.blind_phase.oracle import ChessOracle
from src.core.config import INITIAL_FEN
from src.core.exceptions import IllegalMoveError, InvalidRequestError
from src.core.models import RecordedMove
from src.core.shared_types import Color

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevealEntry:
    color: Color
    san: str
    from_square: str
    to_square: str
    is_invalid: bool


@dataclass
class RevealResult:
    fen: str
    log: list[RevealEntry] = field(default_factory=list)

    @property
    def valid_moves(self) -> int:
        return sum(1 for entry in self.log if not entry.is_invalid)

    @property
    def invalid_moves(self) -> int:
        return sum(1 for entry in self.log if entry.is_invalid)


def simulate_reveal(
    white_moves: Sequence[RecordedMove],
    black_moves: Sequence[RecordedMove],
    oracle: Optional[ChessOracle] = None,
    starting_fen: str = INITIAL_FEN,
    default_promotion: str = "q",
) -> RevealResult:
    """Combine both blind sequences into the position the live phase starts from."""
    oracle = oracle or ChessOracle()
    board = oracle.starting_position(starting_fen)
    queues = {
        Color.WHITE: deque(sorted(white_moves, key=lambda m: m.sequence_index)),
        Color.BLACK: deque(sorted(black_moves, key=lambda m: m.sequence_index)),
    }
    log: list[RevealEntry] = []

    while queues[Color.WHITE] or queues[Color.BLACK]:
        color = Color.WHITE if board.turn == chess.WHITE else Color.BLACK
        if not queues[color]:
            passed = _pass_turn(board)
            if passed is None:
                logger.warning("%s cannot pass the turn; stopping the reveal", color)
                break
            board = passed
            continue

        recorded = queues[color].popleft()
        try:
            move = build_move(
                board, recorded.from_square, recorded.to_square, default_promotion
            )
            applied = oracle.apply_move(board, move)
        except (IllegalMoveError, InvalidRequestError) as e:
            logger.debug("Reveal: %s move %s is invalid (%s)", color, recorded.san, e)
            log.append(
                RevealEntry(
                    color, recorded.san, recorded.from_square, recorded.to_square, True
                )
            )
            # NOTE if the turn cannot be handed over, the same side simply plays its next move
            board = _pass_turn(board) or board
            continue

        log.append(
            RevealEntry(
                color, applied.san, recorded.from_square, recorded.to_square, False
            )
        )
        board = applied.position

    result = RevealResult(fen=board.fen(), log=log)
    logger.info(
        "Reveal done: %d valid, %d invalid move(s)",
        result.valid_moves,
        result.invalid_moves,
    )
    return result


def _pass_turn(board: chess.Board) -> Optional[chess.Board]:
    """Same position, other side to move. None if that position would be invalid (e.g. king capturable)."""
    passed = board.copy(stack=False)
    passed.turn = not board.turn
    passed.ep_square = None
    if not passed.is_valid():
        return None
    return passed
