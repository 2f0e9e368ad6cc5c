"""
Blind-Phase Session State

Orchestrates the blind phase of a single player:
drop a piece -> validate -> apply optimistically -> persist (in the background).
Undo / reset / submit are requests to the move store. Local state is brought back in sync by replaying
the persisted move log whenever the store reports a change.

State machine (see SessionStatus):

    UNINITIALIZED -> FRESH -> IN_PROGRESS -> READY_TO_SUBMIT -> SUBMITTING -> SUBMITTED

NOTE on the side to move: both players make their blind moves "simultaneously", each on a board that only
shows their own moves. The rules library alternates turns, so after every position update the side to move is
overwritten with the local player's color. This is on purpose and happens only here; the oracle stays
a standard chess component.

Runs on an asyncio event loop: the only asynchronous boundary is the move store.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Protocol, Sequence

import chess

from src.blind_phase.feedback import SquareIndicator, piece_indicators
from src.blind_phase.moves import build_move
from src.blind_phase.oracle import ChessOracle
from src.blind_phase.rules import (
    BlindRuleEngine,
    IllegalMove,
    MoveLimitReached,
    TurnViolation,
    ValidationVerdict,
    Violation,
)
from src.blind_phase.tracker import PieceMovementTracker
from src.core.config import BlindPhaseConfig
from src.core.exceptions import (
    IllegalMoveError,
    InvalidRequestError,
    ReplayError,
    SessionStateError,
)
from src.core.models import MovementSummary, RecordedMove
from src.core.shared_types import Color, SessionStatus

logger = logging.getLogger(__name__)

MoveListener = Callable[[list[RecordedMove], bool], None]


class BlindMoveStore(Protocol):
    """Just the parts of the persistence collaborator the session needs"""

    async def save_move(self, move: RecordedMove) -> bool: ...
    async def undo_last_move(self) -> None: ...
    async def clear_all_moves(self) -> None: ...
    async def submit_moves(self) -> bool: ...


class BlindPhaseSession:
    """One player's blind phase. Owns its rule engine (and through it, the piece tracker)."""

    def __init__(
        self,
        store: BlindMoveStore,
        config: Optional[BlindPhaseConfig] = None,
        oracle: Optional[ChessOracle] = None,
    ) -> None:
        self.store = store
        self.config = config or BlindPhaseConfig()
        self.oracle = oracle or ChessOracle()
        self.engine = BlindRuleEngine.from_config(self.config, self.oracle)

        self.color: Optional[Color] = None
        self.position: chess.Board = self.oracle.starting_position(
            self.config.starting_fen
        )
        self.submitted = False
        self.submitting = False
        self.is_processing_move = False
        self.last_verdict: Optional[ValidationVerdict] = None
        self.replay_error: Optional[ReplayError] = None

        self._submission_attempt = 0
        self._pending: set[asyncio.Task[None]] = set()

    # --- SUMMARY (read by the surrounding screen) ---
    @property
    def tracker(self) -> PieceMovementTracker:
        return self.engine.tracker

    @property
    def moves(self) -> list[RecordedMove]:
        return self.tracker.log

    @property
    def movement_summary(self) -> MovementSummary:
        return self.tracker.get_movement_summary()

    @property
    def remaining_moves(self) -> int:
        return self.tracker.remaining_moves

    @property
    def is_complete(self) -> bool:
        return self.tracker.total_moves == self.config.max_moves

    @property
    def is_submit_disabled(self) -> bool:
        return self.tracker.total_moves == 0 or self.submitted or self.submitting

    @property
    def piece_indicators(self) -> dict[str, SquareIndicator]:
        if self.color is None:
            return {}
        return piece_indicators(self.position, self.tracker, self.color)

    @property
    def status(self) -> SessionStatus:
        if self.color is None:
            return SessionStatus.UNINITIALIZED
        if self.submitted:
            return SessionStatus.SUBMITTED
        if self.submitting:
            return SessionStatus.SUBMITTING
        total_moves = self.tracker.total_moves
        if total_moves >= self.config.max_moves:
            return SessionStatus.READY_TO_SUBMIT
        if total_moves > 0:
            return SessionStatus.IN_PROGRESS
        return SessionStatus.FRESH

    # --- COLOR ASSIGNMENT / RELOAD ---
    def assign_color(self, color: Color) -> None:
        """
        Set (or change) the local player's color.
        ----
        The color is only known once matchmaking is done. Anything done under another color assumption
        cannot be trusted, so a change always starts over from a fresh board
        (unless the moves are submitted, or a submission is in flight).
        """
        if color == self.color:
            return
        if self.submitted:
            logger.warning(
                "Ignoring color change to %s: blind moves already submitted", color
            )
            return
        if self.submitting:
            logger.warning(
                "Ignoring color change to %s: submission in flight", color
            )
            return

        logger.info("Blind phase color assigned: %s", color)
        self.color = color
        self._start_fresh()

    def replay_moves(self, moves: Sequence[RecordedMove]) -> None:
        """
        Rebuild position, tracker and engine from scratch out of a persisted move log.
        ----

        ----
        Every move goes through the same rules as a live drop, so it gives exactly the same tracker state
        as playing the moves live (and never more than the move limits allow).
        Stops at the first move that cannot be replayed: the state is left as it was after the last
        good move and a ReplayError is raised.
        """
        if self.color is None:
            raise SessionStateError("Cannot replay blind moves before a color is assigned.")

        self._start_fresh()
        ordered = sorted(moves, key=lambda recorded: recorded.sequence_index)
        for expected_index, recorded in enumerate(ordered, start=1):
            if recorded.sequence_index != expected_index:
                raise ReplayError(
                    f"Move log is not contiguous: found #{recorded.sequence_index}, expected #{expected_index}",
                    sequence_index=recorded.sequence_index,
                    replayed=expected_index - 1,
                )
            try:
                move = build_move(
                    self.position,
                    recorded.from_square,
                    recorded.to_square,
                    self.config.default_promotion,
                )
                verdict = self.engine.validate_move(self.position, move)
                if not verdict.is_valid:
                    raise ReplayError(
                        f"Move #{recorded.sequence_index} ({recorded.san}) breaks the blind phase rules: "
                        + ", ".join(violation.kind for violation in verdict.violations),
                        sequence_index=recorded.sequence_index,
                        replayed=expected_index - 1,
                    )
                applied = self.oracle.apply_move(self.position, move)
            except (IllegalMoveError, InvalidRequestError) as e:
                raise ReplayError(
                    f"Cannot replay move #{recorded.sequence_index} ({recorded.san}): {e}",
                    sequence_index=recorded.sequence_index,
                    replayed=expected_index - 1,
                ) from e

            position = self._spoof_turn(applied.position)
            self.engine.process_move(
                position, move, recorded.san, recorded.sequence_index
            )
            self.position = position

    def on_moves_changed(self, moves: list[RecordedMove], submitted: bool) -> None:
        """Listener for the move store: the persisted log changed (save / undo / clear / submit / reconnect)."""
        if submitted:
            self.submitted = True
        if self.color is None:
            logger.debug("Move log changed before color assignment; nothing to replay")
            return

        try:
            self.replay_moves(moves)
        except ReplayError as e:
            logger.error(
                "Blind move replay halted after %d move(s): %s", e.replayed, e
            )
            self.replay_error = e

    # --- PLAYER ACTIONS ---
    def handle_drop(self, from_square: str, to_square: str, piece_code: str) -> bool:
        """
        A piece (e.g. 'wN') was dropped from 'from_square' onto 'to_square'.
        ----

        ----
        Returns True if the move got accepted and applied to the local state. Persisting it happens in
        the background: a failure there is logged, but the local state is NOT rolled back.

        Must be called from within a running event loop.
        """
        loop = asyncio.get_running_loop()
        if self.is_processing_move:
            loop.call_later(self.config.busy_release_delay, self._release_processing)
            return False

        self.is_processing_move = True
        try:
            return self._drop(from_square, to_square, piece_code)
        finally:
            loop.call_later(
                self.config.processing_release_delay, self._release_processing
            )

    async def handle_undo(self) -> None:
        """Ask the store to drop the latest move. Local state follows through the replay."""
        if self.tracker.total_moves == 0 or self.submitted:
            return

        self.last_verdict = None
        try:
            await self.store.undo_last_move()
        except Exception:
            logger.exception("Failed to undo blind move")

    async def handle_reset(self) -> None:
        """Ask the store to clear all moves. Local state follows through the replay."""
        if self.submitted:
            return

        self.last_verdict = None
        try:
            await self.store.clear_all_moves()
        except Exception:
            logger.exception("Failed to clear blind moves")

    async def handle_submit(self) -> None:
        """
        Submit the blind sequence.
        ----

        ----
        Only one submission can be in flight. Whatever the outcome, submitting is re-enabled after
        a cooldown, to prevent rapid duplicate submissions.
        NOTE the attempt counter discards the result of an attempt that got overtaken by a newer one.
        """
        if self.tracker.total_moves == 0 or self.submitted or self.submitting:
            return

        self._submission_attempt += 1
        attempt = self._submission_attempt
        self.submitting = True
        try:
            success = await self.store.submit_moves()
            if attempt == self._submission_attempt:
                if success:
                    self.submitted = True
                    logger.info(
                        "Submitted %d blind move(s) as %s",
                        self.tracker.total_moves,
                        self.color,
                    )
                else:
                    logger.error("Failed to submit blind moves")
        except Exception:
            logger.exception("Error while submitting blind moves")
        finally:
            asyncio.get_running_loop().call_later(
                self.config.submit_cooldown, self._end_submit_cooldown
            )

    async def flush(self) -> None:
        """Wait until all background persistence calls are done."""
        while self._pending:
            await asyncio.gather(*self._pending)

    # --- INTERNAL HELPERS ---
    def _drop(self, from_square: str, to_square: str, piece_code: str) -> bool:
        if self.color is None:
            logger.debug("Drop %s%s ignored: no color assigned", from_square, to_square)
            return False

        if self.submitted:
            return self._reject(IllegalMove(reason="Moves already submitted"))

        if self.submitting:
            logger.debug("Drop %s%s ignored: submission in flight", from_square, to_square)
            return False

        total_moves = self.tracker.total_moves
        if total_moves >= self.config.max_moves:
            return self._reject(
                MoveLimitReached(current=total_moves, max=self.config.max_moves)
            )

        if not piece_code or piece_code[0] != self.color.letter:
            return self._reject(TurnViolation(expected=self.color))

        try:
            move = build_move(
                self.position, from_square, to_square, self.config.default_promotion
            )
        except InvalidRequestError as e:
            return self._reject(IllegalMove(reason=str(e)))

        verdict = self.engine.validate_move(self.position, move)
        if not verdict.is_valid:
            logger.debug("Blind move %s rejected: %s", move.to_uci(), verdict.violations)
            self.last_verdict = verdict
            return False

        try:
            applied = self.oracle.apply_move(self.position, move)
        except IllegalMoveError as e:
            return self._reject(IllegalMove(reason=str(e)))

        # valid move: update the local state right away (optimistic)
        position = self._spoof_turn(applied.position)
        recorded = self.engine.process_move(
            position, move, applied.san, total_moves + 1
        )
        self.position = position
        self.last_verdict = None
        self._run_in_background(self._persist(recorded))
        return True

    def _reject(self, violation: Violation) -> bool:
        self.last_verdict = ValidationVerdict.rejected(violation)
        logger.debug("Blind move rejected: %s", violation)
        return False

    async def _persist(self, recorded: RecordedMove) -> None:
        try:
            saved = await self.store.save_move(recorded)
        except Exception:
            logger.exception(
                "Network error saving blind move #%d (%s)",
                recorded.sequence_index,
                recorded.san,
            )
            return
        if not saved:
            logger.error(
                "Failed to save blind move #%d (%s)",
                recorded.sequence_index,
                recorded.san,
            )

    def _run_in_background(self, coroutine: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(coroutine)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _start_fresh(self) -> None:
        """Initial position (with our side to move), empty tracker."""
        self.position = self._spoof_turn(
            self.oracle.starting_position(self.config.starting_fen)
        )
        self.engine.reset()
        self.last_verdict = None
        self.replay_error = None

    def _spoof_turn(self, position: chess.Board) -> chess.Board:
        """
        Force the side to move to the local player's color.

        NOTE changes the given board in place: only ever called on a fresh board handed out by the oracle.
        The en passant square is dropped, as it belonged to the (skipped) opponent's turn.
        """
        position.turn = self.color == Color.WHITE
        position.ep_square = None
        return position

    def _release_processing(self) -> None:
        self.is_processing_move = False

    def _end_submit_cooldown(self) -> None:
        self.submitting = False
