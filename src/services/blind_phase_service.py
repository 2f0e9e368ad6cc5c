"""Orchestration of communication from API models to the blind phase session and the move store (and the reverse direction)."""

from typing import Optional
from uuid import UUID

from src.api.models import (
    BlindPhaseView,
    DropRequest,
    DropResponse,
    IndicatorResponse,
    RecordedMoveResponse,
    RevealEntryResponse,
    RevealResponse,
    ViolationResponse,
)
from src.blind_phase.oracle import ChessOracle
from src.blind_phase.reveal import simulate_reveal
from src.blind_phase.rules import (
    IllegalMove,
    MoveLimitReached,
    PieceExhausted,
    TurnViolation,
    Violation,
)
from src.blind_phase.session import BlindPhaseSession
from src.core.config import BlindPhaseConfig
from src.core.exceptions import SessionStateError
from src.core.shared_types import Color
from src.db.repository import BlindMoveRepository
from src.services.blind_moves_store import RepositoryMoveStore


class BlindPhaseService:
    """Orchestration of one player's blind phase."""

    def __init__(
        self,
        store: RepositoryMoveStore,
        config: Optional[BlindPhaseConfig] = None,
        oracle: Optional[ChessOracle] = None,
    ) -> None:
        self.store = store
        self.session = BlindPhaseSession(store, config, oracle)
        self._unsubscribe = store.subscribe(self.session.on_moves_changed)

    # -- API logic ---
    def start(self) -> BlindPhaseView:
        """
        Color is known (matchmaking done): set up the session and load whatever was persisted before.
        ----
        Also used when reconnecting.
        """
        self.session.assign_color(self.store.color)
        self.session.on_moves_changed(self.store.moves(), self.store.is_submitted())
        return self.view()

    def drop(self, request: DropRequest) -> DropResponse:
        """A piece was dropped on the board. Must be called from within a running event loop."""
        accepted = self.session.handle_drop(
            request.from_square, request.to_square, request.piece
        )
        return DropResponse(accepted=accepted, state=self.view())

    async def undo(self) -> BlindPhaseView:
        await self.session.handle_undo()
        return self.view()

    async def reset(self) -> BlindPhaseView:
        await self.session.handle_reset()
        return self.view()

    async def submit(self) -> BlindPhaseView:
        await self.session.handle_submit()
        return self.view()

    def close(self) -> None:
        """Stop listening to the move store."""
        self._unsubscribe()

    def view(self) -> BlindPhaseView:
        """Convert the session state into a BlindPhaseView."""
        session = self.session
        summary = session.movement_summary
        verdict = session.last_verdict
        return BlindPhaseView(
            status=session.status,
            color=session.color,
            fen=session.position.fen(),
            moves=[
                RecordedMoveResponse(
                    from_square=move.from_square,
                    to_square=move.to_square,
                    san=move.san,
                    sequence_index=move.sequence_index,
                )
                for move in session.moves
            ],
            total_moves=summary.total_moves,
            per_piece_move_counts=summary.per_piece_move_counts,
            remaining_moves=session.remaining_moves,
            is_complete=session.is_complete,
            is_submit_disabled=session.is_submit_disabled,
            violations=[
                _violation_response(violation)
                for violation in (verdict.violations if verdict else ())
            ],
            indicators={
                square: IndicatorResponse(
                    label=indicator.label,
                    status=indicator.status,
                    color=indicator.color,
                )
                for square, indicator in session.piece_indicators.items()
            },
        )


def reveal_game(
    repository: BlindMoveRepository,
    game_id: UUID,
    oracle: Optional[ChessOracle] = None,
) -> RevealResponse:
    """Once both players submitted: combine the two blind sequences."""
    for color in Color:
        if not repository.is_submitted(game_id, color):
            raise SessionStateError(
                f"Cannot reveal game {game_id}: {color} did not submit their blind moves yet."
            )

    result = simulate_reveal(
        repository.list_moves(game_id, Color.WHITE),
        repository.list_moves(game_id, Color.BLACK),
        oracle,
    )
    return RevealResponse(
        fen=result.fen,
        log=[
            RevealEntryResponse(
                color=entry.color,
                san=entry.san,
                from_square=entry.from_square,
                to_square=entry.to_square,
                is_invalid=entry.is_invalid,
            )
            for entry in result.log
        ],
        valid_moves=result.valid_moves,
        invalid_moves=result.invalid_moves,
    )


# -- Internal helpers --
def _violation_response(violation: Violation) -> ViolationResponse:
    """Only the data the UI needs to build its message."""
    if isinstance(violation, MoveLimitReached):
        return ViolationResponse(
            kind=violation.kind, current=violation.current, limit=violation.max
        )
    if isinstance(violation, PieceExhausted):
        return ViolationResponse(
            kind=violation.kind,
            square=violation.square,
            current=violation.move_count,
            limit=violation.limit,
        )
    if isinstance(violation, IllegalMove):
        return ViolationResponse(kind=violation.kind, reason=violation.reason)
    if isinstance(violation, TurnViolation):
        return ViolationResponse(kind=violation.kind, expected_color=violation.expected)
    return ViolationResponse(kind=violation.kind)
