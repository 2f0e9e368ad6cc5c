"""
Move store of one player in one game: the persistence collaborator of a blind phase session.

The store is the authority on the move log. After every change it notifies its subscribers with the full
(persisted) log, which is how sessions get back in sync (replay).
"""

import logging
from typing import Callable, Optional
from uuid import UUID

from src.blind_phase.session import MoveListener
from src.core.config import BlindPhaseConfig
from src.core.models import RecordedMove
from src.core.shared_types import Color
from src.db.repository import BlindMoveRepository

logger = logging.getLogger(__name__)


class RepositoryMoveStore:
    """Blind move store backed by a BlindMoveRepository."""

    def __init__(
        self,
        repository: BlindMoveRepository,
        game_id: UUID,
        color: Color,
        config: Optional[BlindPhaseConfig] = None,
    ) -> None:
        self.repo = repository
        self.game_id = game_id
        self.color = color
        self.max_moves = (config or BlindPhaseConfig()).max_moves
        self._listeners: list[MoveListener] = []

    # -- subscriptions --
    def subscribe(self, listener: MoveListener) -> Callable[[], None]:
        """Register a listener for changes of the log. Returns a function to unsubscribe again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def moves(self) -> list[RecordedMove]:
        return self.repo.list_moves(self.game_id, self.color)

    def is_submitted(self) -> bool:
        return self.repo.is_submitted(self.game_id, self.color)

    # -- session contract --
    async def save_move(self, move: RecordedMove) -> bool:
        """
        Append a move to the persisted sequence.
        ----

        ----
        Refused (returns False) once submitted, when the sequence is full, or when the move is not the next one.
        """
        if self.is_submitted():
            logger.warning("Cannot save move %s: %s already submitted", move.san, self.color)
            return False

        stored = self.moves()
        if len(stored) >= self.max_moves:
            logger.warning(
                "Cannot save move %s: %s already has %d moves", move.san, self.color, len(stored)
            )
            return False

        if move.sequence_index != len(stored) + 1:
            logger.warning(
                "Cannot save move %s as #%d: expected #%d",
                move.san,
                move.sequence_index,
                len(stored) + 1,
            )
            return False

        self.repo.add_move(self.game_id, self.color, move)
        self._notify()
        return True

    async def undo_last_move(self) -> None:
        if self.is_submitted():
            logger.warning("Cannot undo: %s already submitted", self.color)
            return
        removed = self.repo.remove_last_move(self.game_id, self.color)
        if removed is None:
            return
        self._notify()

    async def clear_all_moves(self) -> None:
        if self.is_submitted():
            logger.warning("Cannot clear moves: %s already submitted", self.color)
            return
        self.repo.clear_moves(self.game_id, self.color)
        self._notify()

    async def submit_moves(self) -> bool:
        if self.repo.mark_submitted(self.game_id, self.color) == 0:
            logger.warning("Nothing to submit for %s in game %s", self.color, self.game_id)
            return False
        self._notify()
        return True

    def _notify(self) -> None:
        moves = self.moves()
        submitted = self.is_submitted()
        for listener in list(self._listeners):
            listener(moves, submitted)
