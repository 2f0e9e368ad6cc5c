"""Protocol repository (implemented with SQLAlchemy, tests use an in-memory version)"""

from typing import Protocol
from uuid import UUID

from src.core.models import RecordedMove
from src.core.shared_types import Color


class BlindMoveRepository(Protocol):
    """Persistence of the blind move sequences, per game and per player color."""

    def list_moves(self, game_id: UUID, color: Color) -> list[RecordedMove]:
        """All moves of the player, ordered by sequence index."""
        ...

    def add_move(self, game_id: UUID, color: Color, move: RecordedMove) -> RecordedMove:
        """Store a new move at the end of the sequence."""
        ...

    def remove_last_move(self, game_id: UUID, color: Color) -> RecordedMove | None:
        """Remove the latest move (if any) and return it."""
        ...

    def clear_moves(self, game_id: UUID, color: Color) -> int:
        """Remove all moves of the player. Returns how many were removed."""
        ...

    def mark_submitted(self, game_id: UUID, color: Color) -> int:
        """Flag all moves of the player as submitted. Returns how many were flagged."""
        ...

    def is_submitted(self, game_id: UUID, color: Color) -> bool:
        """Did the player submit their sequence?"""
        ...
