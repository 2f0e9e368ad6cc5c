"""Implementation of (BlindMove)Repository using SQLAlchemy"""

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.exceptions import RepositoryError
from src.core.models import RecordedMove
from src.core.shared_types import Color
from src.db.schema import DBBlindMove


class SQLBlindMoveRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def list_moves(self, game_id: UUID, color: Color) -> list[RecordedMove]:
        """All moves of the player, ordered by sequence index."""
        return [self._to_model(move_db) for move_db in self._fetch_moves(game_id, color)]

    def add_move(self, game_id: UUID, color: Color, move: RecordedMove) -> RecordedMove:
        """Store a new move at the end of the sequence."""
        move_db = DBBlindMove(
            game_id=game_id,
            player_color=color.value,
            move_number=move.sequence_index,
            move_from=move.from_square,
            move_to=move.to_square,
            move_san=move.san,
        )
        self.db.add(move_db)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise RepositoryError(
                f"Move #{move.sequence_index} already stored for {color} in game {game_id}."
            ) from e
        self.db.refresh(move_db)
        return self._to_model(move_db)

    def remove_last_move(self, game_id: UUID, color: Color) -> RecordedMove | None:
        """Remove the latest move (if any) and return it."""
        moves_db = self._fetch_moves(game_id, color)
        if not moves_db:
            return None
        last = moves_db[-1]
        removed = self._to_model(last)
        self.db.delete(last)
        self.db.commit()
        return removed

    def clear_moves(self, game_id: UUID, color: Color) -> int:
        """Remove all moves of the player. Returns how many were removed."""
        query = delete(DBBlindMove).where(
            DBBlindMove.game_id == game_id, DBBlindMove.player_color == color.value
        )
        result = self.db.execute(query)
        self.db.commit()
        return result.rowcount

    def mark_submitted(self, game_id: UUID, color: Color) -> int:
        """Flag all moves of the player as submitted. Returns how many were flagged."""
        query = (
            update(DBBlindMove)
            .where(
                DBBlindMove.game_id == game_id,
                DBBlindMove.player_color == color.value,
            )
            .values(is_submitted=True)
        )
        result = self.db.execute(query)
        self.db.commit()
        return result.rowcount

    def is_submitted(self, game_id: UUID, color: Color) -> bool:
        """Did the player submit their sequence?"""
        query = (
            select(DBBlindMove.id)
            .where(
                DBBlindMove.game_id == game_id,
                DBBlindMove.player_color == color.value,
                DBBlindMove.is_submitted.is_(True),
            )
            .limit(1)
        )
        return self.db.scalar(query) is not None

    def _fetch_moves(self, game_id: UUID, color: Color) -> list[DBBlindMove]:
        query = (
            select(DBBlindMove)
            .where(
                DBBlindMove.game_id == game_id,
                DBBlindMove.player_color == color.value,
            )
            .order_by(DBBlindMove.move_number)
        )
        return list(self.db.scalars(query))

    def _to_model(self, move_db: DBBlindMove) -> RecordedMove:
        """Convert SQLAlchemy model to data transfer model."""
        return RecordedMove(
            from_square=move_db.move_from,
            to_square=move_db.move_to,
            san=move_db.move_san,
            sequence_index=move_db.move_number,
        )
