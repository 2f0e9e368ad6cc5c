"""Database tables / schema"""

from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBBlindMove(Base):
    """One blind move of one player. A player's sequence = all rows with the same (game_id, player_color)."""

    __tablename__ = "blind_moves"
    __table_args__ = (
        UniqueConstraint("game_id", "player_color", "move_number"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[UUID] = mapped_column(index=True)
    player_color: Mapped[str]
    move_number: Mapped[int]
    move_from: Mapped[str]
    move_to: Mapped[str]
    move_san: Mapped[str]
    is_submitted: Mapped[bool] = mapped_column(default=False)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
