"""Unit tests for src/db/database.py"""

from sqlalchemy import inspect

from src.db.database import make_session_factory


def test_session_factory_creates_tables() -> None:
    session_factory = make_session_factory("sqlite:///:memory:")
    db = session_factory()
    try:
        assert inspect(db.get_bind()).has_table("blind_moves")
    finally:
        db.close()
