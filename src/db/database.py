"""Generate database session"""

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import DATABASE_URL
from src.db.schema import Base


def make_session_factory(database_url: str = DATABASE_URL) -> sessionmaker[Session]:
    """Engine + session factory for the given database. Makes sure all tables exist."""
    engine = create_engine(database_url)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine)
