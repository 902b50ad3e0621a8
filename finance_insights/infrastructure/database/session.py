"""Database session management for the threshold trigger store"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from finance_insights.config import settings
from finance_insights.infrastructure.database.models import Base


def create_db_engine(database_url: str | None = None) -> Engine:
    """Engine for the configured store; SQLite waits on locks instead of failing fast"""
    url = database_url or settings.database_url
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False, "timeout": 30})

    # Connection pool: max 20 connections, recycle after 1 hour to avoid stale connections
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=10,
        pool_recycle=3600,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create the trigger table and its unique index if missing"""
    Base.metadata.create_all(bind=engine)
