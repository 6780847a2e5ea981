"""
Database connection and session management
"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from loguru import logger as log

from common import global_config


def _connect_args(database_uri: str) -> dict:
    # SQLite connections are shared across the threadpool FastAPI runs sync deps in
    if database_uri.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


# Database engine
engine = create_engine(
    global_config.database_uri,
    pool_pre_ping=True,
    pool_recycle=300,
    echo=global_config.database.echo,
    connect_args=_connect_args(global_config.database_uri),
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency to get a database session.

    Yields:
        Database session
    """
    db_session = SessionLocal()
    try:
        yield db_session
    except Exception as e:
        log.error(f"Database session error: {e}")
        db_session.rollback()
        raise
    finally:
        db_session.close()


def init_db() -> None:
    """Create any missing tables. Migrations remain the source of truth in prod."""
    from src.db.models import Base

    Base.metadata.create_all(bind=engine)
    log.info("Database tables ready")
