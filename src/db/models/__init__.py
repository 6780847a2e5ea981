from sqlalchemy.orm import DeclarativeBase


# Create declarative base for SQLAlchemy 2.0 style
class Base(DeclarativeBase):  # type: ignore
    pass


# Import all models so Alembic and create_all can detect them
from src.db.models.kv_entries import KeyValueEntry  # noqa: E402

__all__ = [
    "Base",
    "KeyValueEntry",
]
