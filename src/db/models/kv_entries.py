from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from src.db.models import Base


class KeyValueEntry(Base):
    """A namespaced string value. Writing an existing key replaces it."""

    __tablename__ = "kv_entries"

    namespace = Column(String, primary_key=True)
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
