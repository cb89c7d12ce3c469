"""Stored document ORM model."""

from datetime import UTC, datetime

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from nerddle.database import Base


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StoredDocument(Base):
    """One string value stored under a string key."""

    __tablename__ = "documents"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, onupdate=_utcnow)
