"""SQLAlchemy ORM models."""

from nerddle.models.document import StoredDocument

__all__ = [
    "StoredDocument",
]
