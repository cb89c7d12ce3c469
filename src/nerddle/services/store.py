"""Persistent store for users, the session snapshot and blog posts.

The store keeps three independent JSON documents in a string-keyed medium:

- ``users``: list of user records
- ``currentUser``: the logged-in user's snapshot, removed when logged out
- ``blogs``: list of blog posts, most recent first

Every ``save_*`` call overwrites the whole document. Callers load the full
collection, transform it and save the result.
"""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime

import pydantic
from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from nerddle.config import Settings
from nerddle.models.document import StoredDocument
from nerddle.schemas.blog import BlogPost
from nerddle.schemas.user import ADMIN_PFP, User, UserRole

logger = logging.getLogger(__name__)

USERS_KEY = "users"
SESSION_KEY = "currentUser"
POSTS_KEY = "blogs"

_users_adapter = TypeAdapter(list[User])
_posts_adapter = TypeAdapter(list[BlogPost])


class KeyValueMedium(ABC):
    """Abstract string-keyed durable medium."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the value stored under key, or None if the key is absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key. Removing an absent key is not an error."""
        ...


class SqlKeyValueMedium(KeyValueMedium):
    """Key-value medium backed by the ``documents`` table."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    def get_item(self, key: str) -> str | None:
        with self._session_factory() as session:
            result = session.execute(select(StoredDocument.value).where(StoredDocument.key == key))
            return result.scalar_one_or_none()

    def set_item(self, key: str, value: str) -> None:
        with self._session_factory.begin() as session:
            document = session.get(StoredDocument, key)
            if document is None:
                session.add(StoredDocument(key=key, value=value))
            else:
                document.value = value

    def remove_item(self, key: str) -> None:
        with self._session_factory.begin() as session:
            document = session.get(StoredDocument, key)
            if document is not None:
                session.delete(document)


class PersistentStore:
    """Typed accessors over a key-value medium."""

    def __init__(self, medium: KeyValueMedium, settings: Settings) -> None:
        self.medium = medium
        self.settings = settings

    def _seed_admin(self) -> User:
        return User(
            username=self.settings.seed_admin_username,
            password=self.settings.seed_admin_password,
            email=self.settings.seed_admin_email,
            fullname=self.settings.seed_admin_fullname,
            class_level=12,
            bio=self.settings.seed_admin_bio,
            pfp=ADMIN_PFP,
            joined_at=datetime.now(UTC),
            role=UserRole.ADMIN,
        )

    def load_users(self) -> list[User]:
        """Load all users, seeding the administrator on an empty medium."""
        raw = self.medium.get_item(USERS_KEY)
        if not raw:
            seed = [self._seed_admin()]
            self.save_users(seed)
            logger.info("Seeded administrator %r", seed[0].username)
            return seed
        try:
            return _users_adapter.validate_json(raw)
        except pydantic.ValidationError:
            logger.warning("Stored %r document is malformed - treating as empty", USERS_KEY)
            return []

    def save_users(self, users: list[User]) -> None:
        self.medium.set_item(USERS_KEY, _users_adapter.dump_json(users, by_alias=True).decode())

    def load_session(self) -> User | None:
        """Load the session snapshot, or None when logged out or unreadable."""
        raw = self.medium.get_item(SESSION_KEY)
        if not raw:
            return None
        try:
            return User.model_validate_json(raw)
        except pydantic.ValidationError:
            logger.warning("Stored %r document is malformed - treating as logged out", SESSION_KEY)
            return None

    def set_session(self, user: User | None) -> None:
        """Store a snapshot of user as the session, or clear it when None."""
        if user is None:
            self.medium.remove_item(SESSION_KEY)
        else:
            self.medium.set_item(SESSION_KEY, user.model_dump_json(by_alias=True))

    def load_posts(self) -> list[BlogPost]:
        raw = self.medium.get_item(POSTS_KEY)
        if not raw:
            return []
        try:
            return _posts_adapter.validate_json(raw)
        except pydantic.ValidationError:
            logger.warning("Stored %r document is malformed - treating as empty", POSTS_KEY)
            return []

    def save_posts(self, posts: list[BlogPost]) -> None:
        self.medium.set_item(POSTS_KEY, _posts_adapter.dump_json(posts, by_alias=True).decode())
