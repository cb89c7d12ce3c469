"""Pytest fixtures and configuration."""

from datetime import UTC, datetime

import pytest

from nerddle.app import NerddleApp
from nerddle.config import Settings
from nerddle.database import create_db_engine, create_session_factory
from nerddle.router import HashLocation
from nerddle.schemas.user import User, UserRole
from nerddle.services.blog import BlogService
from nerddle.services.session import SessionManager
from nerddle.services.store import PersistentStore, SqlKeyValueMedium
from nerddle.services.users import UserService

ADMIN_USERNAME = "gyatt123"
ADMIN_PASSWORD = "gyatt123"


@pytest.fixture
def settings() -> Settings:
    """Settings with an in-memory database, ignoring any .env file."""
    return Settings(_env_file=None, database_url="sqlite://")


@pytest.fixture
def medium(settings: Settings) -> SqlKeyValueMedium:
    """Fresh in-memory key-value medium."""
    engine = create_db_engine(settings.database_url)
    return SqlKeyValueMedium(create_session_factory(engine))


@pytest.fixture
def store(medium: SqlKeyValueMedium, settings: Settings) -> PersistentStore:
    return PersistentStore(medium, settings)


@pytest.fixture
def sessions(store: PersistentStore) -> SessionManager:
    return SessionManager(store)


@pytest.fixture
def user_service(store: PersistentStore, sessions: SessionManager) -> UserService:
    return UserService(store, sessions)


@pytest.fixture
def blog(store: PersistentStore, settings: Settings) -> BlogService:
    return BlogService(store, settings)


@pytest.fixture
def app(settings: Settings, medium: SqlKeyValueMedium) -> NerddleApp:
    """Application facade over the in-memory medium."""
    return NerddleApp(settings, medium=medium, location=HashLocation())


def make_user(
    username: str = "bob",
    password: str = "hunter2",
    role: UserRole = UserRole.USER,
    joined_at: datetime | None = None,
    **fields,
) -> User:
    """Create a User record for tests."""
    return User(
        username=username,
        password=password,
        email=f"{username}@example.com",
        fullname=username.title(),
        class_level=fields.pop("class_level", 10),
        bio=fields.pop("bio", ""),
        pfp=fields.pop("pfp", ""),
        joined_at=joined_at or datetime(2025, 1, 1, 12, 0, tzinfo=UTC),
        role=role,
        **fields,
    )


@pytest.fixture
def bob(store: PersistentStore) -> User:
    """A regular user stored next to the seeded admin."""
    user = make_user()
    store.save_users([*store.load_users(), user])
    return user


@pytest.fixture
def admin(store: PersistentStore) -> User:
    """The seeded administrator."""
    return next(u for u in store.load_users() if u.username == ADMIN_USERNAME)
