"""Application entry point wiring the store, services, router and guard."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any, TypeVar

import pydantic

from nerddle import __version__
from nerddle.config import Settings, get_settings
from nerddle.database import create_db_engine, create_session_factory
from nerddle.guard import ADMIN_ONLY, AUTHENTICATED, RouteGuard
from nerddle.router import HashLocation, Router
from nerddle.schemas.blog import BlogPost
from nerddle.schemas.user import User, UserCreate, UserUpdate
from nerddle.services.base import ValidationError
from nerddle.services.blog import BlogService
from nerddle.services.reputation import AuraTier, classify, is_invited_admin
from nerddle.services.session import SessionManager
from nerddle.services.store import KeyValueMedium, PersistentStore, SqlKeyValueMedium
from nerddle.services.users import UserService, can_edit

logger = logging.getLogger(__name__)

FormT = TypeVar("FormT", bound=pydantic.BaseModel)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging at the level from settings."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)


def _validate_form(schema: type[FormT], data: dict[str, Any]) -> FormT:
    """Validate submitted form data, reporting the first problem as a ValidationError."""
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as exc:
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        message = f"{location}: {error['msg']}" if location else error["msg"]
        raise ValidationError(message) from exc


class Page(StrEnum):
    """Pages the presentation layer knows how to render."""

    HOME = "home"
    LOGIN = "login"
    USERS = "users"
    BLOGS = "blogs"
    PROFILE = "profile"
    ADMIN = "admin"


@dataclass(frozen=True)
class View:
    """The page to render for the current path."""

    page: Page
    params: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ProfileView:
    """Derived data shown on a profile page."""

    user: User
    aura: int
    tier: AuraTier
    invited_admin: bool
    can_edit: bool
    can_edit_admin_fields: bool
    posts: list[BlogPost]


class NerddleApp:
    """Facade used by the presentation layer.

    Every call reads from or writes to the persistent store; objects handed
    out are copies and go stale after the next mutation.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        medium: KeyValueMedium | None = None,
        location: HashLocation | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if medium is None:
            engine = create_db_engine(self.settings.database_url, echo=self.settings.debug)
            medium = SqlKeyValueMedium(create_session_factory(engine))

        self.store = PersistentStore(medium, self.settings)
        self.sessions = SessionManager(self.store)
        self.users = UserService(self.store, self.sessions)
        self.blog = BlogService(self.store, self.settings)
        self.router = Router(location)
        self.guard = RouteGuard(self.router, self.sessions)
        self._register_routes()

        logger.info("Starting %s v%s", self.settings.app_name, __version__)
        for warning in self.settings.validate_runtime_config():
            logger.warning("  - %s", warning)

    def _register_routes(self) -> None:
        # Root must be exact or it would prefix-match every path
        self.router.register("/", Page.HOME, exact=True)
        self.router.register("/login", Page.LOGIN, exact=False)
        self.router.register("/users", Page.USERS, exact=False)
        self.router.register("/blogs", Page.BLOGS, exact=False)
        self.router.register(
            "/profile/{username}", Page.PROFILE, exact=True, requires=AUTHENTICATED
        )
        self.router.register("/admin", Page.ADMIN, exact=False, requires=ADMIN_ONLY)

    # Session

    def login(self, username: str, password: str) -> User:
        user = self.sessions.login(username, password)
        self.navigate("/")
        return user

    def logout(self) -> None:
        self.sessions.logout()
        self.navigate("/")

    def current_user(self) -> User | None:
        return self.sessions.current()

    # Users

    def list_users(self) -> list[User]:
        return self.users.list_users()

    def get_user(self, username: str) -> User | None:
        return self.users.get_user(username)

    def update_user(self, username: str, patch: UserUpdate | dict[str, Any]) -> User | None:
        if isinstance(patch, dict):
            patch = _validate_form(UserUpdate, patch)
        return self.users.update_user(username, patch, self.sessions.require())

    def add_user(self, record: UserCreate | dict[str, Any]) -> User:
        if isinstance(record, dict):
            record = _validate_form(UserCreate, record)
        return self.users.add_user(record, self.sessions.require())

    def delete_user(self, username: str) -> bool:
        return self.users.delete_user(username, self.sessions.require())

    def profile(self, username: str) -> ProfileView | None:
        """Profile data for username, or None if no such user exists."""
        user = self.users.get_user(username)
        if user is None:
            return None
        viewer = self.sessions.current()
        aura = self.blog.aura_for(username)
        return ProfileView(
            user=user,
            aura=aura,
            tier=classify(aura),
            invited_admin=is_invited_admin(aura),
            can_edit=can_edit(viewer, username),
            can_edit_admin_fields=viewer is not None and viewer.is_admin,
            posts=self.blog.posts_by(username),
        )

    # Blog

    def list_posts(self) -> list[BlogPost]:
        return self.blog.list_posts()

    def can_post(self, author: str, now: datetime | None = None) -> bool:
        return self.blog.can_post(author, now)

    def create_post(
        self, author: str | None, title: str, body: str, now: datetime | None = None
    ) -> BlogPost:
        return self.blog.create_post(author, title, body, now)

    def vote(self, post_id: str, voter: str | None, value: int) -> BlogPost | None:
        return self.blog.toggle_vote(post_id, voter, value)

    def aura(self, username: str) -> int:
        return self.blog.aura_for(username)

    # Navigation

    def navigate(self, path: str) -> None:
        self.router.navigate(path)

    def on_path_change(self, listener: Callable[[str], None]) -> Callable[[], None]:
        return self.router.subscribe(listener)

    def render(self) -> View | None:
        """Resolve the current path to a view.

        Returns None when nothing should render: either no route matches or a
        guard redirected elsewhere (the redirect is a navigation, so path
        listeners are told about it).
        """
        match = self.router.match()
        if match is None:
            return None
        if not self.guard.admit(match.route.requires):
            return None
        return View(page=Page(match.route.name), params=match.params)


def create_app(settings: Settings | None = None) -> NerddleApp:
    """Configure logging and build the application."""
    settings = settings or get_settings()
    configure_logging(settings)
    return NerddleApp(settings)
