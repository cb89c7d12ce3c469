"""Session management for the logged-in user."""

import logging

from nerddle.schemas.user import User
from nerddle.services.base import AuthenticationError
from nerddle.services.store import PersistentStore

logger = logging.getLogger(__name__)


class SessionManager:
    """Tracks the currently authenticated identity.

    The session is a snapshot of a user record. Later edits to the stored
    user are not visible here until ``refresh`` is called.
    """

    def __init__(self, store: PersistentStore) -> None:
        self.store = store

    def login(self, username: str, password: str) -> User:
        """Authenticate with an exact, case-sensitive match on both fields.

        Raises:
            AuthenticationError: If no user matches. The message does not say
                which field was wrong.
        """
        for user in self.store.load_users():
            if user.username == username and user.password == password:
                self.store.set_session(user)
                logger.info("User %r logged in", username)
                return user.model_copy()

        logger.info("Rejected login attempt")
        raise AuthenticationError()

    def logout(self) -> None:
        self.store.set_session(None)
        logger.info("Session cleared")

    def current(self) -> User | None:
        return self.store.load_session()

    def require(self) -> User:
        """Return the session user or raise AuthenticationError."""
        user = self.current()
        if user is None:
            raise AuthenticationError("Please login first")
        return user

    def refresh(self, user: User) -> bool:
        """Replace the snapshot with user if it belongs to the same username."""
        current = self.current()
        if current is None or current.username != user.username:
            return False
        self.store.set_session(user)
        return True
