"""Route guards: redirect instead of rendering when the session falls short."""

import logging
from dataclasses import dataclass

from nerddle.router import Router
from nerddle.schemas.user import User, UserRole
from nerddle.services.session import SessionManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requirement:
    """Condition for rendering a route: a session, optionally with a role."""

    role: UserRole | None = None


AUTHENTICATED = Requirement()
ADMIN_ONLY = Requirement(role=UserRole.ADMIN)


class RouteGuard:
    """Gates rendering of guarded routes on the current session."""

    def __init__(
        self,
        router: Router,
        sessions: SessionManager,
        login_path: str = "/login",
        home_path: str = "/",
    ) -> None:
        self.router = router
        self.sessions = sessions
        self.login_path = login_path
        self.home_path = home_path

    def redirect_for(self, requirement: Requirement, user: User | None) -> str | None:
        """Return where to send user, or None if the requirement is met."""
        if user is None:
            return self.login_path
        if requirement.role is not None and user.role != requirement.role:
            return self.home_path
        return None

    def check(self, requirement: Requirement) -> str | None:
        return self.redirect_for(requirement, self.sessions.current())

    def admit(self, requirement: Requirement | None) -> bool:
        """Return True if the guarded content may render.

        On failure the guard navigates to the redirect target and returns
        False; the caller must render nothing.
        """
        if requirement is None:
            return True
        target = self.check(requirement)
        if target is None:
            return True
        logger.info("Guard redirecting %s -> %s", self.router.current_path, target)
        self.router.navigate(target)
        return False
