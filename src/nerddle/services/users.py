"""User listing, profile edits and the admin user management actions."""

import logging
from datetime import UTC, datetime

from nerddle.schemas.user import User, UserCreate, UserRole, UserUpdate
from nerddle.services.base import AuthorizationError, ValidationError
from nerddle.services.session import SessionManager
from nerddle.services.store import PersistentStore

logger = logging.getLogger(__name__)

# Fields anyone may change on a record they are allowed to edit
SELF_EDITABLE = ("fullname", "bio", "pfp")
# Fields only an admin may change
ADMIN_EDITABLE = ("email", "class_level", "role", "password")


def can_edit(actor: User | None, username: str) -> bool:
    return actor is not None and (actor.username == username or actor.is_admin)


def _require_admin(actor: User | None) -> None:
    if actor is None or actor.role != UserRole.ADMIN:
        raise AuthorizationError()


class UserService:
    """Read-modify-write operations on the stored user collection."""

    def __init__(self, store: PersistentStore, sessions: SessionManager) -> None:
        self.store = store
        self.sessions = sessions

    def list_users(self) -> list[User]:
        """All users, most recently joined first."""
        return sorted(self.store.load_users(), key=lambda u: u.joined_at, reverse=True)

    def get_user(self, username: str) -> User | None:
        return next((u for u in self.store.load_users() if u.username == username), None)

    def add_user(self, data: UserCreate, actor: User | None) -> User:
        """Register a new regular user on behalf of an admin.

        Raises:
            AuthorizationError: If actor is not an admin.
            ValidationError: If the username is already taken.
        """
        _require_admin(actor)

        users = self.store.load_users()
        if any(u.username == data.username for u in users):
            raise ValidationError("Username exists")

        user = User(
            username=data.username,
            password=data.password,
            email=str(data.email),
            fullname=data.fullname,
            class_level=data.class_level,
            bio=data.bio,
            pfp=data.pfp,
            joined_at=datetime.now(UTC),
            role=UserRole.USER,
        )
        self.store.save_users([*users, user])
        logger.info("Admin %r added user %r", actor.username, user.username)
        return user

    def update_user(self, username: str, patch: UserUpdate, actor: User | None) -> User | None:
        """Apply patch to a user record.

        Admin-only fields in the patch are ignored unless actor is an admin.
        When the edited user is the one logged in, the session snapshot is
        refreshed. Returns None if there is no such user.

        Raises:
            AuthorizationError: If actor is neither the user nor an admin.
        """
        if not can_edit(actor, username):
            raise AuthorizationError("You may only edit your own profile")

        users = self.store.load_users()
        index = next((i for i, u in enumerate(users) if u.username == username), None)
        if index is None:
            return None

        allowed = SELF_EDITABLE + ADMIN_EDITABLE if actor.is_admin else SELF_EDITABLE
        changes = {
            field: value
            for field, value in patch.model_dump(exclude_unset=True).items()
            if field in allowed and value is not None
        }
        ignored = set(patch.model_fields_set) - set(allowed)
        if ignored:
            logger.debug("Ignoring admin-only fields %s from %r", sorted(ignored), actor.username)

        # A blank picture keeps the current one
        if not changes.get("pfp", True):
            del changes["pfp"]

        updated = users[index].model_copy(update=changes)
        users[index] = User.model_validate(updated.model_dump())
        self.store.save_users(users)
        self.sessions.refresh(users[index])
        logger.info("User %r updated by %r", username, actor.username)
        return users[index]

    def delete_user(self, username: str, actor: User | None) -> bool:
        """Remove a user. Their posts are kept.

        Raises:
            AuthorizationError: If actor is not an admin.
        """
        _require_admin(actor)

        users = self.store.load_users()
        remaining = [u for u in users if u.username != username]
        if len(remaining) == len(users):
            return False
        self.store.save_users(remaining)
        logger.info("Admin %r deleted user %r", actor.username, username)
        return True
