"""Tests for user listing and management."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError as SchemaValidationError

from nerddle.app import NerddleApp
from nerddle.schemas.user import User, UserCreate, UserRole, UserUpdate
from nerddle.services.base import AuthorizationError, NerddleError, ValidationError
from nerddle.services.session import SessionManager
from nerddle.services.store import PersistentStore
from nerddle.services.users import UserService
from tests.conftest import make_user


def new_user_form(**overrides) -> UserCreate:
    data = {
        "username": "carol",
        "password": "pw",
        "fullname": "Carol",
        "email": "carol@example.com",
        "class_level": 11,
    }
    data.update(overrides)
    return UserCreate(**data)


class TestListing:
    """Tests for reading users."""

    def test_sorted_newest_first(self, user_service: UserService, store: PersistentStore) -> None:
        old = make_user("old", joined_at=datetime(2020, 1, 1, tzinfo=UTC))
        new = make_user("new", joined_at=datetime(2030, 1, 1, tzinfo=UTC))
        store.save_users([old, new])

        assert [u.username for u in user_service.list_users()] == ["new", "old"]

    def test_naive_join_dates_sort_with_aware_ones(
        self, user_service: UserService, store: PersistentStore
    ) -> None:
        naive = make_user("naive", joined_at=datetime(2031, 1, 1))
        aware = make_user("aware", joined_at=datetime(2030, 1, 1, tzinfo=UTC))
        store.save_users([aware, naive])

        assert naive.joined_at.tzinfo == UTC
        assert [u.username for u in user_service.list_users()] == ["naive", "aware"]

    def test_get_missing_user(self, user_service: UserService) -> None:
        assert user_service.get_user("ghost") is None


class TestAddUser:
    """Tests for the admin "Add User" action."""

    def test_admin_adds_user(self, user_service: UserService, admin: User) -> None:
        user = user_service.add_user(new_user_form(), admin)

        assert user.role == UserRole.USER
        assert user.class_level == 11
        assert user_service.get_user("carol") == user
        assert user_service.store.load_users()[-1].username == "carol"

    def test_duplicate_username_rejected(self, user_service: UserService, admin: User) -> None:
        with pytest.raises(ValidationError):
            user_service.add_user(new_user_form(username="gyatt123"), admin)

    def test_non_admin_rejected(self, user_service: UserService, bob: User) -> None:
        with pytest.raises(AuthorizationError):
            user_service.add_user(new_user_form(), bob)
        assert user_service.get_user("carol") is None

    @pytest.mark.parametrize(
        "overrides",
        [{"fullname": "  "}, {"username": " "}, {"email": "not-an-email"}, {"class_level": 7}],
    )
    def test_invalid_form_rejected(self, app: NerddleApp, overrides: dict) -> None:
        app.login("gyatt123", "gyatt123")
        form = {
            "username": "carol",
            "password": "pw",
            "fullname": "Carol",
            "email": "carol@example.com",
            "class_level": 11,
            **overrides,
        }

        with pytest.raises(ValidationError) as exc_info:
            app.add_user(form)

        assert isinstance(exc_info.value, NerddleError)
        assert isinstance(exc_info.value.__cause__, SchemaValidationError)
        assert app.get_user("carol") is None


class TestUpdateUser:
    """Tests for profile edits."""

    def test_self_edit(self, user_service: UserService, bob: User) -> None:
        updated = user_service.update_user(
            "bob", UserUpdate(fullname="Robert", bio="hi", pfp="http://x/p.png"), bob
        )

        assert updated.fullname == "Robert"
        assert updated.bio == "hi"
        assert updated.pfp == "http://x/p.png"
        assert user_service.get_user("bob") == updated

    def test_blank_pfp_keeps_previous(
        self, user_service: UserService, store: PersistentStore
    ) -> None:
        user = make_user("dave", pfp="http://x/old.png")
        store.save_users([*store.load_users(), user])

        updated = user_service.update_user("dave", UserUpdate(pfp=""), user)
        assert updated.pfp == "http://x/old.png"

    def test_non_admin_cannot_change_admin_fields(
        self, user_service: UserService, bob: User
    ) -> None:
        updated = user_service.update_user(
            "bob",
            UserUpdate(class_level=12, role=UserRole.ADMIN, password="new", bio="ok"),
            bob,
        )

        assert updated.class_level == 10
        assert updated.role == UserRole.USER
        assert updated.password == "hunter2"
        assert updated.bio == "ok"

    def test_admin_changes_everything(
        self, user_service: UserService, admin: User, bob: User
    ) -> None:
        updated = user_service.update_user(
            "bob",
            UserUpdate(class_level=12, role=UserRole.ADMIN, password="new", email="b@example.org"),
            admin,
        )

        assert updated.class_level == 12
        assert updated.role == UserRole.ADMIN
        assert updated.password == "new"
        assert updated.email == "b@example.org"
        assert updated.username == "bob"

    def test_cannot_edit_someone_else(
        self, user_service: UserService, store: PersistentStore, bob: User
    ) -> None:
        with pytest.raises(AuthorizationError):
            user_service.update_user("gyatt123", UserUpdate(bio="pwned"), bob)
        assert user_service.get_user("gyatt123").bio == "Founder & Admin"

    def test_missing_user(self, user_service: UserService, admin: User) -> None:
        assert user_service.update_user("ghost", UserUpdate(bio="x"), admin) is None

    def test_invalid_patch_rejected(self, app: NerddleApp) -> None:
        app.login("gyatt123", "gyatt123")

        with pytest.raises(ValidationError):
            app.update_user("gyatt123", {"class_level": 7})
        with pytest.raises(NerddleError):
            app.update_user("gyatt123", {"role": "superuser"})

        stored = app.get_user("gyatt123")
        assert stored.class_level == 12
        assert stored.role == UserRole.ADMIN

    def test_self_edit_refreshes_session(
        self, user_service: UserService, sessions: SessionManager, bob: User
    ) -> None:
        sessions.login("bob", "hunter2")
        user_service.update_user("bob", UserUpdate(fullname="Robert"), bob)

        assert sessions.current().fullname == "Robert"

    def test_editing_other_user_leaves_session(
        self, user_service: UserService, sessions: SessionManager, admin: User, bob: User
    ) -> None:
        sessions.login("gyatt123", "gyatt123")
        user_service.update_user("bob", UserUpdate(fullname="Robert"), admin)

        assert sessions.current().username == "gyatt123"


class TestDeleteUser:
    """Tests for the admin delete action."""

    def test_admin_deletes(self, user_service: UserService, admin: User, bob: User) -> None:
        assert user_service.delete_user("bob", admin) is True
        assert user_service.get_user("bob") is None

    def test_delete_missing(self, user_service: UserService, admin: User) -> None:
        assert user_service.delete_user("ghost", admin) is False

    def test_non_admin_rejected(self, user_service: UserService, bob: User) -> None:
        with pytest.raises(AuthorizationError):
            user_service.delete_user("bob", bob)
        assert user_service.get_user("bob") is not None
