from __future__ import annotations

import pytest

from app.auth import SessionManager
from app.models.enums import UserRole
from app.models.user import User


def _user(role: UserRole) -> User:
    return User(id="u1", email="a@example.com", role=role)


def test_admin_flag_is_derived_from_role() -> None:
    session = SessionManager()
    assert session.is_admin is False

    session.set_current_user(_user(UserRole.ADMIN))
    assert session.is_admin is True

    session.set_current_user(_user(UserRole.USER))
    assert session.is_admin is False


def test_get_current_user_requires_sign_in() -> None:
    with pytest.raises(RuntimeError):
        SessionManager().get_current_user()


def test_clear_keeps_last_error() -> None:
    session = SessionManager()
    session.set_current_user(_user(UserRole.ADMIN))
    session.set_session_token("token")
    session.set_error("boom")

    session.clear()

    snapshot = session.snapshot()
    assert snapshot.user is None
    assert snapshot.session_token is None
    assert snapshot.is_admin is False
    assert snapshot.is_authenticated is False
    assert snapshot.last_error == "boom"


def test_role_parses_from_row_strings() -> None:
    assert User(id="u1", email="a@example.com", role="admin").role is UserRole.ADMIN
