from __future__ import annotations

import logging

import pytest

from app.auth import SessionManager
from app.errors import AuthError
from app.models.enums import UserRole
from app.services import ServiceContainer
from app.services.auth_service import AuthService
from tests.fakes import FakeSupabase


@pytest.fixture()
def auth(services: ServiceContainer) -> AuthService:
    return services["auth_service"]


def test_sign_up_then_sign_in_authenticates_non_admin(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    auth.sign_up("Nurse@Example.com ", "s3cret-pass", "Nurse Joy")

    # Sign-up alone does not authenticate.
    assert session.user is None
    assert session.session_token is None
    assert fake_supabase.auth.current_session is None

    profile = fake_supabase.tables["users"][0]
    assert profile["email"] == "nurse@example.com"
    assert profile["display_name"] == "Nurse Joy"
    assert profile["role"] == "user"

    user = auth.sign_in("nurse@example.com", "s3cret-pass")

    assert user is not None
    assert session.is_authenticated
    assert session.user == user
    assert user.role is UserRole.USER
    assert session.is_admin is False
    assert session.is_loading is False
    assert session.last_error is None


def test_sign_up_closes_session_opened_by_backend(
    auth: AuthService, fake_supabase: FakeSupabase,
) -> None:
    auth.sign_up("nurse@example.com", "pw", "Nurse Joy")

    assert fake_supabase.auth.sign_out_calls == 1
    assert fake_supabase.auth.current_session is None


def test_sign_up_without_backend_session_does_not_sign_out(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.auth.open_session_on_sign_up = False

    auth.sign_up("nurse@example.com", "pw", "")

    assert fake_supabase.auth.sign_out_calls == 0
    assert session.user is None
    assert session.session_token is None
    assert session.last_error is None
    profile = fake_supabase.tables["users"][0]
    assert profile["email"] == "nurse@example.com"
    assert profile["display_name"] is None


def test_session_is_loading_while_backend_calls_run(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    seen: list[tuple[str, bool]] = []
    fake_supabase.auth.on_call = lambda name: seen.append((name, session.is_loading))

    auth.sign_up("nurse@example.com", "pw", "Nurse Joy")
    auth.sign_in("nurse@example.com", "pw")
    auth.fetch_current_user()
    auth.sign_out()

    assert [name for name, _ in seen] == [
        "sign_up", "sign_out",
        "sign_in_with_password", "get_session",
        "get_session",
        "sign_out",
    ]
    assert all(loading for _, loading in seen)
    assert session.is_loading is False


def test_sign_up_duplicate_email_records_backend_message(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.add_profile("taken@example.com", "pw")

    with pytest.raises(AuthError) as excinfo:
        auth.sign_up("taken@example.com", "pw2", "Someone")

    assert excinfo.value.message == "User already registered"
    assert session.last_error == "User already registered"
    assert session.is_loading is False


def test_sign_up_requires_email_and_password(auth: AuthService, session: SessionManager) -> None:
    with pytest.raises(AuthError):
        auth.sign_up("", "pw", "Name")
    with pytest.raises(AuthError):
        auth.sign_up("a@example.com", "", "Name")
    assert session.last_error == "Email and password are required."
    assert session.is_loading is False


def test_sign_up_profile_failure_leaves_orphaned_identity(
    auth: AuthService,
    session: SessionManager,
    fake_supabase: FakeSupabase,
    caplog: pytest.LogCaptureFixture,
) -> None:
    fake_supabase.fail_table("users", "new row violates row-level security policy")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(AuthError) as excinfo:
            auth.sign_up("orphan@example.com", "pw", "Orphan")

    assert excinfo.value.message == "new row violates row-level security policy"
    assert session.last_error == excinfo.value.message
    # Identity exists, profile does not: the gap is not compensated.
    assert "orphan@example.com" in fake_supabase.auth.identities
    assert fake_supabase.tables["users"] == []
    assert any(
        getattr(record, "event", None) == "SIGN_UP_ORPHANED_IDENTITY"
        for record in caplog.records
    )


def test_sign_in_invalid_credentials_surfaces_backend_message(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.add_profile("admin@example.com", "right")

    with pytest.raises(AuthError, match="Invalid login credentials"):
        auth.sign_in("admin@example.com", "wrong")

    assert session.last_error == "Invalid login credentials"
    assert session.user is None
    assert session.is_loading is False


def test_sign_in_as_admin_sets_admin_flag(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    admin_id = fake_supabase.add_profile("admin@example.com", "pw", role="admin")

    user = auth.sign_in("admin@example.com", "pw")

    assert user is not None and user.id == admin_id
    assert session.is_admin is True
    assert session.snapshot().is_admin is True


def test_sign_out_resets_state(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.add_profile("admin@example.com", "pw", role="admin")
    auth.sign_in("admin@example.com", "pw")
    assert session.is_admin

    auth.sign_out()

    assert session.user is None
    assert session.session_token is None
    assert session.is_admin is False
    assert fake_supabase.auth.current_session is None


def test_sign_out_failure_keeps_local_state(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.add_profile("user@example.com", "pw")
    user = auth.sign_in("user@example.com", "pw")
    token = session.session_token
    fake_supabase.auth.sign_out_error = "network unreachable"

    with pytest.raises(AuthError, match="network unreachable"):
        auth.sign_out()

    assert session.user == user
    assert session.session_token == token
    assert session.last_error == "network unreachable"
    assert session.is_loading is False


def test_fetch_current_user_without_session_is_anonymous(
    auth: AuthService, session: SessionManager,
) -> None:
    assert auth.fetch_current_user() is None
    assert session.user is None
    assert session.is_admin is False
    assert session.is_loading is False


def test_fetch_current_user_restores_existing_session(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.add_profile("admin@example.com", "pw", role="admin")
    fake_supabase.auth.sign_in_with_password({"email": "admin@example.com", "password": "pw"})

    user = auth.fetch_current_user()

    assert user is not None
    assert session.is_admin
    assert session.session_token == fake_supabase.auth.current_session.access_token


def test_fetch_current_user_missing_profile_is_not_an_error(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.auth.register_identity("ghost@example.com", "pw")
    fake_supabase.auth.sign_in_with_password({"email": "ghost@example.com", "password": "pw"})

    assert auth.fetch_current_user() is None
    assert session.user is None
    assert session.is_admin is False
    assert session.last_error is None


def test_fetch_current_user_swallows_backend_errors(
    auth: AuthService, session: SessionManager, fake_supabase: FakeSupabase,
) -> None:
    fake_supabase.add_profile("admin@example.com", "pw", role="admin")
    auth.sign_in("admin@example.com", "pw")
    fake_supabase.fail_table("users", "connection reset", code="08006")

    assert auth.fetch_current_user() is None
    assert session.user is None
    assert session.is_admin is False

    fake_supabase.auth.get_session_error = "auth server down"
    assert auth.fetch_current_user() is None


def test_clear_error(auth: AuthService, session: SessionManager) -> None:
    with pytest.raises(AuthError):
        auth.sign_in("", "")
    assert session.last_error is not None

    auth.clear_error()

    assert session.last_error is None
