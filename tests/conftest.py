from __future__ import annotations

import io
from typing import Iterator

import pytest

from app.auth import SessionManager
from app.database import DatabaseManager
from app.logger import StructuredLogger
from app.realtime import RealtimeBridge
from app.repositories.user_repository import UserRepository
from app.repositories.vaccination_type_repository import VaccinationTypeRepository
from app.services import ServiceContainer, create_services
from tests.fakes import FakeAsyncSupabase, FakeSupabase


@pytest.fixture()
def logger() -> StructuredLogger:
    # No file handler; records still propagate to caplog.
    return StructuredLogger(name="tests", stream=io.StringIO(), log_file="")


@pytest.fixture()
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def fake_realtime(fake_supabase: FakeSupabase) -> FakeAsyncSupabase:
    return fake_supabase.realtime_backend


@pytest.fixture()
def db(
    fake_supabase: FakeSupabase, fake_realtime: FakeAsyncSupabase, logger: StructuredLogger,
) -> Iterator[DatabaseManager]:
    realtime = RealtimeBridge(client_factory=fake_realtime.connect, logger=logger, timeout=5.0)
    manager = DatabaseManager(
        supabase_url="", supabase_key="", logger=logger, client=fake_supabase, realtime=realtime,
    )
    yield manager
    manager.close()


@pytest.fixture()
def session() -> SessionManager:
    return SessionManager()


@pytest.fixture()
def services(db: DatabaseManager, session: SessionManager, logger: StructuredLogger) -> ServiceContainer:
    return create_services(db=db, session=session, logger=logger)


@pytest.fixture()
def vaccination_repo(db: DatabaseManager, logger: StructuredLogger) -> VaccinationTypeRepository:
    return VaccinationTypeRepository(db=db, logger=logger)


@pytest.fixture()
def user_repo(db: DatabaseManager, logger: StructuredLogger) -> UserRepository:
    return UserRepository(db=db, logger=logger)
