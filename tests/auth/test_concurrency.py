"""
Concurrent registrations for the same email.

Both requests pass the existence pre-check before either one inserts, so the
unique constraint on ``users.email`` has to decide the winner.
"""
import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from dabetai.auth.schemas import RegisterRequest, BasicRegisterRequest
from dabetai.auth.service import register_user, register_basic
from dabetai.core.audit_models import AuditLog
from dabetai.database import Base
from dabetai.exceptions import ConflictException, EmailAlreadyExistsException
from dabetai.users.models import User


@pytest.fixture
def session_factory(tmp_path):
    """Sessions on a file database, each with its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def run_concurrently(*coroutines):
    async def gather():
        return await asyncio.gather(*coroutines, return_exceptions=True)
    return asyncio.run(gather())


def test_exactly_one_concurrent_registration_succeeds(session_factory, hasher, tokens):
    first, second = session_factory(), session_factory()
    data = RegisterRequest(
        email="race@x.com", password="abcdef", first_name="A", last_name="B", second_last_name="C"
    )
    try:
        results = run_concurrently(
            register_user(first, hasher, tokens, data),
            register_user(second, hasher, tokens, data),
        )
    finally:
        first.close()
        second.close()

    failures = [result for result in results if isinstance(result, Exception)]
    successes = [result for result in results if not isinstance(result, Exception)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], EmailAlreadyExistsException)
    assert isinstance(failures[0], ConflictException)
    assert failures[0].status_code == 409

    check = session_factory()
    try:
        assert check.query(User).filter(User.email == "race@x.com").count() == 1
        actions = sorted(entry.action for entry in check.query(AuditLog))
        assert actions == ["REGISTRATION_FAILED_EMAIL_EXISTS", "REGISTRATION_SUCCESS"]
    finally:
        check.close()


def test_race_across_different_entry_points(session_factory, hasher, tokens):
    first, second = session_factory(), session_factory()
    fields = dict(email="race@x.com", password="abcdef", first_name="A", last_name="B", second_last_name="C")
    try:
        results = run_concurrently(
            register_user(first, hasher, tokens, RegisterRequest(**fields)),
            register_basic(second, hasher, tokens, BasicRegisterRequest(**fields)),
        )
    finally:
        first.close()
        second.close()

    assert sum(isinstance(result, EmailAlreadyExistsException) for result in results) == 1
    assert sum(not isinstance(result, Exception) for result in results) == 1
