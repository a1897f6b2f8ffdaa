"""
Pytest configuration and fixtures.

Every test gets its own in-memory SQLite database; e-mail goes to a
recording transport instead of SMTP.
"""

import os
from concurrent.futures import Future
from datetime import datetime
from typing import Callable, List, Optional, Tuple

# Set testing mode before importing the application
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ESCALATION_SCHEDULER_MODE"] = "disabled"
os.environ["LOG_FORMAT"] = "console"
os.environ.pop("SMTP_HOST", None)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from grievance_tracker.models import Base, Complaint, User, UserRole
from grievance_tracker.schemas.complaint import ComplaintCreate
from grievance_tracker.services.complaint import ComplaintLifecycleService
from grievance_tracker.services.notification import NotificationDispatcher


class RecordingTransport:
    """E-mail transport that keeps messages in memory."""

    def __init__(self):
        self.sent: List[Tuple[str, str, str]] = []

    def send(self, to: str, subject: str, body: str) -> Optional[Future]:
        self.sent.append((to, subject, body))
        future: Future = Future()
        future.set_result(True)
        return future

    @property
    def subjects(self) -> List[str]:
        return [subject for _, subject, _ in self.sent]

    def shutdown(self, wait: bool = False) -> None:
        pass


def build_session_factory() -> sessionmaker:
    """Fresh in-memory database shared by every session of the factory."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest.fixture
def session_factory() -> sessionmaker:
    factory = build_session_factory()
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    yield session
    session.close()


# ============================================================================
# DOMAIN FIXTURES
# ============================================================================


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def dispatcher(db, transport) -> NotificationDispatcher:
    return NotificationDispatcher(db, email_transport=transport)


@pytest.fixture
def lifecycle(db, dispatcher) -> ComplaintLifecycleService:
    return ComplaintLifecycleService(db, dispatcher=dispatcher)


@pytest.fixture
def make_user(db) -> Callable[..., User]:
    counter = {"n": 0}

    def _make_user(role: UserRole = UserRole.USER, name: Optional[str] = None, email: Optional[str] = None) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            name=name or f"{role.value.title()} {n}",
            username=f"{role.value.lower()}{n}",
            email=email or f"{role.value.lower()}{n}@example.com",
            role=role,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def user(make_user) -> User:
    return make_user(UserRole.USER, name="Alice")


@pytest.fixture
def staff(make_user) -> User:
    return make_user(UserRole.STAFF, name="Sam")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN, name="Ada")


@pytest.fixture
def make_complaint(lifecycle, user) -> Callable[..., Complaint]:
    def _make_complaint(
        title: str = "Broken heater",
        priority: Optional[str] = "MEDIUM",
        creator: Optional[User] = None,
        created_at: Optional[datetime] = None,
        is_anonymous: bool = False,
    ) -> Complaint:
        data = ComplaintCreate(title=title, priority=priority, is_anonymous=is_anonymous)
        result = lifecycle.create_complaint(data, creator or user, now=created_at)
        assert result.is_success, result.message
        return result.data

    return _make_complaint
