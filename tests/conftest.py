"""
Pytest fixtures for testing
"""
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.orm import Session

from subtracker.application.app_settings import seed_app_settings
from subtracker.application.categories import seed_default_categories
from subtracker.application.reminders import ReminderScheduler
from subtracker.application.notifier import ExternalSchedulingFailure
from subtracker.infrastructure.db.session import create_db_engine, create_session_factory, init_db


UTC = ZoneInfo("UTC")
TODAY = date(2025, 3, 10)
NOW = datetime(2025, 3, 10, 8, 0, tzinfo=UTC)


class FakeNotifier:
    """In-memory notifier: records scheduled and cancelled reminders."""

    def __init__(self):
        self.pending: dict[str, dict] = {}
        self.cancelled: list[str] = []
        self.calls = 0
        self.fail_calls: set[int] = set()  # 1-based schedule_at call numbers that fail
        self.fail_cancel: set[str] = set()

    def schedule_at(self, instant, title, body, correlation_id):
        self.calls += 1
        if self.calls in self.fail_calls:
            raise ExternalSchedulingFailure("notification permission denied")
        handle = f"h{self.calls}"
        self.pending[handle] = {
            "instant": instant, "title": title, "body": body, "subscription_id": correlation_id,
        }
        return handle

    def cancel(self, handle):
        if handle in self.fail_cancel:
            raise RuntimeError("scheduler unavailable")
        self.cancelled.append(handle)
        self.pending.pop(handle, None)


@pytest.fixture
def db_engine():
    """In-memory SQLite engine with the full schema."""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Session with default categories and settings seeded"""
    session = session_factory()
    seed_default_categories(session)
    seed_app_settings(session)
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def reminders(notifier):
    return ReminderScheduler(notifier, tz=UTC)
