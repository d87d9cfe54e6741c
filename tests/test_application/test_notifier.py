"""Tests for the APScheduler-backed notifier"""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from subtracker.application.notifier import APSchedulerNotifier, ExternalSchedulingFailure


@pytest.fixture
def scheduler():
    # Not started: jobs stay pending in the scheduler's job list
    return BackgroundScheduler(timezone=timezone.utc)


def _future():
    return datetime.now(timezone.utc) + timedelta(days=2)


def test_schedule_registers_job(scheduler):
    notifier = APSchedulerNotifier(deliver=MagicMock(), scheduler=scheduler)

    handle = notifier.schedule_at(_future(), "Netflix renewal coming up", "body", "sub-1")

    job = scheduler.get_job(handle)
    assert job is not None
    assert job.args == ({"title": "Netflix renewal coming up", "body": "body", "subscription_id": "sub-1"},)


def test_handles_are_unique(scheduler):
    notifier = APSchedulerNotifier(deliver=MagicMock(), scheduler=scheduler)
    a = notifier.schedule_at(_future(), "t", "b", "sub-1")
    b = notifier.schedule_at(_future(), "t", "b", "sub-1")
    assert a != b


def test_cancel_removes_job(scheduler):
    notifier = APSchedulerNotifier(deliver=MagicMock(), scheduler=scheduler)
    handle = notifier.schedule_at(_future(), "t", "b", "sub-1")

    notifier.cancel(handle)

    assert scheduler.get_job(handle) is None


def test_cancel_unknown_handle_is_silent(scheduler):
    notifier = APSchedulerNotifier(deliver=MagicMock(), scheduler=scheduler)
    notifier.cancel("does-not-exist")


def test_scheduler_error_wrapped():
    broken = MagicMock()
    broken.add_job.side_effect = RuntimeError("job store down")
    notifier = APSchedulerNotifier(deliver=MagicMock(), scheduler=broken)

    with pytest.raises(ExternalSchedulingFailure):
        notifier.schedule_at(_future(), "t", "b", "sub-1")


def test_fire_delivers_payload():
    deliver = MagicMock()
    notifier = APSchedulerNotifier(deliver=deliver, scheduler=MagicMock())
    payload = {"title": "t", "body": "b", "subscription_id": "sub-1"}

    notifier._fire(payload)

    deliver.assert_called_once_with(payload)


def test_fire_swallows_delivery_error(caplog):
    deliver = MagicMock(side_effect=RuntimeError("push service down"))
    notifier = APSchedulerNotifier(deliver=deliver, scheduler=MagicMock())

    notifier._fire({"title": "t", "body": "b", "subscription_id": "sub-1"})

    assert "Reminder delivery failed for subscription sub-1" in caplog.text


def test_start_and_shutdown(scheduler):
    notifier = APSchedulerNotifier(deliver=MagicMock(), scheduler=scheduler)
    notifier.start()
    assert scheduler.running
    notifier.shutdown()
    assert not scheduler.running
