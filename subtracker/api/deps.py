"""
FastAPI dependencies (DB session, reminder scheduler)
"""
from fastapi import Request
from sqlalchemy.orm import Session

from subtracker.application.reminders import ReminderScheduler
from subtracker.infrastructure.db.session import session_scope


def get_db(request: Request) -> Session:
    """
    Session bound to the application's engine, closed after the request

    Usage:
        @router.get("/")
        def list_items(db: Session = Depends(get_db)):
            ...
    """
    yield from session_scope(request.app.state.session_factory)


def get_reminders(request: Request) -> ReminderScheduler:
    return request.app.state.reminders
