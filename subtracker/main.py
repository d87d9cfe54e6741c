"""
FastAPI application factory
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import sessionmaker

from subtracker.config import get_settings
from subtracker.api.v1 import subscriptions, stats, categories, settings as settings_api, push
from subtracker.application.app_settings import seed_app_settings
from subtracker.application.categories import seed_default_categories
from subtracker.application.notifier import APSchedulerNotifier, Notifier
from subtracker.application.push_service import make_push_delivery
from subtracker.application.reminders import ReminderScheduler
from subtracker.application.subscriptions import ResyncRemindersUseCase
from subtracker.infrastructure.db.session import (
    create_db_engine, create_session_factory, init_db, check_db_connection,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: schema (SQLite only), seed data, scheduler, reminder resync. Shutdown: reverse."""
    state = app.state
    if state.engine is not None and str(state.engine.url).startswith("sqlite"):
        init_db(state.engine)

    db = state.session_factory()
    try:
        seed_default_categories(db)
        seed_app_settings(db)
        if hasattr(state.notifier, "start"):
            state.notifier.start()
        ResyncRemindersUseCase(db, state.reminders).execute()
    finally:
        db.close()

    yield

    if hasattr(state.notifier, "shutdown"):
        state.notifier.shutdown()
    if state.owns_engine:
        state.engine.dispose()
    logger.info("SubTracker stopped")


def create_app(
    session_factory: sessionmaker | None = None,
    notifier: Notifier | None = None,
) -> FastAPI:
    """
    Application factory

    Args:
        session_factory: use an existing session factory (tests); by default
            an engine is built from DATABASE_URL and owned by the app
        notifier: reminder scheduler backend; by default APScheduler with
            Web Push delivery
    """
    settings = get_settings()

    app = FastAPI(
        title="SubTracker",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )

    if session_factory is None:
        engine = create_db_engine(settings.get_sqlalchemy_url())
        session_factory = create_session_factory(engine)
        app.state.owns_engine = True
    else:
        engine = session_factory.kw.get("bind")
        app.state.owns_engine = False

    if notifier is None:
        notifier = APSchedulerNotifier(make_push_delivery(session_factory))

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.notifier = notifier
    app.state.reminders = ReminderScheduler(notifier)

    app.include_router(subscriptions.router)
    app.include_router(stats.router)
    app.include_router(categories.router)
    app.include_router(settings_api.router)
    app.include_router(push.router)

    # Health checks
    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (database reachable)"""
        check_db_connection(app.state.engine)
        return "ok"

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "subtracker.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=8000,
    )
