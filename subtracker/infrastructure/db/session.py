"""
Database session management (SQLAlchemy)

The engine and session factory are created explicitly by the application
factory (or by tests) and passed along; nothing here is module-level state.
"""
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for all ORM models
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite leaves FOREIGN KEY clauses unenforced unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


def create_db_engine(url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db(engine: Engine) -> None:
    """Create missing tables (PostgreSQL deployments use Alembic instead)."""
    # Import models so metadata is populated
    from subtracker.infrastructure.db import models  # noqa: F401

    Base.metadata.create_all(engine)


def session_scope(session_factory: sessionmaker):
    """
    Generator yielding a session and closing it afterwards.

    Usage:
        db_gen = session_scope(factory)
        db = next(db_gen)
    """
    db: Session = session_factory()
    try:
        yield db
    finally:
        db.close()


def check_db_connection(engine: Engine) -> None:
    """
    Health check - database reachable

    Raises:
        sqlalchemy.exc.OperationalError: if the database is unavailable
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
