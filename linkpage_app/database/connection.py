"""
Database engine and session management.

One engine per process, one session per request (see get_db).
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from linkpage_app.config import settings


def _engine_kwargs(database_url: str) -> dict:
    # SQLite connections are shared with the threadpool FastAPI runs sync routes in
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
    if dbapi_connection.__class__.__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def get_db():
    """
    Yield a database session for the duration of a request.

    Used as a FastAPI dependency; tests override it with their own session.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
