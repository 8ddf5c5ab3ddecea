"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Every request gets a session
from get_db().
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from church_ledger.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    # SQLite's pools do not take sizing arguments
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
    }


# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles a database restart or a stale connection.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    **_engine_options(settings.DATABASE_URL),
)

# --- Session Factory ---
# autocommit=False: the router decides when a unit of work is
# committed, so a balance update and its entry land together or
# not at all.
# autoflush=False: SQL is only sent on an explicit flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The session is always closed when the request finishes.
    Closing a session with an uncommitted transaction rolls it
    back, so an unexpected error never leaves half a mutation.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
