"""Database dependencies for FastAPI endpoints."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from ledgerview.db.session import SessionLocal


def get_db_session() -> Generator[Session, None, None]:
    """Yield a read-only session for one request.

    Insight endpoints never write, so the session is always rolled back
    rather than committed.
    """

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
