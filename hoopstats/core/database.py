"""
Database configuration and session management.
"""
import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from hoopstats.core.config import settings

DATABASE_URL = settings.DATABASE_URL


def _engine_kwargs() -> dict:
    """Engine options for the configured backend."""
    kwargs = {"echo": os.getenv("SQL_ECHO", "false").lower() == "true"}
    if settings.is_sqlite():
        # FastAPI runs sync endpoints in a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            poolclass=QueuePool,
            pool_size=10,
            max_overflow=20,
            pool_pre_ping=True,  # Verify connections before using
        )
    return kwargs


engine = create_engine(DATABASE_URL, **_engine_kwargs())

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage in FastAPI:
    ```python
    @router.get("/endpoint")
    def endpoint(db: Session = Depends(get_db)):
        ...
    ```
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create any missing tables."""
    from hoopstats.models import Base
    Base.metadata.create_all(bind=engine, checkfirst=True)
