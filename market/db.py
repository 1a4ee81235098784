"""Database engine, session factory and declarative base."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from market.config import get_settings

Base = declarative_base()


def _build_engine() -> Engine:
    settings = get_settings()
    url = settings.database_url_obj
    if url.get_backend_name() == "sqlite":
        # Sessions are used from the threadpool as well as the request thread
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_pre_ping=True,
        connect_args={"application_name": settings.app_name},
    )


class DatabaseManager:
    """Owns the engine and hands out sessions outside of request scope."""

    def __init__(self) -> None:
        self.engine = _build_engine()
        self.SessionLocal = sessionmaker(
            autocommit=False, autoflush=False, bind=self.engine
        )

    @contextmanager
    def db_session(self) -> Iterator[Session]:
        """Yield a session; roll back on error and always close."""
        db = self.SessionLocal()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


db_manager = DatabaseManager()
engine = db_manager.engine
SessionLocal = db_manager.SessionLocal


def get_db() -> Iterator[Session]:
    """FastAPI dependency that yields a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
