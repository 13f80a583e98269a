"""Database engine, session factory and FastAPI dependency."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import get_settings

Base = declarative_base()


class DatabaseManager:
    """Owns the engine and session factory; both are built on first use."""

    def __init__(self, database_url: Optional[str] = None) -> None:
        self._database_url = database_url
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            settings = get_settings()
            url = self._database_url or settings.database_url
            if url is None:
                raise ValueError("Database URL is not set.")
            if url.startswith("sqlite"):
                self._engine = create_engine(
                    url, connect_args={"check_same_thread": False}
                )
            else:
                self._engine = create_engine(
                    url,
                    pool_size=settings.database_pool_size,
                    max_overflow=settings.database_max_overflow,
                    pool_pre_ping=True,
                )
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine, autocommit=False, autoflush=False
            )
        return self._session_factory

    def get_db(self) -> Generator[Session, None, None]:
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    @contextmanager
    def db_session(self) -> Iterator[Session]:
        """Session scope for work outside a request: commit on success, rollback on error."""
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """Database session dependency."""
    yield from db_manager.get_db()
