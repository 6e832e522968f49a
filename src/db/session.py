"""SQLAlchemy engine and session management."""

from __future__ import annotations

import logging
import weakref
from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import (
    DeclarativeBase,
    Session,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool

from src.config import Config
from src.services.transactions import TransactionManager


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


logger = logging.getLogger(__name__)


class Database:
    """Database handle owned by the application startup routine.

    The engine is created lazily on first use and released by
    :meth:`dispose`. Nothing is shared between instances.
    """

    def __init__(self, config: Config) -> None:
        self.config = config
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._sessions: weakref.WeakSet[Session] = weakref.WeakSet()
        self._transactions = TransactionManager(self.session)

    def _engine_options(self) -> tuple[Any, dict[str, Any]]:
        config = self.config
        url = make_url(config.database_url)
        engine_kwargs: dict[str, Any] = {
            "echo": config.sqlalchemy_echo,
            "pool_pre_ping": True,
        }
        database_url: Any = config.database_url
        if url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                engine_kwargs["poolclass"] = StaticPool
        elif url.get_backend_name() == "postgresql":
            engine_kwargs.update(
                {
                    "pool_size": config.pool_size,
                    "max_overflow": config.max_overflow,
                    "pool_timeout": config.pool_timeout,
                    "pool_recycle": config.pool_recycle,
                }
            )
            connect_args: dict[str, Any] = {}
            if config.database_ssl_mode:
                connect_args["sslmode"] = config.database_ssl_mode
            for key, value in url.query.items():
                connect_args.setdefault(key, value)
            if connect_args:
                engine_kwargs["connect_args"] = connect_args
                database_url = url.set(query={})
        return database_url, engine_kwargs

    @property
    def engine(self) -> Engine:
        """Return the configured engine, connecting on first access."""

        if self._engine is None:
            url = make_url(self.config.database_url)
            safe_url = url.render_as_string(hide_password=True)
            database_url, engine_kwargs = self._engine_options()
            try:
                engine = create_engine(database_url, **engine_kwargs)
                with engine.connect() as connection:
                    # Establish a connection early to surface configuration issues.
                    if url.get_backend_name() == "postgresql":
                        connection.execute(text("SELECT 1"))
            except SQLAlchemyError:
                logger.exception(
                    "Failed to initialize database engine for %s", safe_url
                )
                raise
            logger.info("Connected to database %s", safe_url)
            self._engine = engine
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autoflush=False,
                expire_on_commit=False,
            )
        return self._session_factory

    def session(self) -> Session:
        """Create a new SQLAlchemy session."""

        session = self.session_factory()
        self._sessions.add(session)
        return session

    @contextmanager
    def transaction(self, *, name: str = "transaction") -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""

        with self._transactions.transaction(name=name) as session:
            yield session

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self) -> None:
        """Close this database's open sessions and release its connections."""

        for session in list(self._sessions):
            session.close()
        self._sessions.clear()
        if self._engine is not None:
            self._engine.dispose()
            logger.info("Database engine disposed")
        self._engine = None
        self._session_factory = None


__all__ = ["Base", "Database"]
