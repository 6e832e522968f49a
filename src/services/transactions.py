"""Transactional unit of work helpers built on top of SQLAlchemy sessions."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Callable, Iterator

from sqlalchemy.exc import ResourceClosedError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class TransactionManager:
    """Coordinate transactional scopes with support for nesting.

    The outermost scope opens a session from ``session_factory`` and
    commits or rolls it back. Inner scopes reuse that session inside a
    SAVEPOINT. Each manager tracks its own scopes.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory
        self._active_session: ContextVar[Session | None] = ContextVar(
            f"transaction_session_{id(self):x}", default=None
        )
        self._depth: ContextVar[int] = ContextVar(
            f"transaction_depth_{id(self):x}", default=0
        )

    @contextmanager
    def transaction(self, *, name: str = "transaction") -> Iterator[Session]:
        parent = self._active_session.get()
        if parent is None:
            with self._root(name) as session:
                yield session
        else:
            with self._nested(parent, name) as session:
                yield session

    @contextmanager
    def _root(self, name: str) -> Iterator[Session]:
        session = self._session_factory()
        token = self._active_session.set(session)
        depth_token = self._depth.set(1)
        start = time.perf_counter()
        logger.debug("transaction.start name=%s depth=1", name)
        try:
            yield session
            session.commit()
            logger.debug(
                "transaction.commit name=%s depth=1 duration_ms=%.2f",
                name,
                _elapsed_ms(start),
            )
        except Exception:
            logger.exception(
                "transaction.rollback name=%s depth=1 duration_ms=%.2f",
                name,
                _elapsed_ms(start),
            )
            session.rollback()
            raise
        finally:
            session.close()
            self._active_session.reset(token)
            self._depth.reset(depth_token)

    @contextmanager
    def _nested(self, parent: Session, name: str) -> Iterator[Session]:
        depth = self._depth.get() + 1
        savepoint = parent.begin_nested()
        depth_token = self._depth.set(depth)
        start = time.perf_counter()
        logger.debug(
            "transaction.start name=%s depth=%s nested=True", name, depth
        )
        try:
            yield parent
            savepoint.commit()
            logger.debug(
                "transaction.commit name=%s depth=%s duration_ms=%.2f "
                "nested=True",
                name,
                depth,
                _elapsed_ms(start),
            )
        except Exception:
            logger.exception(
                "transaction.rollback name=%s depth=%s duration_ms=%.2f "
                "nested=True",
                name,
                depth,
                _elapsed_ms(start),
            )
            try:
                if savepoint.is_active:
                    savepoint.rollback()
            except ResourceClosedError:  # pragma: no cover
                pass
            raise
        finally:
            self._depth.reset(depth_token)


__all__ = ["TransactionManager"]
