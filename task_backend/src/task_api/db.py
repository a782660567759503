"""SQLAlchemy engine and session management for the task store."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

logger = logging.getLogger(__name__)


def _is_sqlite_memory(database: Optional[str]) -> bool:
    return database in (None, "", ":memory:") or "mode=memory" in (database or "")


def _engine_options(url: str) -> Dict[str, Any]:
    """
    Extra create_engine() options for SQLite.

    FastAPI runs sync handlers in a thread pool, so connections must be shareable
    across threads. In-memory databases live and die with their connection, so
    they get a single static one.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}
    options: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if _is_sqlite_memory(parsed.database):
        options["poolclass"] = StaticPool
    return options


def _install_sqlite_connect_pragmas(engine: Engine) -> None:
    """Install SQLite connection pragmas for reliability under concurrent requests."""

    def on_connect(dbapi_conn: Any, _conn_record: Any) -> None:
        cur = dbapi_conn.cursor()
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute("PRAGMA busy_timeout=30000;")  # 30s
        cur.close()

    event.listen(engine, "connect", on_connect)


# PUBLIC_INTERFACE
class Database:
    """
    Owns the SQLAlchemy engine and hands out sessions.

    One instance is created per application and passed to it explicitly; request
    handlers obtain short-lived sessions through session().
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, future=True, **_engine_options(url))
        if self.engine.dialect.name == "sqlite":
            _install_sqlite_connect_pragmas(self.engine)
        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False
        )

    def create_all(self) -> None:
        """Create the 'tasks' and 'users' tables if they do not exist yet."""
        parsed = make_url(self.url)
        if parsed.get_backend_name() == "sqlite" and not _is_sqlite_memory(parsed.database):
            os.makedirs(os.path.dirname(parsed.database) or ".", exist_ok=True)
        Base.metadata.create_all(self.engine)
        logger.info("Database schema ready (%s)", parsed.render_as_string(hide_password=True))

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that is closed (and rolled back if uncommitted) on exit."""
        with self._session_factory() as s:
            yield s

    def dispose(self) -> None:
        """Dispose of the engine and its connection pool."""
        self.engine.dispose()
