"""SQLite engine and session management for the registry."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from admitflow.registry.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

MEMORY = ":memory:"

# Seconds a writer waits for the SQLite write lock before giving up
BUSY_TIMEOUT_SECONDS = 30

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA foreign_keys=ON",
)


def _apply_pragmas(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    for pragma in _PRAGMAS:
        cursor.execute(pragma)
    cursor.close()


def build_engine(db_path: str) -> Engine:
    """Create an engine for a registry database file or ``:memory:``.

    In-memory databases share one connection so every session (and the
    TestClient's worker thread) sees the same tables. File databases get a
    busy timeout so concurrent writers queue on the lock instead of failing.
    """
    if db_path == MEMORY:
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(
            f"sqlite:///{db_path}",
            connect_args={"timeout": BUSY_TIMEOUT_SECONDS},
        )
    event.listen(engine, "connect", _apply_pragmas)
    return engine


class Database:
    """Lazily created engine plus session factory for one registry database."""

    def __init__(self, db_path: str = "admitflow.db") -> None:
        self.db_path = db_path
        self._engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = build_engine(self.db_path)
        return self._engine

    def get_session(self) -> Session:
        """Open a new session; callers commit and close it."""
        if self._sessions is None:
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions()

    def create_tables(self) -> None:
        """Create any missing registry tables."""
        Base.metadata.create_all(self.engine)

    def journal_mode(self) -> str:
        """Return SQLite's journal mode, ``"wal"`` for file databases."""
        with self.engine.connect() as conn:
            return str(conn.execute(text("PRAGMA journal_mode")).scalar())

    def close(self) -> None:
        """Dispose of the engine; a later call reconnects."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessions = None
