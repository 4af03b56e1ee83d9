"""Engine creation and statement execution for Gatestore storage.

Store is the only place that talks to SQLAlchemy on behalf of the
repositories and the migration engine. Driver failures never escape it
as SQLAlchemy exceptions; they are re-raised as StorageError.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import Engine, create_engine, event, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from gatestore.errors import StorageError
from gatestore.storage.statements import Statement

logger = logging.getLogger(__name__)

_SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=5000",
    "PRAGMA synchronous=NORMAL",
)


def _apply_sqlite_pragmas(dbapi_conn, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_conn.cursor()
    try:
        for pragma in _SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def create_store_engine(
    db_path: str = ":memory:",
    *,
    url: str | None = None,
) -> Engine:
    """Engine for a gateway store.

    ``url`` (any SQLAlchemy URL, as found in the configuration file) wins
    over ``db_path``, which names a SQLite file or ``":memory:"``. SQLite
    connections are switched to WAL with a busy timeout so the CLI and a
    running gateway can share one database file.
    """
    if url is None:
        url = "sqlite://" if db_path == ":memory:" else f"sqlite:///{db_path}"
    engine = create_engine(url)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _apply_sqlite_pragmas)
    logger.debug("Store engine for %s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """ORM sessions for the migration ledger.

    Ledger rows are read right after the commit that wrote them, so
    attributes are not expired on commit.
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


class Store:
    """Executes statement templates and opaque scripts against an engine.

    Each call runs in its own transaction. No retries: a failed call raises
    StorageError and leaves retry policy to the caller.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def execute(self, statement: Statement, row: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Run a statement that returns rows. Returns each row as a dict."""
        params = statement.bind(row or {})
        logger.debug("execute: %s %s", statement.query.strip(), params)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(statement.query), params)
                if not result.returns_rows:
                    return []
                return [dict(r) for r in result.mappings().all()]
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def execute_write(self, statement: Statement, row: Mapping[str, Any] | None = None) -> int:
        """Run a write statement. Returns the number of affected rows."""
        params = statement.bind(row or {})
        logger.debug("execute_write: %s %s", statement.query.strip(), params)
        try:
            with self.engine.begin() as conn:
                return conn.execute(text(statement.query), params).rowcount
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def execute_script(self, script: str) -> None:
        """Run an opaque, possibly multi-statement script.

        The script text is handed to the driver untouched; the store does not
        parse or split it.
        """
        logger.debug("execute_script: %d chars", len(script))
        try:
            if self.dialect == "sqlite":
                raw = self.engine.raw_connection()
                try:
                    raw.driver_connection.executescript(script)
                finally:
                    raw.close()
            else:
                with self.engine.begin() as conn:
                    conn.exec_driver_sql(script)
        except (SQLAlchemyError, self._driver_error()) as exc:
            raise StorageError(str(exc)) from exc

    def table_names(self) -> list[str]:
        try:
            return inspect(self.engine).get_table_names()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def close(self) -> None:
        self.engine.dispose()

    def _driver_error(self) -> type[Exception]:
        # Raw driver calls bypass SQLAlchemy's exception wrapping.
        return self.engine.dialect.loaded_dbapi.Error
