"""Persisted ledger of applied migrations.

Only the migration engine reads or writes this table.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Engine, String, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from gatestore.errors import StorageError
from gatestore.storage.engine import create_session_factory


class LedgerBase(DeclarativeBase):
    """Base class for ledger ORM models."""

    pass


class SchemaMigrationRow(LedgerBase):
    """One applied migration."""

    __tablename__ = "schema_migrations"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    applied_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class Ledger:
    """Ordered set of applied migration names, stored next to the data."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._sessions = create_session_factory(engine)
        self._ready = False

    def applied(self) -> list[str]:
        """Applied migration names in ascending order."""
        self._ensure_table()
        try:
            with self._sessions() as session:
                stmt = select(SchemaMigrationRow.name).order_by(SchemaMigrationRow.name)
                return list(session.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def append(self, name: str) -> None:
        self._ensure_table()
        try:
            with self._sessions() as session:
                session.add(SchemaMigrationRow(name=name, applied_at=datetime.now(timezone.utc)))
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def remove(self, name: str) -> None:
        self._ensure_table()
        try:
            with self._sessions() as session:
                row = session.get(SchemaMigrationRow, name)
                if row is not None:
                    session.delete(row)
                    session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc

    def _ensure_table(self) -> None:
        if self._ready:
            return
        try:
            LedgerBase.metadata.create_all(self._engine)
        except SQLAlchemyError as exc:
            raise StorageError(str(exc)) from exc
        self._ready = True
