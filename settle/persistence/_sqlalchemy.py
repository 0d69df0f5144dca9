"""
SQLAlchemy integration — durable key/value store.

Usage:

    store = SQLAlchemyStore.from_url("sqlite:///settle.db")
    store.set("user_balance", "1500")

    # Later, in a new process
    SQLAlchemyStore.from_url("sqlite:///settle.db").get("user_balance")  # Ok("1500")

One row per key. Values are JSON text, so any record the MemoryStore
accepts round-trips here unchanged.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, UTC
from typing import Any

from sqlalchemy import String, DateTime, Text, create_engine, delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from kungfu import Result, Ok, Error

from settle.persistence._store import StoreError


# ═══════════════════════════════════════════════════════════════════════════════
# Table
# ═══════════════════════════════════════════════════════════════════════════════


class Base(DeclarativeBase):
    pass


class RecordTable(Base):
    """Session records: cart snapshot, wallet balance/history, last order."""

    __tablename__ = "settle_records"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


# ═══════════════════════════════════════════════════════════════════════════════
# Store
# ═══════════════════════════════════════════════════════════════════════════════


class SQLAlchemyStore:
    """
    Persistence backed by any SQLAlchemy engine.

    Every call opens a short session and commits before returning,
    set_many() in a single transaction.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, url: str = "sqlite:///settle.db", *, echo: bool = False) -> SQLAlchemyStore:
        """Create engine + schema and return the store."""
        engine = create_engine(url, echo=echo)
        Base.metadata.create_all(engine)
        return cls(sessionmaker(engine, expire_on_commit=False))

    @property
    def engine(self) -> Engine:
        bind = self._session_factory.kw["bind"]
        return bind

    def get(self, key: str) -> Result[Any | None, StoreError]:
        try:
            with self._session_factory() as session:
                row = session.execute(
                    select(RecordTable).where(RecordTable.key == key)
                ).scalar_one_or_none()

                if row is None:
                    return Ok(None)
                return Ok(json.loads(row.value))

        except Exception as e:
            return Error(StoreError(f"Failed to get {key}: {e}", e))

    def set(self, key: str, value: Any) -> Result[None, StoreError]:
        return self.set_many({key: value})

    def set_many(self, values: Mapping[str, Any]) -> Result[None, StoreError]:
        try:
            encoded = {key: json.dumps(value) for key, value in values.items()}
        except (TypeError, ValueError) as e:
            return Error(StoreError(f"Value is not serializable: {e}", e))

        try:
            now = datetime.now(UTC).replace(tzinfo=None)
            with self._session_factory() as session:
                for key, raw in encoded.items():
                    row = session.get(RecordTable, key)
                    if row is None:
                        session.add(RecordTable(key=key, value=raw, updated_at=now))
                    else:
                        row.value = raw
                        row.updated_at = now
                session.commit()
            return Ok(None)

        except Exception as e:
            return Error(StoreError(f"Failed to write {sorted(values)}: {e}", e))

    def remove(self, key: str) -> Result[bool, StoreError]:
        try:
            with self._session_factory() as session:
                result = session.execute(delete(RecordTable).where(RecordTable.key == key))
                session.commit()
                return Ok(bool(getattr(result, "rowcount", 0)))

        except Exception as e:
            return Error(StoreError(f"Failed to remove {key}: {e}", e))

    def dispose(self) -> None:
        self.engine.dispose()


__all__ = (
    "Base",
    "RecordTable",
    "SQLAlchemyStore",
)
