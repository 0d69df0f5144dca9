"""
Persistence — durable key/value records surviving restarts.

    from settle import persistence as P

    store = P.SQLAlchemyStore.from_url("sqlite:///settle.db")
    store.set(P.Keys.USER_BALANCE, "1500")

    match store.get(P.Keys.USER_BALANCE):
        case Ok(value):
            ...
        case Error(e):
            print(e.message)
"""

from settle.persistence._store import (
    Keys,
    StoreError,
    Persistence,
    MemoryStore,
)
from settle.persistence._sqlalchemy import (
    RecordTable,
    SQLAlchemyStore,
)

__all__ = (
    "Keys",
    "StoreError",
    "Persistence",
    "MemoryStore",
    "RecordTable",
    "SQLAlchemyStore",
)
