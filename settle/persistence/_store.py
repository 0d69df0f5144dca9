"""
Persistence — key/value store protocol.

Keys are strings, values are JSON-compatible records.
All methods return Result for explicit error handling.
Absence is not an error: get() returns Ok(None).
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from kungfu import Result, Ok, Error


# ═══════════════════════════════════════════════════════════════════════════════
# Keys
# ═══════════════════════════════════════════════════════════════════════════════


class Keys:
    """Well-known record keys."""

    CART_ITEMS = "cart_items"
    USER_BALANCE = "user_balance"
    WALLET_TRANSACTIONS = "wallet_transactions"
    LAST_ORDER = "last_order"
    PENDING_SETTLEMENTS = "pending_settlements"
    GATEWAY_CAPTURES = "gateway_captures"


# ═══════════════════════════════════════════════════════════════════════════════
# Store Error
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StoreError:
    """Storage operation error."""

    message: str
    cause: Exception | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Persistence Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Persistence(Protocol):
    """
    Durable key/value store.

    Writes are synchronous and complete before returning (write-through,
    never batched), so the next session can rely on them.

    set_many() must be atomic: either every key is written or none.
    """

    def get(self, key: str) -> Result[Any | None, StoreError]:
        """Get value. Returns Ok(None) if not found."""
        ...

    def set(self, key: str, value: Any) -> Result[None, StoreError]:
        ...

    def set_many(self, values: Mapping[str, Any]) -> Result[None, StoreError]:
        ...

    def remove(self, key: str) -> Result[bool, StoreError]:
        """Remove key. Returns Ok(True) if it existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Store — For Testing
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryStore:
    """
    In-memory store.

    Note: Values are round-tripped through JSON on every write, so a record
    that would not survive a real backend fails here too, and callers never
    share mutable state with the store.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._records: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._records[key] = json.dumps(value)

    def get(self, key: str) -> Result[Any | None, StoreError]:
        raw = self._records.get(key)
        if raw is None:
            return Ok(None)
        return Ok(json.loads(raw))

    def set(self, key: str, value: Any) -> Result[None, StoreError]:
        return self.set_many({key: value})

    def set_many(self, values: Mapping[str, Any]) -> Result[None, StoreError]:
        try:
            encoded = {key: json.dumps(value) for key, value in values.items()}
        except (TypeError, ValueError) as e:
            return Error(StoreError(f"Value is not serializable: {e}", e))
        self._records.update(encoded)
        return Ok(None)

    def remove(self, key: str) -> Result[bool, StoreError]:
        return Ok(self._records.pop(key, None) is not None)

    def keys(self) -> list[str]:
        return list(self._records)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "Keys",
    "StoreError",
    "Persistence",
    "MemoryStore",
)
