"""
Settlement ledger — persisted records of paid attempts.

All records live under one persistence key as {order_id: record}.
Pending records are never pruned; terminal ones keep the most recent
`retain` entries.
"""

from __future__ import annotations

from kungfu import Result, Ok, Error

from settle._errors import CheckoutError, Errors
from settle.persistence import Keys, Persistence
from settle.settlement._types import SettlementRecord, SettlementState

DEFAULT_RETAIN = 50


class SettlementLedger:
    def __init__(self, store: Persistence, *, retain: int = DEFAULT_RETAIN) -> None:
        self._store = store
        self._retain = retain

    def _load(self) -> Result[dict[str, SettlementRecord], CheckoutError]:
        match self._store.get(Keys.PENDING_SETTLEMENTS):
            case Error(e):
                return Error(Errors.persistence_failed(f"Could not load settlements: {e.message}"))
            case Ok(raw):
                return Ok({
                    order_id: SettlementRecord.from_record(r)
                    for order_id, r in (raw or {}).items()
                })

    def _save(self, records: dict[str, SettlementRecord]) -> Result[None, CheckoutError]:
        pending = [r for r in records.values() if r.is_pending]
        terminal = sorted(
            (r for r in records.values() if not r.is_pending),
            key=lambda r: r.created_at,
            reverse=True,
        )[: self._retain]
        kept = {r.order_id: r.to_record() for r in (*pending, *terminal)}

        match self._store.set(Keys.PENDING_SETTLEMENTS, kept):
            case Error(e):
                return Error(Errors.persistence_failed(f"Could not save settlements: {e.message}"))
            case Ok(_):
                return Ok(None)

    # ───────────────────────────────────────────────────────────────────────────
    # Queries
    # ───────────────────────────────────────────────────────────────────────────

    def get(self, order_id: str) -> Result[SettlementRecord | None, CheckoutError]:
        match self._load():
            case Error(e):
                return Error(e)
            case Ok(records):
                return Ok(records.get(order_id))

    def pending(self) -> Result[list[SettlementRecord], CheckoutError]:
        """Pending records, oldest first."""
        match self._load():
            case Error(e):
                return Error(e)
            case Ok(records):
                found = [r for r in records.values() if r.is_pending]
                return Ok(sorted(found, key=lambda r: r.created_at))

    # ───────────────────────────────────────────────────────────────────────────
    # Transitions
    # ───────────────────────────────────────────────────────────────────────────

    def set_pending(self, record: SettlementRecord) -> Result[bool, CheckoutError]:
        """
        Record a paid attempt.

        Returns Ok(True) if written, Ok(False) if the order is already known.
        """
        match self._load():
            case Error(e):
                return Error(e.with_order(record.order_id))
            case Ok(records):
                pass

        if record.order_id in records:
            return Ok(False)
        records[record.order_id] = record.with_state(SettlementState.PENDING)

        match self._save(records):
            case Error(e):
                return Error(e.with_order(record.order_id))
            case Ok(_):
                return Ok(True)

    def set_committed(self, order_id: str) -> Result[None, CheckoutError]:
        return self._transition(order_id, SettlementState.COMMITTED, None)

    def set_failed(self, order_id: str, error: str) -> Result[None, CheckoutError]:
        return self._transition(order_id, SettlementState.FAILED, error)

    def _transition(
        self,
        order_id: str,
        state: SettlementState,
        error: str | None,
    ) -> Result[None, CheckoutError]:
        match self._load():
            case Error(e):
                return Error(e.with_order(order_id))
            case Ok(records):
                pass

        current = records.get(order_id)
        if current is None or not current.is_pending:
            return Ok(None)
        records[order_id] = current.with_state(state, error)

        match self._save(records):
            case Error(e):
                return Error(e.with_order(order_id))
            case Ok(_):
                return Ok(None)


__all__ = ("DEFAULT_RETAIN", "SettlementLedger")
