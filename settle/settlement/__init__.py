"""
Settlement — re-verifiable record of every paid attempt.

Written as PENDING right after a successful pay(), before verify():

    ledger.set_pending(record)       # crash here → recover() re-verifies
    ledger.set_committed(order_id)   # or set_failed(order_id, reason)

A record is never paid again; recovery only calls verify().
"""

from settle.settlement._types import (
    SettlementState,
    SettlementPurpose,
    SettlementRecord,
)
from settle.settlement._ledger import DEFAULT_RETAIN, SettlementLedger

__all__ = (
    "SettlementState",
    "SettlementPurpose",
    "SettlementRecord",
    "DEFAULT_RETAIN",
    "SettlementLedger",
)
