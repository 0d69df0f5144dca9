"""
Wallet — stored-value balance and bounded transaction history.

Balance and history are persisted together in one atomic write before the
in-memory state changes, so they can never disagree after a restart.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from decimal import Decimal

from kungfu import Result, Ok, Error

from settle._errors import CheckoutError, Errors
from settle._types import Money, ZERO, money, money_from_record, money_to_record
from settle.persistence import Keys, Persistence
from settle.wallet._types import Transaction, TransactionKind

log = logging.getLogger(__name__)

DEFAULT_BALANCE = Decimal("1500")
DEFAULT_HISTORY_LIMIT = 10


class Wallet:
    """
    Balance >= 0 with most-recent-first history.

    Note: history keeps only the last `history_limit` transactions, so the
    balance is not recomputable from history alone once entries roll off.
    """

    def __init__(
        self,
        store: Persistence | None = None,
        *,
        balance: Money = DEFAULT_BALANCE,
        history: Sequence[Transaction] = (),
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        opening_balance: Money = DEFAULT_BALANCE,
    ) -> None:
        if balance < 0:
            raise ValueError("Wallet balance cannot be negative")
        self._store = store
        self._balance = money(balance)
        self._history_limit = history_limit
        self._opening_balance = money(opening_balance)
        self._history: tuple[Transaction, ...] = tuple(history)[:history_limit]

    @classmethod
    def load(
        cls,
        store: Persistence,
        *,
        default_balance: Money = DEFAULT_BALANCE,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Result[Wallet, CheckoutError]:
        """Rehydrate from persistence; absent state opens at default_balance."""
        match store.get(Keys.USER_BALANCE):
            case Error(e):
                return Error(Errors.persistence_failed(f"Could not load balance: {e.message}"))
            case Ok(raw_balance):
                balance = default_balance if raw_balance is None else money_from_record(raw_balance)

        match store.get(Keys.WALLET_TRANSACTIONS):
            case Error(e):
                return Error(Errors.persistence_failed(f"Could not load history: {e.message}"))
            case Ok(raw_history):
                history = [Transaction.from_record(r) for r in raw_history or ()]

        return Ok(cls(
            store,
            balance=balance,
            history=history,
            history_limit=history_limit,
            opening_balance=default_balance,
        ))

    # ───────────────────────────────────────────────────────────────────────────
    # Queries
    # ───────────────────────────────────────────────────────────────────────────

    @property
    def balance(self) -> Money:
        return self._balance

    @property
    def history(self) -> tuple[Transaction, ...]:
        return self._history

    @property
    def history_limit(self) -> int:
        return self._history_limit

    def can_afford(self, amount: Money) -> bool:
        return self._balance >= amount

    def find(
        self,
        *,
        order_id: str | None = None,
        gateway_transaction_id: str | None = None,
    ) -> Transaction | None:
        """First retained transaction matching every given key."""
        if order_id is None and gateway_transaction_id is None:
            return None
        for txn in self._history:
            if order_id is not None and txn.order_id != order_id:
                continue
            if gateway_transaction_id is not None and txn.gateway_transaction_id != gateway_transaction_id:
                continue
            return txn
        return None

    def __repr__(self) -> str:
        return f"Wallet(balance={self._balance}, history={len(self._history)})"

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    def credit(
        self,
        amount: Money,
        description: str,
        *,
        gateway_transaction_id: str | None = None,
        order_id: str | None = None,
    ) -> Result[Transaction, CheckoutError]:
        amount = money(amount)
        if amount <= ZERO:
            return Error(Errors.invalid_amount(amount))

        txn = Transaction(
            TransactionKind.CREDIT,
            amount,
            description,
            gateway_transaction_id=gateway_transaction_id,
            order_id=order_id,
        )
        return self._append(txn, self._balance + amount)

    def debit(
        self,
        amount: Money,
        description: str,
        *,
        order_id: str | None = None,
        gateway_transaction_id: str | None = None,
    ) -> Result[Transaction, CheckoutError]:
        amount = money(amount)
        if amount <= ZERO:
            return Error(Errors.invalid_amount(amount))
        if not self.can_afford(amount):
            return Error(Errors.insufficient_funds(self._balance, amount))

        txn = Transaction(
            TransactionKind.DEBIT,
            amount,
            description,
            gateway_transaction_id=gateway_transaction_id,
            order_id=order_id,
        )
        return self._append(txn, self._balance - amount)

    def reset(self, opening_balance: Money | None = None) -> Result[None, CheckoutError]:
        """Explicit reset: balance back to the opening value, history emptied."""
        balance = money(opening_balance) if opening_balance is not None else self._opening_balance
        if balance < 0:
            return Error(Errors.invalid_amount(balance))

        match self._write(balance, ()):
            case Error(e):
                return Error(e)
            case Ok(_):
                self._balance = balance
                self._history = ()
                log.info("wallet reset to %s", balance)
                return Ok(None)

    def _append(self, txn: Transaction, balance: Money) -> Result[Transaction, CheckoutError]:
        history = (txn, *self._history)[: self._history_limit]
        match self._write(balance, history):
            case Error(e):
                return Error(e)
            case Ok(_):
                self._balance = balance
                self._history = history
                return Ok(txn)

    def _write(self, balance: Money, history: Sequence[Transaction]) -> Result[None, CheckoutError]:
        if self._store is None:
            return Ok(None)
        match self._store.set_many({
            Keys.USER_BALANCE: money_to_record(balance),
            Keys.WALLET_TRANSACTIONS: [t.to_record() for t in history],
        }):
            case Error(e):
                log.error("wallet write failed: %s", e.message)
                return Error(Errors.persistence_failed(f"Could not save wallet: {e.message}"))
            case Ok(_):
                return Ok(None)


__all__ = ("DEFAULT_BALANCE", "DEFAULT_HISTORY_LIMIT", "Wallet")
