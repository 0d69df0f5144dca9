"""
Wallet — stored-value balance with a bounded history.

    from settle import wallet as W

    match W.Wallet.load(store):
        case Ok(wallet):
            wallet.credit(Decimal("100"), "Money Added - UPI Payment")
"""

from settle.wallet._types import TransactionKind, Transaction
from settle.wallet._wallet import DEFAULT_BALANCE, DEFAULT_HISTORY_LIMIT, Wallet

__all__ = (
    "TransactionKind",
    "Transaction",
    "DEFAULT_BALANCE",
    "DEFAULT_HISTORY_LIMIT",
    "Wallet",
)
