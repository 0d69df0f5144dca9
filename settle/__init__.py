"""
settle — cart, wallet and payment settlement.

    from settle import cart as K         # Cart lines, write-through
    from settle import wallet as W       # Balance + bounded history
    from settle import gateway as P      # create_order / pay / verify
    from settle import checkout as C     # Orchestrator, pricing, validation
    from settle import settlement as S   # Pending-settlement ledger
    from settle import persistence as D  # Memory / SQLAlchemy stores
"""

from settle import cart
from settle import wallet
from settle import gateway
from settle import checkout
from settle import settlement
from settle import persistence
from settle._types import (
    Money,
    Record,
    money,
)
from settle._errors import (
    ErrorCategory,
    CheckoutErrorKind,
    CheckoutError,
    Errors,
)
from settle.config import Settings, configure_logging
from settle._session import Session

__version__ = "0.1.0"

__all__ = (
    "cart",
    "wallet",
    "gateway",
    "checkout",
    "settlement",
    "persistence",
    "Money",
    "Record",
    "money",
    "ErrorCategory",
    "CheckoutErrorKind",
    "CheckoutError",
    "Errors",
    "Settings",
    "configure_logging",
    "Session",
)
