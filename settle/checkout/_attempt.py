"""
Attempt — state machine of one checkout or top-up.

    IDLE → ORDER_CREATED → PAID → VERIFIED → COMMITTED
      ↘         ↘          │  ↘        ↘
       FAILED    FAILED    │   PENDING  PENDING
                           └→ VERIFICATION_FAILED

Terminal: COMMITTED, FAILED, VERIFICATION_FAILED, PENDING. No automatic
retries: a terminal attempt never advances again. PENDING means money moved
but the commit did not finish; the settlement ledger holds the record and
recover() completes it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto

from settle.settlement import SettlementPurpose

log = logging.getLogger(__name__)


class Stage(Enum):
    IDLE = auto()
    ORDER_CREATED = auto()
    PAID = auto()
    VERIFIED = auto()
    COMMITTED = auto()
    FAILED = auto()
    VERIFICATION_FAILED = auto()
    PENDING = auto()

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL


TERMINAL = frozenset({Stage.COMMITTED, Stage.FAILED, Stage.VERIFICATION_FAILED, Stage.PENDING})

TRANSITIONS: dict[Stage, frozenset[Stage]] = {
    Stage.IDLE: frozenset({Stage.ORDER_CREATED, Stage.FAILED}),
    Stage.ORDER_CREATED: frozenset({Stage.PAID, Stage.FAILED, Stage.VERIFICATION_FAILED}),
    # PAID → PENDING when verify() is unreachable
    Stage.PAID: frozenset({Stage.VERIFIED, Stage.VERIFICATION_FAILED, Stage.PENDING}),
    # VERIFIED → PENDING when the commit cannot be persisted
    Stage.VERIFIED: frozenset({Stage.COMMITTED, Stage.PENDING}),
    Stage.COMMITTED: frozenset(),
    Stage.FAILED: frozenset(),
    Stage.VERIFICATION_FAILED: frozenset(),
    Stage.PENDING: frozenset(),
}


class IllegalTransition(Exception):
    def __init__(self, current: Stage, target: Stage) -> None:
        super().__init__(f"Cannot move attempt from {current.name} to {target.name}")
        self.current = current
        self.target = target


@dataclass(slots=True)
class Attempt:
    purpose: SettlementPurpose
    stage: Stage = Stage.IDLE
    order_id: str | None = None
    transaction_id: str | None = None
    trail: list[Stage] = field(default_factory=lambda: [Stage.IDLE])

    def advance(self, target: Stage) -> None:
        if target not in TRANSITIONS[self.stage]:
            raise IllegalTransition(self.stage, target)
        log.debug("%s %s: %s -> %s", self.purpose.value, self.order_id, self.stage.name, target.name)
        self.stage = target
        self.trail.append(target)

    @property
    def is_terminal(self) -> bool:
        return self.stage.is_terminal

    def describe(self) -> str:
        return " -> ".join(stage.name for stage in self.trail)


__all__ = (
    "Stage",
    "TERMINAL",
    "TRANSITIONS",
    "IllegalTransition",
    "Attempt",
)
