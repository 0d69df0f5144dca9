"""
Settings — pricing, wallet and gateway configuration.

Fluent, immutable:

    settings = (
        Settings()
        .with_wallet(default_balance=500, history_limit=20)
        .with_gateway(success_rate=1.0, latency_scale=0)
    )

Or from environment (SETTLE_* variables):

    settings = Settings.from_env()
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from decimal import Decimal

from settle._types import Money, money


# ═══════════════════════════════════════════════════════════════════════════════
# Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Session configuration.

    Note: Immutable — each with_* method returns a new Settings.
    Defaults: INR, 5% tax, flat delivery
    fee of 50, top-ups between 10 and 10000 with a 1% (minimum 2) fee.
    """

    currency: str = "INR"

    tax_rate: Decimal = Decimal("0.05")
    delivery_fee: Money = Decimal("50")

    top_up_min: Money = Decimal("10")
    top_up_max: Money = Decimal("10000")
    processing_fee_rate: Decimal = Decimal("0.01")
    processing_fee_min: Money = Decimal("2")

    default_balance: Money = Decimal("1500")
    history_limit: int = 10

    gateway_success_rate: float = 0.9
    gateway_latency_scale: float = 1.0

    db_url: str = "sqlite:///settle.db"
    log_level: int = logging.INFO

    def with_currency(self, currency: str) -> Settings:
        return replace(self, currency=currency.upper())

    def with_pricing(
        self,
        *,
        tax_rate: Decimal | str | None = None,
        delivery_fee: Decimal | int | str | None = None,
    ) -> Settings:
        """
        Override checkout pricing.

        Example:
            .with_pricing(tax_rate="0.18", delivery_fee=0)
        """
        return replace(
            self,
            tax_rate=money(tax_rate) if tax_rate is not None else self.tax_rate,
            delivery_fee=money(delivery_fee) if delivery_fee is not None else self.delivery_fee,
        )

    def with_top_up(
        self,
        *,
        minimum: Decimal | int | str | None = None,
        maximum: Decimal | int | str | None = None,
        fee_rate: Decimal | str | None = None,
        fee_min: Decimal | int | str | None = None,
    ) -> Settings:
        return replace(
            self,
            top_up_min=money(minimum) if minimum is not None else self.top_up_min,
            top_up_max=money(maximum) if maximum is not None else self.top_up_max,
            processing_fee_rate=money(fee_rate) if fee_rate is not None else self.processing_fee_rate,
            processing_fee_min=money(fee_min) if fee_min is not None else self.processing_fee_min,
        )

    def with_wallet(
        self,
        *,
        default_balance: Decimal | int | str | None = None,
        history_limit: int | None = None,
    ) -> Settings:
        if history_limit is not None and history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        return replace(
            self,
            default_balance=(
                money(default_balance) if default_balance is not None else self.default_balance
            ),
            history_limit=history_limit if history_limit is not None else self.history_limit,
        )

    def with_gateway(
        self,
        *,
        success_rate: float | None = None,
        latency_scale: float | None = None,
    ) -> Settings:
        """
        Tune the simulated gateway.

        latency_scale=0 removes the artificial network delay.
        """
        if success_rate is not None and not 0.0 <= success_rate <= 1.0:
            raise ValueError("success_rate must be within [0, 1]")
        return replace(
            self,
            gateway_success_rate=(
                success_rate if success_rate is not None else self.gateway_success_rate
            ),
            gateway_latency_scale=(
                latency_scale if latency_scale is not None else self.gateway_latency_scale
            ),
        )

    def with_storage(self, db_url: str) -> Settings:
        return replace(self, db_url=db_url)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from SETTLE_* environment variables.

        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        settings = cls()

        if currency := env.get("SETTLE_CURRENCY"):
            settings = settings.with_currency(currency)
        if db_url := env.get("SETTLE_DB_URL"):
            settings = settings.with_storage(db_url)

        settings = settings.with_wallet(
            default_balance=env.get("SETTLE_DEFAULT_BALANCE") or None,
            history_limit=_int_or_none(env.get("SETTLE_HISTORY_LIMIT")),
        )
        settings = settings.with_gateway(
            success_rate=_float_or_none(env.get("SETTLE_GATEWAY_SUCCESS_RATE")),
            latency_scale=_float_or_none(env.get("SETTLE_GATEWAY_LATENCY_SCALE")),
        )

        if level := env.get("SETTLE_LOG_LEVEL"):
            resolved = logging.getLevelName(level.upper())
            if not isinstance(resolved, int):
                raise ValueError(f"Unknown log level: {level}")
            settings = replace(settings, log_level=resolved)

        return settings


def _int_or_none(raw: str | None) -> int | None:
    return int(raw) if raw else None


def _float_or_none(raw: str | None) -> float | None:
    return float(raw) if raw else None


# ═══════════════════════════════════════════════════════════════════════════════
# Logging
# ═══════════════════════════════════════════════════════════════════════════════


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for the CLI."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


__all__ = ("Settings", "configure_logging")
