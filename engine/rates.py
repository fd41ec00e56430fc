"""
engine/rates.py
---------------
Pluggable currency-rate lookup for the USD-equivalent ranking mode.

A rate is "units of the currency per 1 USD" (1 USD = 0.92 EUR → EUR: 0.92).
A price point's own exchange_rate always wins over the provider.

The PLACEHOLDER_RATES below are approximate and have no authoritative
source. They keep the ranking usable offline; a real deployment passes its
own RateProvider (or overrides via the FX_RATES setting).

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol

from engine.models import PricePoint

BASE_CURRENCY = "USD"

PLACEHOLDER_RATES: dict[str, float] = {
    "EUR": 0.92,
    "GBP": 0.79,
    "CAD": 1.36,
    "AUD": 1.53,
    "JPY": 149.50,
    "CHF": 0.91,
    "CNY": 7.24,
    "HKD": 7.82,
    "INR": 83.28,
    "SGD": 1.35,
}


class RateProvider(Protocol):
    def rate(self, currency_code: str) -> float | None:
        """Units of currency_code per 1 USD, or None when unknown."""
        ...


@dataclass(frozen=True)
class StaticRateProvider:
    rates: Mapping[str, float] = field(default_factory=lambda: dict(PLACEHOLDER_RATES))

    def rate(self, currency_code: str) -> float | None:
        code = (currency_code or "").upper()
        if code == BASE_CURRENCY:
            return 1.0
        value = self.rates.get(code)
        return value if value and value > 0 else None

    def with_overrides(self, overrides: Mapping[str, float]) -> "StaticRateProvider":
        return StaticRateProvider(rates={**self.rates, **{k.upper(): v for k, v in overrides.items()}})


def to_usd(point: PricePoint, provider: RateProvider) -> float | None:
    """USD amount of a price point, or None when no rate is available."""
    if point.currency_code == BASE_CURRENCY:
        return float(point.amount)
    rate = point.exchange_rate if point.exchange_rate else provider.rate(point.currency_code)
    if not rate:
        return None
    return float(point.amount) / rate


def usd_equivalent_pct(
    point: PricePoint,
    usd_point: PricePoint | None,
    provider: RateProvider,
) -> float | None:
    """Price point value as a percentage of the matching USD price."""
    if point.currency_code == BASE_CURRENCY:
        return 100.0
    if usd_point is None or usd_point.currency_code != BASE_CURRENCY or not usd_point.amount:
        return None
    usd_amount = to_usd(point, provider)
    if usd_amount is None:
        return None
    return usd_amount / float(usd_point.amount) * 100
