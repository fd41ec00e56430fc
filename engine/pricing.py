"""
engine/pricing.py
-----------------
Active / Expired status for price points.

Business logic
--------------
    1. Points without a status default to "Active".
    2. Points are grouped by pricing context: currency, pricing rule, tier
       and quantity range (each seat range of a tiered price list keeps its
       own Active point).
    3. Within a group the point with the most recent valid_from is Active,
       every other point is Expired.
    4. An Expired point without valid_until ends the day before the Active
       point's valid_from.

Unparseable valid_from dates count as epoch zero (oldest). Ties keep input
order, so the first-listed of equally recent points stays Active.

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Sequence

import pandas as pd

from engine.models import PricePoint
from engine.validity import parse_date

_EPOCH = pd.Timestamp(0, tz="UTC")


def day_before(value: str | None) -> str | None:
    """ISO date (YYYY-MM-DD) one day before value; None when unparseable."""
    ts = parse_date(value)
    if ts is None:
        return None
    return (ts - pd.Timedelta(days=1)).strftime("%Y-%m-%d")


def _context(point: PricePoint) -> tuple:
    return (
        point.currency_code,
        point.pricing_rule,
        point.pricing_tier,
        point.min_quantity,
        point.max_quantity,
    )


def apply_default_statuses(points: Sequence[PricePoint]) -> list[PricePoint]:
    return [p if p.status else replace(p, status="Active") for p in points]


def calculate_price_point_statuses(points: Sequence[PricePoint]) -> list[PricePoint]:
    """New list with statuses recomputed; input order preserved."""
    if not points:
        return list(points or ())

    groups: dict[tuple, list[int]] = {}
    for i, point in enumerate(points):
        groups.setdefault(_context(point), []).append(i)

    updated: list[PricePoint] = list(points)
    for indices in groups.values():
        newest_first = sorted(
            indices,
            key=lambda i: parse_date(points[i].valid_from) or _EPOCH,
            reverse=True,
        )
        active = points[newest_first[0]]
        updated[newest_first[0]] = replace(active, status="Active")
        for i in newest_first[1:]:
            point = points[i]
            valid_until = point.valid_until or day_before(active.valid_from)
            updated[i] = replace(point, status="Expired", valid_until=valid_until)

    return updated


def process_price_point_statuses(points: Sequence[PricePoint]) -> list[PricePoint]:
    return calculate_price_point_statuses(apply_default_statuses(points))
