"""
engine/views/field_pricing.py
-----------------------------
Field pricing view: the price points of the Field channel's price groups,
browsed one validity period at a time.

Rows
----
field_price_rows() flattens price groups into FieldPriceRow records. A
point's own window narrows its group's window:

    start = later of (group start, point start)
    end   = earlier of (group end, point end)   absent = ongoing

Validity period facet
---------------------
Always single-select. On a fresh dataset it is seeded with the most recent
period (seed_validity + DefaultLatch); a user pick is never overwritten.
Switching to another period clears the currency and tier selections, since
those options belong to the previous period
(selections_after_validity_change).

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from engine.formatting import compare_seat_ranges, seat_range_bounds, seat_range_key
from engine.grouping import GroupKey
from engine.models import STANDARD_TIER, FieldPriceRow, PriceGroup
from engine.orchestrator import ViewConfig
from engine.predicates import FilterState, SelectFacet
from engine.rates import BASE_CURRENCY
from engine.sorting import by_key, by_validity, chain, first_when, priority_order
from engine.validity import (
    DefaultLatch,
    ValidityWindow,
    compare_validity,
    parse_date,
    resolve_validity,
    window_of,
)

logger = logging.getLogger(__name__)

VIEW_NAME = "Field pricing"

# Facet ids
VALIDITY = "validity"
CURRENCY = "currency"
TIER     = "tier"

# Sort orders
SORT_AMOUNT_DESC = "Amount (High to low)"
SORT_AMOUNT_ASC  = "Amount (Low to high)"
SORT_SEAT_RANGE  = "Seat range"

# Group-by keys
GROUP_TIER       = "Tier"
GROUP_SEAT_RANGE = "Seat range"
GROUP_CURRENCY   = "Currency"

# Order of the currency options; others follow alphabetically.
PREFERRED_CURRENCIES: tuple[str, ...] = ("USD", "CAD", "GBP", "EUR", "AUD", "HKD", "INR", "SGD", "CNY")


# ─────────────────────────────────────────────────────────────────────────────
# Rows
# ─────────────────────────────────────────────────────────────────────────────

def _later(a: str | None, b: str | None) -> str | None:
    ta, tb = parse_date(a), parse_date(b)
    if ta is None:
        return b if tb is not None else a
    if tb is None:
        return a
    return b if tb > ta else a


def _earlier(a: str | None, b: str | None) -> str | None:
    ta, tb = parse_date(a), parse_date(b)
    if ta is None:
        return b if tb is not None else None
    if tb is None:
        return a
    return b if tb < ta else a


def field_price_rows(price_groups: Iterable[PriceGroup] | None) -> list[FieldPriceRow]:
    rows = []
    for pg in price_groups or ():
        for point in pg.owned_points():
            start = _later(pg.valid_from, point.valid_from)
            end   = _earlier(pg.valid_until, point.valid_until)
            rows.append(FieldPriceRow(
                point       = point,
                valid_from  = start,
                valid_until = end,
                validity    = resolve_validity(start, end),
            ))
    logger.debug(f"Built {len(rows)} field price rows")
    return rows


def row_window(row: FieldPriceRow) -> ValidityWindow:
    return window_of(row.valid_from, row.valid_until)


# ─────────────────────────────────────────────────────────────────────────────
# Validity selection
# ─────────────────────────────────────────────────────────────────────────────

def selected_validity(state: FilterState) -> str | None:
    selected = state.selected(VALIDITY)
    return selected[0] if selected else None


def selections_after_validity_change(state: FilterState, previous: str | None) -> FilterState:
    """
    Clear currency and tier when the validity period moved away from `previous`.

    `previous` is None before the first period is chosen (initial seeding),
    which leaves the other selections alone.
    """
    current = selected_validity(state)
    if previous is None or current == previous:
        return state
    logger.debug(f"Validity changed {previous!r} -> {current!r}; clearing currency and tier")
    return state.with_selection(CURRENCY, []).with_selection(TIER, [])


def seed_validity(
    state: FilterState,
    latch: DefaultLatch,
    token: Any,
    rows: Iterable[FieldPriceRow] | None,
) -> FilterState:
    """Apply the most recent period once per fresh dataset unless the user picked one."""
    value = latch.seed(token, rows, lambda r: r.validity)
    if value is None:
        return state
    return state.with_selection(VALIDITY, value)


# ─────────────────────────────────────────────────────────────────────────────
# Config
# ─────────────────────────────────────────────────────────────────────────────

def build_config() -> ViewConfig:
    default = chain(
        by_validity(row_window),
        first_when(lambda r: r.point.currency_code == BASE_CURRENCY),
        by_key(lambda r: r.point.currency_code),
        by_key(lambda r: r.point.pricing_tier, casefold=True),
        by_key(lambda r: r.point.min_quantity),
        by_key(lambda r: r.point.key),
    )

    facets = (
        SelectFacet(VALIDITY, extract=lambda r: r.validity, option_order=compare_validity),
        SelectFacet(
            CURRENCY,
            extract      = lambda r: r.point.currency_code,
            multi        = True,
            option_order = priority_order(PREFERRED_CURRENCIES),
        ),
        SelectFacet(TIER, extract=lambda r: r.point.pricing_tier, multi=True, missing_label=STANDARD_TIER),
    )

    sort_orders = {
        SORT_AMOUNT_DESC: by_key(lambda r: r.point.amount, descending=True),
        SORT_AMOUNT_ASC:  by_key(lambda r: r.point.amount),
        SORT_SEAT_RANGE:  by_key(lambda r: seat_range_bounds(seat_range_key(r.point))),
    }

    group_keys = {
        GROUP_TIER:       GroupKey(extract=lambda r: r.point.pricing_tier, missing_label=STANDARD_TIER),
        GROUP_SEAT_RANGE: GroupKey(extract=lambda r: seat_range_key(r.point), order=compare_seat_ranges),
        GROUP_CURRENCY:   GroupKey(
            extract = lambda r: r.point.currency_code,
            order   = priority_order(PREFERRED_CURRENCIES),
        ),
    }

    return ViewConfig(
        name               = VIEW_NAME,
        facets             = facets,
        sort_orders        = sort_orders,
        default_comparator = default,
        group_keys         = group_keys,
    )
