"""
ui/utils/catalog.py
-------------------
Builds each view's record collection from the loaded products, and the
display DataFrame for each view's rows.
"""

from __future__ import annotations
from typing import Any, Iterable

import pandas as pd

from engine.formatting import format_currency, format_usd_equivalent, seat_range_display, seat_range_key
from engine.loader import flatten_price_points, flatten_skus
from engine.models import Product
from engine.orchestrator import ViewConfig
from engine.rates import BASE_CURRENCY, RateProvider, usd_equivalent_pct
from engine.validity import resolve_validity
from engine.views import field_pricing, price_groups, price_points, products, skus

FIELD_CHANNEL = "Field"

VIEW_NAMES = [
    products.VIEW_NAME,
    skus.VIEW_NAME,
    price_groups.VIEW_NAME,
    price_points.VIEW_NAME,
    field_pricing.VIEW_NAME,
]


def build_view_configs(provider: RateProvider) -> dict[str, ViewConfig]:
    return {
        products.VIEW_NAME:      products.build_config(),
        skus.VIEW_NAME:          skus.build_config(),
        price_groups.VIEW_NAME:  price_groups.build_config(),
        price_points.VIEW_NAME:  price_points.build_config(provider),
        field_pricing.VIEW_NAME: field_pricing.build_config(),
    }


def build_view_records(catalog: list[Product]) -> dict[str, list[Any]]:
    """
    One record collection per view. Built once per loaded catalog so every
    view sees the same immutable snapshot.
    """
    all_skus = flatten_skus(catalog)
    field_groups = price_groups.price_group_rows(s for s in all_skus if s.sales_channel == FIELD_CHANNEL)

    return {
        products.VIEW_NAME:      list(catalog),
        skus.VIEW_NAME:          all_skus,
        price_groups.VIEW_NAME:  price_groups.price_group_rows(all_skus),
        price_points.VIEW_NAME:  flatten_price_points(all_skus),
        field_pricing.VIEW_NAME: field_pricing.field_price_rows(r.price_group for r in field_groups),
    }


def _usd_reference(points: Iterable[Any]) -> dict[tuple, Any]:
    """Active USD point per (tier, min, max), the base for the USD-equivalent column."""
    reference = {}
    for p in points:
        if p.currency_code == BASE_CURRENCY and p.status != "Expired":
            reference.setdefault((p.pricing_tier, p.min_quantity, p.max_quantity), p)
    return reference


def to_frame(
    view_name: str,
    records:   list[Any],
    provider:  RateProvider,
    pool:      list[Any] | None = None,
) -> pd.DataFrame:
    """
    Display rows for one view's (already filtered and sorted) records.
    `pool` is the unfiltered collection; USD equivalents look their USD
    reference up there so filtering out USD does not blank the column.
    """
    if view_name == products.VIEW_NAME:
        rows = [{
            "ID":            p.id,
            "Name":          p.name,
            "LOB":           p.lob,
            "Folder":        p.folder,
            "Status":        p.status,
            "Billing model": p.billing_model,
            "SKUs":          len(p.skus),
        } for p in records]

    elif view_name == skus.VIEW_NAME:
        rows = [{
            "ID":            s.id,
            "Channel":       s.sales_channel,
            "Billing cycle": s.billing_cycle,
            "Status":        s.status,
            "Price group":   s.price_group.id,
            "Validity":      resolve_validity(s.price_group.valid_from, s.price_group.valid_until),
            "Experiment":    f"{s.experiment.key} ({s.experiment.treatment})" if s.experiment else "",
        } for s in records]

    elif view_name == price_groups.VIEW_NAME:
        rows = [{
            "ID":       r.id,
            "Name":     r.price_group.name or "",
            "Status":   r.price_group.status,
            "Validity": price_groups.row_validity(r),
            "Channels": ", ".join(dict.fromkeys(r.channels)),
            "SKUs":     len(r.skus),
            "Points":   len(r.price_group.price_points),
        } for r in records]

    elif view_name == price_points.VIEW_NAME:
        reference = _usd_reference(records if pool is None else pool)
        rows = []
        for p in records:
            usd = reference.get((p.pricing_tier, p.min_quantity, p.max_quantity))
            rows.append({
                "Price":          format_currency(p),
                "Tier":           p.pricing_tier or "",
                "Seats":          seat_range_display(seat_range_key(p)),
                "Rule":           p.pricing_rule,
                "Status":         p.status,
                "Valid from":     p.valid_from or "",
                "Valid until":    p.valid_until or "",
                "USD equivalent": format_usd_equivalent(usd_equivalent_pct(p, usd, provider)),
            })

    elif view_name == field_pricing.VIEW_NAME:
        rows = [{
            "Price":    format_currency(r.point),
            "Tier":     r.point.pricing_tier or field_pricing.STANDARD_TIER,
            "Seats":    seat_range_display(seat_range_key(r.point)),
            "Validity": r.validity,
            "Status":   r.point.status,
        } for r in records]

    else:
        raise ValueError(f"Unknown view: {view_name}")

    return pd.DataFrame(rows)
