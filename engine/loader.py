"""
engine/loader.py
----------------
Catalog loader and cache.

Reads a JSON catalog (camelCase keys) into the read-only model dataclasses:

    {"products": [
        {"id", "name", "lob", "folder", "status", "billingModel", "description",
         "skus": [
            {"id", "status", "salesChannel", "billingCycle", "name",
             "lix": {"key", "treatment"},
             "priceGroup": {"id", "name", "status", "validFrom", "validUntil",
                            "lix": {...},
                            "pricePoints": [{"id", "currencyCode", "amount", ...}]}}]}]}

A bare top-level list of products is accepted too. Price point statuses are
computed on load (engine/pricing.py).

The cache is an explicit object passed by reference. Whoever owns it may
register an on_invalidate hook (e.g. to clear a UI-level cache as well).

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Callable, Iterable

from engine.models import Experiment, PriceGroup, PricePoint, Product, Sku
from engine.pricing import process_price_point_statuses

logger = logging.getLogger(__name__)

# Short status codes used by some exports.
_POINT_STATUS_CODES = {"A": "Active", "E": "Expired"}


class CatalogLoadError(ValueError):
    """A catalog record is missing a required field or has a malformed value."""


# ─────────────────────────────────────────────────────────────────────────────
# Cache
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class CatalogCache:
    on_invalidate: Callable[[str | None], None] | None = None
    _products:     dict[str, Product] = field(default_factory=dict)

    def get(self, product_id: str) -> Product | None:
        return self._products.get(product_id)

    def put(self, product: Product) -> None:
        self._products[product.id] = product

    def products(self) -> list[Product]:
        return list(self._products.values())

    def __len__(self) -> int:
        return len(self._products)

    def invalidate(self, product_id: str | None = None) -> None:
        """Drop one product, or everything when product_id is None."""
        if product_id is None:
            self._products.clear()
        else:
            self._products.pop(product_id, None)
        logger.debug(f"Catalog cache invalidated ({product_id or 'all'})")
        if self.on_invalidate is not None:
            self.on_invalidate(product_id)


# ─────────────────────────────────────────────────────────────────────────────
# Parsing
# ─────────────────────────────────────────────────────────────────────────────

def _expect_object(raw: Any, kind: str) -> dict:
    if not isinstance(raw, dict):
        raise CatalogLoadError(f"{kind} entry must be an object, got {type(raw).__name__}")
    return raw


def _required(raw: dict, key: str, context: str) -> Any:
    value = raw.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise CatalogLoadError(f"{context}: missing required field {key!r}")
    return value


def _optional_int(value: Any, context: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise CatalogLoadError(f"{context}: expected an integer, got {value!r}") from exc


def _experiment(raw: Any) -> Experiment | None:
    if not isinstance(raw, dict) or not raw.get("key"):
        return None
    return Experiment(key=str(raw["key"]), treatment=str(raw.get("treatment") or ""))


def parse_price_point(raw: Any) -> PricePoint:
    raw = _expect_object(raw, "price point")
    context = f"price point {raw.get('id') or '?'}"
    raw_amount = _required(raw, "amount", context)
    try:
        amount = float(raw_amount)
        rate   = float(raw["exchangeRate"]) if raw.get("exchangeRate") else None
    except (TypeError, ValueError) as exc:
        raise CatalogLoadError(f"{context}: amount or exchange rate is not a number") from exc

    status = raw.get("status")
    return PricePoint(
        id            = raw.get("id"),
        currency_code = str(_required(raw, "currencyCode", context)).upper(),
        amount        = amount,
        pricing_rule  = raw.get("pricingRule") or "NONE",
        pricing_tier  = raw.get("pricingTier") or None,
        min_quantity  = _optional_int(raw.get("minQuantity"), context),
        max_quantity  = _optional_int(raw.get("maxQuantity"), context),
        valid_from    = raw.get("validFrom"),
        valid_until   = raw.get("validUntil"),
        status        = _POINT_STATUS_CODES.get(status, status) or None,
        exchange_rate = rate,
        price_type    = raw.get("priceType"),
    )


def parse_price_group(raw: Any) -> PriceGroup:
    raw = _expect_object(raw, "price group")
    context = f"price group {raw.get('id') or '?'}"
    group_id = str(_required(raw, "id", context))
    points = [parse_price_point(p) for p in raw.get("pricePoints") or ()]
    group = PriceGroup(
        id           = group_id,
        name         = raw.get("name"),
        status       = raw.get("status") or "Active",
        valid_from   = raw.get("validFrom"),
        valid_until  = raw.get("validUntil"),
        price_points = tuple(process_price_point_statuses(points)),
        experiment   = _experiment(raw.get("lix")),
    )
    return replace(group, price_points=group.owned_points())


def parse_sku(raw: Any) -> Sku:
    raw = _expect_object(raw, "SKU")
    context = f"SKU {raw.get('id') or '?'}"
    return Sku(
        id            = str(_required(raw, "id", context)),
        status        = raw.get("status") or "Active",
        sales_channel = str(_required(raw, "salesChannel", context)),
        billing_cycle = str(_required(raw, "billingCycle", context)),
        price_group   = parse_price_group(_required(raw, "priceGroup", context)),
        experiment    = _experiment(raw.get("lix")),
        name          = raw.get("name"),
    )


def parse_product(raw: Any) -> Product:
    """One catalog product; raises CatalogLoadError on malformed input."""
    raw = _expect_object(raw, "product")
    context = f"product {raw.get('id') or '?'}"
    return Product(
        id            = str(_required(raw, "id", context)),
        name          = str(_required(raw, "name", context)),
        lob           = raw.get("lob") or "",
        folder        = raw.get("folder") or "",
        status        = raw.get("status") or "Active",
        billing_model = raw.get("billingModel") or "",
        skus          = tuple(parse_sku(s) for s in raw.get("skus") or ()),
        description   = raw.get("description"),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Loading
# ─────────────────────────────────────────────────────────────────────────────

def parse_catalog(payload: Any) -> list[Product]:
    """Products from a decoded catalog payload; malformed products are skipped."""
    entries = payload.get("products", []) if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        logger.warning("Catalog payload has no product list; treating it as empty")
        return []

    products = []
    for entry in entries:
        try:
            products.append(parse_product(entry))
        except CatalogLoadError as exc:
            logger.warning(f"Skipping malformed catalog entry: {exc}")
    return products


def load_catalog(path: Path | str, cache: CatalogCache | None = None) -> list[Product]:
    """
    Load every product in the catalog file at `path`.

    A cache that already holds products is returned as-is; call
    cache.invalidate() to force a reload. A missing or undecodable file
    yields an empty catalog.
    """
    if cache is not None and len(cache):
        return cache.products()

    path = Path(path)
    if not path.is_file():
        logger.warning(f"Catalog file not found: {path}")
        return []
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(f"Could not read catalog {path}: {exc}")
        return []

    products = parse_catalog(payload)
    if cache is not None:
        for product in products:
            cache.put(product)
    logger.info(f"Loaded {len(products)} products from {path}")
    return products


def flatten_skus(products: Iterable[Product] | None) -> list[Sku]:
    return [sku for product in products or () for sku in product.skus]


def flatten_price_points(skus: Iterable[Sku] | None) -> list[PricePoint]:
    """Points of every distinct price group referenced by `skus` (shared groups once)."""
    seen: set[str] = set()
    points: list[PricePoint] = []
    for sku in skus or ():
        pg = sku.price_group
        if pg.id in seen:
            continue
        seen.add(pg.id)
        points.extend(pg.owned_points())
    return points
