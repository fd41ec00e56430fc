"""
engine/models.py
----------------
Read-only record shapes consumed by the facet engine.

    Product ──owns──▶ Sku ──references──▶ PriceGroup ──owns──▶ PricePoint

Many SKUs may reference the same PriceGroup (fan-in). The engine never
creates or mutates these records; it only filters, sorts and groups
references to them. Derived projections (PriceGroupRow, FieldPriceRow) are
built by the per-entity views from the loaded records.

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace


# ─────────────────────────────────────────────────────────────────────────────
# Closed value domains
# ─────────────────────────────────────────────────────────────────────────────

PRODUCT_STATUSES:      tuple[str, ...] = ("Active", "Legacy", "Retired")
PRICE_POINT_STATUSES:  tuple[str, ...] = ("Active", "Expired")
BILLING_CYCLES:        tuple[str, ...] = ("Monthly", "Annual", "Quarterly")
SALES_CHANNELS:        tuple[str, ...] = ("Desktop", "Field", "iOS", "GPB")
PRICING_RULES:         tuple[str, ...] = ("NONE", "SLAB", "RANGE", "BLOCK", "SPREADSHEET")

# Display priority for billing cycles; anything unlisted sorts after, A-Z.
BILLING_CYCLE_PRIORITY: tuple[str, ...] = ("Monthly", "Annual", "Quarterly")

# Tier label for price points that carry no pricing tier.
STANDARD_TIER = "Standard"

# Currencies shown in the "Core" partition of the price point view.
CORE_CURRENCIES: tuple[str, ...] = ("USD", "EUR", "GBP", "CAD", "AUD", "JPY", "CHF", "SGD", "HKD")


# ─────────────────────────────────────────────────────────────────────────────
# Entities
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Experiment:
    key:       str
    treatment: str


@dataclass(frozen=True)
class PricePoint:
    currency_code:  str
    amount:         float
    pricing_rule:   str = "NONE"
    id:             str | None = None
    pricing_tier:   str | None = None
    min_quantity:   int | None = None
    max_quantity:   int | None = None
    valid_from:     str | None = None   # narrows the parent price group window
    valid_until:    str | None = None
    status:         str | None = None   # Active / Expired, provided or computed
    exchange_rate:  float | None = None # units of this currency per 1 USD
    price_type:     str | None = None
    price_group_id: str | None = None  # owning group, stamped by PriceGroup.owned_points()

    @property
    def key(self) -> str:
        """
        Stable identifier: the point id, or a composite of the owning group
        and the point's pricing context.
        """
        if self.id:
            return self.id
        qty = f"{self.min_quantity or ''}-{self.max_quantity or ''}"
        return "|".join((
            self.price_group_id or "",
            self.currency_code,
            self.pricing_rule,
            self.pricing_tier or "",
            qty,
            self.valid_from or "",
            f"{self.amount:.4f}",
        ))


@dataclass(frozen=True)
class PriceGroup:
    id:           str
    status:       str
    valid_from:   str | None
    valid_until:  str | None = None   # None = still in effect
    name:         str | None = None
    price_points: tuple[PricePoint, ...] = ()
    experiment:   Experiment | None = None

    def owned_points(self) -> tuple[PricePoint, ...]:
        """The group's points, each carrying this group's id."""
        return tuple(
            p if p.price_group_id == self.id else replace(p, price_group_id=self.id)
            for p in self.price_points
        )


@dataclass(frozen=True)
class Sku:
    id:            str
    status:        str
    sales_channel: str
    billing_cycle: str
    price_group:   PriceGroup
    experiment:    Experiment | None = None
    name:          str | None = None


@dataclass(frozen=True)
class Product:
    id:            str
    name:          str
    lob:           str
    folder:        str
    status:        str
    billing_model: str
    skus:          tuple[Sku, ...] = ()
    description:   str | None = None

    @property
    def channels(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(s.sales_channel for s in self.skus))


# ─────────────────────────────────────────────────────────────────────────────
# Derived projections
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PriceGroupRow:
    """One price group with every SKU that references it."""
    price_group: PriceGroup
    skus:        tuple[Sku, ...] = field(default_factory=tuple)

    @property
    def id(self) -> str:
        return self.price_group.id

    @property
    def channels(self) -> tuple[str, ...]:
        return tuple(s.sales_channel for s in self.skus)

    @property
    def billing_cycles(self) -> tuple[str, ...]:
        return tuple(s.billing_cycle for s in self.skus)


@dataclass(frozen=True)
class FieldPriceRow:
    """A price point with the validity window it is effective in."""
    point:       PricePoint
    valid_from:  str | None
    valid_until: str | None
    validity:    str          # resolved validity label
