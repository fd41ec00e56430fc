"""
engine/views/products.py
------------------------
Product list view.

    Default order : status (Active, Legacy, Retired) → LOB → name → id
    Derived facet : channel: a product passes when ANY of its SKUs sells
                    through a selected channel

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

from engine.grouping import GroupKey
from engine.models import PRODUCT_STATUSES, Product
from engine.orchestrator import ViewConfig
from engine.predicates import SearchFacet, SelectFacet
from engine.sorting import by_key, by_priority, chain, priority_order

VIEW_NAME = "Products"

# Facet ids
SEARCH        = "search"
LOB           = "lob"
STATUS        = "status"
FOLDER        = "folder"
BILLING_MODEL = "billing_model"
CHANNEL       = "channel"

# Sort orders
SORT_NAME_ASC   = "Name (A-Z)"
SORT_NAME_DESC  = "Name (Z-A)"
SORT_SKU_COUNT  = "SKU count (High to low)"

# Group-by keys
GROUP_LOB           = "LOB"
GROUP_FOLDER        = "Folder"
GROUP_STATUS        = "Status"
GROUP_BILLING_MODEL = "Billing model"


def _name(p: Product) -> str | None:
    return p.name


def build_config() -> ViewConfig:
    default = chain(
        by_priority(lambda p: p.status, PRODUCT_STATUSES),
        by_key(lambda p: p.lob, casefold=True),
        by_key(_name, casefold=True),
        by_key(lambda p: p.id),
    )

    facets = (
        SearchFacet(SEARCH, fields=(_name, lambda p: p.id, lambda p: p.folder)),
        SelectFacet(LOB, extract=lambda p: p.lob),
        SelectFacet(STATUS, extract=lambda p: p.status, option_order=priority_order(PRODUCT_STATUSES)),
        SelectFacet(FOLDER, extract=lambda p: p.folder),
        SelectFacet(BILLING_MODEL, extract=lambda p: p.billing_model, multi=True),
        SelectFacet(CHANNEL, extract=lambda p: p.channels, multi=True),
    )

    sort_orders = {
        SORT_NAME_ASC:  by_key(_name, casefold=True),
        SORT_NAME_DESC: by_key(_name, descending=True, casefold=True),
        SORT_SKU_COUNT: by_key(lambda p: len(p.skus), descending=True),
    }

    group_keys = {
        GROUP_LOB:           GroupKey(extract=lambda p: p.lob),
        GROUP_FOLDER:        GroupKey(extract=lambda p: p.folder),
        GROUP_STATUS:        GroupKey(extract=lambda p: p.status, order=priority_order(PRODUCT_STATUSES)),
        GROUP_BILLING_MODEL: GroupKey(extract=lambda p: p.billing_model),
    }

    return ViewConfig(
        name               = VIEW_NAME,
        facets             = facets,
        sort_orders        = sort_orders,
        default_comparator = default,
        group_keys         = group_keys,
    )
