from functools import cmp_to_key
from itertools import permutations

import pytest

from engine.loader import parse_price_group
from engine.models import STANDARD_TIER
from engine.orchestrator import run_engine
from engine.predicates import FilterState
from engine.rates import StaticRateProvider
from engine.validity import DefaultLatch
from engine.views import field_pricing, price_groups, price_points, products, skus
from tests.factories import make_group, make_point, make_product, make_sku


def assert_total_order(config, records):
    cmp = config.default_comparator
    for a, b in permutations(records, 2):
        assert cmp(a, b) != 0
        assert (cmp(a, b) < 0) == (cmp(b, a) > 0)


# ─────────────────────────────────────────────────────────────────────────────
# Products
# ─────────────────────────────────────────────────────────────────────────────

def test_products_grouped_by_lob_alphabetically():
    records = [
        make_product("p1", name="Premium Career", lob="Premium"),
        make_product("p2", name="Premium Business", lob="Premium"),
        make_product("p3", name="Recruiter Lite", lob="LTS"),
    ]
    result = run_engine(products.build_config(), records, FilterState(group_by=products.GROUP_LOB))

    assert list(result.groups) == ["LTS", "Premium"]
    assert [p.id for p in result.groups["Premium"]] == ["p2", "p1"]


def test_products_default_order_and_channel_facet():
    records = [
        make_product("p1", name="B", status="Retired", skus=(make_sku(channel="Field"),)),
        make_product("p2", name="A", status="Legacy", skus=(make_sku(channel="iOS"),)),
        make_product("p3", name="C", status="Active", skus=(make_sku(channel="Field"), make_sku(channel="iOS"))),
    ]
    config = products.build_config()
    result = run_engine(config, records, FilterState())
    assert [p.id for p in result.records] == ["p3", "p2", "p1"]
    assert_total_order(config, records)

    result = run_engine(config, records, FilterState(selections={"channel": ["Field"]}))
    assert [p.id for p in result.records] == ["p3", "p1"]
    assert {o.value: o.count for o in result.options["channel"]} == {"Field": 2, "iOS": 2}


def test_products_sku_count_sort():
    records = [
        make_product("p1", skus=(make_sku("a"),)),
        make_product("p2", skus=(make_sku("b"), make_sku("c"))),
    ]
    result = run_engine(products.build_config(), records, FilterState(sort_order=products.SORT_SKU_COUNT))
    assert [p.id for p in result.records] == ["p2", "p1"]


# ─────────────────────────────────────────────────────────────────────────────
# SKUs
# ─────────────────────────────────────────────────────────────────────────────

def test_skus_billing_cycle_priority_breaks_channel_tie():
    group = make_group()
    records = [
        make_sku("s1", channel="Desktop", cycle="Annual", group=group),
        make_sku("s2", channel="Desktop", cycle="Monthly", group=group),
    ]
    result = run_engine(skus.build_config(), records, FilterState())
    assert [s.id for s in result.records] == ["s2", "s1"]


def test_skus_newest_price_group_first():
    records = [
        make_sku("s1", channel="Desktop", group=make_group("old", valid_from="2023-01-01")),
        make_sku("s2", channel="iOS", group=make_group("new", valid_from="2024-01-01")),
        make_sku("s3", channel="Desktop", group=make_group("bad", valid_from=None)),
    ]
    config = skus.build_config()
    result = run_engine(config, records, FilterState())
    assert [s.id for s in result.records] == ["s2", "s1", "s3"]
    assert_total_order(config, records)

    result = run_engine(config, records, FilterState(sort_order=skus.SORT_EFFECTIVE_ASC))
    assert [s.id for s in result.records] == ["s1", "s2", "s3"]


def test_skus_experiment_sort_and_group():
    records = [
        make_sku("s1", experiment="zeta"),
        make_sku("s2"),
        make_sku("s3", experiment="alpha"),
    ]
    config = skus.build_config()
    result = run_engine(config, records, FilterState(sort_order=skus.SORT_EXPERIMENT))
    assert [s.id for s in result.records] == ["s3", "s1", "s2"]

    result = run_engine(config, records, FilterState(group_by=skus.GROUP_EXPERIMENT))
    assert list(result.groups) == ["alpha", "zeta", skus.NO_EXPERIMENT]


def test_skus_without_experiment_are_counted_and_selectable():
    records = [make_sku("s1", experiment="exp.x"), make_sku("s2"), make_sku("s3")]
    config = skus.build_config()

    result = run_engine(config, records, FilterState())
    options = result.options[skus.EXPERIMENT]
    assert [(o.value, o.count) for o in options] == [("exp.x", 1), (skus.NO_EXPERIMENT, 2)]
    assert sum(o.count for o in options) == len(records)

    result = run_engine(config, records, FilterState(selections={skus.EXPERIMENT: [skus.NO_EXPERIMENT]}))
    assert [s.id for s in result.records] == ["s2", "s3"]


def test_skus_billing_cycle_options_in_priority_order():
    records = [make_sku("a", cycle="Quarterly"), make_sku("b", cycle="Annual"), make_sku("c", cycle="Monthly")]
    result = run_engine(skus.build_config(), records, FilterState())
    assert [o.value for o in result.options["billing_cycle"]] == ["Monthly", "Annual", "Quarterly"]


# ─────────────────────────────────────────────────────────────────────────────
# Price groups
# ─────────────────────────────────────────────────────────────────────────────

def test_price_group_rows_fold_shared_groups():
    shared = make_group("pg-shared")
    records = [
        make_sku("s1", channel="iOS", group=shared),
        make_sku("s2", channel="Desktop", group=make_group("pg-2")),
        make_sku("s3", channel="Desktop", group=shared),
    ]
    rows = price_groups.price_group_rows(records)
    assert [r.id for r in rows] == ["pg-shared", "pg-2"]
    assert [s.id for s in rows[0].skus] == ["s1", "s3"]


def test_price_groups_ongoing_sorts_ahead_of_fixed_end():
    fixed = make_group("fixed", valid_from="2024-01-01", valid_until="2024-12-31")
    ongoing = make_group("ongoing", valid_from="2024-01-01")
    rows = price_groups.price_group_rows([make_sku("a", group=fixed), make_sku("b", group=ongoing)])

    assert price_groups.row_validity(rows[1]) == "Jan 1, 2024 - present"
    result = run_engine(price_groups.build_config(), rows, FilterState())
    assert [r.id for r in result.records] == ["ongoing", "fixed"]
    assert [o.value for o in result.options["validity"]] == [
        "Jan 1, 2024 - present",
        "Jan 1, 2024 - Dec 31, 2024",
    ]


def test_price_groups_channel_grouping_by_majority():
    group = make_group("pg-1")
    rows = price_groups.price_group_rows([
        make_sku("a", channel="iOS", group=group),
        make_sku("b", channel="Desktop", group=group),
        make_sku("c", channel="iOS", group=group),
        make_sku("d", channel="Field", group=make_group("pg-2")),
    ])
    result = run_engine(price_groups.build_config(), rows, FilterState(group_by=price_groups.GROUP_CHANNEL))
    assert {k: [r.id for r in v] for k, v in result.groups.items()} == {"Field": ["pg-2"], "iOS": ["pg-1"]}
    assert list(result.groups) == ["Field", "iOS"]


# ─────────────────────────────────────────────────────────────────────────────
# Price points
# ─────────────────────────────────────────────────────────────────────────────

def test_price_points_usd_first():
    records = [
        make_point("EUR", 9.0, id="eur", status="Expired"),
        make_point("USD", 10.0, id="usd", status="Active"),
    ]
    result = run_engine(price_points.build_config(), records, FilterState())
    assert [p.id for p in result.records] == ["usd", "eur"]


def test_price_points_status_options_ignore_currency_selection():
    records = [
        make_point("EUR", 9.0, id="eur", status="Expired"),
        make_point("USD", 10.0, id="usd", status="Active"),
    ]
    state = FilterState(selections={"currency": ["USD"]})
    result = run_engine(price_points.build_config(), records, state)

    assert [p.id for p in result.records] == ["usd"]
    assert {o.value: o.count for o in result.options["status"]} == {"Active": 1, "Expired": 1}


def test_price_points_default_is_total():
    records = [
        make_point("USD", 10.0, id="u1", status="Active", min_quantity=1),
        make_point("USD", 8.0, id="u2", status="Active", min_quantity=11),
        make_point("USD", 12.0, id="u0", status="Expired"),
        make_point("CAD", 14.0, id="c1", status="Active"),
        make_point("AUD", 15.0, id="a1", status="Active"),
    ]
    config = price_points.build_config()
    assert_total_order(config, records)
    result = run_engine(config, records, FilterState())
    assert [p.id for p in result.records] == ["u1", "u2", "u0", "a1", "c1"]


def test_price_points_without_ids_from_two_groups_are_totally_ordered():
    raw = [
        {"id": "1001", "validFrom": "2024-01-01",
         "pricePoints": [{"currencyCode": "USD", "amount": 39.99, "validFrom": "2024-01-01"}]},
        {"id": "1002", "validFrom": "2024-01-01",
         "pricePoints": [{"currencyCode": "USD", "amount": 59.99, "validFrom": "2024-01-01"}]},
    ]
    groups = [parse_price_group(g) for g in raw]
    records = [p for g in groups for p in g.price_points]

    assert [p.price_group_id for p in records] == ["1001", "1002"]
    assert records[0].key != records[1].key
    assert_total_order(price_points.build_config(), records)


def test_price_points_tier_facet_counts_untiered_points():
    records = [
        make_point("USD", 10.0, id="a", pricing_tier="CORP TIER 1"),
        make_point("USD", 12.0, id="b"),
    ]
    result = run_engine(price_points.build_config(), records, FilterState())
    assert {o.value: o.count for o in result.options[price_points.TIER]} == {
        "CORP TIER 1": 1,
        STANDARD_TIER: 1,
    }


def test_price_points_usd_equivalent_sort_puts_unconvertible_last():
    records = [
        make_point("EUR", 10.0, id="eur"),
        make_point("XYZ", 999.0, id="xyz"),
        make_point("USD", 15.0, id="usd"),
    ]
    config = price_points.build_config(StaticRateProvider(rates={"EUR": 0.5}))
    result = run_engine(config, records, FilterState(sort_order=price_points.SORT_USD_EQUIV))
    assert [p.id for p in result.records] == ["eur", "usd", "xyz"]


def test_price_points_category_grouping():
    records = [make_point("BRL", 1.0, id="b"), make_point("USD", 1.0, id="u"), make_point("INR", 1.0, id="i")]
    result = run_engine(price_points.build_config(), records, FilterState(group_by=price_points.GROUP_CATEGORY))
    assert list(result.groups) == [price_points.CORE, price_points.LONG_TAIL]
    assert [p.id for p in result.groups[price_points.LONG_TAIL]] == ["b", "i"]


# ─────────────────────────────────────────────────────────────────────────────
# Field pricing
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def field_rows():
    current = make_group("pg-2024", valid_from="2024-01-01", points=(
        make_point("USD", 100.0, id="u-1", min_quantity=1, max_quantity=10),
        make_point("USD", 90.0, id="u-2", min_quantity=11),
        make_point("CAD", 130.0, id="c-1", pricing_tier="CORP TIER 1", min_quantity=1, max_quantity=10),
    ))
    previous = make_group("pg-2023", valid_from="2023-01-01", valid_until="2023-12-31", points=(
        make_point("USD", 95.0, id="u-old", min_quantity=1, max_quantity=10),
    ))
    return field_pricing.field_price_rows([previous, current])


def test_point_window_narrows_group_window():
    group = make_group("pg", valid_from="2024-01-01", valid_until="2024-12-31", points=(
        make_point("GBP", 1.0, valid_from="2024-07-01"),
        make_point("GBP", 1.0, valid_from="2023-01-01", valid_until="2025-06-30"),
    ))
    rows = field_pricing.field_price_rows([group])
    assert rows[0].validity == "Jul 1, 2024 - Dec 31, 2024"
    assert rows[1].validity == "Jan 1, 2024 - Dec 31, 2024"


def test_field_pricing_seeds_most_recent_period_once(field_rows):
    latch = DefaultLatch()
    state = field_pricing.seed_validity(FilterState(), latch, "v1", field_rows)
    assert field_pricing.selected_validity(state) == "Jan 1, 2024 - present"

    user = state.with_selection(field_pricing.VALIDITY, "Jan 1, 2023 - Dec 31, 2023")
    latch.mark_overridden()
    assert field_pricing.seed_validity(user, latch, "v1", field_rows) is user


def test_field_pricing_filters_by_period(field_rows):
    config = field_pricing.build_config()
    state = FilterState(selections={field_pricing.VALIDITY: "Jan 1, 2024 - present"})
    result = run_engine(config, field_rows, state)
    assert [r.point.id for r in result.records] == ["u-1", "u-2", "c-1"]
    assert [o.value for o in result.options[field_pricing.CURRENCY]] == ["USD", "CAD"]


def test_validity_change_clears_currency_and_tier():
    state = FilterState(selections={
        field_pricing.VALIDITY: "Jan 1, 2023 - Dec 31, 2023",
        field_pricing.CURRENCY: ["USD"],
        field_pricing.TIER: ["CORP TIER 1"],
    })
    cleared = field_pricing.selections_after_validity_change(state, "Jan 1, 2024 - present")
    assert cleared.selected(field_pricing.CURRENCY) == ()
    assert cleared.selected(field_pricing.TIER) == ()
    assert cleared.selected(field_pricing.VALIDITY) == ("Jan 1, 2023 - Dec 31, 2023",)

    assert field_pricing.selections_after_validity_change(state, None) is state
    assert field_pricing.selections_after_validity_change(state, "Jan 1, 2023 - Dec 31, 2023") is state


def test_field_pricing_groups(field_rows):
    config = field_pricing.build_config()
    state = FilterState(
        selections={field_pricing.VALIDITY: "Jan 1, 2024 - present"},
        group_by=field_pricing.GROUP_TIER,
    )
    result = run_engine(config, field_rows, state)
    assert list(result.groups) == ["CORP TIER 1", field_pricing.STANDARD_TIER]

    state.group_by = field_pricing.GROUP_SEAT_RANGE
    result = run_engine(config, field_rows, state)
    assert list(result.groups) == ["1-10", "11+"]


def test_field_pricing_rows_without_point_ids_are_totally_ordered():
    rows = field_pricing.field_price_rows([
        make_group("pg-a", points=(make_point("USD", 100.0, min_quantity=1, max_quantity=10),)),
        make_group("pg-b", points=(make_point("USD", 90.0, min_quantity=1, max_quantity=10),)),
    ])
    assert [r.point.price_group_id for r in rows] == ["pg-a", "pg-b"]
    assert_total_order(field_pricing.build_config(), rows)


def test_field_pricing_tier_facet_selects_standard_rows(field_rows):
    state = FilterState(selections={
        field_pricing.VALIDITY: "Jan 1, 2024 - present",
        field_pricing.TIER: [STANDARD_TIER],
    })
    result = run_engine(field_pricing.build_config(), field_rows, state)
    assert [r.point.id for r in result.records] == ["u-1", "u-2"]
    assert [o.value for o in result.options[field_pricing.TIER]] == ["CORP TIER 1", STANDARD_TIER]


def test_field_pricing_default_order_is_total(field_rows):
    assert_total_order(field_pricing.build_config(), field_rows)
    ordered = sorted(field_rows, key=cmp_to_key(field_pricing.build_config().default_comparator))
    assert ordered[-1].point.id == "u-old"
