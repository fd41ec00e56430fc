from engine.orchestrator import run_engine
from engine.predicates import FilterState
from engine.views import products
from tests.factories import make_product, make_sku


def catalog():
    return [
        make_product("p3", name="Sales Navigator", lob="LSS", folder="Sales", skus=(make_sku("s1", channel="Desktop"),)),
        make_product("p1", name="Premium Career", lob="Premium", skus=(make_sku("s2", channel="iOS"),)),
        make_product("p2", name="Premium Business", lob="Premium", status="Legacy"),
    ]


def test_result_shape():
    config = products.build_config()
    result = run_engine(config, catalog(), FilterState())
    assert result.total == 3
    assert result.count == 3
    assert result.groups is None and result.group_counts is None
    assert set(result.options) == {"lob", "status", "folder", "billing_model", "channel"}


def test_filtered_grouped_run():
    config = products.build_config()
    state = FilterState(selections={"lob": "Premium"}, group_by=products.GROUP_STATUS)
    result = run_engine(config, catalog(), state)

    assert [p.id for p in result.records] == ["p1", "p2"]
    assert list(result.groups) == ["Active", "Legacy"]
    assert result.group_counts == {"Active": 1, "Legacy": 1}
    # lob options ignore the lob selection
    assert {o.value: o.count for o in result.options["lob"]} == {"LSS": 1, "Premium": 2}


def test_empty_input():
    result = run_engine(products.build_config(), None, FilterState(search="x"))
    assert result.is_empty
    assert result.total == 0
    assert all(options == [] for options in result.options.values())


def test_input_is_not_mutated():
    records = catalog()
    snapshot = list(records)
    run_engine(products.build_config(), records, FilterState(sort_order=products.SORT_NAME_DESC))
    assert records == snapshot
