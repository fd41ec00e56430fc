import pytest

from engine.rates import StaticRateProvider, to_usd, usd_equivalent_pct
from tests.factories import make_point


def test_usd_is_base():
    provider = StaticRateProvider(rates={})
    assert provider.rate("usd") == 1.0
    assert to_usd(make_point("USD", 12.5), provider) == 12.5


def test_provider_rate_converts():
    provider = StaticRateProvider(rates={"EUR": 0.5})
    assert to_usd(make_point("EUR", 10.0), provider) == pytest.approx(20.0)


def test_point_exchange_rate_wins():
    provider = StaticRateProvider(rates={"BRL": 10.0})
    assert to_usd(make_point("BRL", 50.0, exchange_rate=5.0), provider) == pytest.approx(10.0)


def test_unknown_currency_is_unconvertible():
    assert to_usd(make_point("XYZ", 1.0), StaticRateProvider()) is None


def test_overrides_do_not_touch_original():
    base = StaticRateProvider(rates={"EUR": 0.9})
    patched = base.with_overrides({"eur": 0.8, "GBP": 0.7})
    assert base.rate("EUR") == 0.9
    assert patched.rate("EUR") == 0.8
    assert patched.rate("GBP") == 0.7


def test_usd_equivalent_pct():
    provider = StaticRateProvider(rates={"EUR": 0.5})
    usd = make_point("USD", 10.0)
    assert usd_equivalent_pct(usd, usd, provider) == 100.0
    assert usd_equivalent_pct(make_point("EUR", 4.0), usd, provider) == pytest.approx(80.0)
    assert usd_equivalent_pct(make_point("EUR", 4.0), None, provider) is None
