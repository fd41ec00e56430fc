import json
from pathlib import Path

import numpy as np
import pandas as pd

np.random.seed(42)

# ──────────────────────────────────────────────────────────────────────────────
# Config for a synthetic catalog: products, their SKUs and price groups
# ──────────────────────────────────────────────────────────────────────────────
PRODUCT_CONFIG = {
    "PRM_CAREER":   {"name": "Premium Career",          "lob": "Premium", "folder": "Premium Subscriptions", "usd": 39.99},
    "PRM_BUSINESS": {"name": "Premium Business",        "lob": "Premium", "folder": "Premium Subscriptions", "usd": 59.99},
    "SN_CORE":      {"name": "Sales Navigator Core",    "lob": "LSS",     "folder": "Sales Navigator",       "usd": 99.99},
    "SN_ADVANCED":  {"name": "Sales Navigator Advanced","lob": "LSS",     "folder": "Sales Navigator",       "usd": 149.99},
    "RL_LITE":      {"name": "Recruiter Lite",          "lob": "LTS",     "folder": "Talent Solutions",      "usd": 170.00},
    "LRN_ALL":      {"name": "Learning All Access",     "lob": "LMS",     "folder": "Learning",              "usd": 29.99},
}

STATUSES   = ["Active", "Active", "Active", "Legacy", "Retired"]
CHANNELS   = ["Desktop", "iOS", "GPB", "Field"]
CYCLES     = ["Monthly", "Annual", "Quarterly"]
CYCLE_MULT = {"Monthly": 1.0, "Annual": 10.0, "Quarterly": 2.8}
SEAT_TIERS = [(1, 10), (11, 50), (51, None)]

# 1 USD = rate × currency
FX = {"USD": 1.0, "EUR": 0.92, "GBP": 0.79, "CAD": 1.36, "AUD": 1.53, "JPY": 149.5, "INR": 83.28, "BRL": 4.97}

PERIOD_STARTS = pd.date_range("2023-01-01", periods=4, freq="6MS")


def _amount(usd: float, currency: str) -> float:
    value = usd * FX[currency] * np.random.uniform(0.95, 1.05)
    return float(round(value)) if currency == "JPY" else round(float(value), 2)


def _price_points(usd: float, channel: str) -> list[dict]:
    points = []
    currencies = list(np.random.choice(list(FX)[1:], size=3, replace=False))
    for currency in ["USD", *currencies]:
        # two successive list prices per currency so older ones come out Expired
        for start in PERIOD_STARTS[-2:]:
            if channel == "Field":
                for tier in ("CORP TIER 1", "CORP TIER 2", None):
                    for low, high in SEAT_TIERS:
                        points.append({
                            "currencyCode": currency,
                            "amount":       _amount(usd * (0.9 if tier else 1.0), currency),
                            "pricingRule":  "RANGE",
                            "pricingTier":  tier,
                            "minQuantity":  low,
                            "maxQuantity":  high,
                            "validFrom":    start.strftime("%Y-%m-%d"),
                        })
            else:
                points.append({
                    "currencyCode": currency,
                    "amount":       _amount(usd, currency),
                    "pricingRule":  "NONE",
                    "validFrom":    start.strftime("%Y-%m-%d"),
                })
    return points


def generate_data(path: str | Path = Path(__file__).parent / "generated_catalog.json") -> dict:
    products = []
    pg_counter = 1000
    for product_id, cfg in PRODUCT_CONFIG.items():
        skus = []
        for channel in np.random.choice(CHANNELS, size=np.random.randint(2, 5), replace=False):
            shared = None
            for cycle in CYCLES[: np.random.randint(1, 4)]:
                # SKUs of one channel sometimes share a price group across cycles
                if shared is None or np.random.rand() > 0.5:
                    pg_counter += 1
                    start = PERIOD_STARTS[np.random.randint(len(PERIOD_STARTS))]
                    shared = {
                        "id":          str(pg_counter),
                        "name":        f"{cfg['name']} {channel} {cycle}",
                        "status":      "Active",
                        "validFrom":   start.strftime("%Y-%m-%d"),
                        "validUntil":  None if np.random.rand() > 0.3 else (start + pd.DateOffset(years=1)).strftime("%Y-%m-%d"),
                        "pricePoints": _price_points(cfg["usd"] * CYCLE_MULT[cycle], channel),
                    }
                sku = {
                    "id":           f"{product_id}_{channel}_{cycle}".upper(),
                    "status":       "Active",
                    "salesChannel": channel,
                    "billingCycle": cycle,
                    "priceGroup":   shared,
                }
                if np.random.rand() < 0.2:
                    sku["lix"] = {"key": f"pricing.{product_id.lower()}.test", "treatment": "enabled"}
                skus.append(sku)

        products.append({
            "id":           product_id,
            "name":         cfg["name"],
            "lob":          cfg["lob"],
            "folder":       cfg["folder"],
            "status":       str(np.random.choice(STATUSES)),
            "billingModel": "Subscription",
            "skus":         skus,
        })

    catalog = {"products": products}
    Path(path).write_text(json.dumps(catalog, indent=2))
    print(f"Catalog generated with {len(products)} products and "
          f"{sum(len(p['skus']) for p in products)} SKUs → {path}")
    return catalog


if __name__ == "__main__":
    generate_data()
