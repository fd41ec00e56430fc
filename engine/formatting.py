"""
engine/formatting.py
--------------------
Display helpers shared by the facet labels, group headers and UI tables.

    to_sentence_case("SKU overrides in usd") → "SKU overrides in USD"
    format_currency(point)                   → "USD 49.99" / "JPY 5000"
    seat_range_key(point)                    → "1-10" / "11+" / "5"

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import re

from engine.models import PricePoint

# Currencies displayed without decimal places (ISO 4217 minor unit 0).
ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})

CURRENCY_CODES = frozenset({
    "AED", "ARS", "AUD", "BRL", "CAD", "CHF", "CLP", "CNY", "COP", "CZK", "DKK",
    "EGP", "EUR", "GBP", "HKD", "HUF", "IDR", "ILS", "INR", "JPY", "KRW", "MXN",
    "MYR", "NOK", "NZD", "PHP", "PLN", "SAR", "SEK", "SGD", "THB", "TRY", "TWD",
    "USD", "ZAR",
}) | ZERO_DECIMAL_CURRENCIES

ACRONYMS = frozenset({
    "ID", "URL", "LOB", "SKU", "CTA", "NAMER", "EMEA", "APAC", "LATAM", "API",
    "LMS", "LSS", "LTS", "GPB",
})

PROPER_NOUNS = {
    noun.upper(): noun
    for noun in (
        "Premium", "Sales", "Navigator", "Recruiter", "Learning", "Talent",
        "Desktop", "Field", "iOS", "Android", "Web", "Enterprise",
        "Active", "Legacy", "Retired", "Expired",
        "Monthly", "Annual", "Quarterly",
    )
}

_LETTERS = re.compile(r"[A-Za-z]+")


def to_sentence_case(text: str | None) -> str:
    """First word capitalised, the rest lower-case, except acronyms/currencies/proper nouns."""
    if not text:
        return ""

    words = []
    for index, word in enumerate(text.split(" ")):
        if word.startswith("(") and word.endswith(")"):
            words.append(word)
            continue

        core = re.sub(r"[^A-Za-z]", "", word).upper()
        if core in CURRENCY_CODES or core in ACRONYMS:
            words.append(_LETTERS.sub(core, word, count=1))
        elif core.endswith("S") and core[:-1] in ACRONYMS:
            words.append(_LETTERS.sub(core[:-1] + "s", word, count=1))
        elif core in PROPER_NOUNS:
            words.append(_LETTERS.sub(PROPER_NOUNS[core], word, count=1))
        elif index == 0:
            words.append(word[:1].upper() + word[1:].lower())
        else:
            words.append(word.lower())
    return " ".join(words)


def format_amount(point: PricePoint) -> str:
    if point.currency_code in ZERO_DECIMAL_CURRENCIES:
        return str(int(round(point.amount)))
    return f"{point.amount:.2f}"


def format_currency(point: PricePoint) -> str:
    return f"{point.currency_code} {format_amount(point)}"


def format_usd_equivalent(pct: float | None) -> str:
    if pct is None:
        return ""
    if pct == 100:
        return "100%"
    return f"{pct:.1f}%"


# ─────────────────────────────────────────────────────────────────────────────
# Seat ranges
# ─────────────────────────────────────────────────────────────────────────────

def seat_range_key(point: PricePoint) -> str:
    low = point.min_quantity or 1
    high = point.max_quantity
    if not high:
        return f"{low}+"
    if low == high:
        return f"{low}"
    return f"{low}-{high}"


def seat_range_bounds(key: str) -> tuple[int, float]:
    """(min, max) of a seat range key; unparseable keys sort last."""
    try:
        if key.endswith("+"):
            return int(key[:-1]), float("inf")
        if "-" in key:
            low, high = key.split("-", 1)
            return int(low), float(high)
        return int(key), float(key)
    except ValueError:
        return 10**9, float("inf")


def compare_seat_ranges(a: str, b: str) -> int:
    ba, bb = seat_range_bounds(a), seat_range_bounds(b)
    return (ba > bb) - (ba < bb)


def seat_range_display(key: str) -> str:
    if key.endswith("+"):
        return f"{key[:-1]}+ seats"
    if "-" in key:
        low, high = key.split("-", 1)
        return f"{low}-{high} seats"
    try:
        count = int(key)
    except ValueError:
        return key
    return f"{count} seat{'' if count == 1 else 's'}"
