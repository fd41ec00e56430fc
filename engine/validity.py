"""
engine/validity.py
------------------
Validity Period Resolver.

Turns an optional (start, end) timestamp pair into a display label and
provides a total "most recent first" order over such labels.

Label rules
-----------
    start + end      → "Jan 1, 2024 - Dec 31, 2024"
    start, no end    → "Jan 1, 2024 - present"
    no start         → "Present"   (sentinel)

Ordering (compare_validity)
---------------------------
    1. start date, newest first
    2. same start: an ongoing window ("present") before a fixed end
    3. both fixed: end date, newest first
    4. otherwise equal

The sentinel and any label that cannot be parsed resolve to an epoch-zero
window that is NOT ongoing, so they always sort last instead of raising.

Default seeding
---------------
compute_default() is a pure function; DefaultLatch is the caller-owned
one-shot flag that makes sure the default is applied once per fresh dataset
and never over a value the user picked.

No Streamlit imports. Pure Python.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import cmp_to_key, lru_cache
from typing import Any, Callable, Iterable

import pandas as pd

logger = logging.getLogger(__name__)

PRESENT_SENTINEL = "Present"
ONGOING_END      = "present"

_EPOCH = pd.Timestamp(0, tz="UTC")
_LABEL_RE = re.compile(r"^(.+?) - (.+)$")


# ─────────────────────────────────────────────────────────────────────────────
# Window
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ValidityWindow:
    start:   pd.Timestamp
    end:     pd.Timestamp | None   # None when ongoing
    ongoing: bool


_UNRESOLVED = ValidityWindow(start=_EPOCH, end=_EPOCH, ongoing=False)


def parse_date(value: Any) -> pd.Timestamp | None:
    """Parse a date-ish value to a UTC day timestamp; None when absent or unparseable."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    ts = pd.to_datetime(value, utc=True, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.normalize()


def _format_date(ts: pd.Timestamp) -> str:
    return f"{ts.strftime('%b')} {ts.day}, {ts.year}"


@lru_cache(maxsize=4096)
def window_of(start: Any, end: Any) -> ValidityWindow:
    """Build the comparable window straight from a (start, end) pair."""
    s = parse_date(start)
    if s is None:
        return _UNRESOLVED
    e = parse_date(end)
    if e is None:
        return ValidityWindow(start=s, end=None, ongoing=True)
    return ValidityWindow(start=s, end=e, ongoing=False)


# ─────────────────────────────────────────────────────────────────────────────
# Resolve / parse labels
# ─────────────────────────────────────────────────────────────────────────────

def resolve_validity(start: Any = None, end: Any = None) -> str:
    """Canonical display label for a validity window."""
    s = parse_date(start)
    if s is None:
        if start:
            logger.warning(f"Unparseable validity start {start!r}; using sentinel label")
        return PRESENT_SENTINEL

    e = parse_date(end)
    if e is None:
        if end:
            logger.warning(f"Unparseable validity end {end!r}; treating window as ongoing")
        return f"{_format_date(s)} - {ONGOING_END}"

    return f"{_format_date(s)} - {_format_date(e)}"


@lru_cache(maxsize=4096)
def parse_validity(label: str) -> ValidityWindow:
    """Recover the window a label was built from (day granularity)."""
    match = _LABEL_RE.match(label or "")
    if not match:
        if label != PRESENT_SENTINEL:
            logger.debug(f"Could not parse validity period {label!r}")
        return _UNRESOLVED

    start = parse_date(match.group(1))
    if start is None:
        logger.debug(f"Could not parse validity start in {label!r}")
        return _UNRESOLVED

    if match.group(2).strip().lower() == ONGOING_END:
        return ValidityWindow(start=start, end=None, ongoing=True)

    end = parse_date(match.group(2))
    if end is None:
        logger.debug(f"Could not parse validity end in {label!r}")
        return _UNRESOLVED
    return ValidityWindow(start=start, end=end, ongoing=False)


# ─────────────────────────────────────────────────────────────────────────────
# Ordering
# ─────────────────────────────────────────────────────────────────────────────

def compare_windows(a: ValidityWindow, b: ValidityWindow) -> int:
    if a.start != b.start:
        return -1 if a.start > b.start else 1
    if a.ongoing != b.ongoing:
        return -1 if a.ongoing else 1
    if not a.ongoing and a.end != b.end:
        return -1 if a.end > b.end else 1
    return 0


def compare_validity(label_a: str, label_b: str) -> int:
    """Most-recent-first comparator over validity labels."""
    return compare_windows(parse_validity(label_a), parse_validity(label_b))


def pick_default(labels: Iterable[str]) -> str | None:
    """The label that sorts first under compare_validity, or None."""
    unique = list(dict.fromkeys(labels or ()))
    if not unique:
        return None
    return sorted(unique, key=cmp_to_key(compare_validity))[0]


# ─────────────────────────────────────────────────────────────────────────────
# Default seeding
# ─────────────────────────────────────────────────────────────────────────────

def compute_default(
    records: Iterable[Any] | None,
    has_user_overridden: bool,
    label_of: Callable[[Any], str],
) -> str | None:
    """
    Default "most recent period" value for a freshly loaded record set.

    Returns None when the caller has already set the value explicitly, so
    the result can be applied unconditionally when it is not None.
    """
    if has_user_overridden:
        return None
    return pick_default(label_of(r) for r in (records or ()))


@dataclass
class DefaultLatch:
    """
    One-shot seeding flag owned by the caller.

    seed() yields a default at most once per dataset token; the latch
    re-arms only when the token (record identity) changes.
    """
    token:      Any = None
    seeded:     bool = False
    overridden: bool = False

    def observe(self, token: Any) -> bool:
        """Register the current dataset token; True when it is a fresh dataset."""
        if token == self.token:
            return False
        self.token = token
        self.seeded = False
        self.overridden = False
        return True

    def mark_overridden(self) -> None:
        self.overridden = True

    def seed(
        self,
        token: Any,
        records: Iterable[Any] | None,
        label_of: Callable[[Any], str],
    ) -> str | None:
        self.observe(token)
        if self.seeded:
            return None
        value = compute_default(records, self.overridden, label_of)
        self.seeded = value is not None
        if value is not None:
            logger.debug(f"Seeded default validity period {value!r}")
        return value
