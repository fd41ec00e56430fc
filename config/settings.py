from __future__ import annotations
import logging
import os
from pathlib import Path

__all__ = ["get_catalog_path", "get_log_level", "get_rate_overrides"]

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "sample_catalog.json"


def _load_dotenv(dotenv_path: Path | str = ".env") -> None:
    path = Path(dotenv_path)
    if not path.is_file():
        return
    for line in path.read_text().splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, _, value = stripped.partition("=")
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key and value and key not in os.environ:
            os.environ[key] = value


def _get_streamlit_secret(key: str) -> str:
    """
    Try to read a value from st.secrets (Streamlit Community Cloud).
    Returns empty string if streamlit is not available or key not set.
    Safe to call outside a Streamlit context.

    Uses key-in-secrets check before access to avoid FileNotFoundError
    (no secrets file) and KeyError (key not present) both cleanly.
    """
    try:
        import streamlit as st
        if key in st.secrets:
            return str(st.secrets[key]).strip()
        return ""
    except Exception:
        return ""


def _get_setting(key: str, default: str = "") -> str:
    """Priority: st.secrets → environment variable → .env file → default"""
    secret = _get_streamlit_secret(key)
    if secret:
        return secret
    _load_dotenv()
    return os.environ.get(key, default).strip() or default


def get_catalog_path() -> Path:
    """Return the JSON catalog to browse (CATALOG_PATH)."""
    return Path(_get_setting("CATALOG_PATH", str(DEFAULT_CATALOG_PATH)))


def get_log_level() -> str:
    """Return the logging level name (LOG_LEVEL), INFO when unset or unknown."""
    level = _get_setting("LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(level), int):
        return "INFO"
    return level


def get_rate_overrides() -> dict[str, float]:
    """
    Return currency rate overrides from FX_RATES, e.g. "EUR=0.92,GBP=0.79".
    Rates are units of the currency per 1 USD. Malformed pairs are skipped.
    """
    raw = _get_setting("FX_RATES")
    overrides: dict[str, float] = {}
    for pair in raw.split(","):
        code, sep, value = pair.partition("=")
        code = code.strip().upper()
        if not sep or not code:
            continue
        try:
            rate = float(value)
        except ValueError:
            logger.warning(f"Ignoring malformed FX_RATES entry {pair.strip()!r}")
            continue
        if rate > 0:
            overrides[code] = rate
    return overrides
