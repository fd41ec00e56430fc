from pathlib import Path

import pytest

from engine.loader import load_catalog

SAMPLE_CATALOG = Path(__file__).resolve().parent.parent / "data" / "sample_catalog.json"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    # keep a developer's .env / shell settings out of the tests
    for key in ("CATALOG_PATH", "LOG_LEVEL", "FX_RATES"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def sample_catalog_path() -> Path:
    return SAMPLE_CATALOG


@pytest.fixture
def sample_products(sample_catalog_path):
    return load_catalog(sample_catalog_path)
