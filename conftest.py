import pytest

from library_catalog.library import Catalog
from library_catalog.main import build_sample_catalog
from library_catalog.ui_helpers import OUTPUT_MODE_ENV


@pytest.fixture
def catalog():
    # Fresh, empty catalog for each test
    return Catalog()


@pytest.fixture
def sample_catalog():
    # ISBN-001..003 and patrons U001 (Alice), U002 (Bob)
    return build_sample_catalog()


@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    # set_output_mode writes to os.environ; restored after each test
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")
