"""Shared fixtures for the tax receipt test-suite."""

import sys
from pathlib import Path

# Allow running ``pytest`` from a fresh checkout without an editable install.
SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from taxreceipt.backend.app import create_app  # noqa: E402
from taxreceipt.backend.config.year_config import (  # noqa: E402
    YearConfiguration,
    load_year_configuration,
)

_ENVIRONMENT_SETTINGS = (
    "TAXRECEIPT_PAGE_BUDGET",
    "TAXRECEIPT_PROFILE_CALCULATIONS",
)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell settings from leaking into assertions."""

    for name in _ENVIRONMENT_SETTINGS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def rule_set_2024() -> YearConfiguration:
    """Stage 3 rule-set used by most calculator scenarios."""

    return load_year_configuration(2024)


@pytest.fixture()
def app() -> Flask:
    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    return app.test_client()
