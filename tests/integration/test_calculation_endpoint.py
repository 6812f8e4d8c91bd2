"""Integration tests for the tax calculation REST endpoint."""

from __future__ import annotations

import json
from http import HTTPStatus
from pathlib import Path
from typing import Dict, Iterable

import pytest
from flask.testing import FlaskClient

from taxreceipt.backend.app.services import calculation_service
from taxreceipt.backend.config.schema import ConfigurationError

DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


def _load_scenarios() -> Iterable[Dict[str, object]]:
    with DATA_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@pytest.mark.parametrize("scenario", _load_scenarios(), ids=lambda item: item["name"])
def test_calculation_endpoint_matches_regression_scenarios(
    client: FlaskClient, scenario: Dict[str, object]
) -> None:
    """Each regression scenario should remain stable over time."""

    response = client.post("/api/v1/calculations", json=scenario["payload"])
    assert response.status_code == HTTPStatus.OK

    result = response.get_json()
    expected = scenario["expectations"]

    summary = result["summary"]
    for key, value in expected["summary"].items():
        assert summary[key] == pytest.approx(value)

    offsets = {item["type"]: item["amount"] for item in result["offsets"]}
    assert offsets == pytest.approx(expected["offsets"])


def test_calculation_endpoint_reports_applied_year(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations", json={"year": 2030, "taxable_income": 50000}
    )

    assert response.status_code == HTTPStatus.OK
    meta = response.get_json()["meta"]
    assert meta["requested_year"] == 2030
    assert meta["applied_year"] == 2024


def test_calculation_endpoint_rejects_negative_income(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations", json={"year": 2024, "taxable_income": -100}
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert "taxable_income" in payload["message"]


def test_calculation_endpoint_rejects_unknown_fields(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"year": 2024, "taxable_income": 1000, "currency": "AUD"},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_calculation_endpoint_returns_404_for_uncovered_year(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations", json={"year": 2001, "taxable_income": 1000}
    )

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["error"] == "not_found"


def test_calculation_endpoint_requires_json_object(client: FlaskClient) -> None:
    response = client.post("/api/v1/calculations", json=[2024, 1000])

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "bad_request"


def test_calculation_endpoint_rejects_invalid_json(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations", data="{", content_type="application/json"
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST


def test_calculation_endpoint_reports_broken_rule_set_as_server_error(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _broken_rule_set(year: int):
        raise ConfigurationError(f"Configuration validation failed for {year}")

    monkeypatch.setattr(calculation_service, "resolve_rule_set", _broken_rule_set)

    response = client.post(
        "/api/v1/calculations", json={"year": 2024, "taxable_income": 50000}
    )

    assert response.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert response.get_json() == {
        "error": "configuration_error",
        "message": "Tax rule configuration is unavailable",
    }


def test_calculation_endpoint_treats_false_string_as_no_cover(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "year": 2024,
            "taxable_income": 97500,
            "household": {"has_qualifying_cover": "false"},
        },
    )

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["summary"]["surcharge"] == pytest.approx(1462.5)
