"""Integration coverage for rule-set endpoints."""

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient

from taxreceipt.backend.config import year_config
from taxreceipt.backend.version import get_project_version


def test_meta_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/meta")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload == {"version": get_project_version()}


def test_list_years_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert [entry["year"] for entry in payload["years"]] == list(year_config.available_years())
    assert payload["default_year"] == 2024
    assert payload["supported_years"] == [2022, 2023, 2024]

    current = payload["years"][-1]
    assert current["status"] == "active"
    assert current["meta"]["label"] == "2024-25 resident rates (stage 3)"
    assert current["brackets"][1] == {"threshold": 18200, "rate": pytest.approx(0.16), "base": 0}
    assert current["levy"]["phase_in"] == {"lower": 24276, "upper": 30345}
    assert current["surcharge"]["tiers"] == pytest.approx([0.01, 0.0125, 0.015])
    assert current["offsets"]["low_middle_income"] is None

    archived = payload["years"][0]
    assert archived["status"] == "archived"
    assert archived["offsets"]["low_middle_income"]["full_amount"] == 675


def test_year_endpoint_returns_exact_rule_set(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2023")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["requested_year"] == 2023
    assert payload["applied_year"] == 2023
    assert payload["year"] == 2023


def test_year_endpoint_falls_back_for_future_years(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2029")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["requested_year"] == 2029
    assert payload["applied_year"] == 2024


def test_year_endpoint_returns_not_found_before_first_rule_set(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/1995")

    assert response.status_code == HTTPStatus.NOT_FOUND
    payload = response.get_json()
    assert payload["error"] == "not_found"
    assert "1995" in payload["message"]
