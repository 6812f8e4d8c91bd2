"""Integration tests for the page selection endpoint."""

from __future__ import annotations

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient

from taxreceipt.backend.app import create_app


def _classifications(count: int, page_type: str = "1040_main") -> list[dict[str, object]]:
    return [{"page": index + 1, "type": page_type} for index in range(count)]


def test_selection_endpoint_partitions_pages(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/pages/selection",
        json={
            "classifications": [
                {"page": 1, "type": "1040_main"},
                {"page": 2, "type": "schedule_1"},
                {"page": 3, "type": "schedule_a"},
                {"page": 4, "type": "worksheet"},
            ],
            "budget": 2,
        },
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["selected_pages"] == [1, 2]
    assert payload["skipped_pages"] == [3, 4]
    assert payload["reasons"]["4"] == "excluded: worksheet"
    assert payload["budget"] == 2
    assert "detected_year" not in payload


def test_selection_endpoint_uses_default_budget(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/pages/selection", json={"classifications": _classifications(45)}
    )

    payload = response.get_json()
    assert payload["budget"] == 40
    assert len(payload["selected_pages"]) == 40
    assert payload["skipped_pages"] == [41, 42, 43, 44, 45]


def test_selection_endpoint_honours_budget_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("TAXRECEIPT_PAGE_BUDGET", "3")
    client = create_app().test_client()

    response = client.post(
        "/api/v1/pages/selection", json={"classifications": _classifications(5)}
    )

    assert response.get_json()["selected_pages"] == [1, 2, 3]


def test_selection_endpoint_ignores_invalid_budget_environment(
    monkeypatch: pytest.MonkeyPatch, client: FlaskClient
) -> None:
    monkeypatch.setenv("TAXRECEIPT_PAGE_BUDGET", "lots")

    response = client.post(
        "/api/v1/pages/selection", json={"classifications": _classifications(2)}
    )

    assert response.get_json()["budget"] == 40


def test_selection_endpoint_reports_detected_year(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/pages/selection",
        json={"classifications": _classifications(1), "filename": "return_2023.pdf"},
    )

    assert response.get_json()["detected_year"] == 2023


@pytest.mark.parametrize(
    "payload",
    [
        {"classifications": [{"page": 0, "type": "1040_main"}]},
        {"classifications": [{"page": 1, "type": "form_w2"}]},
        {"classifications": [], "budget": 0},
    ],
)
def test_selection_endpoint_rejects_invalid_payloads(
    client: FlaskClient, payload: dict[str, object]
) -> None:
    response = client.post("/api/v1/pages/selection", json=payload)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_error"
