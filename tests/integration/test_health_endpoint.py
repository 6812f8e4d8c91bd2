"""Integration tests for application endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

from taxreceipt.backend.config import year_config
from taxreceipt.backend.version import get_project_version


def test_health_endpoint(client: FlaskClient) -> None:
    """Ensure the health endpoint returns a successful status payload."""
    response = client.get("/health")
    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["version"] == get_project_version()
    assert payload["supported_years"] == list(year_config.available_years())
    assert payload["default_year"] == payload["supported_years"][-1]
    assert response.mimetype == "application/json"


def test_unknown_route_returns_not_found(client: FlaskClient) -> None:
    response = client.get("/api/v1/unknown")

    assert response.status_code == HTTPStatus.NOT_FOUND
