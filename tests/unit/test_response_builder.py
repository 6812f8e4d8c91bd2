"""Unit tests for response formatting helpers."""

from __future__ import annotations

from http import HTTPStatus

from flask import Flask

from taxreceipt.backend.services.response_builder import build_json_response


def test_build_json_response_returns_json(app: Flask) -> None:
    """Formatting helper should generate a JSON response tuple."""

    with app.app_context():
        response, status = build_json_response({"foo": "bar"})

    assert status == 200
    assert response.get_json() == {"foo": "bar"}


def test_build_json_response_accepts_status(app: Flask) -> None:
    with app.app_context():
        _, status = build_json_response({}, HTTPStatus.CREATED)

    assert status == 201
