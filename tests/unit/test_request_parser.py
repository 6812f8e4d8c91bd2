"""Unit tests for request parsing helpers."""

from __future__ import annotations

import logging

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from taxreceipt.backend.services.request_parser import parse_json_object, parse_positive_int


def test_parse_json_object_returns_copy(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json={"year": 2024, "taxable_income": 50000},
    ):
        payload = parse_json_object(request)

    assert payload == {"year": 2024, "taxable_income": 50000}


def test_parse_json_object_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_json_object(request)


def test_parse_json_object_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations",
        method="POST",
        data="{not json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest):
            parse_json_object(request)


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_parse_positive_int_ignores_blank_values(raw: str | None) -> None:
    assert parse_positive_int(raw, env="TAXRECEIPT_PAGE_BUDGET") is None


@pytest.mark.parametrize("raw", ["abc", "0", "-5"])
def test_parse_positive_int_logs_and_ignores_bad_values(
    raw: str, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.WARNING):
        assert parse_positive_int(raw, env="TAXRECEIPT_PAGE_BUDGET") is None

    assert "TAXRECEIPT_PAGE_BUDGET" in caplog.text


def test_parse_positive_int_accepts_positive_values() -> None:
    assert parse_positive_int("25", env="TAXRECEIPT_PAGE_BUDGET") == 25
