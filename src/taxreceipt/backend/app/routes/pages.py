"""Endpoint choosing which classified pages go on to extraction."""

from __future__ import annotations

import os
from typing import Any

from flask import Blueprint, request
from pydantic import ValidationError

from taxreceipt.backend.app.models import PageSelectionRequest, format_validation_error
from taxreceipt.backend.app.services.page_selection import DEFAULT_PAGE_BUDGET, select_pages
from taxreceipt.backend.app.services.year_extractor import extract_year_from_filename
from taxreceipt.backend.services import (
    build_json_response,
    parse_json_object,
    parse_positive_int,
)

blueprint = Blueprint("pages", __name__, url_prefix="/api/v1/pages")

PAGE_BUDGET_ENV = "TAXRECEIPT_PAGE_BUDGET"


def _default_budget() -> int:
    configured = parse_positive_int(os.getenv(PAGE_BUDGET_ENV), env=PAGE_BUDGET_ENV)
    return configured if configured is not None else DEFAULT_PAGE_BUDGET


@blueprint.post("/selection")
def create_selection() -> tuple[Any, int]:
    payload = parse_json_object(request)
    try:
        selection_request = PageSelectionRequest.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc, subject="page selection payload")) from exc

    budget = selection_request.budget or _default_budget()
    selection = select_pages(
        [entry.to_classification() for entry in selection_request.classifications],
        budget=budget,
    )

    response: dict[str, Any] = {**selection.as_dict(), "budget": budget}
    if selection_request.filename:
        response["detected_year"] = extract_year_from_filename(selection_request.filename)
    return build_json_response(response)
