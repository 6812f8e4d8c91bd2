"""Endpoint aggregating stored returns into a multi-year summary."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request
from pydantic import ValidationError

from taxreceipt.backend.app.models import (
    SummaryRequest,
    format_validation_error,
    load_year_records,
)
from taxreceipt.backend.app.services.summary_service import aggregate_summary
from taxreceipt.backend.services import build_json_response, parse_json_object

blueprint = Blueprint("summaries", __name__, url_prefix="/api/v1/summaries")


@blueprint.post("")
def create_summary() -> tuple[Any, int]:
    payload = parse_json_object(request)
    try:
        summary_request = SummaryRequest.model_validate(payload)
        records = load_year_records(summary_request.returns)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc, subject="summary payload")) from exc

    summary = aggregate_summary(records)
    return build_json_response(
        {"summary": summary.as_dict() if summary is not None else None}
    )


__all__ = ["blueprint"]
