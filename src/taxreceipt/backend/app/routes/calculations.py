"""REST endpoints for tax calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from taxreceipt.backend.app.services.calculation_service import calculate_tax
from taxreceipt.backend.services import build_json_response, parse_json_object

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Create a tax calculation using the submitted JSON payload."""

    payload = parse_json_object(request)
    result = calculate_tax(payload)

    return build_json_response(result)
