"""Expose the YAML-backed rule-sets to API clients.

Clients use these endpoints to discover which fiscal years are supported and
to display the thresholds behind a calculation without duplicating them.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from taxreceipt.backend.config.year_config import (
    YearConfiguration,
    available_years,
    load_manifest,
    load_year_configuration,
    resolve_rule_set,
)
from taxreceipt.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    supported_years = list(manifest.supported_years)
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _serialise_year(config: YearConfiguration) -> dict[str, Any]:
    payload = config.model_dump(mode="json")
    entry = load_manifest().get_entry(config.year)
    payload["status"] = entry.status
    if entry.notes_url:
        payload["notes_url"] = entry.notes_url
    return payload


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose the version identifier of the running service."""

    return jsonify({"version": get_project_version()}), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return all configured years with their serialised rule-sets."""

    years = [_serialise_year(load_year_configuration(year)) for year in available_years()]
    metadata = get_configuration_metadata()
    payload = {
        "years": years,
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>")
def get_year(year: int) -> tuple[Any, int]:
    """Return the rule-set governing ``year``; unknown early years yield 404."""

    config = resolve_rule_set(year)
    payload = _serialise_year(config)
    payload["requested_year"] = year
    payload["applied_year"] = config.year
    return jsonify(payload), 200
