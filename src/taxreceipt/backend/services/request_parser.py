"""Helpers for normalising incoming request bodies and settings."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest

logger = logging.getLogger(__name__)


def parse_json_object(req: Request) -> dict[str, Any]:
    """Extract a JSON object from ``req`` or raise :class:`BadRequest`."""

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    return dict(data)


def parse_positive_int(value: str | None, *, env: str) -> int | None:
    """Parse an environment override, ignoring blank or invalid values."""

    if value is None or not value.strip():
        return None
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("Ignoring invalid value for %s: %s", env, value)
        return None
    if parsed <= 0:
        logger.warning("Ignoring non-positive value for %s: %s", env, value)
        return None
    return parsed


__all__ = ["parse_json_object", "parse_positive_int"]
