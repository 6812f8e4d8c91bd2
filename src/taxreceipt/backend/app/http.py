"""Problem payloads returned by the tax receipt API on failure."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Mapping

from flask import jsonify


@dataclass(frozen=True)
class ProblemResponse:
    """RFC 7807-style error body: a machine code, a status and a message."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse`; keyword extras are merged into the body."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


def not_found(message: str, **extra: Any) -> ProblemResponse:
    return problem_response("not_found", status=HTTPStatus.NOT_FOUND, message=message, **extra)


def validation_error(message: str, **extra: Any) -> ProblemResponse:
    return problem_response(
        "validation_error", status=HTTPStatus.BAD_REQUEST, message=message, **extra
    )


def configuration_error(message: str, **extra: Any) -> ProblemResponse:
    return problem_response(
        "configuration_error",
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        message=message,
        **extra,
    )


__all__ = [
    "ProblemResponse",
    "configuration_error",
    "not_found",
    "problem_response",
    "validation_error",
]
