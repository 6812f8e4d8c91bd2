"""Application factory for the tax receipt backend."""

import logging
import os
from importlib import util as importlib_util
from typing import Callable, cast
from warnings import warn

from flask import Flask, Response, jsonify, request
from flask.typing import ResponseReturnValue
from werkzeug.exceptions import BadRequest

from taxreceipt.backend.config.schema import ConfigurationError

from .http import configuration_error, not_found, problem_response, validation_error
from .routes import register_routes
from .routes.config import get_configuration_metadata

CORS: Callable[..., None] | None

if importlib_util.find_spec("flask_cors") is not None:
    from flask_cors import CORS as _cors

    CORS = cast(Callable[..., None], _cors)
else:  # pragma: no cover - executed only when optional dependency missing
    CORS = None

_LOGGER = logging.getLogger(__name__)

_API_RESOURCES = r"/api/*"
_CORS_METHODS = ("GET", "POST", "OPTIONS")
_CORS_HEADERS = ("Content-Type",)


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def _cors_headers(origin: str | None, allowed_origins: set[str]) -> dict[str, str]:
    if not origin or origin not in allowed_origins:
        return {}
    return {
        "Access-Control-Allow-Origin": origin,
        "Access-Control-Allow-Methods": ", ".join(_CORS_METHODS),
        "Access-Control-Allow-Headers": ", ".join(_CORS_HEADERS),
        "Vary": "Origin",
    }


def _install_fallback_cors(app: Flask, allowed_origins: set[str]) -> None:
    """Answer API preflights and tag API responses without Flask-Cors."""

    @app.before_request
    def _answer_preflight() -> ResponseReturnValue | None:
        if request.method != "OPTIONS" or not request.path.startswith("/api/"):
            return None
        origin = request.headers.get("Origin")
        if origin and origin not in allowed_origins:
            return app.make_response(("", 403))
        return app.make_default_options_response()

    @app.after_request
    def _attach_cors_headers(response: Response) -> Response:
        if request.path.startswith("/api/"):
            response.headers.update(_cors_headers(request.headers.get("Origin"), allowed_origins))
        return response


def create_app() -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)

    allowed_origins = _parse_allowed_origins(os.getenv("TAXRECEIPT_ALLOWED_ORIGINS"))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    if CORS is not None:
        CORS(
            app,
            resources={_API_RESOURCES: {"origins": sorted(allowed_origins)}},
            supports_credentials=False,
            methods=list(_CORS_METHODS),
            allow_headers=list(_CORS_HEADERS),
        )
    else:
        warn(
            "Flask-Cors is not installed; falling back to a minimal CORS implementation. "
            "Install the 'cors' extra for production use.",
            stacklevel=1,
        )
        _install_fallback_cors(app, allowed_origins)

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        payload = {"status": "ok", **get_configuration_metadata()}
        return jsonify(payload)

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(error: ConfigurationError):
        """Report broken rule-set data as a server fault, not a client error."""

        _LOGGER.error("Rule-set configuration is invalid: %s", error)
        return configuration_error("Tax rule configuration is unavailable").to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Surface request validation failures to clients."""

        _LOGGER.info("Rejected request to %s: %s", request.path, error)
        return validation_error(str(error)).to_response()

    @app.errorhandler(LookupError)
    def handle_lookup_error(error: LookupError):
        """Report years that no rule-set covers."""

        message = error.args[0] if error.args else "Resource not found"
        return not_found(str(message)).to_response()

    return app
