"""Request and response helpers shared by the HTTP routes."""

from .request_parser import parse_json_object, parse_positive_int
from .response_builder import build_json_response

__all__ = [
    "build_json_response",
    "parse_json_object",
    "parse_positive_int",
]
