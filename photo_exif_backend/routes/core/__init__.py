"""
Core utilities for route handlers.
"""
from .request_json import _read_json
from .response import _json_response
from .services import _build_services, _require_services, get_services_error, prewarm_services, reset_services

__all__ = [
    "_json_response",
    "_read_json",
    "_require_services",
    "_build_services",
    "get_services_error",
    "prewarm_services",
    "reset_services",
]
