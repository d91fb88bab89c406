"""Shared utilities for the photo EXIF inspector."""
from .errors import sanitize_error_message
from .log import get_logger, log_structured, log_success, request_id_var
from .result import Result
from .types import (
    BASIC_PROBE_FIELDS,
    EXIF_FIELD_ALLOWLIST,
    REASON_TO_ERROR,
    SUPPORTED_IMAGE_EXTENSIONS,
    ErrorCode,
    ProbeKind,
    ReasonCode,
    SchemeKind,
)

__all__ = [
    "Result",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "sanitize_error_message",
    "ErrorCode",
    "ReasonCode",
    "SchemeKind",
    "ProbeKind",
    "SUPPORTED_IMAGE_EXTENSIONS",
    "EXIF_FIELD_ALLOWLIST",
    "BASIC_PROBE_FIELDS",
    "REASON_TO_ERROR",
]
