"""Backend-facing alias for shared utilities."""

from __future__ import annotations

from photo_exif_shared import (
    BASIC_PROBE_FIELDS,
    EXIF_FIELD_ALLOWLIST,
    REASON_TO_ERROR,
    SUPPORTED_IMAGE_EXTENSIONS,
    ErrorCode,
    ProbeKind,
    ReasonCode,
    Result,
    SchemeKind,
    get_logger,
    log_structured,
    log_success,
    request_id_var,
    sanitize_error_message,
)

__all__ = [
    "Result",
    "ErrorCode",
    "ReasonCode",
    "SchemeKind",
    "ProbeKind",
    "get_logger",
    "log_success",
    "log_structured",
    "request_id_var",
    "sanitize_error_message",
    "SUPPORTED_IMAGE_EXTENSIONS",
    "EXIF_FIELD_ALLOWLIST",
    "BASIC_PROBE_FIELDS",
    "REASON_TO_ERROR",
]
