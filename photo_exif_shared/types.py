"""
Shared types, enums, and constants.
"""
from enum import Enum
from typing import Final


class ErrorCode(str, Enum):
    """Standardized error codes (string enum)."""

    # Locator / path safety
    MALFORMED_SCHEME = "MALFORMED_SCHEME"
    TRAVERSAL = "TRAVERSAL"
    DENYLISTED_PATH = "DENYLISTED_PATH"
    PATH_TOO_LONG = "PATH_TOO_LONG"
    SUSPICIOUS_PATTERN = "SUSPICIOUS_PATTERN"
    HIDDEN_ROOT_FILE = "HIDDEN_ROOT_FILE"
    UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"

    # Decoder outcomes
    NOT_FOUND = "NOT_FOUND"
    DECODE_ERROR = "DECODE_ERROR"
    EMPTY_METADATA = "EMPTY_METADATA"

    # Transport / service
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_JSON = "INVALID_JSON"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    TOOL_MISSING = "TOOL_MISSING"
    TIMEOUT = "TIMEOUT"


class ReasonCode(str, Enum):
    """Outcome of a single path validation."""

    OK = "OK"
    TRAVERSAL = "TRAVERSAL"
    DENYLISTED_SYSTEM_PATH = "DENYLISTED_SYSTEM_PATH"
    TOO_LONG = "TOO_LONG"
    SUSPICIOUS_PATTERN = "SUSPICIOUS_PATTERN"
    HIDDEN_ROOT_FILE = "HIDDEN_ROOT_FILE"
    MALFORMED_SCHEME = "MALFORMED_SCHEME"


class SchemeKind(str, Enum):
    """Locator schemes, derived from the raw string prefix."""

    APP = "app"
    FILE = "file"
    PLAIN = "plain"


class ProbeKind(str, Enum):
    """How a decoder failure is classified by the existence probe."""

    OK = "ok"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"
    OTHER = "other"


# Verdict reason -> pipeline error code
REASON_TO_ERROR: Final[dict[ReasonCode, ErrorCode]] = {
    ReasonCode.TRAVERSAL: ErrorCode.TRAVERSAL,
    ReasonCode.DENYLISTED_SYSTEM_PATH: ErrorCode.DENYLISTED_PATH,
    ReasonCode.TOO_LONG: ErrorCode.PATH_TOO_LONG,
    ReasonCode.SUSPICIOUS_PATTERN: ErrorCode.SUSPICIOUS_PATTERN,
    ReasonCode.HIDDEN_ROOT_FILE: ErrorCode.HIDDEN_ROOT_FILE,
    ReasonCode.MALFORMED_SCHEME: ErrorCode.MALFORMED_SCHEME,
}

SUPPORTED_IMAGE_EXTENSIONS: Final[tuple[str, ...]] = (".jpg", ".jpeg", ".png", ".webp", ".tiff", ".tif")

# Fields requested from the decoder on a full read
EXIF_FIELD_ALLOWLIST: Final[frozenset[str]] = frozenset({
    "DateTimeOriginal",
    "CreateDate",
    "Make",
    "Model",
    "ApertureValue",
    "ShutterSpeedValue",
    "ISO",
    "FocalLength",
    "LensModel",
    "GPSLatitude",
    "GPSLongitude",
    "GPSAltitude",
    "latitude",
    "longitude",
    "ImageWidth",
    "ImageHeight",
    "Orientation",
    "Software",
    "Artist",
    "Copyright",
})

# Fields requested by the minimal (basic) probe
BASIC_PROBE_FIELDS: Final[frozenset[str]] = frozenset({"ImageWidth", "ImageHeight", "Orientation"})
