"""Locator resolution: parse, normalize, validate, format-check."""

from .format_guard import extension_of, is_supported_format, split_basename
from .locator import APP_PREFIX, FILE_PREFIX, classify_scheme, parse_locator, strip_query_and_fragment
from .normalizer import normalize_locator, percent_decode, resolve_locator
from .validator import (
    LENIENT_POLICY,
    MAX_PATH_LENGTH,
    STRICT_POLICY,
    ValidationPolicy,
    has_traversal,
    policy_for,
    validate_canonical,
    validate_path,
)

__all__ = [
    "APP_PREFIX",
    "FILE_PREFIX",
    "LENIENT_POLICY",
    "MAX_PATH_LENGTH",
    "STRICT_POLICY",
    "ValidationPolicy",
    "classify_scheme",
    "extension_of",
    "has_traversal",
    "is_supported_format",
    "normalize_locator",
    "parse_locator",
    "percent_decode",
    "policy_for",
    "resolve_locator",
    "split_basename",
    "strip_query_and_fragment",
    "validate_canonical",
    "validate_path",
]
