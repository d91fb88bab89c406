"""
Helpers for sanitizing error messages before they reach clients.
"""
from __future__ import annotations

import os
import re
from typing import Any

from .log import get_logger

logger = get_logger(__name__)
_WINDOWS_PATH_RE = re.compile(r"[A-Za-z]:\\[^\s]+")
_UNC_PATH_RE = re.compile(r"\\\\[^\s\\]+\\[^\s]+")
_UNIX_PATH_RE = re.compile(r"(?<![A-Za-z0-9:/?&=#%])/(?!/)[^\s#?]+")


def debug_mode_enabled() -> bool:
    return os.getenv("PHOTO_EXIF_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")


def mask_paths(value: str) -> str:
    """Mask path-looking substrings to avoid leaking filesystem structure."""
    cleaned = _WINDOWS_PATH_RE.sub("[path]", value)
    cleaned = _UNC_PATH_RE.sub("[path]", cleaned)
    return _UNIX_PATH_RE.sub("[path]", cleaned)


def sanitize_error_message(exc: Any, fallback: str) -> str:
    """
    Build a safe error message for clients.

    Paths are masked unless PHOTO_EXIF_DEBUG is on, in which case the
    message is passed through so local debugging stays practical.

    Args:
        exc: Exception or raw value to sanitize.
        fallback: Fallback message to show when nothing meaningful remains.

    Returns:
        A string suitable for inclusion in API responses.
    """
    if not fallback:
        fallback = "An error occurred"
    if exc is None:
        return fallback

    raw = str(exc)
    if not raw:
        return fallback

    flattened = " ".join(raw.splitlines()).strip()
    if debug_mode_enabled():
        logger.debug("Unmasked error payload: %s", flattened)
        sanitized = flattened
    else:
        sanitized = mask_paths(flattened)

    if sanitized:
        return f"{fallback}: {sanitized[:200]}"
    return fallback
