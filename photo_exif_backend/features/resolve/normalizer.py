"""
Locator -> canonical local path.
"""
from __future__ import annotations

import os
import re
from urllib.parse import unquote

from ...models import CanonicalPath, ResourceLocator
from ...shared import SchemeKind, get_logger
from .locator import APP_PREFIX, FILE_PREFIX, parse_locator

logger = get_logger(__name__)

_BAD_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def percent_decode(value: str) -> str:
    """
    Strict percent-decoding that fails open.

    A stray `%` or an escape sequence that is not valid UTF-8 leaves the
    input untouched, so validation still runs on a defined string.
    """
    if _BAD_PERCENT_RE.search(value):
        logger.debug("Malformed percent-escape, keeping undecoded path: %r", value)
        return value
    try:
        return unquote(value, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        logger.debug("Percent-escape is not valid UTF-8, keeping undecoded path: %r", value)
        return value


def uses_drive_letter_paths() -> bool:
    return os.name == "nt"


def _normalize_app(cleaned: str) -> CanonicalPath:
    body = cleaned[len(APP_PREFIX):]
    slash = body.find("/")
    if slash == -1:
        logger.warning("app:// locator has no path after its identifier: %r", cleaned)
        return CanonicalPath(value=cleaned, scheme=SchemeKind.APP, malformed=True)
    # body[:slash] is the opaque vault/app identifier
    return CanonicalPath(value=percent_decode(body[slash:]), scheme=SchemeKind.APP)


def _normalize_file(cleaned: str, drive_letter_paths: bool) -> CanonicalPath:
    body = cleaned[len(FILE_PREFIX):]
    # file:///C:/x -> C:/x on Windows; file:///home/x stays absolute elsewhere
    if drive_letter_paths and body.startswith("/"):
        body = body[1:]
    return CanonicalPath(value=percent_decode(body), scheme=SchemeKind.FILE)


def normalize_locator(locator: ResourceLocator, *, drive_letter_paths: bool | None = None) -> CanonicalPath:
    if drive_letter_paths is None:
        drive_letter_paths = uses_drive_letter_paths()
    if locator.scheme is SchemeKind.APP:
        return _normalize_app(locator.cleaned)
    if locator.scheme is SchemeKind.FILE:
        return _normalize_file(locator.cleaned, drive_letter_paths)
    return CanonicalPath(value=locator.cleaned, scheme=SchemeKind.PLAIN)


def resolve_locator(raw: str, *, drive_letter_paths: bool | None = None) -> CanonicalPath:
    """Parse and normalize in one step."""
    return normalize_locator(parse_locator(raw), drive_letter_paths=drive_letter_paths)
