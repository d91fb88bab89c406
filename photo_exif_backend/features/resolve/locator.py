"""
Locator parsing: strip query/fragment suffixes and classify the scheme.
"""
from __future__ import annotations

from ...models import ResourceLocator
from ...shared import SchemeKind

APP_PREFIX = "app://"
FILE_PREFIX = "file://"


def strip_query_and_fragment(raw: str) -> str:
    """
    Drop everything from the first `?`, then from the first `#` of what remains.

    Resource URLs handed out by the host often carry cache-busting queries
    (`photo.jpeg?1759560592036`); those must never reach the filesystem.
    """
    cleaned = raw.split("?", 1)[0]
    return cleaned.split("#", 1)[0]


def classify_scheme(cleaned: str) -> SchemeKind:
    if cleaned.startswith(APP_PREFIX):
        return SchemeKind.APP
    if cleaned.startswith(FILE_PREFIX):
        return SchemeKind.FILE
    return SchemeKind.PLAIN


def parse_locator(raw: str) -> ResourceLocator:
    """Never raises; malformed scheme bodies are left to the normalizer."""
    text = raw if isinstance(raw, str) else ("" if raw is None else str(raw))
    cleaned = strip_query_and_fragment(text)
    return ResourceLocator(raw=text, cleaned=cleaned, scheme=classify_scheme(cleaned))
