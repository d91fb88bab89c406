"""
Image format allowlist check.
"""
from __future__ import annotations

from typing import Any, Optional

from ...shared import SUPPORTED_IMAGE_EXTENSIONS


def is_supported_format(path: Any) -> bool:
    """Case-insensitive suffix match. Pure and total: anything that is not a str is unsupported."""
    if not isinstance(path, str):
        return False
    return path.lower().endswith(SUPPORTED_IMAGE_EXTENSIONS)


def split_basename(path: str) -> tuple[str, str]:
    """Split on the last `/` or `\\` regardless of the host platform."""
    cut = max(path.rfind("/"), path.rfind("\\"))
    if cut == -1:
        return "", path
    return path[:cut], path[cut + 1:]


def extension_of(path: str) -> Optional[str]:
    _, basename = split_basename(path or "")
    dot = basename.rfind(".")
    return basename[dot:] if dot != -1 else None
