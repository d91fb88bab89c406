"""
Existence probe.

The probe asks the decoder for zero fields instead of calling os.stat; it has
to work wherever the decoder can read but direct filesystem access is
restricted. Outcomes are asymmetric:

- a failure classified as "not found" or "access denied" means the file does
  not exist (fail closed);
- any other failure counts as existing (fail open). The full decode then
  reports the problem as DECODE_ERROR.
"""
from __future__ import annotations

import errno
from typing import Any

from ...adapters.tools import DecodeError, decode_async
from ...models import ProbeOutcome
from ...shared import ProbeKind, get_logger

logger = get_logger(__name__)

_NOT_FOUND_MARKERS = ("enoent", "no such file", "file not found", "cannot find the file")
_ACCESS_MARKERS = ("eacces", "eperm", "permission denied", "access is denied", "access denied")

_NOT_FOUND_ERRNOS = frozenset({errno.ENOENT, errno.ENOTDIR})
_ACCESS_ERRNOS = frozenset({errno.EACCES, errno.EPERM})


def classify_decode_failure(exc: BaseException) -> ProbeKind:
    """Typed signals first, message markers only for foreign exceptions."""
    if isinstance(exc, DecodeError) and exc.kind is not ProbeKind.OTHER:
        return exc.kind
    if isinstance(exc, FileNotFoundError):
        return ProbeKind.NOT_FOUND
    if isinstance(exc, PermissionError):
        return ProbeKind.ACCESS_DENIED
    err_no = getattr(exc, "errno", None)
    if err_no in _NOT_FOUND_ERRNOS:
        return ProbeKind.NOT_FOUND
    if err_no in _ACCESS_ERRNOS:
        return ProbeKind.ACCESS_DENIED
    code = str(getattr(exc, "code", "") or "").upper()
    if code == "ENOENT":
        return ProbeKind.NOT_FOUND
    if code in ("EACCES", "EPERM"):
        return ProbeKind.ACCESS_DENIED

    message = str(exc).lower()
    if any(marker in message for marker in _NOT_FOUND_MARKERS):
        return ProbeKind.NOT_FOUND
    if any(marker in message for marker in _ACCESS_MARKERS):
        return ProbeKind.ACCESS_DENIED
    return ProbeKind.OTHER


async def probe_existence(decoder: Any, path: str) -> ProbeOutcome:
    try:
        await decode_async(decoder, path, frozenset())
    except Exception as exc:
        kind = classify_decode_failure(exc)
        if kind in (ProbeKind.NOT_FOUND, ProbeKind.ACCESS_DENIED):
            logger.warning("File missing or unreadable (%s): %s", kind.value, path)
            return ProbeOutcome(exists=False, kind=kind, error=str(exc))
        logger.warning("Existence probe failed for an unrelated reason, assuming the file exists: %s (%s)", path, exc)
        return ProbeOutcome(exists=True, kind=ProbeKind.OTHER, error=str(exc))
    return ProbeOutcome(exists=True)
