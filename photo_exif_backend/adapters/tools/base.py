"""
Decoder contract shared by every metadata backend.

    decode(path, fields) -> dict[str, value]   (raises DecodeError)

`fields` is a subset of EXIF_FIELD_ALLOWLIST; an empty set asks the decoder
only to open the file, which is how the existence probe works.
"""
from __future__ import annotations

import asyncio
from typing import Any, Protocol, runtime_checkable

from ...shared import ErrorCode, ProbeKind


class DecodeError(Exception):
    """Raised by decoders; `kind` tells the existence probe what went wrong."""

    def __init__(self, message: str, kind: ProbeKind = ProbeKind.OTHER, code: ErrorCode = ErrorCode.DECODE_ERROR):
        super().__init__(message)
        self.kind = kind
        self.code = code


@runtime_checkable
class Decoder(Protocol):
    name: str

    def decode(self, path: str, fields: frozenset[str]) -> dict[str, Any]: ...


async def decode_async(decoder: Any, path: str, fields: frozenset[str]) -> dict[str, Any]:
    """Prefer a native `adecode`, otherwise run the blocking decoder in a worker thread."""
    adecode = getattr(decoder, "adecode", None)
    if callable(adecode):
        return await adecode(path, fields)
    return await asyncio.to_thread(decoder.decode, path, fields)
