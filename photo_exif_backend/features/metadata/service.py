"""
Exif service - runs one locator through the read pipeline.

    parse -> normalize -> validate -> format check -> existence probe
          -> decode -> build record

Every stage either passes its output on or stops the run with an Err whose
code names the rejecting stage. Nothing raised by a decoder reaches the
caller.
"""
import asyncio
import logging
from typing import Any, Iterable, List, Optional

from ...adapters.tools import DecodeError, decode_async
from ...models import CanonicalPath, ImageInfo, MetadataRecord
from ...shared import (
    BASIC_PROBE_FIELDS,
    EXIF_FIELD_ALLOWLIST,
    REASON_TO_ERROR,
    ErrorCode,
    Result,
    get_logger,
    log_structured,
)
from ..resolve import is_supported_format, resolve_locator, validate_canonical
from .probe import probe_existence
from .record import build_record

logger = get_logger(__name__)


def _reject(stage: str, code: ErrorCode, message: str, locator: Any, **meta: Any) -> Result[Any]:
    log_structured(logger, logging.WARNING, message, code=code.value, stage=stage, locator=locator)
    return Result.Err(code, message, stage=stage, **meta)


def _validated(canonical: CanonicalPath, locator: Any) -> Result[str]:
    verdict = validate_canonical(canonical)
    if not verdict.accepted:
        code = REASON_TO_ERROR[verdict.reason]
        return _reject(
            "validate",
            code,
            f"Path rejected ({verdict.reason.value})",
            locator,
            reason=verdict.reason.value,
            policy=verdict.policy,
        )
    return Result.Ok(canonical.value)


def _format_checked(path: str, locator: Any) -> Result[str]:
    if not is_supported_format(path):
        return _reject("format", ErrorCode.UNSUPPORTED_FORMAT, "Unsupported image format", locator)
    return Result.Ok(path)


def check_locator(locator: Any) -> Result[str]:
    """Synchronous front half of the pipeline: locator -> safe, supported local path."""
    canonical = resolve_locator(locator)
    return _validated(canonical, locator).and_then(lambda path: _format_checked(path, locator))


class ExifService:
    """Reads allowlisted photo metadata through a pluggable decoder."""

    def __init__(self, decoder: Any):
        self._decoder = decoder

    @property
    def decoder(self) -> Any:
        return self._decoder

    @property
    def decoder_name(self) -> str:
        return str(getattr(self._decoder, "name", type(self._decoder).__name__))

    async def read_metadata(self, locator: Any) -> Result[MetadataRecord]:
        checked = check_locator(locator)
        if not checked.ok:
            return checked  # type: ignore[return-value]
        path = str(checked.data)

        probe = await probe_existence(self._decoder, path)
        if not probe.exists:
            return _reject(
                "exists",
                ErrorCode.NOT_FOUND,
                "File not found or not readable",
                locator,
                probe=probe.kind.value,
            )

        try:
            raw = await decode_async(self._decoder, path, EXIF_FIELD_ALLOWLIST)
        except DecodeError as exc:
            logger.debug("Decoder %s failed on %s: %s", self.decoder_name, path, exc)
            return _reject("decode", exc.code, str(exc), locator)
        except Exception as exc:
            logger.debug("Decoder %s raised unexpectedly on %s: %s", self.decoder_name, path, exc)
            return _reject("decode", ErrorCode.DECODE_ERROR, str(exc), locator)

        if not raw:
            return _reject("decode", ErrorCode.EMPTY_METADATA, "No embedded metadata", locator)

        try:
            record = build_record(raw)
        except Exception as exc:
            logger.debug("Record build failed for %s: %s", path, exc)
            return _reject("decode", ErrorCode.DECODE_ERROR, f"Unreadable metadata values: {exc}", locator)
        logger.debug("Read %d metadata fields from %s", len(raw), path)
        return Result.Ok(record, decoder=self.decoder_name, field_count=len(raw))

    async def read_exif(self, locator: Any) -> Optional[MetadataRecord]:
        """Populated record, or None when any stage rejected the locator."""
        result = await self.read_metadata(locator)
        return result.data if result.ok else None

    async def read_batch(self, locators: Iterable[Any]) -> List[Optional[MetadataRecord]]:
        """
        Read many locators concurrently.

        Each item runs the full pipeline on its own; a failure only nulls that
        slot. Output order follows input order.
        """
        items = list(locators)
        if not items:
            return []
        results = await asyncio.gather(*(self.read_exif(item) for item in items), return_exceptions=True)
        out: List[Optional[MetadataRecord]] = []
        for item, res in zip(items, results):
            if isinstance(res, BaseException):
                logger.warning("Batch item failed unexpectedly (%r): %s", item, res)
                out.append(None)
            else:
                out.append(res)
        return out

    async def get_image_info(self, locator: Any) -> ImageInfo:
        """Basic width/height/orientation probe; `has_exif=False` on any failure."""
        checked = check_locator(locator)
        if not checked.ok:
            return ImageInfo()
        try:
            raw = await decode_async(self._decoder, str(checked.data), BASIC_PROBE_FIELDS)
        except Exception as exc:
            logger.debug("Basic probe failed for %r: %s", locator, exc)
            return ImageInfo()
        if not raw:
            return ImageInfo()
        try:
            record = build_record(raw)
        except Exception as exc:
            logger.debug("Basic record build failed for %r: %s", locator, exc)
            return ImageInfo()
        return ImageInfo(
            width=record.image_width,
            height=record.image_height,
            orientation=record.orientation,
            has_exif=True,
        )
