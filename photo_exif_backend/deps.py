"""
Dependency injection - builds services.
Simple, debug-friendly DI without framework magic.
"""
import logging
from typing import Any, Optional

from .adapters.tools import ExifToolDecoder, PillowDecoder, build_decoder
from .config import DEBUG, DECODER_BACKEND
from .features.diagnostics import DiagnosticService
from .features.metadata import ExifService
from .shared import ErrorCode, Result, get_logger, log_success

logger = get_logger(__name__)


def _apply_debug_logging() -> None:
    if DEBUG:
        logging.getLogger("photo_exif").setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled (PHOTO_EXIF_DEBUG)")


def _log_decoder(decoder: Any) -> None:
    if isinstance(decoder, ExifToolDecoder):
        if decoder.is_available():
            log_success(logger, "Metadata decoder: ExifTool")
        else:
            logger.warning("Metadata decoder: ExifTool (unavailable) - reads will fail until it is installed")
    elif isinstance(decoder, PillowDecoder):
        logger.info("Metadata decoder: Pillow")
    else:
        logger.info("Metadata decoder: %s", getattr(decoder, "name", type(decoder).__name__))


async def build_services(decoder: Optional[Any] = None) -> Result[dict]:
    """
    Build all services (DI container).

    Args:
        decoder: Decoder to use instead of the configured backend (tests, embedding)

    Returns:
        Result[dict] of service instances
    """
    _apply_debug_logging()
    logger.info("Building services...")
    if decoder is None:
        try:
            decoder = build_decoder(DECODER_BACKEND)
        except Exception as exc:
            logger.error("Failed to initialize metadata decoder: %s", exc)
            return Result.Err(ErrorCode.SERVICE_UNAVAILABLE, f"Failed to initialize metadata decoder: {exc}")

    _log_decoder(decoder)

    services = {
        "decoder": decoder,
        "metadata": ExifService(decoder),
        "diagnostics": DiagnosticService(decoder),
    }
    log_success(logger, "All services initialized")
    return Result.Ok(services)
