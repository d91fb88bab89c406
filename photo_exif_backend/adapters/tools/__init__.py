"""Metadata decoder backends."""

from typing import Optional, Union

from ...config import DECODER_BACKEND, EXIFTOOL_BIN, EXIFTOOL_TIMEOUT
from ...shared import get_logger, log_success
from .base import DecodeError, Decoder, decode_async
from .exiftool import ExifToolDecoder
from .pillow_reader import PillowDecoder

logger = get_logger(__name__)


def build_decoder(
    preference: Optional[str] = None,
    *,
    bin_name: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Union[ExifToolDecoder, PillowDecoder]:
    """
    Pick the decoder backend.

    "auto" uses ExifTool when it resolves to a trusted binary and Pillow
    otherwise; "exiftool" and "pillow" force a backend.
    """
    mode = (preference or DECODER_BACKEND or "auto").strip().lower()
    if mode == "pillow":
        return PillowDecoder()

    exiftool = ExifToolDecoder(bin_name=bin_name or EXIFTOOL_BIN, timeout=timeout if timeout is not None else EXIFTOOL_TIMEOUT)
    if exiftool.is_available():
        log_success(logger, f"ExifTool is available: {exiftool.bin}")
        return exiftool
    if mode == "exiftool":
        logger.warning("ExifTool forced but not found - every decode will fail with TOOL_MISSING")
        return exiftool
    logger.warning("ExifTool not found - falling back to the Pillow decoder")
    return PillowDecoder()


__all__ = ["DecodeError", "Decoder", "ExifToolDecoder", "PillowDecoder", "build_decoder", "decode_async"]
