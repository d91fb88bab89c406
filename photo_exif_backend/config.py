"""
Configuration for the photo EXIF inspector.

All values come from the environment and are read once at import time.
"""
import logging
import os

logger = logging.getLogger(__name__)

BOOL_TRUE_VALUES = frozenset({"1", "true", "yes", "on", "enabled"})
BOOL_FALSE_VALUES = frozenset({"0", "false", "no", "off", "disabled"})


def _env_raw(*names: str, default: str | None = None) -> str | None:
    for name in names:
        if not name:
            continue
        val = os.getenv(name)
        if val is not None and str(val).strip() != "":
            return str(val).strip()
    return default


def _env_int(default: int, *names: str, min_value: int | None = None, max_value: int | None = None) -> int:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid integer for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_float(default: float, *names: str, min_value: float | None = None, max_value: float | None = None) -> float:
    raw = _env_raw(*names)
    if raw is None:
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid float for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    if min_value is not None and value < min_value:
        logger.warning("Value too small for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, min_value)
        value = min_value
    if max_value is not None and value > max_value:
        logger.warning("Value too large for %s=%s, clamped to %s", names[0] if names else "<unknown>", value, max_value)
        value = max_value
    return value


def _env_bool(default: bool, *names: str) -> bool:
    raw = _env_raw(*names)
    if raw is None:
        return default
    normalized = raw.lower()
    if normalized in BOOL_TRUE_VALUES:
        return True
    if normalized in BOOL_FALSE_VALUES:
        return False
    logger.warning("Invalid boolean for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
    return default


def _env_choice(default: str, choices: tuple[str, ...], *names: str) -> str:
    raw = _env_raw(*names)
    if raw is None:
        return default
    value = raw.lower()
    if value not in choices:
        logger.warning("Unknown value for %s=%r, using default=%s", names[0] if names else "<unknown>", raw, default)
        return default
    return value


# Decoder backend: "auto" prefers ExifTool and falls back to Pillow.
DECODER_BACKEND = _env_choice("auto", ("auto", "exiftool", "pillow"), "PHOTO_EXIF_DECODER")

EXIFTOOL_BIN = _env_raw("PHOTO_EXIF_EXIFTOOL_BIN", default="exiftool") or "exiftool"
EXIFTOOL_TIMEOUT = _env_float(15.0, "PHOTO_EXIF_EXIFTOOL_TIMEOUT", min_value=1.0, max_value=300.0)
EXIFTOOL_TRUSTED_DIRS = _env_raw("PHOTO_EXIF_EXIFTOOL_TRUSTED_DIRS", default="") or ""

DEBUG = _env_bool(False, "PHOTO_EXIF_DEBUG")

# HTTP surface limits
MAX_JSON_BYTES = _env_int(1024 * 1024, "PHOTO_EXIF_MAX_JSON_BYTES", min_value=1024, max_value=64 * 1024 * 1024)
MAX_BATCH_LOCATORS = _env_int(200, "PHOTO_EXIF_MAX_BATCH", min_value=1, max_value=10_000)
