"""
In-process metadata decoder built on Pillow.

Used when ExifTool is unavailable. Only EXIF-sourced values are reported:
pixel dimensions come from the ImageWidth/ExifImageWidth tags, never from the
decoded raster, so an image without embedded metadata decodes to `{}`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from PIL import ExifTags, Image, UnidentifiedImageError

from ...shared import ErrorCode, ProbeKind, get_logger
from .base import DecodeError

logger = get_logger(__name__)

_EXIF_IFD = 0x8769
_GPS_IFD = 0x8825

# Allowlist field -> Pillow tag names, first match wins
_FIELD_SOURCES: Dict[str, tuple[str, ...]] = {
    "DateTimeOriginal": ("DateTimeOriginal",),
    "CreateDate": ("DateTimeDigitized",),
    "Make": ("Make",),
    "Model": ("Model",),
    "ApertureValue": ("ApertureValue",),
    "ShutterSpeedValue": ("ShutterSpeedValue",),
    "ISO": ("ISOSpeedRatings", "PhotographicSensitivity"),
    "FocalLength": ("FocalLength",),
    "LensModel": ("LensModel",),
    "ImageWidth": ("ImageWidth", "ExifImageWidth"),
    "ImageHeight": ("ImageLength", "ExifImageHeight"),
    "Orientation": ("Orientation",),
    "Software": ("Software",),
    "Artist": ("Artist",),
    "Copyright": ("Copyright",),
}


def _coerce(value: Any) -> Any:
    """Rationals -> float, bytes/str -> trimmed text, sequences recursively."""
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        text = value.replace("\x00", "").strip()
        return text or None
    if isinstance(value, (tuple, list)):
        items = [_coerce(v) for v in value]
        if len(items) == 1:
            return items[0]
        return items
    if isinstance(value, (bool, int)):
        return value
    try:
        as_float = float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return value
    if as_float != as_float:
        return None
    return as_float


def _dms_to_decimal(dms: Any, ref: Any) -> Optional[float]:
    coerced = _coerce(dms)
    if isinstance(coerced, (int, float)):
        parts = [float(coerced)]
    elif isinstance(coerced, list) and coerced:
        try:
            parts = [float(p) for p in coerced]
        except (TypeError, ValueError):
            return None
    else:
        return None
    degrees = parts[0]
    minutes = parts[1] if len(parts) > 1 else 0.0
    seconds = parts[2] if len(parts) > 2 else 0.0
    decimal = degrees + minutes / 60.0 + seconds / 3600.0
    ref_text = _coerce(ref)
    if isinstance(ref_text, str) and ref_text.upper() in ("S", "W"):
        decimal = -decimal
    return decimal


def _altitude(gps: Dict[str, Any]) -> Optional[float]:
    value = _coerce(gps.get("GPSAltitude"))
    if not isinstance(value, (int, float)):
        return None
    ref = gps.get("GPSAltitudeRef")
    if isinstance(ref, bytes):
        ref = ref[:1] == b"\x01"
    return -float(value) if ref in (1, True) else float(value)


def _named_tags(img: Any) -> tuple[Dict[str, Any], Dict[str, Any]]:
    exif = img.getexif()
    named: Dict[str, Any] = {}
    for tag_id, value in exif.items():
        named[ExifTags.TAGS.get(tag_id, str(tag_id))] = value
    for tag_id, value in exif.get_ifd(_EXIF_IFD).items():
        named[ExifTags.TAGS.get(tag_id, str(tag_id))] = value
    gps: Dict[str, Any] = {}
    for tag_id, value in exif.get_ifd(_GPS_IFD).items():
        gps[ExifTags.GPSTAGS.get(tag_id, str(tag_id))] = value
    return named, gps


def _collect_fields(named: Dict[str, Any], gps: Dict[str, Any], fields: frozenset[str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field_name in fields:
        value: Any = None
        if field_name in _FIELD_SOURCES:
            for source in _FIELD_SOURCES[field_name]:
                value = _coerce(named.get(source))
                if value is not None:
                    break
        elif field_name in ("GPSLatitude", "GPSLongitude"):
            value = _coerce(gps.get(field_name))
        elif field_name == "GPSAltitude":
            value = _altitude(gps)
        elif field_name == "latitude":
            value = _dms_to_decimal(gps.get("GPSLatitude"), gps.get("GPSLatitudeRef"))
        elif field_name == "longitude":
            value = _dms_to_decimal(gps.get("GPSLongitude"), gps.get("GPSLongitudeRef"))
        else:
            raise DecodeError(f"Field outside the allowlist: {field_name}", code=ErrorCode.INVALID_INPUT)
        if value is not None:
            out[field_name] = value
    return out


class PillowDecoder:
    """Decoder contract on top of `PIL.Image.getexif()`."""

    name = "pillow"

    def is_available(self) -> bool:
        return True

    def decode(self, path: str, fields: frozenset[str]) -> Dict[str, Any]:
        if not path or "\x00" in str(path):
            raise DecodeError("Invalid file path", code=ErrorCode.INVALID_INPUT)
        try:
            with Image.open(path) as img:
                if not fields:
                    return {}
                named, gps = _named_tags(img)
        except FileNotFoundError as exc:
            raise DecodeError(f"ENOENT: no such file: {exc.filename or path}", kind=ProbeKind.NOT_FOUND) from exc
        except PermissionError as exc:
            raise DecodeError(f"EACCES: permission denied: {exc.filename or path}", kind=ProbeKind.ACCESS_DENIED) from exc
        except UnidentifiedImageError as exc:
            raise DecodeError(f"Unrecognized image format: {exc}") from exc
        except (OSError, ValueError, SyntaxError) as exc:
            logger.debug("Pillow failed to read EXIF from %s: %s", path, exc)
            raise DecodeError(f"Failed to read image metadata: {exc}") from exc
        return _collect_fields(named, gps, frozenset(fields))
