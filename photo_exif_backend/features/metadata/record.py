"""
Raw decoder dict -> MetadataRecord, including the human-readable display fields.

Aperture and shutter speed arrive as APEX values (log2 units) and are
converted here:

    f-number      = 2 ** (Av / 2)
    exposure time = 1 / 2 ** Tv   (seconds)
"""
from __future__ import annotations

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from ...models import MetadataRecord

_EXIF_DATETIME_RE = re.compile(
    r"^(\d{4}):(\d{2}):(\d{2})[ T](\d{2}):(\d{2}):(\d{2})(?:\.(\d{1,6}))?(?:([+-])(\d{2}):?(\d{2})|Z)?$"
)


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _as_int(value: Any) -> Any:
    number = _as_float(value)
    if number is not None and number.is_integer():
        return int(number)
    return value


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


_APEX_EXPONENT_LIMIT = 1000.0


def _pow2(exponent: float) -> Optional[float]:
    """2 ** exponent, or None outside the range where it and its reciprocal stay finite."""
    if abs(exponent) > _APEX_EXPONENT_LIMIT:
        return None
    try:
        value = math.pow(2.0, exponent)
    except OverflowError:
        return None
    return value if value > 0.0 and not math.isinf(value) else None


def format_aperture(apex: Any) -> Optional[str]:
    """APEX 4.0 -> "4.0". Out-of-range APEX values give None."""
    av = _as_float(apex)
    if av is None:
        return None
    f_number = _pow2(av / 2.0)
    if f_number is None:
        return None
    return f"{f_number:.1f}"


def exposure_seconds(apex: Any) -> Optional[float]:
    tv = _as_float(apex)
    if tv is None:
        return None
    factor = _pow2(tv)
    if factor is None:
        return None
    return 1.0 / factor


def format_shutter_speed(apex: Any) -> Optional[str]:
    """
    Exposure of one second or longer renders as seconds rounded to one
    decimal (`2"`, `1.5"`, `1.4"` for Tv -0.5); shorter exposures render as a
    fraction (`1/64"`). Out-of-range APEX values give None.
    """
    tv = _as_float(apex)
    if tv is None:
        return None
    factor = _pow2(tv)
    if factor is None:
        return None
    speed = 1.0 / factor
    if speed >= 1:
        seconds = float(round(speed, 1))
        return f'{_format_number(seconds)}"'
    # Round half up, not Python's banker's rounding
    denominator = int(math.floor(factor + 0.5))
    return f'1/{denominator}"'


def format_coordinate(value: Any) -> Optional[str]:
    number = _as_float(value)
    if number is None:
        return None
    return f"{number:.6f}"


def parse_exif_datetime(value: Any) -> Any:
    """Parse `YYYY:MM:DD HH:MM:SS[.fff][+HH:MM]`; anything else is returned unchanged."""
    if not isinstance(value, str):
        return value
    match = _EXIF_DATETIME_RE.match(value.strip())
    if not match:
        return value
    year, month, day, hour, minute, second, fraction, sign, off_h, off_m = match.groups()
    tzinfo = None
    if sign:
        offset = timedelta(hours=int(off_h), minutes=int(off_m))
        tzinfo = timezone(-offset if sign == "-" else offset)
    elif value.strip().endswith("Z"):
        tzinfo = timezone.utc
    micro = int((fraction or "0").ljust(6, "0"))
    try:
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tzinfo
        )
    except ValueError:
        # e.g. "0000:00:00 00:00:00" placeholders written by some cameras
        return value


def _display_with_unit(value: Any, unit: str) -> Optional[str]:
    number = _as_float(value)
    if number is None:
        return None
    return f"{_format_number(number)}{unit}"


def _dimensions(width: Any, height: Any) -> Optional[str]:
    if width is None or height is None:
        return None
    return f"{width} × {height}"


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def build_record(raw: Dict[str, Any]) -> MetadataRecord:
    """
    Build a sparse record from decoder output keyed by allowlist field names.

    Decimal GPS coordinates are reported only as a pair: when either side is
    missing both are left out.
    """
    aperture = raw.get("ApertureValue")
    shutter = raw.get("ShutterSpeedValue")
    focal = raw.get("FocalLength")
    altitude = raw.get("GPSAltitude")
    width = _as_int(raw.get("ImageWidth"))
    height = _as_int(raw.get("ImageHeight"))

    latitude = format_coordinate(raw.get("latitude"))
    longitude = format_coordinate(raw.get("longitude"))
    if latitude is None or longitude is None:
        latitude = longitude = None

    return MetadataRecord(
        date_time_original=parse_exif_datetime(raw.get("DateTimeOriginal")),
        create_date=parse_exif_datetime(raw.get("CreateDate")),
        make=_text(raw.get("Make")),
        model=_text(raw.get("Model")),
        lens_model=_text(raw.get("LensModel")),
        aperture_value=_as_float(aperture),
        f_number=format_aperture(aperture),
        shutter_speed_value=_as_float(shutter),
        exposure_time=exposure_seconds(shutter),
        shutter_speed=format_shutter_speed(shutter),
        iso=_as_int(raw.get("ISO")),
        focal_length=_as_float(focal),
        focal_length_display=_display_with_unit(focal, "mm"),
        gps_latitude=raw.get("GPSLatitude"),
        gps_longitude=raw.get("GPSLongitude"),
        latitude=latitude,
        longitude=longitude,
        gps_altitude=_as_float(altitude),
        altitude_display=_display_with_unit(altitude, "m"),
        image_width=width,
        image_height=height,
        dimensions_display=_dimensions(width, height),
        orientation=_as_int(raw.get("Orientation")),
        software=_text(raw.get("Software")),
        artist=_text(raw.get("Artist")),
        copyright=_text(raw.get("Copyright")),
    )
