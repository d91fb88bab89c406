"""Metadata reading: existence probe, record building and the Exif service."""

from .probe import classify_decode_failure, probe_existence
from .record import build_record, format_aperture, format_shutter_speed, parse_exif_datetime
from .service import ExifService, check_locator

__all__ = [
    "ExifService",
    "build_record",
    "check_locator",
    "classify_decode_failure",
    "format_aperture",
    "format_shutter_speed",
    "parse_exif_datetime",
    "probe_existence",
]
