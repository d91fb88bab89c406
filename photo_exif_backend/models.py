"""
Request-scoped value objects passed between pipeline stages.

Everything here is created at the start of one pipeline run and discarded at
its end; nothing is cached or shared between runs.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from typing import Any, Optional

from .shared import ProbeKind, ReasonCode, SchemeKind


@dataclass(frozen=True)
class ResourceLocator:
    raw: str
    cleaned: str
    scheme: SchemeKind


@dataclass(frozen=True)
class CanonicalPath:
    value: str
    scheme: SchemeKind
    # app:// locator with no "/" after the opaque id
    malformed: bool = False


@dataclass(frozen=True)
class ValidationVerdict:
    accepted: bool
    reason: ReasonCode
    policy: str = ""
    matched: Optional[str] = None

    @staticmethod
    def accept(policy: str) -> "ValidationVerdict":
        return ValidationVerdict(accepted=True, reason=ReasonCode.OK, policy=policy)

    @staticmethod
    def reject(reason: ReasonCode, policy: str, matched: Optional[str] = None) -> "ValidationVerdict":
        return ValidationVerdict(accepted=False, reason=reason, policy=policy, matched=matched)


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of the zero-field existence probe."""

    exists: bool
    kind: ProbeKind = ProbeKind.OK
    error: Optional[str] = None


@dataclass(frozen=True)
class MetadataRecord:
    """
    Sparse photo metadata.

    A field is set only when the decoder returned a non-null value for it (or,
    for display fields, for the value it is derived from).
    """

    # Capture time
    date_time_original: Optional[datetime | str] = None
    create_date: Optional[datetime | str] = None

    # Camera
    make: Optional[str] = None
    model: Optional[str] = None
    lens_model: Optional[str] = None

    # Exposure
    aperture_value: Optional[float] = None
    f_number: Optional[str] = None
    shutter_speed_value: Optional[float] = None
    exposure_time: Optional[float] = None
    shutter_speed: Optional[str] = None
    iso: Optional[int | float] = None
    focal_length: Optional[float] = None
    focal_length_display: Optional[str] = None

    # GPS
    gps_latitude: Any = None
    gps_longitude: Any = None
    latitude: Optional[str] = None
    longitude: Optional[str] = None
    gps_altitude: Optional[float] = None
    altitude_display: Optional[str] = None

    # Image
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    dimensions_display: Optional[str] = None
    orientation: Optional[int] = None

    # Authoring
    software: Optional[str] = None
    artist: Optional[str] = None
    copyright: Optional[str] = None

    def present_fields(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly dict without the absent fields."""
        out: dict[str, Any] = {}
        for name in self.present_fields():
            value = getattr(self, name)
            out[name] = value.isoformat() if isinstance(value, datetime) else value
        return out


@dataclass(frozen=True)
class ImageInfo:
    width: Optional[int] = None
    height: Optional[int] = None
    orientation: Optional[int] = None
    has_exif: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BasicProbe:
    width: Optional[int] = None
    height: Optional[int] = None
    orientation: Optional[int] = None
    has_basic_exif: bool = False


@dataclass
class FullProbeAttempt:
    success: bool = False
    error: Optional[str] = None
    field_count: Optional[int] = None


@dataclass
class DiagnosisReport:
    locator: str
    resolved_path: str = ""
    file_exists: bool = False
    is_in_sandbox: bool = False
    is_supported_format: bool = False
    verdict_reason: str = ReasonCode.OK.value
    basic_probe: BasicProbe = field(default_factory=BasicProbe)
    full_probe_attempt: FullProbeAttempt = field(default_factory=FullProbeAttempt)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class PathDetails:
    is_absolute: bool = False
    is_relative: bool = False
    has_traversal: bool = False
    length: int = 0
    extension: Optional[str] = None
    dirname: str = ""
    basename: str = ""


@dataclass
class PathDebugReport:
    original_path: str
    converted_path: str = ""
    scheme: str = SchemeKind.PLAIN.value
    path_validation: bool = False
    verdict_reason: str = ReasonCode.OK.value
    file_exists: bool = False
    path_details: PathDetails = field(default_factory=PathDetails)
    recommendations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
