"""
Recommendation rule tables for the diagnostic and path-debug reports.

Rules are evaluated in order and every rule that fires appends its message.
When none fire the report gets a single "all checks normal" entry, so the
list is never empty.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ...models import FullProbeAttempt, ValidationVerdict
from ...shared import SUPPORTED_IMAGE_EXTENSIONS

ALL_CHECKS_NORMAL = "All checks normal: the file is readable and its EXIF data looks healthy"
PATH_VALIDATION_NORMAL = "Path validation normal"

LONG_PATH_HINT_THRESHOLD = 1000


@dataclass(frozen=True)
class DiagnosisFacts:
    resolved_path: str
    verdict: ValidationVerdict
    has_traversal: bool
    supported_format: bool
    file_exists: bool
    basic_ok: bool
    full: FullProbeAttempt


@dataclass(frozen=True)
class PathFacts:
    converted_path: str
    verdict: ValidationVerdict
    file_exists: bool
    has_traversal: bool
    length: int


_DiagnosisRule = Callable[[DiagnosisFacts], Optional[str]]
_PathRule = Callable[[PathFacts], Optional[str]]


def _not_in_sandbox(f: DiagnosisFacts) -> Optional[str]:
    if f.verdict.accepted:
        return None
    return (
        f"Path rejected by the security check ({f.verdict.reason.value}); "
        "the check may be overly strict for this location"
    )


def _traversal(f: DiagnosisFacts) -> Optional[str]:
    return "Path traversal pattern detected in the resolved path" if f.has_traversal else None


def _unsupported(f: DiagnosisFacts) -> Optional[str]:
    if f.supported_format:
        return None
    return f"Unsupported image format; use one of {', '.join(SUPPORTED_IMAGE_EXTENSIONS)}"


def _not_found(f: DiagnosisFacts) -> Optional[str]:
    if f.file_exists:
        return None
    return f"File not found or not accessible, check the path: {f.resolved_path}"


def _basic_failed(f: DiagnosisFacts) -> Optional[str]:
    if f.basic_ok:
        return None
    return "Basic image info unavailable: the image may be corrupted or have an unusual structure"


def _full_failed_basic_ok(f: DiagnosisFacts) -> Optional[str]:
    if f.full.success or not f.basic_ok:
        return None
    return f"Basic info is readable but the full read failed: corrupted or unusual EXIF structure ({f.full.error})"


def _full_failed_basic_failed(f: DiagnosisFacts) -> Optional[str]:
    if f.full.success or f.basic_ok:
        return None
    return f"EXIF parse failed: {f.full.error}"


def _zero_fields(f: DiagnosisFacts) -> Optional[str]:
    if f.full.success and not f.full.field_count:
        return "The file genuinely has no embedded metadata"
    return None


DIAGNOSIS_RULES: tuple[_DiagnosisRule, ...] = (
    _not_in_sandbox,
    _traversal,
    _unsupported,
    _not_found,
    _basic_failed,
    _full_failed_basic_ok,
    _full_failed_basic_failed,
    _zero_fields,
)


def _path_not_found(f: PathFacts) -> Optional[str]:
    return None if f.file_exists else f"File not found: {f.converted_path}"


def _path_rejected(f: PathFacts) -> Optional[str]:
    if f.verdict.accepted:
        return None
    return f"Path validation failed ({f.verdict.reason.value}); the security check may be overly strict"


def _path_traversal(f: PathFacts) -> Optional[str]:
    return "Path traversal pattern detected" if f.has_traversal else None


def _path_too_long(f: PathFacts) -> Optional[str]:
    if f.length > LONG_PATH_HINT_THRESHOLD:
        return f"Path is unusually long ({f.length} characters)"
    return None


PATH_RULES: tuple[_PathRule, ...] = (
    _path_not_found,
    _path_rejected,
    _path_traversal,
    _path_too_long,
)


def recommend(facts: DiagnosisFacts) -> list[str]:
    out = [msg for msg in (rule(facts) for rule in DIAGNOSIS_RULES) if msg]
    return out or [ALL_CHECKS_NORMAL]


def recommend_for_path(facts: PathFacts) -> list[str]:
    out = [msg for msg in (rule(facts) for rule in PATH_RULES) if msg]
    return out or [PATH_VALIDATION_NORMAL]
