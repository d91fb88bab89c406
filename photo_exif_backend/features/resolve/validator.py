"""
Path safety validation.

One rule evaluator, parametrized by a policy. Rules run in a fixed order and
the first failing rule decides the verdict:

    MALFORMED_SCHEME -> TRAVERSAL -> DENYLISTED_SYSTEM_PATH -> TOO_LONG
        -> SUSPICIOUS_PATTERN -> HIDDEN_ROOT_FILE

The denylist and injection checks are plain case-insensitive substring
matches against the whole path, not path-segment matches. A file merely named
`program files.jpg` is rejected by the strict policy. Injection markers are
matched case-insensitively as well, so `<SCRIPT` is caught like `<script`.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from ...models import CanonicalPath, ValidationVerdict
from ...shared import ReasonCode, SchemeKind

MAX_PATH_LENGTH = 2000

TRAVERSAL_MARKERS: tuple[str, ...] = ("../", "..\\")
INJECTION_MARKERS: tuple[str, ...] = ("<script", "javascript:", "data:", "\x00")

_SYSTEM_DIRS: tuple[str, ...] = (
    "/etc/", "\\etc\\",
    "/system32/", "\\system32\\",
    "/windows/system32/", "\\windows\\system32\\",
    "/usr/bin/", "\\usr\\bin\\",
    "/bin/", "\\bin\\",
    "/proc/", "\\proc\\",
    "/dev/", "\\dev\\",
    "/sys/", "\\sys\\",
)

_STRICT_EXTRA_DIRS: tuple[str, ...] = (
    "/program files/", "\\program files\\",
    "system32",
    "windows/system32",
    "program files",
)


@dataclass(frozen=True)
class ValidationPolicy:
    name: str
    denylist: tuple[str, ...]
    traversal_markers: tuple[str, ...] = TRAVERSAL_MARKERS
    injection_markers: tuple[str, ...] = INJECTION_MARKERS
    max_length: int = MAX_PATH_LENGTH
    reject_hidden_root_files: bool = False


# app:// resolution legitimately yields absolute paths, so only the
# traversal/system-dir/length/injection rules apply.
LENIENT_POLICY = ValidationPolicy(name="lenient", denylist=_SYSTEM_DIRS)

STRICT_POLICY = ValidationPolicy(
    name="strict",
    denylist=_SYSTEM_DIRS + _STRICT_EXTRA_DIRS,
    reject_hidden_root_files=True,
)


def policy_for(canonical: CanonicalPath) -> ValidationPolicy:
    if canonical.scheme is SchemeKind.APP and not canonical.malformed:
        return LENIENT_POLICY
    return STRICT_POLICY


def _first_marker(haystack: str, markers: tuple[str, ...]) -> Optional[str]:
    for marker in markers:
        if marker in haystack:
            return marker
    return None


def _check_empty(path: str, _lower: str, _policy: ValidationPolicy) -> Optional[str]:
    return "<empty>" if not path else None


def _check_traversal(path: str, _lower: str, policy: ValidationPolicy) -> Optional[str]:
    return _first_marker(path, policy.traversal_markers)


def _check_denylist(_path: str, lower: str, policy: ValidationPolicy) -> Optional[str]:
    return _first_marker(lower, policy.denylist)


def _check_length(path: str, _lower: str, policy: ValidationPolicy) -> Optional[str]:
    return str(len(path)) if len(path) > policy.max_length else None


def _check_injection(_path: str, lower: str, policy: ValidationPolicy) -> Optional[str]:
    return _first_marker(lower, policy.injection_markers)


def _check_hidden_root_file(path: str, _lower: str, policy: ValidationPolicy) -> Optional[str]:
    if not policy.reject_hidden_root_files:
        return None
    if path.startswith(".") and "/" not in path and "\\" not in path:
        return path
    return None


_Rule = Callable[[str, str, ValidationPolicy], Optional[str]]

_RULES: tuple[tuple[ReasonCode, _Rule], ...] = (
    (ReasonCode.MALFORMED_SCHEME, _check_empty),
    (ReasonCode.TRAVERSAL, _check_traversal),
    (ReasonCode.DENYLISTED_SYSTEM_PATH, _check_denylist),
    (ReasonCode.TOO_LONG, _check_length),
    (ReasonCode.SUSPICIOUS_PATTERN, _check_injection),
    (ReasonCode.HIDDEN_ROOT_FILE, _check_hidden_root_file),
)


def validate_path(path: str, policy: ValidationPolicy = STRICT_POLICY) -> ValidationVerdict:
    """Pure and deterministic; returns exactly one reason code."""
    lower = path.lower()
    for reason, rule in _RULES:
        matched = rule(path, lower, policy)
        if matched is not None:
            return ValidationVerdict.reject(reason, policy.name, matched)
    return ValidationVerdict.accept(policy.name)


def validate_canonical(canonical: CanonicalPath) -> ValidationVerdict:
    return validate_path(canonical.value, policy_for(canonical))


def has_traversal(path: str) -> bool:
    return _first_marker(path, TRAVERSAL_MARKERS) is not None
