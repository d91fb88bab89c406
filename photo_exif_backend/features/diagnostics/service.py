"""
Diagnostic service.

Unlike the read pipeline, a diagnosis never stops at the first failing stage:
every check runs against the same locator and each outcome is recorded, so
the report shows all failing dimensions at once.
"""
import re
from typing import Any

from ...adapters.tools import decode_async
from ...models import BasicProbe, DiagnosisReport, FullProbeAttempt, PathDebugReport, PathDetails
from ...shared import BASIC_PROBE_FIELDS, EXIF_FIELD_ALLOWLIST, get_logger, log_success
from ..metadata.probe import probe_existence
from ..metadata.record import build_record
from ..resolve import (
    extension_of,
    has_traversal,
    is_supported_format,
    parse_locator,
    normalize_locator,
    split_basename,
    validate_canonical,
)
from .recommendations import DiagnosisFacts, PathFacts, recommend, recommend_for_path

logger = get_logger(__name__)

_DRIVE_ABSOLUTE_RE = re.compile(r"^[A-Za-z]:\\")


def is_absolute_path(path: str) -> bool:
    return path.startswith("/") or path.startswith("\\") or bool(_DRIVE_ABSOLUTE_RE.match(path))


class DiagnosticService:
    def __init__(self, decoder: Any):
        self._decoder = decoder

    async def _basic_probe(self, path: str) -> BasicProbe:
        try:
            raw = await decode_async(self._decoder, path, BASIC_PROBE_FIELDS)
        except Exception as exc:
            logger.debug("Basic probe failed for %s: %s", path, exc)
            return BasicProbe()
        if not raw:
            return BasicProbe()
        record = build_record(raw)
        return BasicProbe(
            width=record.image_width,
            height=record.image_height,
            orientation=record.orientation,
            has_basic_exif=True,
        )

    async def _full_probe(self, path: str) -> FullProbeAttempt:
        try:
            raw = await decode_async(self._decoder, path, EXIF_FIELD_ALLOWLIST)
        except Exception as exc:
            logger.debug("Full probe failed for %s: %s", path, exc)
            return FullProbeAttempt(success=False, error=str(exc) or type(exc).__name__)
        return FullProbeAttempt(success=True, field_count=len(raw or {}))

    async def diagnose(self, locator: Any) -> DiagnosisReport:
        """
        Run every stage and both decoder probes, then apply the recommendation rules.

        Always returns a report with at least one recommendation; an unexpected
        internal error is reported as a recommendation instead of raised.
        """
        report = DiagnosisReport(locator=str(locator) if locator is not None else "")
        try:
            canonical = normalize_locator(parse_locator(locator))
            path = canonical.value
            report.resolved_path = path

            verdict = validate_canonical(canonical)
            report.is_in_sandbox = verdict.accepted
            report.verdict_reason = verdict.reason.value
            report.is_supported_format = is_supported_format(path)

            probe = await probe_existence(self._decoder, path)
            report.file_exists = probe.exists

            report.basic_probe = await self._basic_probe(path)
            report.full_probe_attempt = await self._full_probe(path)

            report.recommendations = recommend(
                DiagnosisFacts(
                    resolved_path=path,
                    verdict=verdict,
                    has_traversal=has_traversal(path),
                    supported_format=report.is_supported_format,
                    file_exists=report.file_exists,
                    basic_ok=report.basic_probe.has_basic_exif,
                    full=report.full_probe_attempt,
                )
            )
        except Exception as exc:
            logger.error("Diagnosis failed for %r: %s", locator, exc)
            report.recommendations.append(f"Diagnosis failed: {exc}")
            return report

        if report.is_in_sandbox and report.file_exists and report.full_probe_attempt.success:
            log_success(logger, f"Diagnosis complete, {report.full_probe_attempt.field_count} fields readable")
        return report

    async def debug_path(self, locator: Any) -> PathDebugReport:
        """Explain how a locator resolves and why it would be accepted or rejected."""
        original = str(locator) if locator is not None else ""
        report = PathDebugReport(original_path=original)
        report.path_details.length = len(original)
        try:
            parsed = parse_locator(locator)
            canonical = normalize_locator(parsed)
            converted = canonical.value
            report.converted_path = converted
            report.scheme = parsed.scheme.value

            dirname, basename = split_basename(converted)
            details = PathDetails(
                is_absolute=is_absolute_path(converted),
                has_traversal=has_traversal(converted),
                length=len(original),
                extension=extension_of(converted),
                dirname=dirname,
                basename=basename,
            )
            details.is_relative = not details.is_absolute
            report.path_details = details

            verdict = validate_canonical(canonical)
            report.path_validation = verdict.accepted
            report.verdict_reason = verdict.reason.value

            probe = await probe_existence(self._decoder, converted)
            report.file_exists = probe.exists

            report.recommendations = recommend_for_path(
                PathFacts(
                    converted_path=converted,
                    verdict=verdict,
                    file_exists=probe.exists,
                    has_traversal=details.has_traversal,
                    length=details.length,
                )
            )
        except Exception as exc:
            logger.error("Path debug failed for %r: %s", locator, exc)
            report.recommendations.append(f"Path debug failed: {exc}")
        return report
