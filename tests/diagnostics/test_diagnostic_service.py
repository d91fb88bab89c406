import pytest

from photo_exif_backend.features.diagnostics import (
    ALL_CHECKS_NORMAL,
    PATH_VALIDATION_NORMAL,
    DiagnosticService,
    is_absolute_path,
)
from photo_exif_backend.features.diagnostics import service as diagnostics_service
from photo_exif_backend.shared import BASIC_PROBE_FIELDS

HEALTHY = {"Make": "Fujifilm", "ImageWidth": 6240, "ImageHeight": 4160, "Orientation": 1}


class _BrokenMakerNoteDecoder:
    """Basic fields decode fine, the full read blows up."""

    name = "broken"

    def decode(self, path, fields):
        if not fields:
            return {}
        if fields == BASIC_PROBE_FIELDS:
            return {"ImageWidth": 100, "ImageHeight": 50}
        raise RuntimeError("bad maker note")


@pytest.mark.asyncio
async def test_healthy_file_reports_all_checks_normal(fake_decoder):
    fake_decoder.files["/p/ok.jpg"] = HEALTHY
    report = await DiagnosticService(fake_decoder).diagnose("/p/ok.jpg")

    assert report.recommendations == [ALL_CHECKS_NORMAL]
    assert report.file_exists and report.is_in_sandbox and report.is_supported_format
    assert report.basic_probe.width == 6240
    assert report.basic_probe.has_basic_exif is True
    assert report.full_probe_attempt.success is True
    assert report.full_probe_attempt.field_count == 4


@pytest.mark.asyncio
async def test_diagnosis_reports_every_failing_dimension(fake_decoder):
    report = await DiagnosticService(fake_decoder).diagnose("/etc/passwd")
    recs = "\n".join(report.recommendations)

    assert report.is_in_sandbox is False
    assert report.verdict_reason == "DENYLISTED_SYSTEM_PATH"
    assert report.is_supported_format is False
    assert report.file_exists is False
    assert report.resolved_path == "/etc/passwd"
    assert "overly strict" in recs
    assert "Unsupported image format" in recs
    assert "File not found" in recs and "/etc/passwd" in recs
    assert "EXIF parse failed" in recs
    assert ALL_CHECKS_NORMAL not in report.recommendations


@pytest.mark.asyncio
async def test_traversal_is_flagged(fake_decoder):
    report = await DiagnosticService(fake_decoder).diagnose("../photos/x.jpg")
    assert report.verdict_reason == "TRAVERSAL"
    assert any("traversal" in r.lower() for r in report.recommendations)


@pytest.mark.asyncio
async def test_zero_fields_means_no_embedded_metadata(fake_decoder):
    fake_decoder.files["/p/blank.png"] = {}
    report = await DiagnosticService(fake_decoder).diagnose("/p/blank.png")

    assert report.full_probe_attempt.success is True
    assert report.full_probe_attempt.field_count == 0
    assert any("no embedded metadata" in r for r in report.recommendations)


@pytest.mark.asyncio
async def test_full_probe_failure_with_healthy_basic_probe():
    report = await DiagnosticService(_BrokenMakerNoteDecoder()).diagnose("/p/odd.jpg")

    assert report.basic_probe.has_basic_exif is True
    assert report.full_probe_attempt.success is False
    assert report.full_probe_attempt.error == "bad maker note"
    assert len(report.recommendations) == 1
    assert "corrupted or unusual EXIF structure" in report.recommendations[0]


@pytest.mark.asyncio
async def test_internal_error_becomes_recommendation(monkeypatch, fake_decoder):
    def _boom(_canonical):
        raise RuntimeError("validator exploded")

    monkeypatch.setattr(diagnostics_service, "validate_canonical", _boom)
    report = await DiagnosticService(fake_decoder).diagnose("/p/ok.jpg")
    assert report.recommendations == ["Diagnosis failed: validator exploded"]


@pytest.mark.asyncio
async def test_report_serializes(fake_decoder):
    fake_decoder.files["/p/ok.jpg"] = HEALTHY
    payload = (await DiagnosticService(fake_decoder).diagnose("/p/ok.jpg")).to_dict()
    assert payload["basic_probe"]["height"] == 4160
    assert payload["full_probe_attempt"]["error"] is None


@pytest.mark.parametrize(
    "path, expected",
    [("/a/b.jpg", True), ("\\\\server\\x.jpg", True), ("C:\\x\\y.jpg", True), ("C:/x/y.jpg", False), ("a/b.jpg", False)],
)
def test_is_absolute_path(path, expected):
    assert is_absolute_path(path) is expected


@pytest.mark.asyncio
async def test_debug_path_for_valid_app_locator(fake_decoder):
    fake_decoder.files["/Users/a/photo.JPG"] = HEALTHY
    report = await DiagnosticService(fake_decoder).debug_path("app://vault/Users/a/photo.JPG?v=1")

    assert report.converted_path == "/Users/a/photo.JPG"
    assert report.scheme == "app"
    assert report.path_validation is True
    assert report.file_exists is True
    details = report.path_details
    assert details.is_absolute and not details.is_relative
    assert (details.dirname, details.basename, details.extension) == ("/Users/a", "photo.JPG", ".JPG")
    assert report.recommendations == [PATH_VALIDATION_NORMAL]


@pytest.mark.asyncio
async def test_debug_path_collects_all_hints(fake_decoder):
    locator = "../" + "d/" * 600 + "x.jpg"
    report = await DiagnosticService(fake_decoder).debug_path(locator)
    recs = "\n".join(report.recommendations)

    assert report.path_details.has_traversal is True
    assert report.path_details.length == len(locator)
    assert report.path_validation is False
    assert report.verdict_reason == "TRAVERSAL"
    assert "File not found" in recs
    assert "Path validation failed (TRAVERSAL)" in recs
    assert "Path traversal pattern detected" in recs
    assert "unusually long" in recs
