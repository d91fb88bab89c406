"""
ExifTool adapter for reading allowlisted photo metadata.
"""
import json
import math
import os
import re
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ...config import EXIFTOOL_TIMEOUT, EXIFTOOL_TRUSTED_DIRS
from ...shared import ErrorCode, ProbeKind, get_logger
from .base import DecodeError

logger = get_logger(__name__)

_TAG_SAFE_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_:-]*$")

# Allowlist field -> ExifTool tag. Group-qualified tags must match the -G1
# output key exactly; bare names match any group.
FIELD_TAGS: Dict[str, str] = {
    "DateTimeOriginal": "DateTimeOriginal",
    "CreateDate": "CreateDate",
    "Make": "Make",
    "Model": "Model",
    "ApertureValue": "ApertureValue",
    "ShutterSpeedValue": "ShutterSpeedValue",
    "ISO": "ISO",
    "FocalLength": "FocalLength",
    "LensModel": "LensModel",
    "GPSLatitude": "GPS:GPSLatitude",
    "GPSLongitude": "GPS:GPSLongitude",
    "GPSAltitude": "GPS:GPSAltitude",
    "latitude": "Composite:GPSLatitude",
    "longitude": "Composite:GPSLongitude",
    "ImageWidth": "ImageWidth",
    "ImageHeight": "ImageHeight",
    "Orientation": "Orientation",
    "Software": "Software",
    "Artist": "Artist",
    "Copyright": "Copyright",
}

# Zero-field probes still need one cheap tag so ExifTool opens the file.
_PROBE_TAG = "File:FileType"

_NOT_FOUND_HINTS = ("file not found", "no such file")
_ACCESS_HINTS = ("error opening file", "permission denied", "access is denied")


def _decode_bytes_best_effort(blob: Optional[bytes]) -> Tuple[str, bool]:
    """
    Decode subprocess bytes robustly across Windows code pages.

    Returns:
      (text, had_replacement_chars)
    """
    if not blob:
        return "", False
    raw = bytes(blob)
    for enc in ("utf-8", "utf-8-sig"):
        try:
            return raw.decode(enc, errors="strict"), False
        except UnicodeDecodeError:
            pass
    try:
        return raw.decode("cp1252", errors="strict"), False
    except UnicodeDecodeError:
        pass
    text = raw.decode("utf-8", errors="replace")
    return text, "\ufffd" in text


def _is_safe_exiftool_tag(tag: str) -> bool:
    """
    Return True if a tag looks safe to pass to ExifTool as `-TAG`.

    Whitespace, control characters and a leading dash are rejected so a tag
    can never be read as an extra option.
    """
    if not tag or not isinstance(tag, str):
        return False
    s = tag.strip()
    if not s or s != tag:
        return False
    if any(ch in s for ch in ("\x00", "\n", "\r", "\t")):
        return False
    if s.startswith("-"):
        return False
    return bool(_TAG_SAFE_PATTERN.match(s))


def tags_for_fields(fields: frozenset[str]) -> List[str]:
    unknown = sorted(f for f in fields if f not in FIELD_TAGS)
    if unknown:
        raise DecodeError(f"Fields outside the allowlist: {', '.join(unknown)}", code=ErrorCode.INVALID_INPUT)
    tags = [FIELD_TAGS[f] for f in sorted(fields)] or [_PROBE_TAG]
    invalid = [t for t in tags if not _is_safe_exiftool_tag(t)]
    if invalid:
        raise DecodeError(f"Invalid ExifTool tag format: {', '.join(invalid)}", code=ErrorCode.INVALID_INPUT)
    return tags


def _tag_matches(tag: str, output_key: str) -> bool:
    if ":" in tag:
        return output_key == tag
    return output_key.rsplit(":", 1)[-1] == tag


def _aperture_to_apex(f_number: Any) -> Any:
    if isinstance(f_number, (int, float)) and not isinstance(f_number, bool) and f_number > 0:
        return 2.0 * math.log2(float(f_number))
    return None


def _exposure_to_apex(seconds: Any) -> Any:
    if isinstance(seconds, (int, float)) and not isinstance(seconds, bool) and seconds > 0:
        return -math.log2(float(seconds))
    return None


# ExifTool's -n output is already value-converted (f-number, seconds);
# the decoder contract reports these two as raw APEX.
_APEX_CONVERSIONS = {
    "ApertureValue": _aperture_to_apex,
    "ShutterSpeedValue": _exposure_to_apex,
}


def map_output_to_fields(entry: Dict[str, Any], fields: frozenset[str]) -> Dict[str, Any]:
    """Pick the requested fields out of one -G1 JSON entry; nulls and empty strings are dropped."""
    out: Dict[str, Any] = {}
    for field_name in sorted(fields):
        tag = FIELD_TAGS[field_name]
        for key, value in entry.items():
            if key == "SourceFile" or not _tag_matches(tag, key):
                continue
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            convert = _APEX_CONVERSIONS.get(field_name)
            if convert is not None:
                value = convert(value)
                if value is None:
                    continue
            out[field_name] = value
            break
    return out


def classify_stderr(stderr: str) -> ProbeKind:
    lowered = (stderr or "").lower()
    if any(hint in lowered for hint in _NOT_FOUND_HINTS):
        return ProbeKind.NOT_FOUND
    if any(hint in lowered for hint in _ACCESS_HINTS):
        return ProbeKind.ACCESS_DENIED
    return ProbeKind.OTHER


class ExifToolDecoder:
    """
    ExifTool wrapper implementing the decoder contract.

    Every failure surfaces as DecodeError; nothing else escapes `decode`.
    """

    name = "exiftool"

    def __init__(self, bin_name: str = "exiftool", timeout: Optional[float] = None, trusted_dirs: Optional[str] = None):
        self.bin = bin_name
        self.timeout = float(timeout) if timeout is not None else float(EXIFTOOL_TIMEOUT)
        self._trusted_dirs = EXIFTOOL_TRUSTED_DIRS if trusted_dirs is None else trusted_dirs
        self._available = self._check_available()

    def _resolve_executable(self, bin_name: str) -> Optional[str]:
        """Resolve the binary and make sure it is really an exiftool, not an arbitrary command."""
        raw = (bin_name or "").strip()
        if not self._is_safe_executable_name(raw):
            return None
        resolved = self._resolve_executable_path(raw)
        if not resolved:
            return None
        if not self._is_under_trusted_dirs(resolved, self._trusted_dirs):
            return None
        return resolved if self._looks_like_exiftool_name(resolved) else None

    @staticmethod
    def _is_safe_executable_name(raw: str) -> bool:
        if not raw:
            return False
        if "\x00" in raw or "\n" in raw or "\r" in raw:
            return False
        return not any(ch in raw for ch in ("&", "|", ";", ">", "<"))

    @staticmethod
    def _resolve_executable_path(raw: str) -> Optional[str]:
        resolved = shutil.which(raw)
        if resolved:
            return resolved
        try:
            candidate = Path(raw)
            if candidate.is_file():
                return str(candidate.resolve(strict=True))
        except (OSError, RuntimeError, ValueError):
            return None
        return None

    @staticmethod
    def _trusted_roots(trusted_dirs_raw: str) -> List[Path]:
        roots: List[Path] = []
        for item in trusted_dirs_raw.split(os.pathsep):
            item = item.strip()
            if not item:
                continue
            try:
                roots.append(Path(item).expanduser().resolve(strict=True))
            except (OSError, RuntimeError):
                logger.debug("Ignoring unresolvable trusted dir: %s", item)
        return roots

    @classmethod
    def _is_under_trusted_dirs(cls, resolved: str, trusted_dirs_raw: str) -> bool:
        if not trusted_dirs_raw.strip():
            return True
        roots = cls._trusted_roots(trusted_dirs_raw)
        if not roots:
            return True
        try:
            resolved_path = Path(resolved).resolve(strict=True)
        except (OSError, RuntimeError):
            return False
        return any(resolved_path == root or root in resolved_path.parents for root in roots)

    @staticmethod
    def _looks_like_exiftool_name(resolved: str) -> bool:
        return Path(resolved).name.lower().startswith("exiftool")

    def _check_available(self) -> bool:
        resolved = self._resolve_executable(self.bin)
        if not resolved:
            return False
        self.bin = resolved
        return True

    def is_available(self) -> bool:
        return self._available

    def _build_command(self, path: str, tags: List[str]) -> List[str]:
        cmd = [self.bin, "-j", "-n", "-G1"]
        cmd.extend(f"-{tag}" for tag in tags)
        if os.name == "nt":
            cmd.extend(["-charset", "filename=utf8"])
        # "--" keeps a path starting with "-" from being read as an option
        cmd.extend(["--", path])
        return cmd

    @staticmethod
    def _run_exiftool_process(cmd: List[str], *, timeout: float) -> subprocess.CompletedProcess:
        return subprocess.run(
            cmd,
            capture_output=True,
            text=False,
            check=False,
            timeout=timeout,
            shell=False,
        )

    @staticmethod
    def _parse_process(process: subprocess.CompletedProcess, path: str) -> Dict[str, Any]:
        stdout, stdout_rep = _decode_bytes_best_effort(process.stdout)
        stderr, stderr_rep = _decode_bytes_best_effort(process.stderr)
        if stdout_rep or stderr_rep:
            logger.warning("ExifTool output contained decoding replacement characters for %s", path)

        if not stdout.strip():
            message = stderr.strip() or f"ExifTool failed with return code {int(process.returncode)}"
            if process.returncode != 0:
                logger.debug("ExifTool error for %s: %s", path, message)
            raise DecodeError(message, kind=classify_stderr(message))

        try:
            data = json.loads(stdout)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"Failed to parse ExifTool output: {exc}") from exc

        if not isinstance(data, list) or not data or not isinstance(data[0], dict):
            raise DecodeError("ExifTool returned no metadata entry")

        entry = data[0]
        tool_error = entry.get("ExifTool:Error")
        if tool_error:
            raise DecodeError(str(tool_error), kind=classify_stderr(str(tool_error)))
        return entry

    def decode(self, path: str, fields: frozenset[str]) -> Dict[str, Any]:
        """
        Read the requested allowlist fields from one file.

        Raises:
            DecodeError: tool missing, file missing/unreadable, timeout or bad output.
        """
        if not self._available:
            raise DecodeError("ExifTool not found in PATH", code=ErrorCode.TOOL_MISSING)
        if not path or "\x00" in str(path):
            raise DecodeError("Invalid file path", code=ErrorCode.INVALID_INPUT)

        tags = tags_for_fields(frozenset(fields))
        try:
            process = self._run_exiftool_process(self._build_command(path, tags), timeout=self.timeout)
        except subprocess.TimeoutExpired as exc:
            raise DecodeError(f"ExifTool timeout after {self.timeout}s", code=ErrorCode.TIMEOUT) from exc
        except OSError as exc:
            raise DecodeError(f"Failed to run ExifTool: {exc}", code=ErrorCode.TOOL_MISSING) from exc

        entry = self._parse_process(process, path)
        return map_output_to_fields(entry, frozenset(fields))


__all__ = ["ExifToolDecoder", "FIELD_TAGS"]
