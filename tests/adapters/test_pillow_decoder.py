from pathlib import Path

import pytest
from PIL import Image
from PIL.TiffImagePlugin import IFDRational

from photo_exif_backend.adapters.tools import DecodeError, PillowDecoder
from photo_exif_backend.shared import EXIF_FIELD_ALLOWLIST, ProbeKind


def _write_jpeg_with_exif(path: Path) -> None:
    exif = Image.Exif()
    exif[0x010F] = "Canon"  # Make
    exif[0x0110] = "EOS R5"  # Model
    exif[0x0112] = 6  # Orientation

    exif_ifd = exif.get_ifd(0x8769)
    exif_ifd[0x9202] = IFDRational(4, 1)  # ApertureValue
    exif_ifd[0x9201] = IFDRational(6, 1)  # ShutterSpeedValue
    exif_ifd[0x8827] = 200  # ISOSpeedRatings
    exif_ifd[0x920A] = IFDRational(50, 1)  # FocalLength
    exif_ifd[0x9003] = "2024:05:01 10:20:30"  # DateTimeOriginal
    exif_ifd[0xA002] = 64  # ExifImageWidth
    exif_ifd[0xA003] = 32  # ExifImageHeight

    gps_ifd = exif.get_ifd(0x8825)
    gps_ifd[1] = "N"
    gps_ifd[2] = (IFDRational(52, 1), IFDRational(30, 1), IFDRational(0, 1))
    gps_ifd[3] = "W"
    gps_ifd[4] = (IFDRational(13, 1), IFDRational(15, 1), IFDRational(0, 1))

    Image.new("RGB", (64, 32), "white").save(path, exif=exif)


def test_reads_exif_fields(tmp_path: Path):
    img_path = tmp_path / "camera.jpg"
    _write_jpeg_with_exif(img_path)

    out = PillowDecoder().decode(str(img_path), EXIF_FIELD_ALLOWLIST)

    assert out["Make"] == "Canon"
    assert out["Model"] == "EOS R5"
    assert out["Orientation"] == 6
    assert out["ApertureValue"] == pytest.approx(4.0)
    assert out["ShutterSpeedValue"] == pytest.approx(6.0)
    assert out["ISO"] == 200
    assert out["FocalLength"] == pytest.approx(50.0)
    assert out["DateTimeOriginal"] == "2024:05:01 10:20:30"
    assert (out["ImageWidth"], out["ImageHeight"]) == (64, 32)
    assert out["latitude"] == pytest.approx(52.5)
    assert out["longitude"] == pytest.approx(-13.25)


def test_requested_fields_only(tmp_path: Path):
    img_path = tmp_path / "camera.jpg"
    _write_jpeg_with_exif(img_path)
    out = PillowDecoder().decode(str(img_path), frozenset({"Make", "Orientation"}))
    assert out == {"Make": "Canon", "Orientation": 6}


def test_image_without_exif_decodes_to_empty(tmp_path: Path):
    img_path = tmp_path / "plain.png"
    Image.new("RGB", (8, 8), "black").save(img_path)

    decoder = PillowDecoder()
    assert decoder.decode(str(img_path), EXIF_FIELD_ALLOWLIST) == {}
    assert decoder.decode(str(img_path), frozenset()) == {}


def test_missing_file_is_not_found(tmp_path: Path):
    with pytest.raises(DecodeError) as excinfo:
        PillowDecoder().decode(str(tmp_path / "gone.jpg"), frozenset())
    assert excinfo.value.kind is ProbeKind.NOT_FOUND
    assert "ENOENT" in str(excinfo.value)


def test_not_an_image(tmp_path: Path):
    bogus = tmp_path / "notes.jpg"
    bogus.write_text("definitely not a jpeg")
    with pytest.raises(DecodeError) as excinfo:
        PillowDecoder().decode(str(bogus), frozenset({"Make"}))
    assert excinfo.value.kind is ProbeKind.OTHER
