import asyncio

import pytest

from photo_exif_backend.features.metadata import ExifService, check_locator
from photo_exif_backend.shared import ErrorCode

CANON = {
    "Make": "Canon",
    "Model": "EOS R5",
    "ApertureValue": 4.0,
    "ShutterSpeedValue": 6.0,
    "ImageWidth": 8192,
    "ImageHeight": 5464,
    "Orientation": 1,
}


@pytest.mark.asyncio
async def test_query_stripped_path_is_decoded(fake_decoder):
    fake_decoder.files["/Users/a/img.jpeg"] = CANON
    service = ExifService(fake_decoder)

    result = await service.read_metadata("/Users/a/img.jpeg?123456")

    assert result.ok, result.error
    assert result.data.f_number == "4.0"
    assert result.data.shutter_speed == '1/64"'
    assert result.data.dimensions_display == "8192 × 5464"
    assert result.meta["decoder"] == "fake"
    assert {c[0] for c in fake_decoder.calls} == {"/Users/a/img.jpeg"}


@pytest.mark.asyncio
async def test_app_locator_into_system_dir_is_rejected(fake_decoder):
    result = await ExifService(fake_decoder).read_metadata("app://abc123/etc/passwd")
    assert not result.ok
    assert result.code == ErrorCode.DENYLISTED_PATH.value
    assert result.meta["stage"] == "validate"
    assert fake_decoder.calls == []


@pytest.mark.asyncio
async def test_traversal_rejected_before_any_decode(fake_decoder):
    result = await ExifService(fake_decoder).read_metadata("../../../etc/passwd")
    assert result.code == ErrorCode.TRAVERSAL.value
    assert fake_decoder.calls == []


@pytest.mark.asyncio
async def test_missing_file_skips_full_decode(fake_decoder):
    service = ExifService(fake_decoder)

    assert await service.read_exif("/photos/missing.jpg") is None
    result = await service.read_metadata("/photos/missing.jpg")
    assert result.code == ErrorCode.NOT_FOUND.value
    assert fake_decoder.full_reads() == []


@pytest.mark.asyncio
async def test_empty_decode_is_no_data(fake_decoder):
    fake_decoder.files["/photos/blank.png"] = {}
    service = ExifService(fake_decoder)

    assert await service.read_exif("/photos/blank.png") is None
    result = await service.read_metadata("/photos/blank.png")
    assert result.code == ErrorCode.EMPTY_METADATA.value


@pytest.mark.asyncio
async def test_unrelated_decoder_error_is_decode_error(fake_decoder):
    fake_decoder.files["/photos/odd.tif"] = RuntimeError("Unexpected end of IFD")
    result = await ExifService(fake_decoder).read_metadata("/photos/odd.tif")
    assert result.code == ErrorCode.DECODE_ERROR.value
    assert result.meta["stage"] == "decode"
    # probe failed open, so the full read was attempted
    assert len(fake_decoder.full_reads()) == 1


@pytest.mark.asyncio
async def test_unsupported_format(fake_decoder):
    fake_decoder.files["/photos/anim.gif"] = CANON
    result = await ExifService(fake_decoder).read_metadata("/photos/anim.gif")
    assert result.code == ErrorCode.UNSUPPORTED_FORMAT.value
    assert fake_decoder.calls == []


def test_check_locator_returns_canonical_path():
    res = check_locator("file:///photos/a%20b.jpg?x#y")
    assert res.ok
    assert res.data.endswith("photos/a b.jpg")


@pytest.mark.asyncio
async def test_batch_keeps_order_and_isolates_failures(fake_decoder):
    fake_decoder.files["/p/1.jpg"] = {"Make": "One"}
    fake_decoder.files["/p/2.jpg"] = {"Make": "Two"}
    fake_decoder.files["/p/boom.jpg"] = RuntimeError("corrupt")
    service = ExifService(fake_decoder)

    records = await service.read_batch(["/p/1.jpg", "../x.jpg", "/p/missing.jpg", "/p/boom.jpg", "/p/2.jpg"])

    assert [r.make if r else None for r in records] == ["One", None, None, None, "Two"]


@pytest.mark.asyncio
async def test_batch_order_independent_of_completion_order():
    class _SlowFirstDecoder:
        name = "slow"

        def decode(self, path, fields):  # pragma: no cover - adecode is preferred
            raise AssertionError

        async def adecode(self, path, fields):
            index = int(path.rsplit("/", 1)[-1].split(".")[0])
            await asyncio.sleep(0.01 * (5 - index))
            return {"ISO": index * 100} if fields else {}

    records = await ExifService(_SlowFirstDecoder()).read_batch([f"/p/{i}.jpg" for i in range(1, 5)])
    assert [r.iso for r in records] == [100, 200, 300, 400]


@pytest.mark.asyncio
async def test_batch_empty():
    assert await ExifService(object()).read_batch([]) == []


@pytest.mark.asyncio
async def test_image_info(fake_decoder):
    fake_decoder.files["/p/a.jpg"] = CANON
    service = ExifService(fake_decoder)

    info = await service.get_image_info("/p/a.jpg")
    assert info.to_dict() == {"width": 8192, "height": 5464, "orientation": 1, "has_exif": True}
    assert fake_decoder.calls[-1][1] == frozenset({"ImageWidth", "ImageHeight", "Orientation"})

    assert (await service.get_image_info("/p/missing.jpg")).has_exif is False
    assert (await service.get_image_info("/etc/passwd.jpg")).has_exif is False


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fields",
    [
        {"ShutterSpeedValue": 2147483647.0},
        {"ShutterSpeedValue": -2147483647.0},
        {"ApertureValue": 4096.0},
    ],
)
async def test_extreme_apex_values_do_not_escape_the_read(fake_decoder, fields):
    fake_decoder.files["/p/crafted.jpg"] = {"Make": "Canon", **fields}
    service = ExifService(fake_decoder)

    record = await service.read_exif("/p/crafted.jpg")

    assert record is not None
    assert record.make == "Canon"
    assert record.f_number is None
    assert record.shutter_speed is None


@pytest.mark.asyncio
async def test_record_build_failure_is_a_decode_error(fake_decoder, monkeypatch):
    import photo_exif_backend.features.metadata.service as service_mod

    def _boom(raw):
        raise ValueError("bad rational")

    monkeypatch.setattr(service_mod, "build_record", _boom)
    fake_decoder.files["/p/odd.jpg"] = {"Make": "Canon"}

    result = await ExifService(fake_decoder).read_metadata("/p/odd.jpg")

    assert not result.ok
    assert result.code == ErrorCode.DECODE_ERROR.value
    assert result.meta["stage"] == "decode"
