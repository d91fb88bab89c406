import json

import pytest
from aiohttp import web
from aiohttp.test_utils import make_mocked_request

from photo_exif_backend.routes.core import response as response_mod
from photo_exif_backend.routes.handlers import exif as exif_mod
from photo_exif_backend.shared import Result

CANON = {"Make": "Canon", "ApertureValue": 4.0, "ShutterSpeedValue": 6.0, "ImageWidth": 40, "ImageHeight": 30}


def _app():
    app = web.Application()
    routes = web.RouteTableDef()
    exif_mod.register_exif_routes(routes)
    app.add_routes(routes)
    return app


def _with_services(monkeypatch, services):
    async def _require():
        return services, None

    monkeypatch.setattr(exif_mod, "_require_services", _require)


async def _call(app, method, url):
    req = make_mocked_request(method, url, app=app)
    match = await app.router.resolve(req)
    resp = await match.handler(req)
    return json.loads(resp.text)


async def _post_json(monkeypatch, app, url, body):
    async def _read_json(_request):
        return Result.Ok(body)

    monkeypatch.setattr(exif_mod, "_read_json", _read_json)
    return await _call(app, "POST", url)


@pytest.mark.asyncio
async def test_read_returns_record(monkeypatch, services, fake_decoder):
    fake_decoder.files["/p/a.jpg"] = CANON
    _with_services(monkeypatch, services)

    payload = await _call(_app(), "GET", "/exif/read?locator=/p/a.jpg%3F123")

    assert payload["ok"] is True
    assert payload["data"]["f_number"] == "4.0"
    assert payload["data"]["shutter_speed"] == '1/64"'
    assert payload["data"]["dimensions_display"] == "40 × 30"
    assert "latitude" not in payload["data"]


@pytest.mark.asyncio
async def test_read_failure_offers_diagnosis(monkeypatch, services):
    _with_services(monkeypatch, services)

    payload = await _call(_app(), "GET", "/exif/read?locator=/home/me/photos/missing.jpg")

    assert payload["ok"] is False
    assert payload["code"] == "NOT_FOUND"
    assert payload["meta"]["diagnose_available"] is True
    assert "/home/me/photos" not in payload["error"]


@pytest.mark.asyncio
async def test_read_rejects_traversal(monkeypatch, services):
    _with_services(monkeypatch, services)
    payload = await _call(_app(), "GET", "/exif/read?locator=../../../etc/passwd")
    assert payload["code"] == "TRAVERSAL"
    assert payload["meta"]["stage"] == "validate"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/exif/read", "/exif/info", "/exif/diagnose", "/exif/debug?locator=%20"])
async def test_missing_locator(monkeypatch, services, path):
    _with_services(monkeypatch, services)
    payload = await _call(_app(), "GET", path)
    assert payload["ok"] is False
    assert payload["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_service_unavailable(monkeypatch):
    async def _require():
        return None, Result.Err("SERVICE_UNAVAILABLE", "Services are unavailable")

    monkeypatch.setattr(exif_mod, "_require_services", _require)
    payload = await _call(_app(), "GET", "/exif/read?locator=/p/a.jpg")
    assert payload["code"] == "SERVICE_UNAVAILABLE"


@pytest.mark.asyncio
async def test_read_batch_aligns_with_input(monkeypatch, services, fake_decoder):
    fake_decoder.files["/p/a.jpg"] = CANON
    _with_services(monkeypatch, services)

    payload = await _post_json(
        monkeypatch, _app(), "/exif/read_batch", {"locators": ["/p/a.jpg", "/p/missing.jpg", "../x.jpg"]}
    )

    assert payload["ok"] is True
    assert payload["data"][0]["make"] == "Canon"
    assert payload["data"][1:] == [None, None]
    assert payload["meta"] == {"total": 3, "found": 1}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"locators": "a.jpg"}, {"locators": [1, 2]}])
async def test_read_batch_validates_body(monkeypatch, services, body):
    _with_services(monkeypatch, services)
    payload = await _post_json(monkeypatch, _app(), "/exif/read_batch", body)
    assert payload["code"] == "INVALID_INPUT"


@pytest.mark.asyncio
async def test_read_batch_size_limit(monkeypatch, services):
    _with_services(monkeypatch, services)
    monkeypatch.setattr(exif_mod, "MAX_BATCH_LOCATORS", 2)
    payload = await _post_json(monkeypatch, _app(), "/exif/read_batch", {"locators": ["a.jpg", "b.jpg", "c.jpg"]})
    assert payload["code"] == "INVALID_INPUT"
    assert payload["meta"]["limit"] == 2


@pytest.mark.asyncio
async def test_info(monkeypatch, services, fake_decoder):
    fake_decoder.files["/p/a.jpg"] = CANON
    _with_services(monkeypatch, services)
    payload = await _call(_app(), "GET", "/exif/info?locator=/p/a.jpg")
    assert payload["data"] == {"width": 40, "height": 30, "orientation": None, "has_exif": True}


@pytest.mark.asyncio
async def test_diagnose(monkeypatch, services):
    _with_services(monkeypatch, services)
    payload = await _call(_app(), "GET", "/exif/diagnose?locator=app://vault/etc/passwd")
    report = payload["data"]
    assert payload["ok"] is True
    assert report["is_in_sandbox"] is False
    assert report["resolved_path"] == "/etc/passwd"
    assert report["recommendations"]


@pytest.mark.asyncio
async def test_debug(monkeypatch, services, fake_decoder):
    fake_decoder.files["C:\\photos\\a.jpg"] = CANON
    _with_services(monkeypatch, services)
    payload = await _call(_app(), "GET", "/exif/debug?locator=C:%5Cphotos%5Ca.jpg")
    report = payload["data"]
    assert report["path_details"]["is_absolute"] is True
    assert report["path_details"]["basename"] == "a.jpg"
    assert report["file_exists"] is True


def test_json_payload_is_sanitized():
    cleaned = response_mod._sanitize_json_payload({"a": float("nan"), "b": [float("inf"), 1.5], "c": (1, 2)})
    assert cleaned == {"a": None, "b": [None, 1.5], "c": [1, 2]}


@pytest.mark.asyncio
async def test_read_json_rejects_oversized_body():
    from photo_exif_backend.routes.core.request_json import _read_json

    req = make_mocked_request("POST", "/exif/read_batch", headers={"Content-Length": "50000"})
    res = await _read_json(req, max_bytes=2048)
    assert res.ok is False
    assert res.code == "INVALID_INPUT"
    assert res.meta["limit"] == 2048
