"""
EXIF read, diagnosis and path-debug endpoints.
"""
from typing import Any

from aiohttp import web

from photo_exif_backend.config import MAX_BATCH_LOCATORS
from photo_exif_backend.shared import ErrorCode, Result, get_logger, sanitize_error_message

from ..core import _json_response, _read_json, _require_services

logger = get_logger(__name__)

API_PREFIX = "/exif"


def _locator_from_query(request: web.Request) -> Result[str]:
    locator = request.query.get("locator") or request.query.get("path") or ""
    if not locator.strip():
        return Result.Err(ErrorCode.INVALID_INPUT, "Missing 'locator' query parameter")
    return Result.Ok(locator)


def _parse_batch_body(body: dict) -> Result[list]:
    locators = body.get("locators")
    if not isinstance(locators, list):
        return Result.Err(ErrorCode.INVALID_INPUT, "'locators' must be a list")
    if len(locators) > MAX_BATCH_LOCATORS:
        return Result.Err(
            ErrorCode.INVALID_INPUT,
            f"Too many locators ({len(locators)} > {MAX_BATCH_LOCATORS})",
            limit=MAX_BATCH_LOCATORS,
        )
    if not all(isinstance(item, str) for item in locators):
        return Result.Err(ErrorCode.INVALID_INPUT, "Every locator must be a string")
    return Result.Ok(locators)


def _service_or_error(svc: dict, key: str) -> Result[Any]:
    service = svc.get(key) if isinstance(svc, dict) else None
    if service is None:
        return Result.Err(ErrorCode.SERVICE_UNAVAILABLE, f"{key} service unavailable")
    return Result.Ok(service)


def _no_data_response(result: Result) -> Result:
    """Public shape of a failed read: sanitized message plus the offer to diagnose."""
    meta = dict(result.meta or {})
    meta["diagnose_available"] = True
    message = sanitize_error_message(result.error, "No EXIF data available")
    return Result.Err(result.code or ErrorCode.DECODE_ERROR, message, **meta)


def register_exif_routes(routes: web.RouteTableDef) -> None:
    @routes.get(f"{API_PREFIX}/read")
    async def read_exif(request):
        locator_res = _locator_from_query(request)
        if not locator_res.ok:
            return _json_response(locator_res)

        svc, error_result = await _require_services()
        if error_result:
            return _json_response(error_result)
        service_res = _service_or_error(svc, "metadata")
        if not service_res.ok:
            return _json_response(service_res)

        try:
            result = await service_res.data.read_metadata(locator_res.data)
        except Exception as exc:
            logger.error("Unexpected failure reading EXIF: %s", exc, exc_info=True)
            return _json_response(
                Result.Err(ErrorCode.DECODE_ERROR, sanitize_error_message(exc, "Failed to read EXIF"), diagnose_available=True)
            )
        if not result.ok:
            return _json_response(_no_data_response(result))
        return _json_response(Result.Ok(result.data.to_dict(), **result.meta))

    @routes.post(f"{API_PREFIX}/read_batch")
    async def read_exif_batch(request):
        body_res = await _read_json(request)
        if not body_res.ok:
            return _json_response(body_res)
        locators_res = _parse_batch_body(body_res.data or {})
        if not locators_res.ok:
            return _json_response(locators_res)

        svc, error_result = await _require_services()
        if error_result:
            return _json_response(error_result)
        service_res = _service_or_error(svc, "metadata")
        if not service_res.ok:
            return _json_response(service_res)

        records = await service_res.data.read_batch(locators_res.data)
        items = [record.to_dict() if record is not None else None for record in records]
        found = sum(1 for item in items if item is not None)
        return _json_response(Result.Ok(items, total=len(items), found=found))

    @routes.get(f"{API_PREFIX}/info")
    async def image_info(request):
        locator_res = _locator_from_query(request)
        if not locator_res.ok:
            return _json_response(locator_res)

        svc, error_result = await _require_services()
        if error_result:
            return _json_response(error_result)
        service_res = _service_or_error(svc, "metadata")
        if not service_res.ok:
            return _json_response(service_res)

        info = await service_res.data.get_image_info(locator_res.data)
        return _json_response(Result.Ok(info.to_dict()))

    @routes.get(f"{API_PREFIX}/diagnose")
    async def diagnose(request):
        locator_res = _locator_from_query(request)
        if not locator_res.ok:
            return _json_response(locator_res)

        svc, error_result = await _require_services()
        if error_result:
            return _json_response(error_result)
        service_res = _service_or_error(svc, "diagnostics")
        if not service_res.ok:
            return _json_response(service_res)

        report = await service_res.data.diagnose(locator_res.data)
        return _json_response(Result.Ok(report.to_dict()))

    @routes.get(f"{API_PREFIX}/debug")
    async def debug_path(request):
        locator_res = _locator_from_query(request)
        if not locator_res.ok:
            return _json_response(locator_res)

        svc, error_result = await _require_services()
        if error_result:
            return _json_response(error_result)
        service_res = _service_or_error(svc, "diagnostics")
        if not service_res.ok:
            return _json_response(service_res)

        report = await service_res.data.debug_path(locator_res.data)
        return _json_response(Result.Ok(report.to_dict()))
