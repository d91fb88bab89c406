"""
Route registration.
Collects every handler module into one RouteTableDef and mounts it on an aiohttp app.
"""

from __future__ import annotations

from typing import Optional

from aiohttp import web

from photo_exif_backend.observability import ensure_observability
from photo_exif_backend.shared import get_logger, log_success

from .core import prewarm_services
from .handlers import register_exif_routes

logger = get_logger(__name__)

_APP_KEY_ROUTES_REGISTERED: web.AppKey[bool] = web.AppKey("_photo_exif_routes_registered", bool)


def register_all_routes(routes: Optional[web.RouteTableDef] = None) -> web.RouteTableDef:
    """
    Register all route handlers and return the RouteTableDef.
    This is the central registration point for all routes.
    """
    table = routes if routes is not None else web.RouteTableDef()
    register_exif_routes(table)
    return table


def register_routes(app: web.Application) -> None:
    """Register routes onto an aiohttp application (idempotent per app)."""
    ensure_observability(app)
    if app.get(_APP_KEY_ROUTES_REGISTERED):
        logger.debug("register_routes(app) skipped: routes already registered on this app")
        return
    table = register_all_routes()
    app.router.add_routes(table)
    app[_APP_KEY_ROUTES_REGISTERED] = True
    log_success(logger, f"Registered {len(list(table))} EXIF routes")


async def _prewarm_on_startup(app: web.Application) -> None:
    await prewarm_services()


def create_app(*, prewarm: bool = True) -> web.Application:
    app = web.Application()
    register_routes(app)
    if prewarm:
        app.on_startup.append(_prewarm_on_startup)
    return app


def init_app(argv: Optional[list[str]] = None) -> web.Application:
    """Entry point for `python -m aiohttp.web photo_exif_backend.routes:init_app`."""
    return create_app()
