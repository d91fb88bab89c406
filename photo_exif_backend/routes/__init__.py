"""
HTTP routes for the photo EXIF inspector.
Importing this package is side-effect free; route registration is explicit.
"""
from .registry import create_app, init_app, register_all_routes, register_routes

__all__ = [
    "create_app",
    "init_app",
    "register_all_routes",
    "register_routes",
]
