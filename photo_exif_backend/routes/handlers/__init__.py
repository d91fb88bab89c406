"""
Route handlers.
"""
from .exif import register_exif_routes

__all__ = ["register_exif_routes"]
