"""Diagnostics: full-pipeline diagnosis reports and path debugging."""

from .recommendations import ALL_CHECKS_NORMAL, PATH_VALIDATION_NORMAL, recommend, recommend_for_path
from .service import DiagnosticService, is_absolute_path

__all__ = [
    "ALL_CHECKS_NORMAL",
    "PATH_VALIDATION_NORMAL",
    "DiagnosticService",
    "is_absolute_path",
    "recommend",
    "recommend_for_path",
]
