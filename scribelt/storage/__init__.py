"""Storage for exported transcripts."""

from .export import ExportService, DEFAULT_FILE_NAME

__all__ = [
    "ExportService",
    "DEFAULT_FILE_NAME",
]
