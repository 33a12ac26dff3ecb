"""Utility helpers."""

from .storage import atomic_write_text
from .images import (
    detect_mime_type,
    to_data_uri,
    strip_data_uri,
    data_uri_mime_type,
    normalize_image,
)

__all__ = [
    "detect_mime_type",
    "to_data_uri",
    "strip_data_uri",
    "data_uri_mime_type",
    "normalize_image",
    "atomic_write_text",
]
