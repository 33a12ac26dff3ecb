"""Helpers for turning raw image bytes and files into data URIs."""

import base64
import io
from pathlib import Path

from PIL import Image


EXTENSION_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
    ".gif": "image/gif",
}


def detect_mime_type(image_bytes: bytes, filename: str | None = None) -> str:
    """Detect the image format from magic bytes, falling back to the extension."""
    if image_bytes[:3] == b'\xff\xd8\xff':
        return "image/jpeg"
    if image_bytes[:8] == b'\x89PNG\r\n\x1a\n':
        return "image/png"
    if image_bytes[:4] == b'RIFF' and image_bytes[8:12] == b'WEBP':
        return "image/webp"
    if image_bytes[:6] in (b'GIF87a', b'GIF89a'):
        return "image/gif"

    if filename:
        return EXTENSION_MIME_TYPES.get(Path(filename).suffix.lower(), "image/png")
    return "image/png"


def to_data_uri(image_bytes: bytes, mime_type: str) -> str:
    """Encode bytes as a ``data:<mime>;base64,<payload>`` string."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def strip_data_uri(data: str) -> str:
    """Return the base64 payload of a data URI (or the input if it has no prefix)."""
    if "," in data:
        return data.split(",", 1)[1]
    return data


def normalize_image(image_bytes: bytes) -> tuple[bytes, str] | None:
    """Re-encode palette/alpha images as RGB PNG.

    Returns None when the image is already in a mode the provider accepts
    or cannot be opened by Pillow.
    """
    try:
        img = Image.open(io.BytesIO(image_bytes))
        if img.mode not in ('RGBA', 'P', 'LA'):
            return None
        img = img.convert('RGB')
        output = io.BytesIO()
        img.save(output, format='PNG')
        return output.getvalue(), "image/png"
    except (OSError, ValueError):
        return None


def data_uri_mime_type(data: str, default: str = "image/png") -> str:
    """Mime type declared in a data URI header, or ``default``."""
    if data.startswith("data:") and ";" in data:
        return data[5:data.index(";")] or default
    return default
