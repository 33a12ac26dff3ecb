"""Image asset model."""

import uuid
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..utils.images import detect_mime_type, normalize_image, strip_data_uri, to_data_uri


class ImageAsset(BaseModel):
    """An uploaded image, carried as a self-describing data URI."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    payload: str = Field(description="Image encoded as data:<mime>;base64,<data>")
    mime_type: str = "image/png"
    preview_uri: str | None = None

    @property
    def base64_data(self) -> str:
        """Payload without the data URI prefix."""
        return strip_data_uri(self.payload)

    def to_part(self) -> dict:
        """Inline-data content part for a generation request."""
        return {"inlineData": {"mimeType": self.mime_type, "data": self.base64_data}}

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str | None = None) -> "ImageAsset":
        """Build an asset from raw image bytes."""
        mime_type = mime_type or detect_mime_type(data)
        uri = to_data_uri(data, mime_type)
        return cls(payload=uri, mime_type=mime_type, preview_uri=uri)


def load_image_asset(path: Path) -> ImageAsset:
    """Load an image file as an asset, converting palette/alpha images to PNG."""
    image_bytes = path.read_bytes()

    converted = normalize_image(image_bytes)
    if converted is not None:
        image_bytes, mime_type = converted
    else:
        mime_type = detect_mime_type(image_bytes, path.name)

    return ImageAsset.from_bytes(image_bytes, mime_type)
