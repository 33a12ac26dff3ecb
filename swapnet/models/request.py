"""Generation request models."""

from enum import Enum

from pydantic import BaseModel, Field, model_validator

from ..config import PRO_IMAGE_MODEL
from .asset import ImageAsset


class BlendMode(str, Enum):
    """Which input supplies identity, garment and background."""
    PRESERVE_SUBJECT_BACKGROUND = "keep-model-bg"
    STUDIO_BACKGROUND = "new-bg"
    PRESERVE_SCENE_IDENTITY_SWAP = "keep-garment-bg"


class AspectRatio(str, Enum):
    PORTRAIT = "9:16"
    PORTRAIT_3_4 = "3:4"
    SQUARE = "1:1"
    LANDSCAPE_4_3 = "4:3"
    LANDSCAPE = "16:9"


class ResolutionTier(str, Enum):
    LOW = "1K"
    MEDIUM = "2K"
    HIGH = "4K"


DEFAULT_BACKGROUND_PROMPT = "Clean studio background"


class GenerationRequest(BaseModel):
    """A try-on batch: which images to blend, how, and how many replicas."""

    primary_image: ImageAsset
    secondary_image: ImageAsset | None = None
    detail_image: ImageAsset | None = None
    accessory_image: ImageAsset | None = None
    note: str = ""
    aspect_ratio: AspectRatio = AspectRatio.PORTRAIT
    resolution_tier: ResolutionTier = ResolutionTier.MEDIUM
    model_id: str = PRO_IMAGE_MODEL
    mode: BlendMode = BlendMode.PRESERVE_SUBJECT_BACKGROUND
    replica_count: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def _check_image_roles(self) -> "GenerationRequest":
        if self.secondary_image is None and self.accessory_image is None:
            raise ValueError("A try-on needs a garment image or an accessory image")
        if self.mode is BlendMode.PRESERVE_SCENE_IDENTITY_SWAP and self.secondary_image is None:
            raise ValueError("Identity swap needs a scene image to swap onto")
        return self

    def ordered_images(self) -> list[ImageAsset]:
        """Images in the order they are sent to the provider."""
        images = [self.primary_image, self.secondary_image, self.detail_image, self.accessory_image]
        return [image for image in images if image is not None]


class BackgroundRequest(BaseModel):
    """A background-replacement batch: one branch per prompt."""

    source_image: str = Field(description="Data URI of the image to edit")
    prompts: list[str] = Field(default_factory=lambda: [DEFAULT_BACKGROUND_PROMPT], min_length=1)
    detail_image: ImageAsset | None = None
    custom_background: ImageAsset | None = None
    aspect_ratio: AspectRatio = AspectRatio.PORTRAIT
    resolution_tier: ResolutionTier = ResolutionTier.MEDIUM
    model_id: str = PRO_IMAGE_MODEL

    @property
    def resolved_prompts(self) -> list[str]:
        """Prompts with blanks replaced by the default studio background."""
        return [p.strip() or DEFAULT_BACKGROUND_PROMPT for p in self.prompts]
