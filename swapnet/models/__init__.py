"""Data models for the SwapNet try-on core."""

from .asset import ImageAsset, load_image_asset
from .request import (
    AspectRatio,
    BackgroundRequest,
    BlendMode,
    GenerationRequest,
    ResolutionTier,
)
from .outcome import (
    AttemptOutcome,
    BatchResult,
    BatchStatus,
    Fatal,
    SafetyBlocked,
    Success,
    TextOnly,
    TransientFailure,
)

__all__ = [
    "ImageAsset",
    "load_image_asset",
    "AspectRatio",
    "BackgroundRequest",
    "BlendMode",
    "GenerationRequest",
    "ResolutionTier",
    "AttemptOutcome",
    "BatchResult",
    "BatchStatus",
    "Fatal",
    "SafetyBlocked",
    "Success",
    "TextOnly",
    "TransientFailure",
]
