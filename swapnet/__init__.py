"""SwapNet - multi-image virtual try-on on Gemini image models."""

from .config import SwapNetConfig, load_config
from .models import BatchResult, BatchStatus, BlendMode, GenerationRequest, ImageAsset
from .pipeline import BatchCoordinator

__version__ = "1.0.0"

__all__ = [
    "SwapNetConfig",
    "load_config",
    "BatchResult",
    "BatchStatus",
    "BlendMode",
    "GenerationRequest",
    "ImageAsset",
    "BatchCoordinator",
]
