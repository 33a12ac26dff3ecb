"""Configuration management for the SwapNet try-on core."""

from pathlib import Path
from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings


PRO_IMAGE_MODEL = "gemini-3-pro-image-preview"


class GeminiConfig(BaseModel):
    """Gemini REST endpoint and model selection."""
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    timeout: float = 300.0  # image generation at 4K can take minutes
    image_model: str = PRO_IMAGE_MODEL
    pro_image_model: str = PRO_IMAGE_MODEL  # only this tier accepts imageSize
    text_model: str = "gemini-3-pro-preview"


class RetryConfig(BaseModel):
    """Retry-with-backoff settings for a single generation call."""
    max_attempts: int = Field(default=3, ge=1)
    base_delay: float = Field(default=2.0, ge=0.0)  # seconds, doubled per attempt


class GenerationConfig(BaseModel):
    """Default image generation settings."""
    aspect_ratio: str = "9:16"
    resolution_tier: str = "2K"
    replica_count: int = Field(default=2, ge=1)


class SwapNetConfig(BaseSettings):
    """Main configuration."""

    # Persisted state (credential override, saved model library)
    state_dir: Path = Path.home() / ".swapnet"

    # Sub-configs
    gemini: GeminiConfig = Field(default_factory=GeminiConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    # Ambient credential supplied at process start (loaded from .env)
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )

    class Config:
        env_file = ".env"
        env_prefix = ""
        env_nested_delimiter = "__"
        extra = "ignore"
        populate_by_name = True

    @property
    def credential_path(self) -> Path:
        return self.state_dir / "gemini_api_key"

    @property
    def library_path(self) -> Path:
        return self.state_dir / "saved_models.json"


def load_config() -> SwapNetConfig:
    """Load configuration from environment and defaults."""
    return SwapNetConfig()
