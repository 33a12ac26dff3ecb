"""Provider transport, retry, validation and persisted state."""

from .credentials import CredentialStore
from .gemini_client import GeminiClient, default_safety_settings
from .request_executor import RequestExecutor, backoff_delay, is_transient
from .response_validator import validate_response, extract_text
from .asset_library import AssetLibrary

__all__ = [
    "CredentialStore",
    "GeminiClient",
    "default_safety_settings",
    "RequestExecutor",
    "backoff_delay",
    "is_transient",
    "validate_response",
    "extract_text",
    "AssetLibrary",
]
