# Test fixtures and configuration
import base64
import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from swapnet.config import GeminiConfig, RetryConfig
from swapnet.models import ImageAsset
from swapnet.services import CredentialStore, GeminiClient, RequestExecutor


@pytest.fixture
def minimal_png_bytes():
    """Minimal valid PNG image bytes."""
    return bytes([
        0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A,  # PNG signature
        0x00, 0x00, 0x00, 0x0D, 0x49, 0x48, 0x44, 0x52,  # IHDR chunk
        0x00, 0x00, 0x00, 0x01, 0x00, 0x00, 0x00, 0x01,  # 1x1 dimensions
        0x08, 0x02, 0x00, 0x00, 0x00, 0x90, 0x77, 0x53,
        0xDE, 0x00, 0x00, 0x00, 0x0C, 0x49, 0x44, 0x41,  # IDAT chunk
        0x54, 0x08, 0xD7, 0x63, 0xF8, 0xCF, 0xC0, 0x00,
        0x00, 0x00, 0x03, 0x00, 0x01, 0x00, 0x05, 0xFE,
        0xD4, 0xAA, 0x00, 0x00, 0x00, 0x00, 0x49, 0x45,  # IEND chunk
        0x4E, 0x44, 0xAE, 0x42, 0x60, 0x82
    ])


@pytest.fixture
def person_asset(minimal_png_bytes):
    """Person photo asset."""
    return ImageAsset.from_bytes(minimal_png_bytes, "image/png")


@pytest.fixture
def garment_asset():
    """Garment photo asset with a payload distinct from the person photo."""
    data = base64.b64encode(b"\xff\xd8\xff" + b"garment" * 40).decode()
    uri = f"data:image/jpeg;base64,{data}"
    return ImageAsset(payload=uri, mime_type="image/jpeg", preview_uri=uri)


def image_response(data: str = "aW1hZ2U=", mime_type: str | None = "image/png") -> dict:
    """A successful generateContent response carrying one inline image."""
    inline = {"data": data}
    if mime_type is not None:
        inline["mimeType"] = mime_type
    return {
        "candidates": [{
            "content": {"parts": [{"inlineData": inline}]},
            "finishReason": "STOP",
            "safetyRatings": [],
        }]
    }


def text_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}]}


def safety_response() -> dict:
    return {"candidates": [{"finishReason": "SAFETY", "safetyRatings": [
        {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "blocked": True},
    ]}]}


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def credentials():
    """In-memory credential store with an ambient key."""
    return CredentialStore(path=None, default="test-api-key-123")


@pytest.fixture
def gemini_client():
    """Gemini client whose network call is mocked."""
    client = GeminiClient(GeminiConfig())
    client.generate_content = AsyncMock(return_value=image_response())
    return client


@pytest.fixture
def executor(gemini_client, credentials, sleep):
    return RequestExecutor(
        client=gemini_client,
        credentials=credentials,
        retry=RetryConfig(max_attempts=3, base_delay=2.0),
        sleep=sleep,
    )
