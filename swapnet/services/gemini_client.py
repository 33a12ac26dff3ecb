"""Gemini REST client for image editing and text generation calls."""

import logging
from typing import Any

import httpx

from ..config import GeminiConfig
from ..errors import ProviderError

logger = logging.getLogger(__name__)


SAFETY_CATEGORIES = [
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
]

BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"


def default_safety_settings(threshold: str = BLOCK_ONLY_HIGH) -> list[dict[str, str]]:
    """All four harm categories mapped to the same threshold."""
    return [{"category": category, "threshold": threshold} for category in SAFETY_CATEGORIES]


class GeminiClient:
    """Thin async client for ``models/{model}:generateContent``.

    Non-200 replies raise ProviderError with the status code in the message,
    so the retry classifier can recognise 500/503 and friends.
    """

    def __init__(self, config: GeminiConfig, transport: httpx.AsyncBaseTransport | None = None):
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.config.timeout,
                transport=self._transport,
            )
        return self._client

    def build_image_request(
        self,
        parts: list[dict[str, Any]],
        model_id: str,
        aspect_ratio: str,
        resolution_tier: str,
        safety_settings: list[dict[str, str]] | None = None,
    ) -> dict[str, Any]:
        """Build the JSON body for an image generation call."""
        image_config = {"aspectRatio": aspect_ratio}
        if model_id == self.config.pro_image_model:
            image_config["imageSize"] = resolution_tier

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "responseModalities": ["IMAGE", "TEXT"],
                "imageConfig": image_config,
            },
            "safetySettings": safety_settings if safety_settings is not None else default_safety_settings(),
        }

    def build_text_request(
        self,
        parts: list[dict[str, Any]],
        system_instruction: str | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build the JSON body for a text (optionally JSON-constrained) call."""
        body: dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if response_schema is not None:
            body["generationConfig"] = {
                "responseMimeType": "application/json",
                "responseSchema": response_schema,
            }
        return body

    async def generate_content(
        self,
        model_id: str,
        body: dict[str, Any],
        api_key: str,
    ) -> dict[str, Any]:
        """POST one generateContent request and return the parsed JSON reply."""
        url = f"{self.config.base_url}/models/{model_id}:generateContent"

        try:
            response = await self.client.post(
                url,
                json=body,
                headers={"x-goog-api-key": api_key},
            )
        except httpx.TimeoutException as e:
            raise ProviderError(f"Deadline expired waiting for {model_id}: {e}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Request to {model_id} failed: {e}") from e

        if response.status_code != 200:
            raise ProviderError(
                f"Gemini request failed with status {response.status_code}: {response.text[:500]}",
                status_code=response.status_code,
            )

        return response.json()

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
