"""Single generation call with retry-with-exponential-backoff."""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from ..config import RetryConfig
from ..errors import AuthError, MissingCredentialError, TransientProviderError
from .credentials import CredentialStore
from .gemini_client import GeminiClient

logger = logging.getLogger(__name__)


TRANSIENT_STATUS_MARKERS = ("500", "503")
TRANSIENT_TEXT_MARKERS = ("overloaded", "deadline expired", "internal error")
AUTH_MARKERS = ("404", "not found", "API key")

AUTH_ERROR_MESSAGE = "API key error: please check your key or project."

Sleep = Callable[[float], Awaitable[None]]


def is_transient(error: BaseException) -> bool:
    """Whether an error looks like overload, a 5xx or a deadline and is worth retrying."""
    message = str(error)
    if any(marker in message for marker in TRANSIENT_STATUS_MARKERS):
        return True
    lowered = message.lower()
    return any(marker in lowered for marker in TRANSIENT_TEXT_MARKERS)


def is_auth_error(error: BaseException) -> bool:
    message = str(error)
    return any(marker in message for marker in AUTH_MARKERS)


def backoff_delay(attempt: int, base_delay: float = 2.0) -> float:
    """Seconds to wait after failed attempt ``attempt`` (1-based): base * 2^(attempt-1)."""
    return base_delay * (2 ** (attempt - 1))


class RequestExecutor:
    """Runs one provider call, retrying transient failures.

    The credential is read from the store at every attempt, so a key changed
    mid-batch is picked up by calls that have not started yet.
    """

    def __init__(
        self,
        client: GeminiClient,
        credentials: CredentialStore,
        retry: RetryConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.client = client
        self.credentials = credentials
        self.retry = retry or RetryConfig()
        self.sleep = sleep

    async def execute(
        self,
        parts: list[dict[str, Any]],
        aspect_ratio: str,
        resolution_tier: str,
        model_id: str,
        safety_settings: list[dict[str, str]] | None = None,
    ) -> dict[str, Any]:
        """Run an image generation call and return the raw provider response."""
        body = self.client.build_image_request(
            parts=parts,
            model_id=model_id,
            aspect_ratio=aspect_ratio,
            resolution_tier=resolution_tier,
            safety_settings=safety_settings,
        )
        return await self.call(model_id, body)

    async def call(self, model_id: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST ``body`` to ``model_id`` with retry.

        Raises:
            MissingCredentialError: no key configured; nothing was sent.
            TransientProviderError: every attempt failed transiently.
            AuthError: the provider rejected the key or model.
        """
        max_attempts = self.retry.max_attempts
        attempt = 1

        while True:
            api_key = self.credentials.get()
            if not api_key:
                raise MissingCredentialError("Missing API key.")

            try:
                return await self.client.generate_content(model_id, body, api_key)
            except Exception as e:
                if not is_transient(e):
                    if is_auth_error(e):
                        logger.error("Gemini rejected credentials for %s: %s", model_id, e)
                        raise AuthError(AUTH_ERROR_MESSAGE) from e
                    raise

                if attempt >= max_attempts:
                    logger.warning("Giving up on %s after %d attempts: %s", model_id, attempt, e)
                    raise TransientProviderError(str(e)) from e

                delay = backoff_delay(attempt, self.retry.base_delay)
                logger.info(
                    "Transient error from %s (attempt %d/%d), retrying in %.1fs: %s",
                    model_id, attempt, max_attempts, delay, e,
                )
                await self.sleep(delay)
                attempt += 1
