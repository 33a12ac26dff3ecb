"""Concurrent fan-out of generation attempts into one batch result."""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from ..agents.prompt_composer import PromptComposer
from ..config import GenerationConfig, SwapNetConfig
from ..errors import BatchFailedError, MissingCredentialError, TransientProviderError
from ..models.outcome import AttemptOutcome, BatchResult, Fatal, Success, TransientFailure
from ..models.request import AspectRatio, BackgroundRequest, GenerationRequest, ResolutionTier
from ..services import CredentialStore, GeminiClient, RequestExecutor, validate_response
from ..utils.images import data_uri_mime_type, strip_data_uri

logger = logging.getLogger(__name__)


DEFAULT_BATCH_ERROR = "Could not generate any image."


class BatchCoordinator:
    """Runs N independent generation branches and aggregates their outcomes.

    Flow per branch:
    1. Compose the instruction text for the blend mode
    2. Execute the call with retry (RequestExecutor)
    3. Classify the response (validate_response)

    All branches are started before any is awaited. A failing branch never
    cancels the others; successful images are collected in the order their
    branches finish.

    Request fields the caller left unset are filled from ``defaults`` and
    ``image_model`` when those are given.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        composer: PromptComposer | None = None,
        validator: Callable[[Any], AttemptOutcome] = validate_response,
        defaults: GenerationConfig | None = None,
        image_model: str | None = None,
    ):
        self.executor = executor
        self.composer = composer or PromptComposer()
        self.validator = validator

        # Unknown configured values raise here, not per request
        self.default_fields: dict[str, Any] = {}
        if defaults is not None:
            self.default_fields.update(
                aspect_ratio=AspectRatio(defaults.aspect_ratio),
                resolution_tier=ResolutionTier(defaults.resolution_tier),
                replica_count=defaults.replica_count,
            )
        if image_model:
            self.default_fields["model_id"] = image_model

    @classmethod
    def from_config(
        cls,
        config: SwapNetConfig,
        credentials: CredentialStore | None = None,
    ) -> "BatchCoordinator":
        """Wire client, credential store and executor from configuration."""
        if credentials is None:
            credentials = CredentialStore(config.credential_path, default=config.gemini_api_key)
        executor = RequestExecutor(
            client=GeminiClient(config.gemini),
            credentials=credentials,
            retry=config.retry,
        )
        return cls(executor, defaults=config.generation, image_model=config.gemini.image_model)

    async def run(self, request: GenerationRequest) -> BatchResult:
        """Fan out ``request.replica_count`` try-on branches.

        Raises:
            MissingCredentialError: no API key is configured.
        """
        self._require_credential()
        request = self.with_defaults(request)
        logger.info(
            "Starting try-on batch: %d replica(s), mode=%s, model=%s",
            request.replica_count, request.mode.value, request.model_id,
        )

        branches = [self._tryon_branch(request) for _ in range(request.replica_count)]
        return await self._gather(branches)

    async def generate(self, request: GenerationRequest) -> list[str]:
        """Like run(), but raise BatchFailedError when no branch succeeded."""
        result = await self.run(request)
        if not result.outputs:
            raise BatchFailedError(result.last_error or DEFAULT_BATCH_ERROR)
        return result.outputs

    async def change_background(self, request: BackgroundRequest) -> BatchResult:
        """Fan out one background-replacement branch per prompt."""
        self._require_credential()
        request = self.with_defaults(request)
        prompts = request.resolved_prompts
        logger.info("Starting background batch: %d prompt(s)", len(prompts))

        branches = [self._background_branch(request, prompt) for prompt in prompts]
        return await self._gather(branches)

    def with_defaults(self, request):
        """Copy of ``request`` with unset fields taken from the configured defaults."""
        unset = set(type(request).model_fields) - request.model_fields_set
        update = {name: value for name, value in self.default_fields.items() if name in unset}
        return request.model_copy(update=update) if update else request

    def _require_credential(self):
        if not self.executor.credentials.get():
            raise MissingCredentialError("Missing API key.")

    async def _tryon_branch(self, request: GenerationRequest) -> AttemptOutcome:
        instruction = self.composer.compose_for(request)
        parts = [image.to_part() for image in request.ordered_images()]
        parts.append({"text": instruction})

        return await self._attempt(
            parts,
            aspect_ratio=request.aspect_ratio.value,
            resolution_tier=request.resolution_tier.value,
            model_id=request.model_id,
        )

    async def _background_branch(self, request: BackgroundRequest, prompt: str) -> AttemptOutcome:
        instruction = self.composer.compose_background(
            prompt,
            has_detail=request.detail_image is not None,
            has_custom_background=request.custom_background is not None,
        )
        parts = [{
            "inlineData": {
                "mimeType": data_uri_mime_type(request.source_image),
                "data": strip_data_uri(request.source_image),
            }
        }]
        if request.detail_image is not None:
            parts.append(request.detail_image.to_part())
        if request.custom_background is not None:
            parts.append(request.custom_background.to_part())
        parts.append({"text": instruction})

        return await self._attempt(
            parts,
            aspect_ratio=request.aspect_ratio.value,
            resolution_tier=request.resolution_tier.value,
            model_id=request.model_id,
        )

    async def _attempt(
        self,
        parts: list[dict[str, Any]],
        aspect_ratio: str,
        resolution_tier: str,
        model_id: str,
    ) -> AttemptOutcome:
        """One branch: execute with retry, then classify. Never raises."""
        try:
            response = await self.executor.execute(
                parts,
                aspect_ratio=aspect_ratio,
                resolution_tier=resolution_tier,
                model_id=model_id,
            )
            return self.validator(response)
        except TransientProviderError as e:
            return TransientFailure(str(e))
        except Exception as e:
            logger.warning("Generation branch failed: %s", e)
            return Fatal(str(e) or "System error.")

    async def _gather(self, branches: list[Awaitable[AttemptOutcome]]) -> BatchResult:
        tasks = [asyncio.ensure_future(branch) for branch in branches]

        outputs: list[str] = []
        last_error: str | None = None
        for next_done in asyncio.as_completed(tasks):
            outcome = await next_done
            if isinstance(outcome, Success):
                outputs.append(outcome.data_uri)
            else:
                last_error = outcome.message
                logger.info("Branch failed: %s", outcome.message)

        result = BatchResult(outputs=outputs, last_error=last_error)
        logger.info(
            "Batch %s: %d of %d branch(es) produced an image",
            result.status.value, len(outputs), len(tasks),
        )
        return result

    async def close(self):
        """Close the underlying HTTP client."""
        await self.executor.client.close()
