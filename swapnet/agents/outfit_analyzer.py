"""Outfit Analyzer - describes an outfit and turns the description into motion prompts."""

import json
import logging

from ..config import GeminiConfig
from ..models.asset import ImageAsset
from ..services.request_executor import RequestExecutor
from ..services.response_validator import extract_text

logger = logging.getLogger(__name__)


ANALYSIS_INSTRUCTION = "Describe this outfit for high-quality video generation."

PROMPTS_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "prompts": {"type": "ARRAY", "items": {"type": "STRING"}},
    },
}


def prompts_instruction(count: int) -> str:
    return f'Generate {count} video motion prompts. Return JSON {{ "prompts": [] }}.'


class OutfitAnalyzer:
    """Auxiliary text calls on the Gemini text model."""

    def __init__(self, executor: RequestExecutor, config: GeminiConfig | None = None):
        self.executor = executor
        self.config = config or GeminiConfig()

    def _parse_json_response(self, text: str) -> dict:
        """Parse JSON from the model's reply, handling markdown code blocks."""
        text = text.strip()
        if text.startswith("```"):
            lines = text.split("\n")
            # Drop the opening ```json and closing ``` lines
            text = "\n".join(lines[1:-1])

        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Prompt list reply was not valid JSON: %.200s", text)
            return {}
        return data if isinstance(data, dict) else {}

    async def analyze_outfit(
        self,
        image: ImageAsset,
        detail_image: ImageAsset | None = None,
    ) -> str:
        """Describe the outfit in ``image`` (plus an optional close-up)."""
        parts = [image.to_part()]
        if detail_image is not None:
            parts.append(detail_image.to_part())
        parts.append({"text": ANALYSIS_INSTRUCTION})

        body = self.executor.client.build_text_request(parts)
        response = await self.executor.call(self.config.text_model, body)
        return extract_text(response)

    async def generate_prompts(self, analysis: str, count: int) -> list[str]:
        """Turn an outfit analysis into ``count`` video motion prompts."""
        body = self.executor.client.build_text_request(
            [{"text": analysis}],
            system_instruction=prompts_instruction(count),
            response_schema=PROMPTS_SCHEMA,
        )
        response = await self.executor.call(self.config.text_model, body)

        data = self._parse_json_response(extract_text(response) or "{}")
        prompts = data.get("prompts")
        if not isinstance(prompts, list):
            logger.warning("Prompt list reply had no prompts array: %.200s", prompts)
            return []
        return [str(p) for p in prompts]
