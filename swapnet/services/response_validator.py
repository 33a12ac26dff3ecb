"""Classify raw generateContent responses into attempt outcomes."""

from typing import Any

from ..models.outcome import (
    EMPTY_CONTENT,
    MALFORMED_RESPONSE,
    NO_IMAGE_DATA,
    NO_RESULT,
    SAFETY_BLOCKED,
    AttemptOutcome,
    Fatal,
    SafetyBlocked,
    Success,
    TextOnly,
)


SAFETY_FINISH_REASONS = {"SAFETY", "IMAGE_SAFETY"}


def _get(data: Any, camel: str, snake: str) -> Any:
    """Read a field that may be spelled camelCase (REST) or snake_case (SDK dumps)."""
    if not isinstance(data, dict):
        return None
    value = data.get(camel)
    if value is None:
        value = data.get(snake)
    return value


def first_candidate(response: Any) -> dict | None:
    candidates = _get(response, "candidates", "candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return None
    return candidates[0] if isinstance(candidates[0], dict) else None


def _items(value: Any) -> list:
    return value if isinstance(value, list) else []


def validate_response(response: Any) -> AttemptOutcome:
    """Turn a provider response into exactly one outcome.

    Safety is checked before scanning parts: a blocked response that still
    carries an image part must not count as a success. Parts and ratings
    that are not objects are skipped; a response left with no usable
    content is reported as malformed.
    """
    candidate = first_candidate(response)
    if not candidate:
        return Fatal(NO_RESULT)

    finish_reason = _get(candidate, "finishReason", "finish_reason")
    safety_ratings = _items(_get(candidate, "safetyRatings", "safety_ratings"))
    blocked = any(_get(rating, "blocked", "blocked") is True for rating in safety_ratings)
    if finish_reason in SAFETY_FINISH_REASONS or blocked:
        return SafetyBlocked(SAFETY_BLOCKED)

    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        return Fatal(MALFORMED_RESPONSE)
    raw_parts = _items(content.get("parts"))
    if not raw_parts:
        return Fatal(EMPTY_CONTENT)
    parts = [part for part in raw_parts if isinstance(part, dict)]
    if not parts:
        return Fatal(MALFORMED_RESPONSE)

    for part in parts:
        inline = _get(part, "inlineData", "inline_data")
        data = _get(inline, "data", "data")
        if data and isinstance(data, str):
            mime_type = _get(inline, "mimeType", "mime_type") or "image/png"
            return Success(f"data:{mime_type};base64,{data}")

    for part in parts:
        text = part.get("text")
        if text and isinstance(text, str):
            return TextOnly(text)

    return Fatal(NO_IMAGE_DATA)


def extract_text(response: Any) -> str:
    """Concatenate the text parts of the first candidate."""
    candidate = first_candidate(response)
    if not candidate:
        return ""
    content = candidate.get("content")
    parts = _items(content.get("parts")) if isinstance(content, dict) else []
    return "".join(
        part["text"] for part in parts
        if isinstance(part, dict) and isinstance(part.get("text"), str)
    )
