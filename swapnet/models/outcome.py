"""Per-attempt outcomes and batch results."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field, computed_field


NO_RESULT = "No result returned by the API. Check your network connection."
SAFETY_BLOCKED = "Image blocked by the safety filter. Please try a less sensitive image."
EMPTY_CONTENT = "The model produced nothing. Please try again."
NO_IMAGE_DATA = "No image data found in the response."
MALFORMED_RESPONSE = "The API returned a malformed response. Please try again."


@dataclass(frozen=True)
class Success:
    data_uri: str
    ok = True

    @property
    def message(self) -> str:
        return "ok"


@dataclass(frozen=True)
class TransientFailure:
    reason: str
    ok = False

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True)
class SafetyBlocked:
    reason: str = SAFETY_BLOCKED
    ok = False

    @property
    def message(self) -> str:
        return self.reason


@dataclass(frozen=True)
class TextOnly:
    """The model answered in words instead of an image."""
    text: str
    ok = False

    @property
    def message(self) -> str:
        return f"Message from the model: {self.text}"


@dataclass(frozen=True)
class Fatal:
    reason: str
    ok = False

    @property
    def message(self) -> str:
        return self.reason


AttemptOutcome = Success | TransientFailure | SafetyBlocked | TextOnly | Fatal


class BatchStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class BatchResult(BaseModel):
    """Aggregated outcome of a fan-out batch."""

    outputs: list[str] = Field(default_factory=list)  # completion order
    last_error: str | None = None

    @computed_field
    @property
    def status(self) -> BatchStatus:
        """Completed as soon as one branch produced an image."""
        return BatchStatus.COMPLETED if self.outputs else BatchStatus.FAILED
