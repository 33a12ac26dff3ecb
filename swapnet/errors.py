"""Error taxonomy for generation calls and batches."""


class SwapNetError(RuntimeError):
    """Base class for all errors raised by the try-on core."""


class ProviderError(SwapNetError):
    """The provider call failed; the message carries the HTTP status or cause."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransientProviderError(SwapNetError):
    """Overload, 5xx, deadline or internal error that survived every retry."""


class MissingCredentialError(SwapNetError):
    """No API key is configured, so no call was attempted."""


class AuthError(SwapNetError):
    """The provider rejected the key or could not find the model/project."""


class BatchFailedError(SwapNetError):
    """Every branch of a batch failed; carries the last branch's message."""
