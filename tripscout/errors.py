"""Typed failures raised at the boundaries of external calls."""
from __future__ import annotations


class TripScoutError(Exception):
    """Base class for all errors raised by TripScout."""


class ConfigurationError(TripScoutError):
    """A required credential or backend could not be resolved."""


class UpstreamError(TripScoutError):
    """An external service call failed.

    ``status_code`` is the HTTP status reported by the upstream service, or
    ``None`` when the failure happened before a response was received.
    """

    provider: str = "upstream"

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(provider={self.provider!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class SearchProviderError(UpstreamError):
    provider = "firecrawl"


class ModelBackendError(UpstreamError):
    def __init__(self, message: str, *, status_code: int | None = None, provider: str = "openai"):
        super().__init__(message, status_code=status_code)
        self.provider = provider
