"""Map upstream failures to user-facing error categories."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from tripscout.errors import UpstreamError
from tripscout.models.events import StreamEvent
from tripscout.services import streaming


class ErrorKind(str, Enum):
    INVALID_CREDENTIAL = "invalid_credential"
    QUOTA_EXHAUSTED = "quota_exhausted"
    RATE_LIMITED = "rate_limited"
    UPSTREAM_TIMEOUT = "upstream_timeout"
    GENERIC = "generic"


@dataclass(frozen=True)
class ErrorClassification:
    kind: ErrorKind
    message: str
    suggestion: str | None = None
    code: int | None = None

    def to_event(self) -> StreamEvent:
        return streaming.error(
            self.kind.value,
            self.message,
            suggestion=self.suggestion,
            code=self.code,
        )


_BY_STATUS: dict[int, tuple[ErrorKind, str, str]] = {
    401: (
        ErrorKind.INVALID_CREDENTIAL,
        "Invalid API key",
        "Please check your Firecrawl API key is correct.",
    ),
    402: (
        ErrorKind.QUOTA_EXHAUSTED,
        "Insufficient credits",
        "You've run out of Firecrawl credits. Please upgrade your plan.",
    ),
    429: (
        ErrorKind.RATE_LIMITED,
        "Rate limit exceeded",
        "Too many requests. Please wait a moment and try again.",
    ),
    504: (
        ErrorKind.UPSTREAM_TIMEOUT,
        "Request timeout",
        "The search took too long. Try a simpler query or fewer sources.",
    ),
}


def status_code_of(exc: BaseException) -> int | None:
    if isinstance(exc, UpstreamError):
        return exc.status_code
    return None


def classify_error(exc: BaseException) -> ErrorClassification:
    """Classify ``exc``. Never raises; unknown codes fall through to generic."""
    code = status_code_of(exc)
    mapped = _BY_STATUS.get(code) if code is not None else None
    if mapped is not None:
        kind, message, suggestion = mapped
        return ErrorClassification(kind=kind, message=message, suggestion=suggestion, code=code)

    if isinstance(exc, UpstreamError):
        message = exc.message
    else:
        message = str(exc)
    return ErrorClassification(
        kind=ErrorKind.GENERIC,
        message=message or "Unknown error",
        code=code,
    )
