"""Exception hierarchy for Gemini Harness.

Every error raised by the library derives from ``GeminiHarnessError`` so
callers can catch the whole family with one ``except`` clause.  HTTP-level
failures carry the originating ``status_code`` (``None`` for failures that
never reached the server, e.g. local parameter validation).
"""

from __future__ import annotations

AUTH_HELP_URL = "https://makersuite.google.com/app/apikey"

# Lets callers pass status_code=None explicitly (local validation errors)
_UNSET: object = object()


class GeminiHarnessError(Exception):
    """Base class for all library errors."""

    default_message = "Gemini Harness error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(GeminiHarnessError):
    """Missing or invalid client configuration (checked before any request)."""

    default_message = "Invalid client configuration."


class ApiError(GeminiHarnessError):
    """The API answered with a status outside the known categories."""

    default_message = "Unexpected API error."
    default_status: int | None = None

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None | object = _UNSET,
    ) -> None:
        super().__init__(message)
        self.status_code = (
            self.default_status if status_code is _UNSET else status_code
        )


class AuthenticationError(ApiError):
    """401 / 403 -- never retried."""

    default_message = f"Invalid API key. Get one at {AUTH_HELP_URL}"
    default_status = 401


class InvalidRequestError(ApiError):
    """400 / 404, or a request parameter rejected locally."""

    default_message = "Invalid request. Check your parameters."
    default_status = 400


class RateLimitError(ApiError):
    """429 after the retry budget is spent."""

    default_message = "Rate limit exceeded. Please retry after some time."
    default_status = 429


class ServerError(ApiError):
    """5xx, an unparseable success body, or a non-timeout network failure."""

    default_message = "Gemini API server error. Please retry."
    default_status = 500


class RequestTimeoutError(GeminiHarnessError):
    """Every attempt timed out."""

    default_message = "Request timed out after retries."
