"""HTTP transport for the Gemini API: JSON POSTs, retries, NDJSON streaming."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Generator

import httpx

from gemini_harness.errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    InvalidRequestError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
)

from .stream import StreamDecoder

_logger = logging.getLogger(__name__)

BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Retry configuration
_DEFAULT_RETRY_COUNT = 3
_BACKOFF_BASE = 1  # seconds -- exponential: 1, 2, 4

_CONNECT_TIMEOUT = 5

ChunkCallback = Callable[[dict[str, Any]], Any]


def backoff_seconds(attempt: int) -> int:
    """Sleep before the attempt after *attempt* (1-based): 1, 2, 4, ..."""
    return _BACKOFF_BASE * (2 ** (attempt - 1))


def _error_message(body: str) -> str | None:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, ValueError):
        return body or None
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
    return body or None


def classify_status(status: int, body: str = "") -> ApiError | None:
    """Map an HTTP status to the error it stands for (``None`` for 2xx).

    The error's class says whether it may be retried: ``RateLimitError`` and
    5xx ``ServerError`` are, everything else is terminal.
    """
    if 200 <= status < 300:
        return None
    if status == 400:
        return InvalidRequestError(_error_message(body), status_code=400)
    if status == 404:
        return InvalidRequestError(
            _error_message(body)
            or "Resource not found. Check model name and endpoint.",
            status_code=404,
        )
    if status in (401, 403):
        return AuthenticationError(status_code=status)
    if status == 429:
        return RateLimitError(_error_message(body), status_code=429)
    if 500 <= status < 600:
        return ServerError(_error_message(body), status_code=status)
    return ApiError(f"Unexpected status code: {status}", status_code=status)


def _is_retryable(error: ApiError) -> bool:
    return isinstance(error, (RateLimitError, ServerError))


class Transport:
    """Blocking HTTP client bound to one API key.

    ``send`` retries rate limits, 5xx responses and timeouts up to
    ``retry_count`` extra attempts with exponential backoff (1s, 2s, 4s...).
    Streaming calls are never retried: a stream that already delivered
    records cannot be replayed without handing the caller duplicates.
    """

    def __init__(
        self,
        api_key: str,
        timeout: float = 30,
        retry_count: int = _DEFAULT_RETRY_COUNT,
        base_url: str = BASE_URL,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError(
                "API key is required. Set it via configure() or GOOGLE_API_KEY."
            )
        if retry_count < 0:
            raise ConfigurationError(f"retry_count must be >= 0, got {retry_count}")
        self.timeout = timeout
        self.retry_count = retry_count
        self.base_url = base_url.rstrip("/") + "/"
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Underlying ``httpx.Client``, created on first use and reused."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self._api_key,
                },
                timeout=httpx.Timeout(self.timeout, connect=_CONNECT_TIMEOUT),
                transport=self._transport,
            )
        return self._client

    # ------------------------------------------------------------------
    # Non-streaming
    # ------------------------------------------------------------------

    def send(self, path: str, payload: dict[str, Any]) -> Any:
        """POST *payload* to *path* and return the decoded JSON body."""
        max_attempts = self.retry_count + 1
        attempt = 1
        while True:
            _logger.debug("POST %s (attempt %d/%d)", path, attempt, max_attempts)
            try:
                resp = self.client.post(path, json=payload)
            except httpx.TimeoutException as e:
                if attempt >= max_attempts:
                    raise RequestTimeoutError(
                        f"Request timed out after {self.retry_count} retries"
                    ) from e
                wait = backoff_seconds(attempt)
                _logger.warning(
                    "Gemini API timeout (attempt %d/%d), retrying in %ds: %s",
                    attempt, max_attempts, wait, e,
                )
                time.sleep(wait)
                attempt += 1
                continue
            except httpx.HTTPError as e:
                raise ServerError(f"Network error: {e}", status_code=None) from e

            error = classify_status(resp.status_code, resp.text)
            if error is None:
                try:
                    return resp.json()
                except (json.JSONDecodeError, ValueError) as e:
                    raise ServerError(
                        f"Invalid JSON response from API: {e}",
                        status_code=resp.status_code,
                    ) from e
            if not _is_retryable(error) or attempt >= max_attempts:
                raise error
            wait = backoff_seconds(attempt)
            _logger.warning(
                "Gemini API returned %d (attempt %d/%d), retrying in %ds",
                resp.status_code, attempt, max_attempts, wait,
            )
            time.sleep(wait)
            attempt += 1

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def send_stream(
        self,
        path: str,
        payload: dict[str, Any],
        on_chunk: ChunkCallback | None,
    ) -> None:
        """POST and hand each decoded record to *on_chunk* as it arrives.

        The callback runs before the next bytes are read, so a slow callback
        slows the stream and a raising one aborts it.  Records delivered
        before a terminal error stay delivered.
        """
        if on_chunk is None:
            raise ValueError("on_chunk callback required for streaming")
        for record in self.iter_stream(path, payload):
            on_chunk(record)

    def iter_stream(
        self, path: str, payload: dict[str, Any],
    ) -> Generator[dict[str, Any], None, None]:
        """Lazily POST and yield decoded records.

        Nothing is sent until the first ``next()``.  Closing the generator
        early closes the connection.

        A non-2xx status is raised before any record is yielded.  A failure
        after records were already delivered can only arrive in-band, as a
        record carrying an ``error`` object; it is raised with the same
        classification as an HTTP status.
        """
        decoder = StreamDecoder()
        _logger.debug("POST %s (stream)", path)
        try:
            with self.client.stream("POST", path, json=payload) as resp:
                if not resp.is_success:
                    # httpx knows the status before the body; an error body
                    # is never fed to the decoder.
                    body = resp.read().decode("utf-8", errors="replace")
                    raise classify_status(resp.status_code, body)  # type: ignore[misc]
                for raw in resp.iter_bytes():
                    for record in decoder.feed(raw):
                        _raise_inline_error(record)
                        yield record
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                f"Streaming request timed out (streams are not retried): {e}"
            ) from e
        except httpx.HTTPError as e:
            raise ServerError(f"Network error: {e}", status_code=None) from e
        if decoder.pending.strip():
            _logger.debug(
                "Dropping %d bytes of unterminated stream data", len(decoder.pending),
            )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


def _raise_inline_error(record: dict[str, Any]) -> None:
    """Raise if a stream record is an in-band error report."""
    err = record.get("error") if isinstance(record, dict) else None
    if not isinstance(err, dict):
        return
    code = err.get("code")
    status = code if isinstance(code, int) else 500
    error = classify_status(status, json.dumps(record))
    if error is None:
        error = ServerError(err.get("message"), status_code=status)
    raise error
