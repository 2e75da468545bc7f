"""Incremental decoder for newline-delimited JSON streams."""

from __future__ import annotations

import json
from typing import Any, Generator

from gemini_harness.errors import ServerError


class StreamDecoder:
    """Turn arbitrary byte chunks into parsed JSON records.

    One decoder serves one streaming response.  Bytes are buffered until a
    ``\\n`` arrives; each complete line is stripped, blank lines are skipped,
    and the rest must be valid JSON.  Whatever is left in the buffer when the
    stream ends (a line with no terminating newline) is never emitted.

    Usage::

        decoder = StreamDecoder()
        for raw in response.iter_bytes():
            for record in decoder.feed(raw):
                handle(record)
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, chunk: bytes) -> Generator[dict[str, Any], None, None]:
        """Append *chunk* and yield every record it completes, in order."""
        self._buffer.extend(chunk)
        while True:
            idx = self._buffer.find(b"\n")
            if idx < 0:
                return
            line = bytes(self._buffer[:idx])
            del self._buffer[:idx + 1]
            text = line.decode("utf-8", errors="replace").strip()
            if not text:
                continue
            try:
                yield json.loads(text)
            except json.JSONDecodeError as e:
                raise ServerError(
                    f"Invalid JSON in stream: {e.msg} (line: {text[:200]!r})",
                    status_code=None,
                ) from e

    @property
    def pending(self) -> bytes:
        """Bytes received after the last newline (not yet a full record)."""
        return bytes(self._buffer)
