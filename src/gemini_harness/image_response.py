"""Convenience wrapper around an image-generation response."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any

from gemini_harness.errors import GeminiHarnessError


class ImageResponse:
    """Read generated image bytes, caption text and failure details.

    Usage::

        resp = client.generate_image("A cute puppy")
        if resp.success:
            resp.save("puppy.png")
        else:
            print(resp.failure_reason, resp.failure_message)
    """

    def __init__(self, response: dict[str, Any]) -> None:
        self.raw_response = response

    @property
    def _candidate(self) -> dict[str, Any]:
        candidates = self.raw_response.get("candidates") or [{}]
        return candidates[0] or {}

    @property
    def _parts(self) -> list[dict[str, Any]]:
        return (self._candidate.get("content") or {}).get("parts") or []

    def _find_part(self, key: str) -> dict[str, Any] | None:
        return next((p for p in self._parts if key in p), None)

    @property
    def finish_reason(self) -> str | None:
        return self._candidate.get("finishReason")

    @property
    def success(self) -> bool:
        return self.finish_reason == "STOP"

    @property
    def has_image(self) -> bool:
        return self._find_part("inlineData") is not None

    @property
    def text(self) -> str | None:
        part = self._find_part("text")
        return part["text"] if part else None

    @property
    def image_data(self) -> bytes | None:
        """Decoded image bytes."""
        part = self._find_part("inlineData")
        if part is None:
            return None
        return base64.b64decode(part["inlineData"]["data"])

    @property
    def mime_type(self) -> str | None:
        part = self._find_part("inlineData")
        return part["inlineData"].get("mimeType") if part else None

    def save(self, path: str | Path) -> None:
        data = self.image_data
        if data is None:
            raise GeminiHarnessError("No image data to save")
        Path(path).write_bytes(data)

    @property
    def failure_reason(self) -> str | None:
        return None if self.success else self.finish_reason

    @property
    def failure_message(self) -> str | None:
        return None if self.success else self._candidate.get("finishMessage")
