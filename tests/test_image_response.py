"""Tests for ImageResponse."""

import base64

import pytest

from gemini_harness.errors import GeminiHarnessError
from gemini_harness.image_response import ImageResponse

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image"


def _success() -> dict:
    return {
        "candidates": [{
            "content": {
                "parts": [
                    {"text": "Here is your image"},
                    {"inlineData": {
                        "mimeType": "image/png",
                        "data": base64.b64encode(PNG_BYTES).decode(),
                    }},
                ],
                "role": "model",
            },
            "finishReason": "STOP",
        }],
    }


def _failure() -> dict:
    return {
        "candidates": [{
            "finishReason": "IMAGE_OTHER",
            "finishMessage": "Unable to generate the requested image.",
        }],
    }


def _text_only() -> dict:
    return {
        "candidates": [{
            "content": {"parts": [{"text": "I can only describe it."}], "role": "model"},
            "finishReason": "STOP",
        }],
    }


class TestSuccessfulResponse:
    def test_fields(self):
        resp = ImageResponse(_success())
        assert resp.success
        assert resp.has_image
        assert resp.text == "Here is your image"
        assert resp.image_data == PNG_BYTES
        assert resp.mime_type == "image/png"
        assert resp.failure_reason is None
        assert resp.failure_message is None

    def test_save(self, tmp_path):
        path = tmp_path / "out.png"
        ImageResponse(_success()).save(path)
        assert path.read_bytes() == PNG_BYTES

    def test_raw_response_kept(self):
        raw = _success()
        assert ImageResponse(raw).raw_response is raw


class TestFailedResponse:
    def test_fields(self):
        resp = ImageResponse(_failure())
        assert not resp.success
        assert not resp.has_image
        assert resp.text is None
        assert resp.image_data is None
        assert resp.mime_type is None
        assert resp.failure_reason == "IMAGE_OTHER"
        assert resp.failure_message == "Unable to generate the requested image."

    def test_save_raises(self, tmp_path):
        with pytest.raises(GeminiHarnessError, match="No image data"):
            ImageResponse(_failure()).save(tmp_path / "x.png")
        assert not (tmp_path / "x.png").exists()


class TestTextOnlyResponse:
    def test_fields(self):
        resp = ImageResponse(_text_only())
        assert resp.success
        assert not resp.has_image
        assert resp.text == "I can only describe it."
        assert resp.image_data is None


class TestEmptyResponse:
    @pytest.mark.parametrize("raw", [{}, {"candidates": []}])
    def test_no_candidates(self, raw):
        resp = ImageResponse(raw)
        assert not resp.success
        assert resp.finish_reason is None
        assert resp.failure_reason is None
        assert not resp.has_image
