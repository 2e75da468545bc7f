"""HTTP transport and stream decoding for Gemini Harness."""

from gemini_harness.llm.stream import StreamDecoder
from gemini_harness.llm.transport import BASE_URL, Transport, backoff_seconds, classify_status

__all__ = [
    "BASE_URL",
    "StreamDecoder",
    "Transport",
    "backoff_seconds",
    "classify_status",
]
