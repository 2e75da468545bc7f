"""Gemini Harness: a client for the Gemini generative-AI HTTP API."""

from gemini_harness.chat import ChatSession, ChatStream
from gemini_harness.client import Client
from gemini_harness.config import (
    ClientConfig,
    configure,
    get_default_config,
    load_config,
    reset_configuration,
)
from gemini_harness.errors import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    GeminiHarnessError,
    InvalidRequestError,
    RateLimitError,
    RequestTimeoutError,
    ServerError,
)
from gemini_harness.generation import GenerationConfig, SafetySettings
from gemini_harness.image_response import ImageResponse
from gemini_harness.types import Content, InlineDataPart, OpaquePart, TextPart, Turn

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "AuthenticationError",
    "ChatSession",
    "ChatStream",
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "Content",
    "GeminiHarnessError",
    "GenerationConfig",
    "ImageResponse",
    "InlineDataPart",
    "InvalidRequestError",
    "OpaquePart",
    "RateLimitError",
    "RequestTimeoutError",
    "SafetySettings",
    "ServerError",
    "TextPart",
    "Turn",
    "configure",
    "get_default_config",
    "load_config",
    "reset_configuration",
]
