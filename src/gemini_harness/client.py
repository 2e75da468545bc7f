"""Client facade: one-shot generation, streaming, chat and image generation."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping

import httpx

from gemini_harness.chat import ChatSession
from gemini_harness.config import ClientConfig, build_config, get_default_config
from gemini_harness.generation import GenerationConfig, SafetySettings
from gemini_harness.image_response import ImageResponse
from gemini_harness.llm.transport import ChunkCallback, Transport
from gemini_harness.types import Message, Turn, build_request, user_turn, validate_message

_logger = logging.getLogger(__name__)

GenConfigArg = GenerationConfig | Mapping[str, Any] | None
SafetyArg = SafetySettings | Iterable[Mapping[str, Any]] | None


class Client:
    """Entry point for the Gemini API.

    Configuration is resolved once, at construction: the process-wide
    default from ``configure()`` if one is set (otherwise built-in defaults
    and ``$GOOGLE_API_KEY``), then the keyword overrides given here.  A
    missing API key raises ``ConfigurationError`` before any request.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        retry_count: int | None = None,
        config: ClientConfig | None = None,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        base = config if config is not None else get_default_config()
        self.config = build_config(
            base,
            api_key=api_key,
            default_model=model,
            timeout=timeout,
            retry_count=retry_count,
        )
        self.config.validate_credentials()
        self.transport = Transport(
            api_key=self.config.api_key or "",
            timeout=self.config.timeout,
            retry_count=self.config.retry_count,
            base_url=self.config.base_url,
            transport=http_transport,
        )

    def _payload(
        self,
        prompt: Message,
        generation_config: GenConfigArg,
        safety_settings: SafetyArg,
    ) -> dict[str, Any]:
        validate_message(prompt)
        return build_request([user_turn(prompt)], generation_config, safety_settings)

    def generate_content(
        self,
        prompt: Message,
        model: str | None = None,
        generation_config: GenConfigArg = None,
        safety_settings: SafetyArg = None,
    ) -> dict[str, Any]:
        """Single-turn generation; returns the raw response."""
        payload = self._payload(prompt, generation_config, safety_settings)
        model = model or self.config.default_model
        return self.transport.send(f"models/{model}:generateContent", payload)

    def generate_content_stream(
        self,
        prompt: Message,
        on_chunk: ChunkCallback | None = None,
        model: str | None = None,
        generation_config: GenConfigArg = None,
        safety_settings: SafetyArg = None,
    ) -> Iterator[dict[str, Any]] | None:
        """Single-turn streaming generation.

        With *on_chunk*, records are delivered to it and ``None`` is
        returned; otherwise a lazy iterator of records is returned.
        """
        payload = self._payload(prompt, generation_config, safety_settings)
        path = f"models/{model or self.config.default_model}:streamGenerateContent"
        if on_chunk is None:
            return self.transport.iter_stream(path, payload)
        self.transport.send_stream(path, payload, on_chunk)
        return None

    def start_chat(
        self,
        history: Iterable[Turn | Mapping[str, Any]] | None = None,
        model: str | None = None,
    ) -> ChatSession:
        return ChatSession(
            self.transport,
            model=model or self.config.default_model,
            history=history,
        )

    def generate_image(
        self,
        prompt: Message,
        model: str | None = None,
        aspect_ratio: str | None = None,
        image_size: str | None = None,
        temperature: float | None = None,
        safety_settings: SafetyArg = None,
    ) -> ImageResponse:
        """Generate an image (plus optional caption text) from *prompt*."""
        gen_config = GenerationConfig(
            response_modalities=["TEXT", "IMAGE"],
            aspect_ratio=aspect_ratio,
            image_size=image_size,
            temperature=temperature,
        )
        model = model or self.config.image_model
        _logger.debug("Generating image with %s", model)
        response = self.generate_content(
            prompt, model=model,
            generation_config=gen_config, safety_settings=safety_settings,
        )
        return ImageResponse(response)

    def close(self) -> None:
        self.transport.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
