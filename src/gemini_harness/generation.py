"""Generation parameters and safety filters.

Both are validated on construction so a bad value raises
``InvalidRequestError`` before any request is sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from gemini_harness.errors import InvalidRequestError

MODALITIES = ("TEXT", "IMAGE")
ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4", "5:4", "4:5")
IMAGE_SIZES = ("1K", "2K", "4K")


def _invalid(message: str) -> InvalidRequestError:
    return InvalidRequestError(message, status_code=None)


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling and output controls for a generation request."""

    temperature: float | None = None
    top_p: float | None = None
    top_k: int | None = None
    max_output_tokens: int | None = None
    response_modalities: list[str] | None = None
    aspect_ratio: str | None = None
    image_size: str | None = None

    def __post_init__(self) -> None:
        if self.temperature is not None and not 0.0 <= self.temperature <= 1.0:
            raise _invalid(
                f"temperature must be between 0.0 and 1.0, got {self.temperature}"
            )
        if self.top_p is not None and not 0.0 <= self.top_p <= 1.0:
            raise _invalid(f"top_p must be between 0.0 and 1.0, got {self.top_p}")
        if self.top_k is not None and self.top_k <= 0:
            raise _invalid(f"top_k must be greater than 0, got {self.top_k}")
        if self.max_output_tokens is not None and self.max_output_tokens <= 0:
            raise _invalid(
                f"max_output_tokens must be greater than 0, got {self.max_output_tokens}"
            )
        if self.response_modalities is not None:
            self._check_modalities(self.response_modalities)
            object.__setattr__(
                self, "response_modalities", list(self.response_modalities),
            )
        if self.aspect_ratio is not None and self.aspect_ratio not in ASPECT_RATIOS:
            raise _invalid(
                f"aspect_ratio must be one of {', '.join(ASPECT_RATIOS)}, "
                f"got {self.aspect_ratio}"
            )
        if self.image_size is not None and self.image_size not in IMAGE_SIZES:
            raise _invalid(
                f"image_size must be one of {', '.join(IMAGE_SIZES)}, "
                f"got {self.image_size}"
            )

    @staticmethod
    def _check_modalities(value: Any) -> None:
        if not isinstance(value, (list, tuple)):
            raise _invalid("response_modalities must be an array")
        if not value:
            raise _invalid("response_modalities must not be empty")
        if any(m not in MODALITIES for m in value):
            raise _invalid("response_modalities must only contain TEXT or IMAGE")

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the API's camelCase keys, omitting unset values."""
        result: dict[str, Any] = {}
        if self.response_modalities is not None:
            result["responseModalities"] = list(self.response_modalities)
        image_config: dict[str, str] = {}
        if self.aspect_ratio is not None:
            image_config["aspectRatio"] = self.aspect_ratio
        if self.image_size is not None:
            image_config["imageSize"] = self.image_size
        if image_config:
            result["imageConfig"] = image_config
        if self.temperature is not None:
            result["temperature"] = self.temperature
        if self.top_p is not None:
            result["topP"] = self.top_p
        if self.top_k is not None:
            result["topK"] = self.top_k
        if self.max_output_tokens is not None:
            result["maxOutputTokens"] = self.max_output_tokens
        return result


@dataclass
class SafetySettings:
    """Content filtering thresholds per harm category."""

    HARM_CATEGORY_HATE_SPEECH = "HARM_CATEGORY_HATE_SPEECH"
    HARM_CATEGORY_DANGEROUS_CONTENT = "HARM_CATEGORY_DANGEROUS_CONTENT"
    HARM_CATEGORY_HARASSMENT = "HARM_CATEGORY_HARASSMENT"
    HARM_CATEGORY_SEXUALLY_EXPLICIT = "HARM_CATEGORY_SEXUALLY_EXPLICIT"

    BLOCK_NONE = "BLOCK_NONE"
    BLOCK_LOW_AND_ABOVE = "BLOCK_LOW_AND_ABOVE"
    BLOCK_MEDIUM_AND_ABOVE = "BLOCK_MEDIUM_AND_ABOVE"
    BLOCK_ONLY_HIGH = "BLOCK_ONLY_HIGH"

    settings: list[dict[str, str]] = field(default_factory=list)

    @classmethod
    def default(cls) -> SafetySettings:
        """Block medium-and-above for every category."""
        categories = (
            cls.HARM_CATEGORY_HATE_SPEECH,
            cls.HARM_CATEGORY_DANGEROUS_CONTENT,
            cls.HARM_CATEGORY_HARASSMENT,
            cls.HARM_CATEGORY_SEXUALLY_EXPLICIT,
        )
        return cls([
            {"category": c, "threshold": cls.BLOCK_MEDIUM_AND_ABOVE}
            for c in categories
        ])

    def to_list(self) -> list[dict[str, str]]:
        return [dict(s) for s in self.settings]
