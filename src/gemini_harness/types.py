"""Shared data types: parts, turns, multimodal content, request envelopes."""

from __future__ import annotations

import base64
import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Union

from gemini_harness.generation import GenerationConfig, SafetySettings

ROLES = ("user", "model")


# ---------------------------------------------------------------------------
# Parts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextPart:
    """Plain text part."""

    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text}


@dataclass(frozen=True)
class InlineDataPart:
    """Binary payload (image, audio, ...) carried inline as base64."""

    mime_type: str
    data: str  # base64-encoded

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str) -> InlineDataPart:
        return cls(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))

    def decode(self) -> bytes:
        return base64.b64decode(self.data)

    def to_dict(self) -> dict[str, Any]:
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return copy.deepcopy(value)


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return copy.deepcopy(value)


@dataclass(frozen=True)
class OpaquePart:
    """Any part kind the library does not model (function calls, thoughts...).

    The payload is frozen recursively (mappings become read-only proxies,
    lists become tuples) so a stored transcript cannot be changed through
    it.  ``to_dict`` returns a fresh mutable copy in wire form.
    """

    payload: Mapping[str, Any]

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", _freeze(self.payload))

    def to_dict(self) -> dict[str, Any]:
        return _thaw(self.payload)


Part = Union[TextPart, InlineDataPart, OpaquePart]


def part_from_dict(raw: Mapping[str, Any] | Part) -> Part:
    """Build a part from its wire form (snake_case or camelCase keys).

    Shapes that are not plain text or well-formed inline data are kept
    as an ``OpaquePart``.
    """
    if isinstance(raw, (TextPart, InlineDataPart, OpaquePart)):
        return raw
    if not isinstance(raw, Mapping):
        raise TypeError(f"part must be a mapping, got {type(raw).__name__}")
    if len(raw) == 1 and isinstance(raw.get("text"), str):
        return TextPart(text=raw["text"])
    inline = raw.get("inline_data") or raw.get("inlineData")
    if isinstance(inline, Mapping) and len(raw) == 1:
        mime = inline.get("mime_type") or inline.get("mimeType") or ""
        data = inline.get("data", "")
        if isinstance(data, (bytes, bytearray)):
            return InlineDataPart.from_bytes(bytes(data), mime)
        return InlineDataPart(mime_type=mime, data=data)
    return OpaquePart(payload=raw)


# ---------------------------------------------------------------------------
# Turns
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Turn:
    """One message in a conversation."""

    role: str
    parts: tuple[Part, ...]

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"role must be one of {ROLES}, got {self.role!r}")
        object.__setattr__(
            self, "parts", tuple(part_from_dict(p) for p in self.parts),
        )

    @classmethod
    def user(cls, *parts: Part | Mapping[str, Any]) -> Turn:
        return cls(role="user", parts=parts)  # type: ignore[arg-type]

    @classmethod
    def model(cls, *parts: Part | Mapping[str, Any]) -> Turn:
        return cls(role="model", parts=parts)  # type: ignore[arg-type]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any] | Turn) -> Turn:
        if isinstance(raw, Turn):
            return raw
        return cls(role=raw.get("role") or "user", parts=tuple(raw.get("parts") or ()))

    @property
    def text(self) -> str:
        """Concatenated text of all text-bearing parts."""
        chunks: list[str] = []
        for p in self.parts:
            if isinstance(p, TextPart):
                chunks.append(p.text)
            elif isinstance(p, OpaquePart) and isinstance(p.payload.get("text"), str):
                chunks.append(p.payload["text"])
        return "".join(chunks)

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "parts": [p.to_dict() for p in self.parts]}


# ---------------------------------------------------------------------------
# Content builder
# ---------------------------------------------------------------------------

class Content:
    """Structured (possibly multimodal) message content.

    Usage::

        Content.text("Hello")
        Content.image(data=b64, mime_type="image/jpeg")
        Content([{"text": "What is this?"},
                 {"inline_data": {"mime_type": "image/png", "data": b64}}])
    """

    def __init__(self, parts: Iterable[Part | Mapping[str, Any]]) -> None:
        self._parts: tuple[Part, ...] = tuple(part_from_dict(p) for p in parts)

    @classmethod
    def text(cls, text: str) -> Content:
        return cls([TextPart(text)])

    @classmethod
    def image(cls, data: str | bytes, mime_type: str) -> Content:
        if isinstance(data, bytes):
            return cls([InlineDataPart.from_bytes(data, mime_type)])
        return cls([InlineDataPart(mime_type=mime_type, data=data)])

    @property
    def parts(self) -> tuple[Part, ...]:
        return self._parts

    def to_dict(self) -> dict[str, Any]:
        return {"parts": [p.to_dict() for p in self._parts]}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Content):
            return NotImplemented
        return self._parts == other._parts

    def __repr__(self) -> str:
        return f"Content({list(self._parts)!r})"


Message = Union[str, Content]


def user_turn(message: Message) -> Turn:
    """Wrap a text or structured message as a user turn."""
    match message:
        case str():
            return Turn.user(TextPart(message))
        case Content():
            return Turn(role="user", parts=message.parts)
        case _:
            raise TypeError(
                f"message must be str or Content, got {type(message).__name__}"
            )


def validate_message(message: Message | None) -> None:
    """Reject absent or empty text messages before any I/O."""
    if message is None:
        raise ValueError("message cannot be None")
    if isinstance(message, str) and not message:
        raise ValueError("message cannot be empty")


# ---------------------------------------------------------------------------
# Request envelope
# ---------------------------------------------------------------------------

def build_request(
    contents: Iterable[Turn],
    generation_config: GenerationConfig | Mapping[str, Any] | None = None,
    safety_settings: SafetySettings | Iterable[Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Serialize turns and optional settings into a request body."""
    payload: dict[str, Any] = {"contents": [t.to_dict() for t in contents]}
    if generation_config is not None:
        if isinstance(generation_config, GenerationConfig):
            generation_config = generation_config.to_dict()
        if generation_config:
            payload["generationConfig"] = dict(generation_config)
    if safety_settings is not None:
        if isinstance(safety_settings, SafetySettings):
            safety_settings = safety_settings.to_list()
        payload["safetySettings"] = [dict(s) for s in safety_settings]
    return payload
