"""Multi-turn chat sessions with an append-only transcript.

A ``ChatSession`` sends its whole transcript plus the new user turn on every
request and records the exchange only once the reply has been fully
received.  A session is not thread-safe: the user turn and the model turn
are appended as two list operations with no lock, so concurrent senders
must serialize access themselves.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Generator, Iterable, Iterator, Mapping

from gemini_harness.generation import GenerationConfig, SafetySettings
from gemini_harness.llm.transport import ChunkCallback, Transport
from gemini_harness.types import (
    ROLES,
    Message,
    TextPart,
    Turn,
    build_request,
    user_turn,
    validate_message,
)

_logger = logging.getLogger(__name__)


def _first_candidate_content(response: Any) -> Mapping[str, Any] | None:
    if not isinstance(response, Mapping):
        return None
    candidates = response.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    candidate = candidates[0]
    if not isinstance(candidate, Mapping):
        return None
    content = candidate.get("content")
    return content if isinstance(content, Mapping) else None


def extract_model_turn(response: Any) -> Turn:
    """Model turn from a ``generateContent`` response.

    Falls back to an empty text turn when the response lacks the usual
    ``candidates[0].content`` structure.
    """
    content = _first_candidate_content(response)
    if content is None:
        return Turn.model(TextPart(""))
    role = content.get("role")
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not all(isinstance(p, Mapping) for p in parts):
        parts = [{"text": ""}]
    return Turn(role=role if role in ROLES else "model", parts=tuple(parts))


def chunk_text(record: Any) -> str:
    """Text of the first part of the first candidate, or ``""``."""
    content = _first_candidate_content(record)
    if content is None:
        return ""
    parts = content.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], Mapping):
        return ""
    text = parts[0].get("text")
    return text if isinstance(text, str) else ""


class ChatStream:
    """Single-pass iterator over the records of a streamed chat reply.

    The request is sent on the first ``next()``.  When the records are
    exhausted, *on_complete* is called exactly once with the concatenated
    text.  Iterating again afterwards yields nothing; stopping early (or
    ``close()``) leaves *on_complete* uncalled.
    """

    def __init__(
        self,
        records: Iterable[dict[str, Any]],
        on_complete: Callable[[str], None],
    ) -> None:
        self._records = records
        self._on_complete = on_complete
        self._chunks: list[str] = []
        self._done = False
        self._gen = self._run()

    def _run(self) -> Generator[dict[str, Any], None, None]:
        for record in self._records:
            self._chunks.append(chunk_text(record))
            yield record
        self._done = True
        self._on_complete(self.text)

    def __iter__(self) -> Iterator[dict[str, Any]]:
        return self

    def __next__(self) -> dict[str, Any]:
        return next(self._gen)

    @property
    def text(self) -> str:
        """Text accumulated so far."""
        return "".join(self._chunks)

    @property
    def done(self) -> bool:
        """True once every record was consumed and the history updated."""
        return self._done

    def close(self) -> None:
        """Abandon the stream and release the connection."""
        self._gen.close()
        close_records = getattr(self._records, "close", None)
        if close_records is not None:
            close_records()


class ChatSession:
    """Stateful conversation with one model.

    Usage::

        chat = client.start_chat()
        chat.send_message("What is Python?")
        chat.send_message("What are its main features?")
        for turn in chat.history:
            print(turn.role, turn.text)
    """

    def __init__(
        self,
        transport: Transport,
        model: str,
        history: Iterable[Turn | Mapping[str, Any]] | None = None,
    ) -> None:
        self._transport = transport
        self.model = model
        self._history: list[Turn] = [Turn.from_dict(t) for t in history or ()]

    @property
    def history(self) -> tuple[Turn, ...]:
        """Snapshot of the transcript; later messages do not change it."""
        return tuple(self._history)

    def _prepare(
        self,
        message: Message,
        generation_config: GenerationConfig | Mapping[str, Any] | None,
        safety_settings: SafetySettings | Iterable[Mapping[str, Any]] | None,
    ) -> tuple[Turn, dict[str, Any]]:
        validate_message(message)
        user = user_turn(message)
        payload = build_request(
            [*self._history, user], generation_config, safety_settings,
        )
        return user, payload

    def send_message(
        self,
        message: Message,
        generation_config: GenerationConfig | Mapping[str, Any] | None = None,
        safety_settings: SafetySettings | Iterable[Mapping[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Send *message* with the transcript as context.

        Returns the raw response; the transcript gains the user turn and
        the model turn only if the request succeeds.
        """
        user, payload = self._prepare(message, generation_config, safety_settings)
        response = self._transport.send(
            f"models/{self.model}:generateContent", payload,
        )
        model_turn = extract_model_turn(response)
        self._history.append(user)
        self._history.append(model_turn)
        return response

    def send_message_stream(
        self,
        message: Message,
        on_chunk: ChunkCallback | None = None,
        generation_config: GenerationConfig | Mapping[str, Any] | None = None,
        safety_settings: SafetySettings | Iterable[Mapping[str, Any]] | None = None,
    ) -> ChatStream | None:
        """Stream the reply to *message*.

        With *on_chunk*, each record is passed to it as it arrives and
        ``None`` is returned once the stream ends.  Without it, a lazy
        ``ChatStream`` is returned.  Either way the transcript is updated
        only after the last record, with one model turn holding the
        accumulated text.
        """
        user, payload = self._prepare(message, generation_config, safety_settings)
        records = self._transport.iter_stream(
            f"models/{self.model}:streamGenerateContent", payload,
        )

        def _record(text: str) -> None:
            self._history.append(user)
            self._history.append(Turn.model(TextPart(text)))
            _logger.debug("Chat stream finished (%d chars)", len(text))

        stream = ChatStream(records, on_complete=_record)
        if on_chunk is None:
            return stream
        try:
            for record in stream:
                on_chunk(record)
        finally:
            stream.close()
        return None
