"""Normalization of client-supplied conversation history."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from niw_assistant.errors import HistoryFormatError
from niw_assistant.types import ConversationTurn, Role

DEFAULT_MAX_TURNS = 10


class TextTurn(BaseModel):
    """Frontend shape: ``{"role": ..., "text": ...}``."""

    role: str
    text: str

    def as_text(self) -> str:
        return self.text


class ContentTurn(BaseModel):
    """Chat-completion shape: ``{"role": ..., "content": ...}``."""

    role: str
    content: str

    def as_text(self) -> str:
        return self.content


class TurnPart(BaseModel):
    text: str


class PartsTurn(BaseModel):
    """Upstream wire shape: ``{"role": ..., "parts": [{"text": ...}]}``."""

    role: str
    parts: list[TurnPart] = Field(min_length=1)

    def as_text(self) -> str:
        return "".join(part.text for part in self.parts)


RawTurn = Union[TextTurn, ContentTurn, PartsTurn]

_TURN_ADAPTER: TypeAdapter[RawTurn] = TypeAdapter(RawTurn)


def decode_turn(entry: Any, index: int = 0) -> ConversationTurn:
    """Map one accepted external shape onto the canonical turn type.

    Raises:
        HistoryFormatError: when ``entry`` matches none of the shapes.
    """

    if not isinstance(entry, dict):
        raise HistoryFormatError(index, f"expected an object, got {type(entry).__name__}")
    try:
        raw = _TURN_ADAPTER.validate_python(entry)
    except ValidationError as exc:
        raise HistoryFormatError(
            index, "expected a role with 'text', 'content' or 'parts'"
        ) from exc

    role = Role.USER if raw.role == Role.USER.value else Role.MODEL
    return ConversationTurn(role=role, text=raw.as_text())


def normalize_history(
    raw_history: Sequence[Any] | None,
    *,
    max_turns: int = DEFAULT_MAX_TURNS,
) -> list[ConversationTurn]:
    """Decode, strip leading model turns, and keep the most recent turns.

    The upstream chat API requires the context to open with a user turn, so
    leading model turns are dropped both before and after the recency cut.
    """

    if max_turns < 1:
        raise ValueError("max_turns must be >= 1")
    turns = [decode_turn(entry, index) for index, entry in enumerate(raw_history or [])]
    turns = _drop_leading_model_turns(turns)[-max_turns:]
    return _drop_leading_model_turns(turns)


def _drop_leading_model_turns(turns: list[ConversationTurn]) -> list[ConversationTurn]:
    for index, turn in enumerate(turns):
        if turn.role is Role.USER:
            return turns[index:]
    return []
