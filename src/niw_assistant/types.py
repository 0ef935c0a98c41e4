"""Shared domain models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True, slots=True)
class Document:
    """A knowledge base text file as read from disk."""

    doc_id: str
    text: str
    source_url: str | None
    body: str

    @property
    def attribution(self) -> str:
        return self.source_url or self.doc_id

    @property
    def is_url_source(self) -> bool:
        return self.source_url is not None


class Role(str, Enum):
    USER = "user"
    MODEL = "model"


@dataclass(frozen=True, slots=True)
class ConversationTurn:
    """One normalized chat turn."""

    role: Role
    text: str

    def as_payload(self) -> dict[str, object]:
        """Render the upstream chat wire shape (``role`` + ``parts``)."""
        return {"role": self.role.value, "parts": [{"text": self.text}]}
