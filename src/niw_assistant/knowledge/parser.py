"""Parsing of knowledge base text files into attributed documents."""

from __future__ import annotations

import html
import re
from pathlib import Path

from niw_assistant.types import Document

_SOURCE_PATTERN = re.compile(
    r"^[ \t]*Source(?:[ \t]+URL)?[ \t]*:[ \t]*(https?://[^\s<>\"']+)",
    re.IGNORECASE | re.MULTILINE,
)
_BLANK_RUN = re.compile(r"\n(?:[ \t\f\v]*\n)+")


def extract_source_url(text: str) -> str | None:
    """Return the URL of the first ``Source:`` / ``Source URL:`` line, if any."""

    match = _SOURCE_PATTERN.search(text)
    if match is None:
        return None
    return match.group(1).rstrip(".,;)")


def collapse_blank_lines(text: str) -> str:
    return _BLANK_RUN.sub("\n\n", text.replace("\r\n", "\n")).strip()


class TextDocumentParser:
    """Parser for plain text documents produced by the offline fetch tooling.

    Files written by the fetch step start with a ``Source: <url>`` header;
    converted PDFs and hand-written notes usually carry none, in which case
    the document is attributed to its file name.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def parse(self, path: Path) -> Document:
        text = path.read_text(encoding=self.encoding)
        return self.parse_text(path.name, text)

    @staticmethod
    def parse_text(doc_id: str, text: str) -> Document:
        return Document(
            doc_id=doc_id,
            text=text,
            source_url=extract_source_url(text),
            body=collapse_blank_lines(text),
        )


def render_document(document: Document) -> str:
    source = html.escape(document.attribution, quote=True)
    return f'<document source="{source}">\n{document.body}\n</document>'


def render_corpus(documents: list[Document] | tuple[Document, ...]) -> str:
    return "\n\n".join(render_document(document) for document in documents)
