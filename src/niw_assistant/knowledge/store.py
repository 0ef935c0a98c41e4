"""Process-lifetime knowledge base cache."""

from __future__ import annotations

import logging
from pathlib import Path

from niw_assistant.config import KnowledgeConfig
from niw_assistant.knowledge.parser import TextDocumentParser, render_corpus
from niw_assistant.types import Document

logger = logging.getLogger(__name__)


class KnowledgeStore:
    """Loads every knowledge document once and serves the concatenated corpus.

    The store is constructed at application start-up and shared by reference
    with request handlers. Nothing watches the directory: the corpus only
    changes through `reload()` or a process restart.

    There is no lock around the first scan. Concurrent first calls may each
    read the directory; they produce equal corpora and the last one wins.
    """

    def __init__(
        self,
        config: KnowledgeConfig | None = None,
        parser: TextDocumentParser | None = None,
    ) -> None:
        self.config = config or KnowledgeConfig()
        self.parser = parser or TextDocumentParser()
        self._corpus = ""
        self._documents: tuple[Document, ...] = ()
        self._loaded = False

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def documents(self) -> tuple[Document, ...]:
        return self._documents

    def get_corpus(self) -> str:
        """Return the cached corpus, scanning the directory on first use.

        Read failures degrade to an empty corpus and are logged, never raised.
        A failed scan leaves the store unloaded so the next call retries.
        """

        if self._loaded:
            return self._corpus

        try:
            documents = self._scan()
        except (OSError, UnicodeDecodeError):
            logger.exception("Failed to load knowledge base from %s", self.config.directory)
            return ""

        if not documents:
            logger.warning(
                "No knowledge documents found in %s; answers will not be grounded.",
                self.config.directory,
            )

        self._documents = tuple(documents)
        self._corpus = render_corpus(self._documents)
        self._loaded = True
        logger.info(
            "Loaded knowledge base: %d documents, %d characters",
            len(self._documents),
            len(self._corpus),
        )
        return self._corpus

    def reload(self) -> str:
        """Drop the cached corpus and scan the directory again."""

        self._loaded = False
        self._corpus = ""
        self._documents = ()
        return self.get_corpus()

    def _scan(self) -> list[Document]:
        return [self.parser.parse(path) for path in self._list_files()]

    def _list_files(self) -> list[Path]:
        suffixes = tuple(suffix.lower() for suffix in self.config.suffixes)
        directory = Path(self.config.directory)
        return sorted(
            (
                path
                for path in directory.iterdir()
                if path.is_file() and path.name.lower().endswith(suffixes)
            ),
            key=lambda path: path.name,
        )
