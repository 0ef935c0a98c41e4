"""Latency and token accounting helpers for upstream model calls."""

from __future__ import annotations

import re
import time

_TOKEN_PATTERN = re.compile(r"\w+|[^\w\s]", flags=re.UNICODE)


class Timer:
    """Simple context timer used around model calls."""

    def __init__(self) -> None:
        self._start = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (time.perf_counter() - self._start) * 1000.0


def estimate_token_count(text: str) -> int:
    """Rough word/punctuation count; only used for log lines."""
    return len(_TOKEN_PATTERN.findall(text))
