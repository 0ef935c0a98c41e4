"""Exception hierarchy shared by the service layers."""

from __future__ import annotations


class NiwAssistantError(Exception):
    """Base class for errors raised by this package."""


class HistoryFormatError(NiwAssistantError, ValueError):
    """A history entry matched none of the accepted shapes."""

    def __init__(self, index: int, reason: str) -> None:
        super().__init__(f"history[{index}] is not a valid chat turn: {reason}")
        self.index = index
        self.reason = reason


class CompletionError(NiwAssistantError):
    """The upstream model call failed or returned an unusable response."""


class ApiError(NiwAssistantError):
    """Error that maps directly onto an HTTP JSON error payload."""

    def __init__(self, status_code: int, error: str, details: str | None = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details

    def to_payload(self) -> dict[str, str]:
        payload = {"error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload
