from __future__ import annotations

from typing import Any, Protocol


class CompletionError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None, retryable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class CompletionProvider(Protocol):
    name: str

    def complete(self, messages: list[dict[str, Any]], *, model: str) -> str:
        """Return the assistant reply text or raise ``CompletionError``."""
        ...
