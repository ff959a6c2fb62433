from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from salesagent.ai.base import CompletionError
from salesagent.core.config import (
    COMPLETION_API_KEY,
    COMPLETION_API_URL,
    COMPLETION_MAX_TOKENS,
    COMPLETION_TEMPERATURE,
    COMPLETION_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = {408, 429, 500, 502, 503, 504}


class OpenAIProvider:
    """Chat-completions client for any OpenAI-compatible endpoint."""

    name = "openai"

    def __init__(
        self,
        *,
        api_url: str = COMPLETION_API_URL,
        api_key: str = COMPLETION_API_KEY,
        timeout: float = COMPLETION_TIMEOUT_SECONDS,
        max_tokens: int = COMPLETION_MAX_TOKENS,
        temperature: float = COMPLETION_TEMPERATURE,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._transport = transport

    def complete(self, messages: list[dict[str, Any]], *, model: str) -> str:
        if not self.api_key:
            raise CompletionError("COMPLETION_API_KEY is not configured", retryable=False)

        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        payload = {
            "model": model,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.api_url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise CompletionError(f"completion timeout: {exc}") from exc
        except httpx.HTTPError as exc:
            raise CompletionError(f"completion transport error: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise CompletionError(
                f"completion service returned {response.status_code}",
                status_code=response.status_code,
                retryable=response.status_code in _RETRYABLE_STATUS,
            )

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
            raise CompletionError("malformed completion response", status_code=response.status_code) from exc

        reply = (content or "").strip()
        if not reply:
            raise CompletionError("empty completion reply", status_code=response.status_code)
        return reply
