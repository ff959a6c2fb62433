from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from salesagent.ai.base import CompletionError, CompletionProvider
from salesagent.ai.mock_provider import MockProvider
from salesagent.ai.openai_provider import OpenAIProvider
from salesagent.core.config import (
    COMPLETION_HISTORY_TURNS,
    COMPLETION_MAX_RETRIES,
    COMPLETION_MODEL,
    COMPLETION_PROVIDER,
    COMPLETION_VISION_MODEL,
)
from salesagent.services.history import recent_turns

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "দুঃখিত, একটু সমস্যা হচ্ছে।"
RETRY_BASE_SECONDS = 0.5
RETRY_MAX_SECONDS = 8.0


@dataclass
class CompletionResult:
    reply: str
    provider: str
    ok: bool
    attempts: int = 0
    error: str | None = None


def get_provider(name: str = COMPLETION_PROVIDER) -> CompletionProvider:
    if (name or "").strip().lower() == "openai":
        return OpenAIProvider()
    return MockProvider()


def retry_delay(attempt: int, *, rand: Callable[[], float] = random.random) -> float:
    # exponential ceiling with jitter in its upper half: 0.5s, 1s, 2s... (max 8s)
    ceiling = min(RETRY_BASE_SECONDS * (2 ** max(0, attempt - 1)), RETRY_MAX_SECONDS)
    return ceiling / 2 + rand() * ceiling / 2


class CompletionClient:
    def __init__(
        self,
        provider: CompletionProvider | None = None,
        *,
        max_retries: int = COMPLETION_MAX_RETRIES,
        model: str = COMPLETION_MODEL,
        vision_model: str = COMPLETION_VISION_MODEL,
        history_turns: int = COMPLETION_HISTORY_TURNS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.provider = provider or get_provider()
        self.max_retries = max(1, max_retries)
        self.model = model
        self.vision_model = vision_model
        self.history_turns = history_turns
        self._sleep = sleep

    def build_messages(
        self,
        prompt: str,
        history: list[dict[str, Any]],
        image_urls: Sequence[str] = (),
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = [{"role": "system", "content": prompt}]
        messages.extend(recent_turns(history, self.history_turns))
        if image_urls and messages[-1]["role"] == "user":
            text = messages[-1]["content"]
            parts: list[dict[str, Any]] = [{"type": "text", "text": text}]
            parts.extend({"type": "image_url", "image_url": {"url": url}} for url in image_urls)
            messages[-1] = {"role": "user", "content": parts}
        return messages

    def complete(
        self,
        prompt: str,
        history: list[dict[str, Any]],
        *,
        page_id: str = "",
        image_urls: Sequence[str] = (),
    ) -> CompletionResult:
        """Ask the provider for a reply; never raises.

        Every failure path ends in ``FALLBACK_REPLY`` with ``ok=False`` so the
        conversation keeps moving even when the completion service is down.
        """
        messages = self.build_messages(prompt, history, image_urls)
        model = self.vision_model if image_urls else self.model
        last_error: str | None = None
        attempt = 0

        for attempt in range(1, self.max_retries + 1):
            retryable = True
            try:
                reply = self.provider.complete(messages, model=model)
                return CompletionResult(reply=reply, provider=self.provider.name, ok=True, attempts=attempt)
            except CompletionError as exc:
                last_error = str(exc)
                retryable = exc.retryable
                logger.warning(
                    "completion attempt failed attempt=%s status_code=%s error=%s",
                    attempt,
                    exc.status_code,
                    exc,
                )
            except Exception as exc:
                last_error = str(exc)
                logger.exception("completion provider crashed attempt=%s", attempt)

            if not retryable or attempt >= self.max_retries:
                break
            self._sleep(retry_delay(attempt))

        logger.error(
            "completion failed, using fallback reply page_id=%s attempts=%s error=%s", page_id, attempt, last_error
        )
        return CompletionResult(
            reply=FALLBACK_REPLY,
            provider=self.provider.name,
            ok=False,
            attempts=attempt,
            error=last_error,
        )
