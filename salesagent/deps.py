from __future__ import annotations

import secrets

from fastapi import Header, HTTPException, status

from salesagent.ai.client import CompletionClient
from salesagent.core.config import INTERNAL_METRICS_TOKEN, IS_DEV

_completion_client: CompletionClient | None = None


def get_completion_client() -> CompletionClient:
    global _completion_client
    if _completion_client is None:
        _completion_client = CompletionClient()
    return _completion_client


def require_internal_token(x_internal_token: str | None = Header(default=None)) -> None:
    if not INTERNAL_METRICS_TOKEN:
        if IS_DEV:
            return
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Internal endpoints disabled")
    if not x_internal_token or not secrets.compare_digest(x_internal_token, INTERNAL_METRICS_TOKEN):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid internal token")
