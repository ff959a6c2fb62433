from __future__ import annotations

from contextvars import ContextVar


_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("request_id", default=None)
_PAGE_ID_CTX: ContextVar[str | None] = ContextVar("page_id", default=None)
_SENDER_ID_CTX: ContextVar[str | None] = ContextVar("sender_id", default=None)


def set_request_context(
    *, request_id: str | None = None, page_id: str | None = None, sender_id: str | None = None
) -> None:
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if page_id is not None:
        _PAGE_ID_CTX.set(page_id)
    if sender_id is not None:
        _SENDER_ID_CTX.set(sender_id)


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


def get_page_id() -> str | None:
    return _PAGE_ID_CTX.get()


def get_sender_id() -> str | None:
    return _SENDER_ID_CTX.get()


def clear_request_context() -> None:
    _REQUEST_ID_CTX.set(None)
    _PAGE_ID_CTX.set(None)
    _SENDER_ID_CTX.set(None)
