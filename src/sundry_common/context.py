"""Per-call correlation ids, carried in a context variable so log lines from
the handler, the backend client and the HTTP layer can be tied together."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_request_id_ctx: ContextVar[str | None] = ContextVar("sundry_request_id", default=None)


def new_request_id() -> str:
    return uuid.uuid4().hex


def get_request_id() -> str | None:
    return _request_id_ctx.get()


@contextmanager
def request_scope(rid: str | None = None) -> Iterator[str]:
    """Bind a correlation id for the duration of one handler call."""
    rid = rid or new_request_id()
    token = _request_id_ctx.set(rid)
    try:
        yield rid
    finally:
        _request_id_ctx.reset(token)
