from __future__ import annotations

import functools
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from sundry_common.context import request_scope
from sundry_common.errors import REDACT_TOKEN, typed_error


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Shared helpers for MCP request handlers
# ---------------------------------------------------------------------------


_REDACTION_KEYS = {"authorization", "x-api-key", "token", "access_token", "api_key", "apikey"}


def sanitize_args_for_log(args: dict | None) -> dict:
    """Remove obvious secrets from args before they reach a log line."""
    out: dict[str, Any] = {}
    for k, v in (args or {}).items():
        if str(k).lower() in _REDACTION_KEYS:
            out[str(k)] = REDACT_TOKEN
        elif isinstance(v, dict):
            out[str(k)] = sanitize_args_for_log(v)
        else:
            out[str(k)] = v
    return out


def error_envelope(exc: BaseException) -> dict:
    """Error envelope for logging; uses the exception's own when it has one."""
    to_dict = getattr(exc, "to_dict", None)
    if callable(to_dict):
        return to_dict()["error"]
    return typed_error("internal", str(exc))["error"]


@dataclass(frozen=True)
class InstrumentConfig:
    kind: str
    name: str


def instrument_async_handler(cfg: InstrumentConfig):
    """Decorator for async MCP handlers: logs outcome and timing, re-raises errors."""

    def decorator(fn: Callable[..., Awaitable[Any]]):
        fn_sig = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any):
            with request_scope() as corr_id:
                t0 = time.perf_counter()
                bound = fn_sig.bind_partial(*args, **kwargs)
                args_for_log = sanitize_args_for_log(dict(bound.arguments))

                try:
                    result = await fn(*args, **kwargs)
                except Exception as e:
                    ms = int((time.perf_counter() - t0) * 1000)
                    logger.info(
                        "%s %s failed corr_id=%s ms=%s error=%s",
                        cfg.kind,
                        cfg.name,
                        corr_id,
                        ms,
                        error_envelope(e),
                    )
                    logger.debug("%s %s args=%s", cfg.kind, cfg.name, args_for_log)
                    raise

                ms = int((time.perf_counter() - t0) * 1000)
                logger.info("%s %s ok corr_id=%s ms=%s", cfg.kind, cfg.name, corr_id, ms)
                logger.debug("%s %s args=%s", cfg.kind, cfg.name, args_for_log)
                return result

        # Preserve signature for callers that introspect handlers
        wrapper.__signature__ = fn_sig  # type: ignore[attr-defined]
        return wrapper

    return decorator
