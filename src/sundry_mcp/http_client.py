"""
Lightweight HTTP client for the Sundry backend.

- One `requests.Session` bound to a base URL and default headers.
- No retries: the adapter is mounted with max_retries=0 so failures reach the caller.
- Failed requests are logged once here, then re-raised unchanged.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping

import requests
from requests import Response
from requests.adapters import HTTPAdapter

from sundry_common.context import get_request_id


logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "sundry-mcp/0.1.0"


@dataclass(frozen=True)
class HttpClientConfig:
    base_url: str
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)
    # None keeps the requests default (wait indefinitely)
    timeout: float | None = None
    user_agent: str = DEFAULT_USER_AGENT


def api_url(base_url: str, path: str) -> str:
    """Join base and path without duplicate or missing slashes."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class HttpClient:
    """A small wrapper around `requests.Session` bound to one base URL."""

    def __init__(self, config: HttpClientConfig, *, session: requests.Session | None = None) -> None:
        self.config = config
        self.session = session or requests.Session()
        self._configure_session(self.session, self.config)

    @staticmethod
    def _configure_session(session: requests.Session, config: HttpClientConfig) -> None:
        # Session() already carries python-requests/x.y; replace it
        session.headers["User-Agent"] = config.user_agent
        session.headers.update(dict(config.headers))

        adapter = HTTPAdapter(max_retries=0)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any | None = None,
        **kwargs: Any,
    ) -> Response:
        """Perform an HTTP request against the base URL and raise for non-2xx responses."""
        url = api_url(self.config.base_url, path)
        t0 = time.perf_counter()
        try:
            resp = self.session.request(
                method=method,
                url=url,
                json=json,
                timeout=self.config.timeout,
                **kwargs,
            )
            resp.raise_for_status()
            return resp
        except requests.RequestException as e:
            ms = int((time.perf_counter() - t0) * 1000)
            status = getattr(getattr(e, "response", None), "status_code", None)
            logger.warning(
                "HTTP %s %s failed (status=%s, ms=%s, corr_id=%s): %s",
                method.upper(),
                url,
                status,
                ms,
                get_request_id(),
                str(e),
            )
            raise

    def get_json(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs).json()

    def post_json(self, path: str, body: Any, **kwargs: Any) -> Any:
        return self.request("POST", path, json=body, **kwargs).json()

    def close(self) -> None:
        self.session.close()
