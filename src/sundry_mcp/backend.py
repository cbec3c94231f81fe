from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import pydantic
import requests

from sundry_config import settings
from sundry_mcp.credentials import Credentials
from sundry_mcp.errors import BackendError, BackendUnavailable
from sundry_mcp.http_client import DEFAULT_USER_AGENT, HttpClient, HttpClientConfig
from sundry_mcp.models import ContextQuery, ContextResponse, SourcesResponse


logger = logging.getLogger(__name__)

SOURCES_PATH = "/sources"
CONTEXT_PATH = "/context"

T = TypeVar("T")


class SundryClient:
    """
    Client for the Sundry backend API.

    Every request carries the user's bearer token and the application key.
    Failures are wrapped once for message clarity and never retried.
    """

    def __init__(self, http: HttpClient) -> None:
        self.http = http

    @classmethod
    def from_credentials(
        cls,
        credentials: Credentials,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> "SundryClient":
        config = HttpClientConfig(
            base_url=base_url or settings.base_url(),
            headers=credentials.auth_headers(),
            timeout=timeout,
            user_agent=user_agent,
        )
        return cls(HttpClient(config))

    def _call(self, what: str, fn: Callable[[], Any], parse: Callable[[Any], T]) -> T:
        try:
            return parse(fn())
        except requests.JSONDecodeError as e:
            # subclass of RequestException: a 2xx with a non-JSON body is not a transport failure
            raise BackendError(f"Failed to fetch {what}: response body is not JSON ({e})") from e
        except requests.RequestException as e:
            status = getattr(getattr(e, "response", None), "status_code", None)
            raise BackendUnavailable(f"Failed to fetch {what}: {e}", status=status) from e
        except pydantic.ValidationError as e:
            raise BackendError(
                f"Failed to fetch {what}: unexpected response shape",
                details={"errors": e.errors(include_url=False)},
            ) from e
        except Exception as e:
            raise BackendError(f"An unexpected error occurred: {e}") from e

    def fetch_sources(self) -> SourcesResponse:
        """GET /sources: the data domains the user has connected."""
        return self._call(
            "sources",
            lambda: self.http.get_json(SOURCES_PATH),
            SourcesResponse.model_validate,
        )

    def submit_query(self, query: ContextQuery) -> ContextResponse:
        """POST /context with the natural-language query."""
        logger.debug("submitting context query (%d chars)", len(query.query))
        response = self._call(
            "context",
            lambda: self.http.post_json(CONTEXT_PATH, query.model_dump()),
            ContextResponse.from_payload,
        )
        if not response.has_known_confidence:
            logger.debug("backend reported unrecognised confidence %r", response.confidence)
        return response

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "SundryClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
