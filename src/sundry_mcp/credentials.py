from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping

from sundry_mcp.errors import ConfigurationError


USER_API_KEY_ENV = "SUNDRY_USER_API_KEY"
APPLICATION_API_KEY_ENV = "SUNDRY_APPLICATION_API_KEY"


@dataclass(frozen=True)
class Credentials:
    user_api_key: str = field(repr=False)
    application_api_key: str = field(repr=False)

    def auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.user_api_key}",
            "X-API-Key": self.application_api_key,
        }


def _require(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name) or ""
    if not value.strip():
        raise ConfigurationError(f"{name} environment variable is required", details={"variable": name})
    return value


def load_credentials(environ: Mapping[str, str] | None = None) -> Credentials:
    """Read both API keys from the environment; absence of either is fatal."""
    env = os.environ if environ is None else environ
    return Credentials(
        user_api_key=_require(env, USER_API_KEY_ENV),
        application_api_key=_require(env, APPLICATION_API_KEY_ENV),
    )
