from __future__ import annotations

import pytest

from sundry_config import settings
from tests.helpers.fakes import FakeSundryClient


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep developer .env files and SUNDRY_* variables out of unit tests."""
    for name in (
        "SUNDRY_USER_API_KEY",
        "SUNDRY_APPLICATION_API_KEY",
        "SUNDRY_BASE_URL",
        "SUNDRY_HTTP_TIMEOUT",
        "SUNDRY_ENV_FILE",
        "SUNDRY_HTTP_USER_AGENT",
    ):
        # set first so teardown also removes values a dotenv load puts there
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setenv("SUNDRY_REPO_ROOT", str(tmp_path))
    settings.repo_root.cache_clear()
    settings.load_env_once.cache_clear()
    yield
    settings.repo_root.cache_clear()
    settings.load_env_once.cache_clear()


@pytest.fixture()
def fake_backend() -> FakeSundryClient:
    return FakeSundryClient()
