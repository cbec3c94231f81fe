from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_BASE_URL = "http://127.0.0.1:3002/v1"


def _find_repo_root(start: Path) -> Optional[Path]:
    """Walk upward until we find pyproject.toml or .git."""
    start = start.resolve()
    for p in (start, *start.parents):
        if (p / "pyproject.toml").exists() or (p / ".git").exists():
            return p
    return None


@lru_cache(maxsize=1)
def repo_root() -> Path:
    """Best-effort repository root discovery.

    Order of precedence:
      1) SUNDRY_REPO_ROOT (explicit override)
      2) walk upward from current working directory
      3) walk upward from this module file's directory
    """
    explicit = os.getenv("SUNDRY_REPO_ROOT")
    if explicit:
        p = Path(explicit).expanduser().resolve()
        if not p.is_dir():
            raise RuntimeError(f"SUNDRY_REPO_ROOT does not exist or is not a directory: {p}")
        return p

    cwd = Path.cwd().resolve()
    root = _find_repo_root(cwd)
    if root:
        return root

    root = _find_repo_root(Path(__file__).resolve().parent)
    if root:
        return root

    return cwd


@lru_cache(maxsize=1)
def load_env_once() -> Optional[Path]:
    """
    Load dotenv exactly once. Precedence:
      1) SUNDRY_ENV_FILE (explicit path)
      2) repo-root/.env
    """
    explicit = os.getenv("SUNDRY_ENV_FILE")
    candidates = []

    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.append(repo_root() / ".env")

    for p in candidates:
        p = p.resolve()
        if p.is_file():
            # Do NOT override already-set environment variables
            load_dotenv(dotenv_path=str(p), override=False)
            return p

    return None


def base_url() -> str:
    """Backend base URL. Override with SUNDRY_BASE_URL."""
    return (os.getenv("SUNDRY_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")


def http_timeout() -> Optional[float]:
    """Request timeout in seconds; None keeps the requests default (no timeout)."""
    raw = (os.getenv("SUNDRY_HTTP_TIMEOUT") or "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


def http_user_agent() -> Optional[str]:
    """User-Agent override (SUNDRY_HTTP_USER_AGENT); None keeps the client default."""
    return (os.getenv("SUNDRY_HTTP_USER_AGENT") or "").strip() or None


def configure_logging() -> None:
    """
    Configure logging explicitly. No import-time side effects.
    Idempotent: if logging is already configured, do nothing.

    Handlers write to stderr; stdout is reserved for the MCP stdio channel.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    level_name = os.getenv("SUNDRY_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    fmt = os.getenv(
        "SUNDRY_LOG_FORMAT",
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logging.basicConfig(level=level, format=fmt)


def init_runtime(*, configure_logs: bool = True, load_env: bool = True) -> None:
    """
    Call this from entrypoints only (servers, scripts).
    """
    if load_env:
        load_env_once()
    if configure_logs:
        configure_logging()
