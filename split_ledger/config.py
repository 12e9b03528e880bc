"""Runtime settings resolved from the environment.

A local ``.env`` (current working directory) is loaded with ``python-dotenv``
before reading variables; values already present in the environment win.

Variables
---------
- ``DATABASE_URL``: SQLAlchemy URL for the ledger database.
- ``SPLIT_JWT_SECRET``: signing key for bearer tokens issued by the server.
- ``SPLIT_API_BASE_URL``: base URL used by :class:`~split_ledger.remote.LedgerClient`.
- ``SPLIT_TOKEN_TTL_MINUTES``: bearer token lifetime (default 60).
- ``SPLIT_LOG_LEVEL``: read by :mod:`split_ledger.logging_setup`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .logging_setup import get_logger

_logger = get_logger("split_ledger.config")

DEV_JWT_SECRET = "split-ledger-dev-secret-change-me-0123456789"
DEFAULT_API_BASE_URL = "http://localhost:5000"
DEFAULT_TOKEN_TTL_MINUTES = 60


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str | None
    jwt_secret: str
    api_base_url: str
    token_ttl_minutes: int


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        _logger.warning("%s=%r is not an integer; using %d", name, raw, default)
        return default
    return value if value > 0 else default


def load_settings(*, dotenv_path: Path | None = None) -> Settings:
    """Load ``.env`` (without overriding) and resolve :class:`Settings`."""

    load_dotenv(dotenv_path=dotenv_path or Path.cwd() / ".env", override=False)

    secret = os.getenv("SPLIT_JWT_SECRET")
    if not secret:
        _logger.warning("SPLIT_JWT_SECRET is not set; using the development secret")
        secret = DEV_JWT_SECRET

    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        jwt_secret=secret,
        api_base_url=(os.getenv("SPLIT_API_BASE_URL") or DEFAULT_API_BASE_URL).rstrip("/"),
        token_ttl_minutes=_int_env("SPLIT_TOKEN_TTL_MINUTES", DEFAULT_TOKEN_TTL_MINUTES),
    )
