from __future__ import annotations

from pathlib import Path

import pytest

from split_ledger.config import (
    DEFAULT_API_BASE_URL,
    DEFAULT_TOKEN_TTL_MINUTES,
    DEV_JWT_SECRET,
    load_settings,
)


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SPLIT_API_BASE_URL", "https://ledger.example.com/")
    monkeypatch.setenv("SPLIT_TOKEN_TTL_MINUTES", "15")

    settings = load_settings()

    assert settings.api_base_url == "https://ledger.example.com"
    assert settings.token_ttl_minutes == 15
    assert settings.database_url and settings.database_url.startswith("sqlite")


def test_dotenv_fills_gaps_without_overriding(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    # setenv first so teardown removes whatever load_dotenv writes.
    monkeypatch.setenv("SPLIT_TOKEN_TTL_MINUTES", "0")
    monkeypatch.delenv("SPLIT_TOKEN_TTL_MINUTES")
    monkeypatch.setenv("SPLIT_JWT_SECRET", "from-the-environment-0123456789abcdef")
    (tmp_path / ".env").write_text(
        "SPLIT_JWT_SECRET=from-dotenv\nSPLIT_TOKEN_TTL_MINUTES=30\n", encoding="utf-8"
    )

    settings = load_settings(dotenv_path=tmp_path / ".env")

    assert settings.jwt_secret == "from-the-environment-0123456789abcdef"
    assert settings.token_ttl_minutes == 30


def test_defaults_and_dev_secret_warning(monkeypatch: pytest.MonkeyPatch, caplog):
    monkeypatch.delenv("SPLIT_JWT_SECRET")
    monkeypatch.delenv("DATABASE_URL")
    monkeypatch.setenv("SPLIT_TOKEN_TTL_MINUTES", "soon")

    with caplog.at_level("WARNING", logger="split_ledger.config"):
        settings = load_settings()

    assert settings.jwt_secret == DEV_JWT_SECRET
    assert settings.database_url is None
    assert settings.api_base_url == DEFAULT_API_BASE_URL
    assert settings.token_ttl_minutes == DEFAULT_TOKEN_TTL_MINUTES
    assert any("SPLIT_JWT_SECRET" in r.getMessage() for r in caplog.records)
