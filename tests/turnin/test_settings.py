from __future__ import annotations

import os
from pathlib import Path

import pytest

from src.env_loader import load_env_file
from src.turnin.settings import DEFAULT_CONTENT_DIR, DEFAULT_EMAIL_FROM, load_settings

_VARS = (
    "PORT",
    "HOST",
    "BASE_URL",
    "CONTENT_DIR",
    "CONTENT_PATH",
    "ENABLE_EMAIL",
    "NOTIFICATION_EMAIL",
    "SMTP_HOST",
    "SMTP_PORT",
    "SMTP_SECURE",
    "SMTP_USER",
    "SMTP_PASS",
    "EMAIL_FROM",
    "RETENTION_HOURS",
    "SWEEP_INTERVAL_HOURS",
    "RENDER_TIMEOUT_SECONDS",
    "STRICT_ENVELOPE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # load_env_file writes straight into os.environ; keep that inside the test.
    monkeypatch.setattr(os, "environ", dict(os.environ))
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = load_settings()
    assert settings.port == 10000
    assert settings.base_url == "http://localhost:10000"
    assert settings.content_dir == DEFAULT_CONTENT_DIR
    assert settings.content_path == "uploads"
    assert settings.enable_email is False
    assert settings.smtp.sender == DEFAULT_EMAIL_FROM
    assert settings.retention_seconds == 24 * 3600
    assert settings.sweep_interval_seconds == 12 * 3600
    assert settings.strict_envelope is False


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("BASE_URL", "https://pdf.example.com/")
    monkeypatch.setenv("CONTENT_DIR", str(tmp_path))
    monkeypatch.setenv("CONTENT_PATH", "/files/")
    monkeypatch.setenv("ENABLE_EMAIL", "true")
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_PORT", "465")
    monkeypatch.setenv("SMTP_SECURE", "TRUE")
    monkeypatch.setenv("RETENTION_HOURS", "1.5")
    monkeypatch.setenv("STRICT_ENVELOPE", "yes")

    settings = load_settings()

    assert settings.port == 8080
    assert settings.base_url == "https://pdf.example.com"
    assert settings.content_dir == Path(str(tmp_path))
    assert settings.content_path == "files"
    assert settings.enable_email is True
    assert settings.smtp.host == "smtp.example.com"
    assert settings.smtp.port == 465
    assert settings.smtp.secure is True
    assert settings.retention_seconds == 5400
    assert settings.strict_envelope is True


def test_base_url_follows_port(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    assert load_settings().base_url == "http://localhost:9000"


def test_unparsable_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("PORT", "eighty")
    monkeypatch.setenv("RETENTION_HOURS", "a day")
    settings = load_settings()
    assert settings.port == 10000
    assert settings.retention_hours == 24.0


def test_smtp_password_is_not_in_repr(monkeypatch):
    monkeypatch.setenv("SMTP_PASS", "hunter2")
    assert "hunter2" not in repr(load_settings())


def test_load_env_file_respects_existing_values(monkeypatch, tmp_path):
    env_path = tmp_path / ".env"
    env_path.write_text(
        "\n".join(
            [
                "# comment",
                "PORT=7000",
                "export SMTP_HOST=smtp.example.com",
                'EMAIL_FROM="Turn In <noreply@example.com>"',
                "NOTIFICATION_EMAIL=office@example.com # inline comment",
                "BASE_URL=https://already.example.com",
                "not a pair",
            ]
        ),
        encoding="utf-8",
    )
    monkeypatch.setenv("BASE_URL", "https://env.example.com")

    applied = load_env_file(env_path)

    assert applied == ["PORT", "SMTP_HOST", "EMAIL_FROM", "NOTIFICATION_EMAIL"]
    assert os.environ["PORT"] == "7000"
    assert os.environ["SMTP_HOST"] == "smtp.example.com"
    assert os.environ["EMAIL_FROM"] == "Turn In <noreply@example.com>"
    assert os.environ["NOTIFICATION_EMAIL"] == "office@example.com"
    assert os.environ["BASE_URL"] == "https://env.example.com"


def test_load_env_file_missing_is_noop(tmp_path):
    assert load_env_file(tmp_path / "missing.env") == []
