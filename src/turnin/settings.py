from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_PORT = 10000
DEFAULT_CONTENT_DIR = Path(__file__).resolve().parents[2] / "uploads"
DEFAULT_EMAIL_FROM = '"PDF Generator" <noreply@example.com>'

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_str(name: str, default: str = "") -> str:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class SmtpSettings:
    host: str = ""
    port: int = 587
    secure: bool = False
    user: str = ""
    password: str = field(default="", repr=False)
    sender: str = DEFAULT_EMAIL_FROM


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    base_url: str = f"http://localhost:{DEFAULT_PORT}"
    content_dir: Path = DEFAULT_CONTENT_DIR
    content_path: str = "uploads"
    enable_email: bool = False
    notification_email: str = ""
    smtp: SmtpSettings = field(default_factory=SmtpSettings)
    retention_hours: float = 24.0
    sweep_interval_hours: float = 12.0
    render_timeout_seconds: float = 60.0
    strict_envelope: bool = False
    log_level: str = "INFO"

    @property
    def retention_seconds(self) -> float:
        return self.retention_hours * 3600

    @property
    def sweep_interval_seconds(self) -> float:
        return self.sweep_interval_hours * 3600


def load_settings() -> Settings:
    """Build settings from the process environment."""

    port = _env_int("PORT", DEFAULT_PORT)
    base_url = _env_str("BASE_URL") or f"http://localhost:{port}"
    content_dir = _env_str("CONTENT_DIR")
    return Settings(
        host=_env_str("HOST", "0.0.0.0"),
        port=port,
        base_url=base_url.rstrip("/"),
        content_dir=Path(content_dir) if content_dir else DEFAULT_CONTENT_DIR,
        content_path=_env_str("CONTENT_PATH", "uploads").strip("/") or "uploads",
        enable_email=_env_bool("ENABLE_EMAIL"),
        notification_email=_env_str("NOTIFICATION_EMAIL"),
        smtp=SmtpSettings(
            host=_env_str("SMTP_HOST"),
            port=_env_int("SMTP_PORT", 587),
            secure=_env_bool("SMTP_SECURE"),
            user=_env_str("SMTP_USER"),
            password=os.getenv("SMTP_PASS", ""),
            sender=_env_str("EMAIL_FROM") or DEFAULT_EMAIL_FROM,
        ),
        retention_hours=_env_float("RETENTION_HOURS", 24.0),
        sweep_interval_hours=_env_float("SWEEP_INTERVAL_HOURS", 12.0),
        render_timeout_seconds=_env_float("RENDER_TIMEOUT_SECONDS", 60.0),
        strict_envelope=_env_bool("STRICT_ENVELOPE"),
        log_level=_env_str("LOG_LEVEL", "INFO").upper() or "INFO",
    )
