"""
Centralized configuration — env vars resolved once into an immutable Settings.

create_app() receives a Settings value; handlers read it through get_settings()
instead of touching os.environ.
"""
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from flask import current_app


DEFAULT_DATABASE_URL = 'sqlite:///local.db'

_TRUTHY = {'1', 'true', 'yes', 'y', 'on'}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _parse_origins(raw: str) -> Tuple[str, ...]:
    """Split comma-separated origins, honoring a wildcard if present."""
    origins = []
    for origin in raw.split(','):
        cleaned = origin.strip()
        if not cleaned:
            continue
        if cleaned == '*':
            return ('*',)
        origins.append(cleaned)
    return tuple(origins)


@dataclass(frozen=True)
class Settings:
    # ── Server ────────────────────────────────────────────────────────────────
    port: int = 3000

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = 'INFO'
    log_format: str = 'text'

    # ── Store (Supabase Postgres) ─────────────────────────────────────────────
    database_url: str = DEFAULT_DATABASE_URL

    # ── Identity provider (Supabase Auth) ─────────────────────────────────────
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None

    # ── SMTP relay ────────────────────────────────────────────────────────────
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from: Optional[str] = None
    smtp_starttls: bool = True

    # ── Webhooks ──────────────────────────────────────────────────────────────
    webhook_secret: Optional[str] = None

    # ── Outreach ──────────────────────────────────────────────────────────────
    outreach_sender_name: str = 'Price Capital'

    # ── CORS ──────────────────────────────────────────────────────────────────
    cors_allowed_origins: Tuple[str, ...] = ('*',)

    @property
    def mail_configured(self) -> bool:
        """SMTP is all-or-nothing: any missing piece disables direct send."""
        return all([
            self.smtp_host, self.smtp_port, self.smtp_user,
            self.smtp_password, self.smtp_from,
        ])

    @property
    def database_configured(self) -> bool:
        """False when running on the local SQLite fallback."""
        return self.database_url != DEFAULT_DATABASE_URL

    @property
    def identity_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_key)

    @property
    def webhook_secret_configured(self) -> bool:
        return bool(self.webhook_secret)


def load_settings() -> Settings:
    """Read the environment once and freeze it."""
    return Settings(
        port=_env_int('PORT', 3000),
        log_level=os.getenv('LOG_LEVEL', 'INFO'),
        log_format=os.getenv('LOG_FORMAT', 'text'),
        database_url=os.getenv('DATABASE_URL') or DEFAULT_DATABASE_URL,
        supabase_url=os.getenv('SUPABASE_URL') or None,
        supabase_service_key=os.getenv('SUPABASE_SERVICE_KEY') or None,
        smtp_host=os.getenv('SMTP_HOST') or None,
        smtp_port=_env_int('SMTP_PORT', None),
        smtp_user=os.getenv('SMTP_USER') or None,
        smtp_password=os.getenv('SMTP_PASSWORD') or None,
        smtp_from=os.getenv('SMTP_FROM') or None,
        smtp_starttls=_env_flag('SMTP_STARTTLS', True),
        webhook_secret=os.getenv('WEBHOOK_SECRET') or None,
        outreach_sender_name=os.getenv('OUTREACH_SENDER_NAME', 'Price Capital'),
        cors_allowed_origins=_parse_origins(os.getenv('CORS_ALLOWED_ORIGINS', '*')),
    )


def get_settings() -> Settings:
    """Settings of the app handling the current request."""
    return current_app.config['SETTINGS']
