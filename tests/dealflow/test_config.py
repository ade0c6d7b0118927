"""Tests for dealflow.config — env parsing into an immutable Settings."""
import dataclasses
import os
import pytest
from unittest.mock import patch

from dealflow.config import Settings, load_settings


class TestLoadSettings:

    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            settings = load_settings()
        assert settings.port == 3000
        assert settings.database_url == 'sqlite:///local.db'
        assert settings.webhook_secret is None
        assert settings.mail_configured is False
        assert settings.cors_allowed_origins == ('*',)

    def test_reads_env(self):
        env = {
            'PORT': '8080',
            'SUPABASE_URL': 'https://x.supabase.co',
            'SUPABASE_SERVICE_KEY': 'key',
            'SMTP_HOST': 'smtp.test',
            'SMTP_PORT': '2525',
            'SMTP_USER': 'u',
            'SMTP_PASSWORD': 'p',
            'SMTP_FROM': 'f@test',
            'SMTP_STARTTLS': 'false',
            'WEBHOOK_SECRET': 'shh',
            'CORS_ALLOWED_ORIGINS': 'https://a.test, https://b.test',
        }
        with patch.dict(os.environ, env, clear=True):
            settings = load_settings()
        assert settings.port == 8080
        assert settings.identity_configured
        assert settings.mail_configured
        assert settings.smtp_port == 2525
        assert settings.smtp_starttls is False
        assert settings.webhook_secret_configured
        assert settings.cors_allowed_origins == ('https://a.test', 'https://b.test')

    def test_empty_secret_disables_check(self):
        with patch.dict(os.environ, {'WEBHOOK_SECRET': ''}, clear=True):
            assert load_settings().webhook_secret is None

    def test_bad_port_falls_back(self):
        with patch.dict(os.environ, {'PORT': 'abc'}, clear=True):
            assert load_settings().port == 3000

    @pytest.mark.parametrize('missing', ['SMTP_HOST', 'SMTP_PORT', 'SMTP_USER', 'SMTP_PASSWORD', 'SMTP_FROM'])
    def test_mail_is_all_or_nothing(self, missing):
        env = {
            'SMTP_HOST': 'smtp.test', 'SMTP_PORT': '587', 'SMTP_USER': 'u',
            'SMTP_PASSWORD': 'p', 'SMTP_FROM': 'f@test',
        }
        env.pop(missing)
        with patch.dict(os.environ, env, clear=True):
            assert load_settings().mail_configured is False


class TestSettingsImmutable:

    def test_frozen(self):
        settings = Settings()
        with pytest.raises(dataclasses.FrozenInstanceError):
            settings.webhook_secret = 'changed'


class TestDatabaseConfigured:

    def test_local_fallback_is_not_configured(self):
        with patch.dict(os.environ, {}, clear=True):
            assert load_settings().database_configured is False

    def test_env_url_is_configured(self):
        with patch.dict(os.environ, {'DATABASE_URL': 'postgresql://db.test/deals'}, clear=True):
            assert load_settings().database_configured is True
