"""AppSettings validation and environment loading."""

from __future__ import annotations

import pytest

from inspection_share.app.settings import DEFAULT_CORS_ORIGINS, AppSettings


def _staging(**overrides) -> AppSettings:
    values = {
        'environment': 'staging',
        'supabase_url': 'https://abc.supabase.co',
        'supabase_service_role_key': 'service-key-not-real',
    }
    values.update(overrides)
    return AppSettings(**values)


class TestValidate:
    def test_local_defaults_are_valid(self):
        assert AppSettings().validate() == []
        assert AppSettings().is_local

    def test_unknown_environment(self):
        errors = AppSettings(environment='qa').validate()
        assert len(errors) == 1
        assert 'environment must be one of' in errors[0]

    def test_unknown_environment_skips_deployment_checks(self):
        errors = AppSettings(environment='qa', supabase_service_role_key='k').validate()
        assert len(errors) == 1
        assert 'supabase_url' not in errors[0]

    def test_staging_requires_supabase(self):
        errors = AppSettings(environment='staging').validate()
        assert any('supabase_url' in e for e in errors)
        assert any('supabase_service_role_key' in e for e in errors)

    def test_staging_complete(self):
        assert _staging().validate() == []

    def test_local_key_without_url(self):
        errors = AppSettings(supabase_service_role_key='k').validate()
        assert errors == ['supabase_url is required when a service-role key is set']

    def test_public_base_url_needs_scheme_and_host(self):
        errors = AppSettings(public_base_url='inspect.example.com').validate()
        assert any('scheme and host' in e for e in errors)

    def test_deployed_public_base_url_must_be_https(self):
        errors = _staging(public_base_url='http://inspect.example.com').validate()
        assert any('https' in e for e in errors)
        assert _staging(public_base_url='https://inspect.example.com').validate() == []

    def test_local_allows_http_base_url(self):
        assert AppSettings(public_base_url='http://localhost:3000').validate() == []


class TestFromEnv:
    def test_empty_env_gives_local_defaults(self):
        settings = AppSettings.from_env({})
        assert settings.environment == 'local'
        assert settings.public_base_url == ''
        assert settings.cors_origins == DEFAULT_CORS_ORIGINS
        assert settings.store_timeout_seconds == 30.0
        assert settings.log_json is True

    def test_reads_all_variables(self):
        settings = AppSettings.from_env({
            'ENVIRONMENT': ' Production ',
            'SUPABASE_URL': 'https://abc.supabase.co',
            'SUPABASE_SERVICE_ROLE_KEY': 'svc',
            'SUPABASE_JWT_SECRET': 'jwt',
            'PUBLIC_SITE_URL': ' https://inspect.example.com ',
            'CORS_ORIGINS': 'https://a.example.com, https://b.example.com,',
            'STORE_TIMEOUT_SECONDS': '5',
            'LOG_LEVEL': 'DEBUG',
            'LOG_FORMAT': 'console',
        })
        assert settings.environment == 'production'
        assert settings.supabase_url == 'https://abc.supabase.co'
        assert settings.supabase_service_role_key == 'svc'
        assert settings.supabase_jwt_secret == 'jwt'
        assert settings.public_base_url == 'https://inspect.example.com'
        assert settings.cors_origins == ('https://a.example.com', 'https://b.example.com')
        assert settings.store_timeout_seconds == 5.0
        assert settings.log_level == 'DEBUG'
        assert settings.log_json is False
        assert settings.validate() == []

    def test_next_public_site_url_fallback(self):
        settings = AppSettings.from_env({'NEXT_PUBLIC_SITE_URL': 'http://localhost:3000'})
        assert settings.public_base_url == 'http://localhost:3000'

    def test_public_site_url_wins(self):
        settings = AppSettings.from_env({
            'PUBLIC_SITE_URL': 'https://one.example.com',
            'NEXT_PUBLIC_SITE_URL': 'https://two.example.com',
        })
        assert settings.public_base_url == 'https://one.example.com'

    def test_settings_are_frozen(self):
        settings = AppSettings()
        with pytest.raises(AttributeError):
            settings.environment = 'production'
