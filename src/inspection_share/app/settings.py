"""Service configuration.

AppSettings is the single configuration object accepted by create_app(). It
is a plain dataclass so tests build it directly; production uses from_env().
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import urlparse

ENVIRONMENTS = ("local", "staging", "production")

DEFAULT_CORS_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:5173",
)


@dataclass(frozen=True, slots=True)
class AppSettings:
    """Configuration for the inspection share API.

    Local mode runs against the in-memory store; staging and production
    need the Supabase URL and service-role key.
    """

    environment: str = "local"
    """One of: local, staging, production."""

    supabase_url: str = ""
    """Supabase project URL (e.g. https://xyz.supabase.co)."""

    supabase_service_role_key: str = ""
    """Service-role key for PostgREST calls. Never log this."""

    supabase_jwt_secret: str = ""
    """HS256 secret for access tokens when JWKS is unavailable (local dev)."""

    public_base_url: str = ""
    """Public origin for share links. Empty: use the request's origin."""

    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS

    store_timeout_seconds: float = 30.0

    log_level: str = "INFO"
    log_json: bool = True

    @property
    def is_local(self) -> bool:
        return self.environment == "local"

    def validate(self) -> list[str]:
        """Return a list of configuration errors. Empty means valid."""
        errors: list[str] = []
        if self.environment not in ENVIRONMENTS:
            errors.append(
                f"environment must be one of {', '.join(ENVIRONMENTS)}, "
                f"got {self.environment!r}"
            )
        elif not self.is_local:
            if not self.supabase_url:
                errors.append(f"{self.environment}: supabase_url is required")
            if not self.supabase_service_role_key:
                errors.append(
                    f"{self.environment}: supabase_service_role_key is required"
                )
        elif self.supabase_service_role_key and not self.supabase_url:
            errors.append("supabase_url is required when a service-role key is set")
        if self.public_base_url:
            parsed = urlparse(self.public_base_url)
            if not parsed.scheme or not parsed.netloc:
                errors.append(
                    f"public_base_url must include scheme and host, "
                    f"got {self.public_base_url!r}"
                )
            elif not self.is_local and parsed.scheme != "https":
                errors.append(
                    f"{self.environment}: public_base_url must use https"
                )
        return errors

    @classmethod
    def from_env(cls, env: dict[str, str] | None = None) -> AppSettings:
        """Build settings from environment variables."""
        if env is None:
            env = dict(os.environ)

        cors_raw = env.get("CORS_ORIGINS", "")
        cors = (
            tuple(o.strip() for o in cors_raw.split(",") if o.strip())
            if cors_raw
            else DEFAULT_CORS_ORIGINS
        )

        public_base_url = env.get("PUBLIC_SITE_URL") or env.get("NEXT_PUBLIC_SITE_URL", "")

        return cls(
            environment=env.get("ENVIRONMENT", "local").strip().lower(),
            supabase_url=env.get("SUPABASE_URL", ""),
            supabase_service_role_key=env.get("SUPABASE_SERVICE_ROLE_KEY", ""),
            supabase_jwt_secret=env.get("SUPABASE_JWT_SECRET", ""),
            public_base_url=public_base_url.strip(),
            cors_origins=cors,
            store_timeout_seconds=float(env.get("STORE_TIMEOUT_SECONDS", "30")),
            log_level=env.get("LOG_LEVEL", "INFO"),
            log_json=env.get("LOG_FORMAT", "json") == "json",
        )
