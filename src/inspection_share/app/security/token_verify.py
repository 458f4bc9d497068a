"""Supabase access-token verification.

Inspectors sign in through Supabase Auth; every owner-facing request
carries the resulting access token. This module turns that token into an
``AuthIdentity`` or raises ``TokenVerificationError``.

Key resolution:
  - ``SUPABASE_URL`` set: RS256 keys from the project JWKS endpoint,
    cached by PyJWKClient.
  - only ``SUPABASE_JWT_SECRET`` set: HS256 with the shared secret
    (local development).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import jwt
from jwt import PyJWKClient, PyJWKClientError
from starlette.requests import Request

DEFAULT_AUDIENCE = 'authenticated'
JWKS_CACHE_TTL_SECONDS = 300
BEARER_PREFIX = 'Bearer '
SUPABASE_ACCESS_COOKIE = 'sb-access-token'


@dataclass(frozen=True, slots=True)
class AuthIdentity:
    """Verified caller identity.

    Attributes:
        user_id: Supabase ``auth.users`` id (the ``sub`` claim); this is the
            value compared against ``inspections.inspector_id``.
        email: Lower-cased email claim, empty when absent.
        role: Supabase role claim.
        raw_claims: The decoded payload.
    """

    user_id: str
    email: str = ''
    role: str = 'authenticated'
    raw_claims: dict[str, Any] = field(default_factory=dict)


class TokenVerificationError(Exception):
    """Raised when an access token cannot be trusted."""

    def __init__(self, code: str, detail: str = '') -> None:
        self.code = code
        self.detail = detail
        super().__init__(f'{code}: {detail}' if detail else code)


class KeyProvider(Protocol):
    def get_signing_key(self, token: str) -> Any: ...


class JWKSKeyProvider:
    """Signing keys from a Supabase JWKS endpoint."""

    def __init__(self, jwks_url: str, cache_ttl: int = JWKS_CACHE_TTL_SECONDS) -> None:
        self._client = PyJWKClient(jwks_url, cache_jwk_set=True, lifespan=cache_ttl)

    def get_signing_key(self, token: str) -> Any:
        try:
            return self._client.get_signing_key_from_jwt(token).key
        except PyJWKClientError as exc:
            raise TokenVerificationError('jwks_fetch_error', str(exc)) from exc


class StaticKeyProvider:
    """Shared HS256 secret (local development only)."""

    def __init__(self, secret: str) -> None:
        self._secret = secret

    def get_signing_key(self, token: str) -> str:
        return self._secret


class TokenVerifier:
    """Verifies Supabase JWTs and extracts the caller identity."""

    def __init__(
        self,
        key_provider: KeyProvider,
        audience: str = DEFAULT_AUDIENCE,
        algorithms: list[str] | None = None,
    ) -> None:
        self._key_provider = key_provider
        self._audience = audience
        self._algorithms = algorithms or ['RS256']

    def verify(self, token: str) -> AuthIdentity:
        if not token or not token.strip():
            raise TokenVerificationError('empty_token')

        key = self._key_provider.get_signing_key(token)

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=self._algorithms,
                audience=self._audience,
                options={'require': ['sub', 'exp', 'aud']},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenVerificationError('token_expired') from exc
        except jwt.InvalidAudienceError as exc:
            raise TokenVerificationError(
                'invalid_audience', f'expected {self._audience}',
            ) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenVerificationError('invalid_token', str(exc)) from exc

        user_id = claims.get('sub')
        if not user_id:
            raise TokenVerificationError('missing_sub_claim')

        email = claims.get('email') or ''
        return AuthIdentity(
            user_id=str(user_id),
            email=email.lower(),
            role=claims.get('role', 'authenticated'),
            raw_claims=claims,
        )


def extract_access_token(request: Request) -> str | None:
    """Return the caller's access token, Bearer header first, then cookie."""
    auth_header = request.headers.get('authorization', '')
    if auth_header.startswith(BEARER_PREFIX):
        token = auth_header[len(BEARER_PREFIX):].strip()
        if token:
            return token
    cookie = request.cookies.get(SUPABASE_ACCESS_COOKIE)
    return cookie or None


def create_token_verifier(
    supabase_url: str | None = None,
    jwt_secret: str | None = None,
    audience: str = DEFAULT_AUDIENCE,
) -> TokenVerifier:
    """Build a verifier, preferring JWKS over the shared secret.

    Raises:
        ValueError: If neither ``supabase_url`` nor ``jwt_secret`` is given.
    """
    if supabase_url:
        jwks_url = f'{supabase_url.rstrip("/")}/auth/v1/.well-known/jwks.json'
        return TokenVerifier(
            key_provider=JWKSKeyProvider(jwks_url),
            audience=audience,
            algorithms=['RS256'],
        )

    if jwt_secret:
        return TokenVerifier(
            key_provider=StaticKeyProvider(jwt_secret),
            audience=audience,
            algorithms=['HS256'],
        )

    raise ValueError(
        'Either supabase_url (for JWKS) or jwt_secret (for HS256) is required'
    )
