"""Caller authentication for owner-facing routes."""

from .auth_guard import (
    AuthGuardMiddleware,
    get_auth_identity,
    unauthorized_response,
)
from .token_verify import (
    AuthIdentity,
    JWKSKeyProvider,
    StaticKeyProvider,
    TokenVerificationError,
    TokenVerifier,
    create_token_verifier,
    extract_access_token,
)

__all__ = [
    'AuthGuardMiddleware',
    'AuthIdentity',
    'JWKSKeyProvider',
    'StaticKeyProvider',
    'TokenVerificationError',
    'TokenVerifier',
    'create_token_verifier',
    'extract_access_token',
    'get_auth_identity',
    'unauthorized_response',
]
