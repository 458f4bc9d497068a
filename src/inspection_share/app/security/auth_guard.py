"""Authentication middleware and route dependency.

``AuthGuardMiddleware`` resolves the caller's Supabase access token into
``request.state.auth_identity``. Public paths (health, metrics, the shared
report reader) skip verification entirely; a token on those paths is
ignored. On protected paths a missing or invalid token answers 401 with the
same ``{"error": "Unauthorized"}`` body the share routes use.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from ..observability import get_logger
from .token_verify import (
    AuthIdentity,
    TokenVerificationError,
    TokenVerifier,
    extract_access_token,
)

logger = get_logger(__name__)

DEFAULT_PUBLIC_PREFIXES: tuple[str, ...] = (
    '/health',
    '/metrics',
    '/api/shared/',
    '/docs',
    '/openapi.json',
)

UNAUTHORIZED_BODY = {'error': 'Unauthorized'}


def unauthorized_response() -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=UNAUTHORIZED_BODY,
        headers={'WWW-Authenticate': 'Bearer'},
    )


class AuthGuardMiddleware(BaseHTTPMiddleware):
    """Verify access tokens and attach the identity to the request.

    Args:
        app: The ASGI application.
        token_verifier: Verifier for Supabase JWTs. When None no token can
            be verified and every protected request answers 401.
        public_prefixes: Path prefixes that never require a token.
    """

    def __init__(
        self,
        app,
        token_verifier: TokenVerifier | None,
        public_prefixes: tuple[str, ...] = DEFAULT_PUBLIC_PREFIXES,
    ) -> None:
        super().__init__(app)
        self._verifier = token_verifier
        self._public_prefixes = public_prefixes

    def _is_public(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self._public_prefixes)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        request.state.auth_identity = None

        if request.method == 'OPTIONS' or self._is_public(request.url.path):
            return await call_next(request)

        token = extract_access_token(request)
        if token is None or self._verifier is None:
            logger.info('auth_missing', path=request.url.path)
            return unauthorized_response()

        try:
            request.state.auth_identity = self._verifier.verify(token)
        except TokenVerificationError as exc:
            logger.info('auth_rejected', path=request.url.path, code=exc.code)
            return unauthorized_response()

        return await call_next(request)


def get_auth_identity(request: Request) -> AuthIdentity | None:
    """FastAPI dependency returning the verified caller, or None.

    The share service decides what an anonymous caller may do, so this
    never raises.
    """
    return getattr(request.state, 'auth_identity', None)
