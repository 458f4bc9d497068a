"""Share URL construction.

The public origin comes from configuration when it is set. Deployments that
leave it empty fall back to the origin the request arrived on, so links are
never built against a placeholder host.
"""

from __future__ import annotations

from starlette.requests import Request

SHARE_PATH = '/shared/inspection'


def request_origin(request: Request) -> str:
    """``scheme://host[:port]`` of the inbound request."""
    return f'{request.url.scheme}://{request.url.netloc}'


def resolve_base_url(configured: str | None, origin: str | None) -> str:
    """Pick the base URL for share links, without a trailing slash.

    Raises:
        ValueError: If neither a configured base nor a request origin is known.
    """
    for candidate in (configured, origin):
        if candidate and candidate.strip():
            return candidate.strip().rstrip('/')
    raise ValueError('no public base URL configured and no request origin available')


def build_share_url(base_url: str, token: str) -> str:
    return f'{base_url.rstrip("/")}{SHARE_PATH}/{token}'
