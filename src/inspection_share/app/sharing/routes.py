"""Owner-facing share endpoints.

  POST   /api/inspections/{inspection_id}/share  → issue or rotate the link
  DELETE /api/inspections/{inspection_id}/share  → disable sharing
  GET    /api/inspections/{inspection_id}/share  → current share status

Answers:
  - 401 ``{"error": "Unauthorized"}`` without a verified caller.
  - 404 ``{"error": "Inspection not found"}`` for missing inspections and
    for inspections owned by someone else (never 403).
  - 500 with a generic message when the store rejects the update; the cause
    is only logged.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..observability import get_logger
from ..security.auth_guard import get_auth_identity
from ..security.token_verify import AuthIdentity
from .errors import InspectionNotFound, StoreWriteFailure, Unauthorized
from .service import ShareLinkService
from .urls import request_origin

logger = get_logger(__name__)

NOT_FOUND_MESSAGE = 'Inspection not found'


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'error': message})


def _owner_error(exc: Exception, failure_message: str) -> JSONResponse:
    if isinstance(exc, Unauthorized):
        return _error(401, 'Unauthorized')
    if isinstance(exc, InspectionNotFound):
        return _error(404, NOT_FOUND_MESSAGE)
    logger.error(
        'share_store_write_failed',
        operation=getattr(exc, 'operation', None),
        cause=getattr(exc, 'cause', str(exc)),
    )
    return _error(500, failure_message)


def create_share_router(service: ShareLinkService) -> APIRouter:
    """Build the owner share router around an injected service."""
    router = APIRouter(prefix='/api/inspections', tags=['sharing'])

    @router.post('/{inspection_id}/share')
    async def issue_share_link(
        inspection_id: str,
        request: Request,
        identity: AuthIdentity | None = Depends(get_auth_identity),
    ):
        try:
            issued = await service.issue(
                inspection_id, identity, request_origin(request),
            )
        except (Unauthorized, InspectionNotFound, StoreWriteFailure) as exc:
            return _owner_error(exc, 'Failed to generate share link')

        return {
            'success': True,
            'shareUrl': issued.share_url,
            'shareToken': issued.share_token,
        }

    @router.delete('/{inspection_id}/share')
    async def revoke_share_link(
        inspection_id: str,
        identity: AuthIdentity | None = Depends(get_auth_identity),
    ):
        try:
            await service.revoke(inspection_id, identity)
        except (Unauthorized, InspectionNotFound, StoreWriteFailure) as exc:
            return _owner_error(exc, 'Failed to disable sharing')

        return {'success': True}

    @router.get('/{inspection_id}/share')
    async def get_share_status(
        inspection_id: str,
        request: Request,
        identity: AuthIdentity | None = Depends(get_auth_identity),
    ):
        try:
            status = await service.status(
                inspection_id, identity, request_origin(request),
            )
        except (Unauthorized, InspectionNotFound) as exc:
            return _owner_error(exc, 'Internal server error')

        return {
            'shareEnabled': status.share_enabled,
            'shareUrl': status.share_url,
            'sharedAt': status.shared_at,
        }

    return router
