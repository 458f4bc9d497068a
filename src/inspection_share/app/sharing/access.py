"""Public read endpoint for share-link holders.

  GET /api/shared/inspections/{token}  → read-only inspection report

No identity is required: the token is the capability. Unknown, malformed and
revoked tokens get the same 404 body so a caller cannot tell them apart.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from .errors import ShareLinkNotFound
from .routes import NOT_FOUND_MESSAGE
from .service import ShareLinkService


def create_shared_inspection_router(service: ShareLinkService) -> APIRouter:
    router = APIRouter(prefix='/api/shared', tags=['shared-inspections'])

    @router.get('/inspections/{token}')
    async def read_shared_inspection(token: str):
        try:
            report = await service.load_shared_report(token)
        except ShareLinkNotFound:
            return JSONResponse(status_code=404, content={'error': NOT_FOUND_MESSAGE})
        return report.model_dump()

    return router
