"""Capability links granting read-only access to one inspection."""

from .access import create_shared_inspection_router
from .errors import (
    InspectionNotFound,
    ShareError,
    ShareLinkNotFound,
    StoreWriteFailure,
    Unauthorized,
)
from .model import (
    TOKEN_BYTES,
    ShareLinkIssued,
    ShareState,
    ShareStatus,
    generate_share_token,
    is_well_formed_token,
    redact_token,
)
from .report import SharedInspectionReport, build_shared_report
from .routes import create_share_router
from .service import ShareLinkService
from .urls import build_share_url, request_origin, resolve_base_url

__all__ = [
    'InspectionNotFound',
    'ShareError',
    'ShareLinkIssued',
    'ShareLinkNotFound',
    'ShareLinkService',
    'ShareState',
    'ShareStatus',
    'SharedInspectionReport',
    'StoreWriteFailure',
    'TOKEN_BYTES',
    'Unauthorized',
    'build_share_url',
    'build_shared_report',
    'create_share_router',
    'create_shared_inspection_router',
    'generate_share_token',
    'is_well_formed_token',
    'redact_token',
    'request_origin',
    'resolve_base_url',
]
