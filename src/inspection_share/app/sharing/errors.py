"""Share-link failure taxonomy.

Each error maps to exactly one HTTP answer in the routes; ownership is never
disclosed, so a foreign inspection and a missing one look the same.
"""

from __future__ import annotations


class ShareError(Exception):
    """Base class for share-link failures."""


class Unauthorized(ShareError):
    """No verified caller identity."""


class InspectionNotFound(ShareError):
    """No inspection with this id is owned by the caller."""

    def __init__(self, inspection_id: str) -> None:
        self.inspection_id = inspection_id
        super().__init__(f'inspection {inspection_id} not found for caller')


class ShareLinkNotFound(ShareError):
    """Token is unknown, malformed, or belongs to a revoked share."""


class StoreWriteFailure(ShareError):
    """The store rejected a share-state update or matched no row."""

    def __init__(self, operation: str, cause: str) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f'{operation} failed: {cause}')
