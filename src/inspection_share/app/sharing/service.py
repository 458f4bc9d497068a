"""Share-link service: issue, revoke, report status, resolve.

Owner operations are one ownership-filtered read followed by at most one
ownership-filtered update. Nothing is cached in process; concurrent
rotations race at the store and the last write wins.

Resolution is anonymous. A token resolves only while ``share_enabled`` is
true, and every failure (malformed, unknown, rotated away, revoked) raises
the same ``ShareLinkNotFound``.
"""

from __future__ import annotations

import asyncio
import secrets
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator

from ..db.errors import SupabaseError
from ..observability import SHARE_LINK_OPERATIONS_TOTAL, get_logger
from ..protocols import InspectionRepository
from ..security.token_verify import AuthIdentity
from .errors import (
    InspectionNotFound,
    ShareLinkNotFound,
    StoreWriteFailure,
    Unauthorized,
)
from .model import (
    ShareLinkIssued,
    ShareState,
    ShareStatus,
    generate_share_token,
    is_well_formed_token,
    redact_token,
)
from .report import SharedInspectionReport, build_shared_report
from .urls import build_share_url, resolve_base_url

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@contextmanager
def _observed(operation: str) -> Iterator[None]:
    try:
        yield
    except Unauthorized:
        SHARE_LINK_OPERATIONS_TOTAL.labels(operation=operation, outcome='unauthorized').inc()
        raise
    except (InspectionNotFound, ShareLinkNotFound):
        SHARE_LINK_OPERATIONS_TOTAL.labels(operation=operation, outcome='not_found').inc()
        raise
    except (StoreWriteFailure, SupabaseError):
        SHARE_LINK_OPERATIONS_TOTAL.labels(operation=operation, outcome='store_error').inc()
        raise
    except Exception:
        SHARE_LINK_OPERATIONS_TOTAL.labels(operation=operation, outcome='error').inc()
        raise
    else:
        SHARE_LINK_OPERATIONS_TOTAL.labels(operation=operation, outcome='ok').inc()


class ShareLinkService:
    """Manages the share token of inspections.

    Args:
        repo: Inspection store.
        public_base_url: Configured public origin for share links. Empty
            means "use the origin of the request being served".
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        repo: InspectionRepository,
        *,
        public_base_url: str = '',
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = repo
        self._public_base_url = public_base_url
        self._clock = clock

    def _share_url(self, token: str, request_origin: str | None) -> str:
        return build_share_url(
            resolve_base_url(self._public_base_url, request_origin), token,
        )

    async def _owned_state(
        self, inspection_id: str, identity: AuthIdentity | None,
    ) -> ShareState:
        if identity is None:
            raise Unauthorized()
        row = await self._repo.get_owned(inspection_id, identity.user_id)
        if row is None:
            raise InspectionNotFound(inspection_id)
        return ShareState.from_row(row)

    async def _write(
        self,
        operation: str,
        state: ShareState,
        data: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            row = await self._repo.update_share_state(
                state.inspection_id, state.inspector_id, data,
            )
        except SupabaseError as exc:
            raise StoreWriteFailure(operation, str(exc)) from exc
        if row is None:
            # Row vanished (or changed owner) between the read and the update.
            raise StoreWriteFailure(operation, 'update matched no row')
        return row

    async def issue(
        self,
        inspection_id: str,
        identity: AuthIdentity | None,
        request_origin: str | None = None,
    ) -> ShareLinkIssued:
        """Mint a new token, replacing any previous one in the same update."""
        with _observed('issue'):
            state = await self._owned_state(inspection_id, identity)

            token = generate_share_token()
            share_url = self._share_url(token, request_origin)
            shared_at = self._clock()

            await self._write('issue', state, {
                'share_token': token,
                'share_enabled': True,
                'shared_at': shared_at.isoformat(),
            })

        logger.info(
            'share_link_issued',
            inspection_id=inspection_id,
            token_prefix=redact_token(token),
            rotated=state.share_token is not None,
        )
        return ShareLinkIssued(share_url=share_url, share_token=token, shared_at=shared_at)

    async def revoke(
        self, inspection_id: str, identity: AuthIdentity | None,
    ) -> None:
        """Disable sharing. The stored token is kept but no longer resolves."""
        with _observed('revoke'):
            state = await self._owned_state(inspection_id, identity)
            await self._write('revoke', state, {'share_enabled': False})

        logger.info('share_link_revoked', inspection_id=inspection_id)

    async def status(
        self,
        inspection_id: str,
        identity: AuthIdentity | None,
        request_origin: str | None = None,
    ) -> ShareStatus:
        with _observed('status'):
            state = await self._owned_state(inspection_id, identity)

        share_url = None
        if state.is_active:
            share_url = self._share_url(state.share_token, request_origin)
        return ShareStatus(
            share_enabled=state.share_enabled,
            share_url=share_url,
            shared_at=state.shared_at,
        )

    async def resolve(self, token: str) -> dict[str, Any]:
        """Return the inspection row behind an active token."""
        with _observed('resolve'):
            if not is_well_formed_token(token):
                logger.info('share_link_not_found', token_prefix=redact_token(token))
                raise ShareLinkNotFound()

            row = await self._repo.find_shared(token)
            if (
                row is None
                or row.get('share_enabled') is not True
                or not secrets.compare_digest(str(row.get('share_token') or ''), token)
            ):
                logger.info('share_link_not_found', token_prefix=redact_token(token))
                raise ShareLinkNotFound()

        logger.info(
            'share_link_resolved',
            inspection_id=row['id'],
            token_prefix=redact_token(token),
        )
        return row

    async def load_shared_report(self, token: str) -> SharedInspectionReport:
        inspection = await self.resolve(token)
        inspection_id = str(inspection['id'])
        with _observed('report'):
            reads = [
                asyncio.ensure_future(self._repo.list_selected_rooms(inspection_id)),
                asyncio.ensure_future(self._repo.list_photos(inspection_id)),
            ]
            try:
                rooms, photos = await asyncio.gather(*reads)
            except BaseException:
                # gather leaves the sibling read running when one fails.
                for read in reads:
                    read.cancel()
                raise
        return build_shared_report(inspection, rooms, photos)
