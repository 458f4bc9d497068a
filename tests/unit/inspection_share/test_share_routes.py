"""Owner share endpoints through the full application stack.

Validates:
  - 401 without a (valid) access token, on every verb.
  - 404 for foreign and missing inspections, never 403.
  - shareUrl built from the request origin or the configured base URL.
  - DELETE then GET reports sharing disabled with a null URL.
  - Store rejections answer a generic 500 without leaking the cause.
  - An unreachable store still answers the per-operation message.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import jwt
import pytest
from httpx import ASGITransport, AsyncClient
from prometheus_client import REGISTRY

from inspection_share.app import AppSettings, create_app
from inspection_share.app.db import SupabaseClient, SupabaseError, SupabaseInspectionRepository
from inspection_share.app.inmemory import InMemoryInspectionRepository
from inspection_share.app.protocols import InspectionRepository
from inspection_share.app.security.token_verify import StaticKeyProvider, TokenVerifier

JWT_SECRET = 'test-jwt-secret-that-is-at-least-32-bytes-long'
OWNER_ID = 'owner-1'
STRANGER_ID = 'stranger-1'


# ── Helpers ───────────────────────────────────────────────────────────


def _access_token(user_id: str, **overrides: Any) -> str:
    claims = {
        'sub': user_id,
        'email': f'{user_id}@example.com',
        'aud': 'authenticated',
        'role': 'authenticated',
        'exp': int(time.time()) + 3600,
    }
    claims.update(overrides)
    return jwt.encode(claims, JWT_SECRET, algorithm='HS256')


def _auth(user_id: str = OWNER_ID) -> dict[str, str]:
    return {'Authorization': f'Bearer {_access_token(user_id)}'}


def _make_app(
    repo: InspectionRepository | None = None,
    **settings: Any,
):
    repo = repo or InMemoryInspectionRepository()
    app = create_app(
        AppSettings(log_json=False, **settings),
        inspection_repo=repo,
        token_verifier=TokenVerifier(StaticKeyProvider(JWT_SECRET), algorithms=['HS256']),
    )
    return app, repo


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url='http://test')


def _seed(repo: InMemoryInspectionRepository, owner: str = OWNER_ID) -> str:
    return repo.add_inspection({'inspector_id': owner, 'address': '7 Elm St'})['id']


class _RejectingRepo(InMemoryInspectionRepository):
    async def update_share_state(self, inspection_id, owner_id, data):
        raise SupabaseError(
            status_code=403,
            message='permission denied for table inspections',
            hint='service key sk-secret-value',
        )


# =====================================================================
# Authentication
# =====================================================================


class TestAuthentication:
    @pytest.mark.asyncio
    @pytest.mark.parametrize('method', ['POST', 'DELETE', 'GET'])
    async def test_missing_token_is_401(self, method):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.request(method, f'/api/inspections/{inspection_id}/share')

        assert resp.status_code == 401
        assert resp.json() == {'error': 'Unauthorized'}
        assert repo.raw(inspection_id)['share_token'] is None

    @pytest.mark.asyncio
    async def test_bad_signature_is_401(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)
        forged = jwt.encode(
            {'sub': OWNER_ID, 'aud': 'authenticated', 'exp': int(time.time()) + 60},
            'some-other-secret-that-is-also-32-bytes-or-more',
            algorithm='HS256',
        )

        async with _client(app) as client:
            resp = await client.post(
                f'/api/inspections/{inspection_id}/share',
                headers={'Authorization': f'Bearer {forged}'},
            )

        assert resp.status_code == 401
        assert resp.json() == {'error': 'Unauthorized'}

    @pytest.mark.asyncio
    async def test_expired_token_is_401(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)
        expired = _access_token(OWNER_ID, exp=int(time.time()) - 60)

        async with _client(app) as client:
            resp = await client.get(
                f'/api/inspections/{inspection_id}/share',
                headers={'Authorization': f'Bearer {expired}'},
            )

        assert resp.status_code == 401

    @pytest.mark.asyncio
    async def test_session_cookie_is_accepted(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.get(
                f'/api/inspections/{inspection_id}/share',
                headers={'Cookie': f'sb-access-token={_access_token(OWNER_ID)}'},
            )

        assert resp.status_code == 200
        assert resp.json()['shareEnabled'] is False


# =====================================================================
# POST /api/inspections/{id}/share
# =====================================================================


class TestIssueRoute:
    @pytest.mark.asyncio
    async def test_issue_returns_url_on_request_origin(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.post(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )

        assert resp.status_code == 200
        body = resp.json()
        assert body['success'] is True
        assert len(body['shareToken']) == 64
        assert body['shareUrl'] == f'http://test/shared/inspection/{body["shareToken"]}'
        assert repo.raw(inspection_id)['share_token'] == body['shareToken']

    @pytest.mark.asyncio
    async def test_configured_base_url_with_trailing_slash(self):
        app, repo = _make_app(public_base_url='http://share.example.com/')
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.post(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )

        body = resp.json()
        assert body['shareUrl'] == (
            f'http://share.example.com/shared/inspection/{body["shareToken"]}'
        )

    @pytest.mark.asyncio
    async def test_foreign_inspection_is_404_not_403(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.post(
                f'/api/inspections/{inspection_id}/share', headers=_auth(STRANGER_ID),
            )

        assert resp.status_code == 404
        assert resp.json() == {'error': 'Inspection not found'}
        assert repo.raw(inspection_id)['share_enabled'] is False

    @pytest.mark.asyncio
    async def test_missing_inspection_is_404(self):
        app, _ = _make_app()

        async with _client(app) as client:
            resp = await client.post('/api/inspections/nope/share', headers=_auth())

        assert resp.status_code == 404
        assert resp.json() == {'error': 'Inspection not found'}

    @pytest.mark.asyncio
    async def test_store_rejection_is_generic_500(self):
        app, repo = _make_app(_RejectingRepo())
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.post(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )

        assert resp.status_code == 500
        assert resp.json() == {'error': 'Failed to generate share link'}
        assert 'permission denied' not in resp.text
        assert 'sk-secret-value' not in resp.text


# =====================================================================
# DELETE / GET /api/inspections/{id}/share
# =====================================================================


class TestRevokeAndStatusRoutes:
    @pytest.mark.asyncio
    async def test_status_when_never_shared(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.get(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )

        assert resp.status_code == 200
        assert resp.json() == {'shareEnabled': False, 'shareUrl': None, 'sharedAt': None}

    @pytest.mark.asyncio
    async def test_status_after_issue(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            issued = (await client.post(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )).json()
            resp = await client.get(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )

        body = resp.json()
        assert body['shareEnabled'] is True
        assert body['shareUrl'] == issued['shareUrl']
        assert body['sharedAt'] == repo.raw(inspection_id)['shared_at']

    @pytest.mark.asyncio
    async def test_delete_then_get_reports_disabled(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            issued = (await client.post(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )).json()
            deleted = await client.delete(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )
            status = await client.get(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )

        assert deleted.status_code == 200
        assert deleted.json() == {'success': True}
        assert status.json()['shareEnabled'] is False
        assert status.json()['shareUrl'] is None
        assert repo.raw(inspection_id)['share_token'] == issued['shareToken']

    @pytest.mark.asyncio
    async def test_delete_foreign_inspection_is_404(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.delete(
                f'/api/inspections/{inspection_id}/share', headers=_auth(STRANGER_ID),
            )

        assert resp.status_code == 404
        assert resp.json() == {'error': 'Inspection not found'}

    @pytest.mark.asyncio
    async def test_status_foreign_inspection_is_404(self):
        app, repo = _make_app()
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.get(
                f'/api/inspections/{inspection_id}/share', headers=_auth(STRANGER_ID),
            )

        assert resp.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_store_rejection_is_generic_500(self):
        app, repo = _make_app(_RejectingRepo())
        inspection_id = _seed(repo)

        async with _client(app) as client:
            resp = await client.delete(
                f'/api/inspections/{inspection_id}/share', headers=_auth(),
            )

        assert resp.status_code == 500
        assert resp.json() == {'error': 'Failed to disable sharing'}


# =====================================================================
# Store unreachable
# =====================================================================


STORED_ID = '6f1c9a52-3b7e-4d0a-9c1e-2a4b5c6d7e8f'


def _unreachable_on_write(request: httpx.Request) -> httpx.Response:
    if request.method == 'GET':
        return httpx.Response(200, json=[{
            'id': STORED_ID,
            'inspector_id': OWNER_ID,
            'share_token': None,
            'share_enabled': False,
            'shared_at': None,
        }])
    raise httpx.ConnectError('connection refused', request=request)


def _supabase_repo(handler) -> SupabaseInspectionRepository:
    return SupabaseInspectionRepository(SupabaseClient(
        supabase_url='https://abc.supabase.co',
        service_role_key='service-key-not-real',
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    ))


def _operations(operation: str, outcome: str) -> float:
    return REGISTRY.get_sample_value(
        'share_link_operations_total', {'operation': operation, 'outcome': outcome},
    ) or 0.0


class TestStoreUnreachable:
    @pytest.mark.asyncio
    async def test_issue_answers_operation_message(self):
        app, _ = _make_app(_supabase_repo(_unreachable_on_write))
        before = _operations('issue', 'store_error')

        async with _client(app) as client:
            resp = await client.post(f'/api/inspections/{STORED_ID}/share', headers=_auth())

        assert resp.status_code == 500
        assert resp.json() == {'error': 'Failed to generate share link'}
        assert resp.headers['x-request-id']
        assert _operations('issue', 'store_error') == before + 1

    @pytest.mark.asyncio
    async def test_revoke_answers_operation_message(self):
        app, _ = _make_app(_supabase_repo(_unreachable_on_write))

        async with _client(app) as client:
            resp = await client.delete(f'/api/inspections/{STORED_ID}/share', headers=_auth())

        assert resp.status_code == 500
        assert resp.json() == {'error': 'Failed to disable sharing'}

    @pytest.mark.asyncio
    async def test_read_failure_is_internal_error_with_request_id(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout('timed out', request=request)

        app, _ = _make_app(_supabase_repo(handler))
        before = _operations('status', 'store_error')

        async with _client(app) as client:
            resp = await client.get(f'/api/inspections/{STORED_ID}/share', headers=_auth())

        assert resp.status_code == 500
        assert resp.json() == {'error': 'Internal server error'}
        assert resp.headers['x-request-id']
        assert _operations('status', 'store_error') == before + 1
