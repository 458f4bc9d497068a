"""Async PostgREST client for the hosted inspection store.

All Supabase HTTP traffic from the repositories goes through here. Only the
row-level ``select`` and ``update`` verbs are needed: inspection rows are
created and deleted by the inspection CRUD subsystem, not by this service.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

import httpx

from .errors import (
    SupabaseAuthError,
    SupabaseConflictError,
    SupabaseError,
    SupabaseNotFoundError,
    SupabaseUnavailableError,
)

DEFAULT_TIMEOUT_SECONDS = 30.0

# Pooled client shared by every SupabaseClient built without an explicit one.
_shared_async_client: httpx.AsyncClient | None = None


def _get_shared_async_client() -> httpx.AsyncClient:
    global _shared_async_client
    if _shared_async_client is None:
        _shared_async_client = httpx.AsyncClient()
    return _shared_async_client


async def close_shared_async_client() -> None:
    """Close the pooled client (app shutdown)."""
    global _shared_async_client
    if _shared_async_client is not None:
        await _shared_async_client.aclose()
        _shared_async_client = None


@dataclass(frozen=True, slots=True)
class PostgrestFilter:
    column: str
    op: str
    value: Any


Filters = Sequence[PostgrestFilter] | Mapping[str, tuple[str, Any] | Any] | None


def _encode_filter_value(op: str, value: Any) -> str:
    if op == "is":
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    if op == "in":
        if not isinstance(value, (list, tuple, set, frozenset)):
            raise ValueError("in operator requires an iterable of values")
        items = []
        for v in value:
            if isinstance(v, str):
                items.append(json.dumps(v))
            elif v is None:
                items.append("null")
            else:
                items.append(str(v))
        return f"({','.join(items)})"

    if value is None:
        raise ValueError(f"{op} does not support None; use op='is' with value=None")

    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _filters_to_params(filters: Filters) -> dict[str, str]:
    if not filters:
        return {}

    pairs: Iterable[tuple[str, str, Any]]
    if isinstance(filters, Mapping):
        expanded = []
        for col, spec in filters.items():
            if isinstance(spec, tuple) and len(spec) == 2:
                op, val = spec
            else:
                op, val = "eq", spec
            expanded.append((str(col), str(op), val))
        pairs = expanded
    else:
        pairs = [(f.column, f.op, f.value) for f in filters]

    return {col: f"{op}.{_encode_filter_value(op, val)}" for col, op, val in pairs}


def _error_class_for(status_code: int) -> type[SupabaseError]:
    if status_code in (401, 403):
        return SupabaseAuthError
    if status_code == 404:
        return SupabaseNotFoundError
    if status_code == 409:
        return SupabaseConflictError
    return SupabaseError


class SupabaseClient:
    """Service-role PostgREST client returning plain row dicts."""

    def __init__(
        self,
        *,
        supabase_url: str,
        service_role_key: str,
        schema: str = "public",
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not supabase_url:
            raise ValueError("supabase_url is required")
        if not service_role_key:
            raise ValueError("service_role_key is required")

        self._supabase_url = supabase_url.rstrip("/")
        self._service_role_key = service_role_key
        self._schema = schema or "public"
        self._timeout_seconds = float(timeout_seconds)
        self._client = http_client or _get_shared_async_client()

    @property
    def base_rest_url(self) -> str:
        return f"{self._supabase_url}/rest/v1"

    def _headers(self, method: str) -> dict[str, str]:
        # Never log these headers.
        headers = {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
            "Accept-Profile": self._schema,
        }
        if method != "GET":
            headers["Content-Profile"] = self._schema
            headers["Prefer"] = "return=representation"
        return headers

    def _raise_for_error(self, resp: httpx.Response) -> None:
        if resp.status_code < 400:
            return

        message = resp.text
        code = details = hint = None
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            message = payload.get("message") or message
            code = payload.get("code")
            details = payload.get("details")
            hint = payload.get("hint")

        raise _error_class_for(resp.status_code)(
            status_code=resp.status_code,
            message=message,
            code=code,
            details=details,
            hint=hint,
        )

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str],
        json_body: Mapping[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        try:
            resp = await self._client.request(
                method,
                f"{self.base_rest_url}/{table}",
                params=params,
                json=json_body,
                headers=self._headers(method),
                timeout=self._timeout_seconds,
            )
        except httpx.HTTPError as exc:
            raise SupabaseUnavailableError(
                status_code=503,
                message=f"{method} {table} failed: {type(exc).__name__}",
            ) from exc
        self._raise_for_error(resp)
        payload = resp.json()
        if not isinstance(payload, list):
            raise SupabaseError(
                status_code=500,
                message=f"expected list response from {method} {table}",
            )
        return payload

    async def select(
        self,
        table: str,
        filters: Filters = None,
        *,
        columns: str = "*",
        limit: int | None = None,
        order: str | None = None,
    ) -> list[dict[str, Any]]:
        params = _filters_to_params(filters)
        params["select"] = columns
        if limit is not None:
            params["limit"] = str(int(limit))
        if order:
            params["order"] = order
        return await self._request("GET", table, params=params)

    async def update(
        self,
        table: str,
        filters: Filters,
        data: Mapping[str, Any],
    ) -> list[dict[str, Any]]:
        params = _filters_to_params(filters)
        if not params:
            # PostgREST would patch every row in the table.
            raise ValueError("update requires at least one filter")
        return await self._request("PATCH", table, params=params, json_body=data)
