"""Share token and share-state model.

A share token is a capability: 32 bytes from ``secrets``, hex encoded. It is
stored in ``inspections.share_token`` and only means something while
``share_enabled`` is true. Rotation overwrites the column, so the previous
token stops resolving in the same update that writes the new one.
"""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any

TOKEN_BYTES = 32
TOKEN_LENGTH = TOKEN_BYTES * 2
TOKEN_PREFIX_LENGTH = 8

_TOKEN_SHAPE = re.compile(rf'[0-9a-f]{{{TOKEN_LENGTH}}}')


def generate_share_token() -> str:
    """Return a new 256-bit token as 64 lowercase hex characters."""
    return secrets.token_hex(TOKEN_BYTES)


def is_well_formed_token(token: str | None) -> bool:
    return bool(token) and _TOKEN_SHAPE.fullmatch(token) is not None


def redact_token(token: str | None) -> str:
    """Shorten a token to a log-safe prefix."""
    if not token or len(token) < TOKEN_PREFIX_LENGTH:
        return '<redacted>'
    return f'{token[:TOKEN_PREFIX_LENGTH]}...'


@dataclass(frozen=True, slots=True)
class ShareState:
    """The sharing columns of one inspection row."""

    inspection_id: str
    inspector_id: str
    share_token: str | None
    share_enabled: bool
    shared_at: str | None

    @property
    def is_active(self) -> bool:
        return self.share_enabled and bool(self.share_token)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ShareState:
        return cls(
            inspection_id=str(row['id']),
            inspector_id=str(row.get('inspector_id') or ''),
            share_token=row.get('share_token'),
            share_enabled=row.get('share_enabled') is True,
            shared_at=row.get('shared_at'),
        )


@dataclass(frozen=True, slots=True)
class ShareLinkIssued:
    share_url: str
    share_token: str
    shared_at: datetime


@dataclass(frozen=True, slots=True)
class ShareStatus:
    share_enabled: bool
    share_url: str | None
    shared_at: str | None
