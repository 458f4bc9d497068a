"""Logging, request correlation and Prometheus metrics."""

from .logging import configure_logging, get_logger, redact_share_tokens, request_id_ctx
from .metrics import SHARE_LINK_OPERATIONS_TOTAL, metrics_text

__all__ = [
    "SHARE_LINK_OPERATIONS_TOTAL",
    "configure_logging",
    "get_logger",
    "metrics_text",
    "redact_share_tokens",
    "request_id_ctx",
]
