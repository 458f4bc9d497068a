"""Structured logging for the share service.

structlog renders JSON lines (console output in dev). Two processors run on
every entry, including stdlib records routed through the formatter:

  - ``_add_request_id`` stamps the id of the request being served.
  - ``redact_share_tokens`` cuts any 64-hex share token down to its
    8-character prefix, so a token passed as a field, embedded in a path,
    or echoed in an exception message never reaches the output.

Usage::

    from inspection_share.app.observability import configure_logging, get_logger

    configure_logging(level="INFO", json_output=True)  # once, at startup
    logger = get_logger(__name__)
    logger.info("share_link_issued", inspection_id=inspection_id)
"""

from __future__ import annotations

import logging
import re
import sys
from contextvars import ContextVar
from typing import Any

import structlog

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

_SHARE_TOKEN = re.compile(r"(?<![0-9a-f])([0-9a-f]{8})[0-9a-f]{56}(?![0-9a-f])")

_configured = False


def _add_request_id(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    rid = request_id_ctx.get()
    if rid is not None:
        event_dict["request_id"] = rid
    return event_dict


def _redact(value: Any) -> Any:
    if isinstance(value, str):
        return _SHARE_TOKEN.sub(r"\1...", value)
    if isinstance(value, dict):
        return {k: _redact(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_redact(v) for v in value]
    if type(value) is tuple:
        return tuple(_redact(v) for v in value)
    return value


def redact_share_tokens(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> dict:
    """Replace share tokens in every string field with their prefix."""
    return {key: _redact(value) for key, value in event_dict.items()}


def configure_logging(*, level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog and route stdlib logging through it. Idempotent."""
    global _configured
    if _configured:
        return
    _configured = True

    # format_exc_info runs before redaction so tracebacks are scrubbed too.
    pre_chain: list = [
        structlog.contextvars.merge_contextvars,
        _add_request_id,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        redact_share_tokens,
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.JSONRenderer()
            if json_output
            else structlog.dev.ConsoleRenderer(colors=False),
        ],
    ))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Access lines carry raw /api/shared/inspections/<token> paths.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
