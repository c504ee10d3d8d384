"""Structured logging configuration for enrollgate.

Environment variables:
    EG_LOG_FORMAT  -- ``json`` for one JSON object per line, ``text`` (default) otherwise.
    EG_LOG_LEVEL   -- Python log level name (default: ``INFO``).

Request and audit fields (``request_id``, ``identity``, ``reason``...) are
passed through ``extra=`` and end up as top-level keys in JSON mode.
"""

from __future__ import annotations

import logging
import os
import traceback
from typing import Any

from pythonjsonlogger.json import JsonFormatter


def _is_json_mode() -> bool:
    return os.environ.get("EG_LOG_FORMAT", "text").lower() == "json"


def _get_log_level() -> int:
    """Return the numeric log level from EG_LOG_LEVEL (default INFO)."""
    numeric = getattr(logging, os.environ.get("EG_LOG_LEVEL", "INFO").upper(), None)
    return numeric if isinstance(numeric, int) else logging.INFO


class StructuredJsonFormatter(JsonFormatter):
    """JSON formatter that reports exceptions as a ``traceback`` list field."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.pop("exc_info", None)
        if record.exc_info and record.exc_info[1] is not None:
            log_record["traceback"] = traceback.format_exception(*record.exc_info)


def setup_logging() -> None:
    """Configure the root logger according to EG_LOG_FORMAT and EG_LOG_LEVEL."""
    level = _get_log_level()
    root = logging.getLogger()
    root.setLevel(level)
    # Repeated setup (tests, reload) must not stack handlers.
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(level)
    if _is_json_mode():
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    root.addHandler(handler)


def log_startup_info() -> None:
    """Log the effective gateway configuration once, at startup."""
    import enrollgate
    from enrollgate.config import settings

    logger = logging.getLogger("enrollgate")
    secret_configured = bool(os.environ.get("EG_JWT_SECRET", settings.jwt_secret))
    if not secret_configured:
        logger.warning("EG_JWT_SECRET not set, signing tokens with insecure dev default")

    logger.info(
        "enrollgate started",
        extra={
            "version": enrollgate.__version__,
            "token_ttl_seconds": settings.token_ttl_seconds,
            "jwt_secret_status": "configured" if secret_configured else "dev-default",
            "protect_user_reset": settings.protect_user_reset,
            "redact_user_passwords": settings.redact_user_passwords,
        },
    )
