"""Structured JSON logging for the Game Pass API.

Loguru is the single sink; stdlib loggers (uvicorn, SQLAlchemy, alembic,
httpx) are routed into it. Claims bind their identity with
:func:`claim_log_context` so ledger, wallet, and delivery records emitted
underneath carry the same ``claim_request_id``.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from logging import LogRecord
from typing import Any, Dict, Iterator
from uuid import UUID, uuid4

from loguru import logger
from opentelemetry import trace


_STDLIB_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

# Credentials that may reach ``extra`` via bound context or bridged records.
_REDACTED_KEYS = frozenset({"api_key", "authorization", "x_api_key", "character_delivery_api_key"})

_QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "aiosqlite": logging.WARNING,
    # The character delivery bridge logs every request at INFO.
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


class InterceptHandler(logging.Handler):
    """Route stdlib logging records through Loguru, keeping their ``extra`` fields."""

    def emit(self, record: LogRecord) -> None:  # pragma: no cover - bridging glue
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = record.msg if isinstance(record.msg, str) else str(record.msg)

        extra = {key: value for key, value in record.__dict__.items() if key not in _STDLIB_RECORD_ATTRS}
        bound = logger.bind(**extra) if extra else logger
        bound.opt(depth=6, exception=record.exc_info).log(level, message.replace("{", "{{").replace("}", "}}"))


def _redact(values: Dict[str, Any]) -> Dict[str, Any]:
    return {key: "[redacted]" if key.lower() in _REDACTED_KEYS else value for key, value in values.items()}


def _serialize_log(message: "logger.Message", metadata: Dict[str, Any]) -> None:
    record = message.record
    span_context = trace.get_current_span().get_span_context()

    payload: Dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name.lower(),
        "message": record["message"],
        "logger": record["name"],
        "service": metadata["service_name"],
        "environment": metadata["environment"],
        "version": metadata["version"],
    }

    if span_context.is_valid:
        payload["trace_id"] = f"{span_context.trace_id:032x}"
        payload["span_id"] = f"{span_context.span_id:016x}"

    if record["exception"] is not None:
        payload["exception"] = repr(record["exception"].value)

    if record["extra"]:
        payload.update(_redact(record["extra"]))

    print(json.dumps(payload, default=str))


@contextmanager
def claim_log_context(user_id: UUID, *, day: int, tier: str) -> Iterator[str]:
    """Bind one claim's identity to every record logged inside the block.

    Yields the generated ``claim_request_id`` so callers can echo it.
    """

    claim_request_id = uuid4().hex
    with logger.contextualize(
        claim_request_id=claim_request_id,
        user_id=str(user_id),
        day=day,
        tier=tier,
    ):
        yield claim_request_id


def configure_logging(*, service_name: str, environment: str, version: str, level: str = "INFO") -> None:
    """Install the JSON sink and bridge stdlib logging into it."""

    logger.remove()
    metadata = {"service_name": service_name, "environment": environment, "version": version}
    logger.add(lambda message: _serialize_log(message, metadata), level=level, backtrace=False, diagnose=False)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


__all__ = ["InterceptHandler", "claim_log_context", "configure_logging"]
