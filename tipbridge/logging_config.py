"""
Logging for the tip service.

Module loggers (``logging.getLogger(__name__)``) and the structlog event
loggers (``tipbridge.http``, ``tipbridge.settlement``) share one stdout
handler. Every line inside a settlement attempt carries the attempt id, the
source chain and the chain family through contextvars.
"""

import logging
import sys
from typing import Any, ContextManager, List, MutableMapping, Optional

import structlog

from .config import settings


PACKAGE_LOGGER = "tipbridge"

# Chatty at INFO: one line per HTTP call made while polling receipts
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")

# Event keys that can hold wallet signatures, signed payloads or session tokens
SECRET_KEYS = frozenset({"signature", "signed_transaction", "token", "authorization"})
REDACTED = "[redacted]"


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def _use_json(level: int, log_format: str) -> bool:
    log_format = log_format.lower()
    if log_format in ("json", "console"):
        return log_format == "json"
    return level != logging.DEBUG


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Route stdlib and structlog output through one renderer.

    Args:
        log_level: Override ``settings.log_level``.
        log_format: Override ``settings.log_format``.
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    json_logs = _use_json(level, log_format or settings.log_format)

    shared: List[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_secrets,
    ]
    if json_logs:
        shared.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_event_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Structured event logger under the package namespace."""
    return structlog.stdlib.get_logger(f"{PACKAGE_LOGGER}.{component}")


def bind_attempt(attempt_id: str, *, source_chain: int, family: str) -> ContextManager[Any]:
    """Tag every log line inside the block with one settlement attempt."""
    return structlog.contextvars.bound_contextvars(
        attempt_id=attempt_id,
        source_chain=source_chain,
        family=family,
    )


__all__ = [
    "QUIET_LOGGERS",
    "SECRET_KEYS",
    "bind_attempt",
    "get_event_logger",
    "redact_secrets",
    "setup_logging",
]
