"""
Anchor Proof Verifier - Logging Configuration

Every event carries the service identity (name, version, environment) so
verdicts from several deployments can be told apart in one log stream.
Per-request context such as the transaction under analysis is bound via
structlog contextvars.
"""

import logging
import sys
from typing import Any

import structlog

from proofcheck.core.config import settings

# Transport loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def add_service_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add service identity to an event without overriding bound values."""
    event_dict.setdefault("service", settings.APP_NAME)
    event_dict.setdefault("version", settings.VERSION)
    event_dict.setdefault("env", settings.ENV)
    return event_dict


def setup_logging() -> None:
    """Configure structured logging for the verifier."""
    use_json = settings.ENV == "production"

    processors = [
        structlog.contextvars.merge_contextvars,
        add_service_context,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if use_json:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )

    transport_level = logging.DEBUG if settings.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
