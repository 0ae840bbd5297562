"""Structlog setup shared by the HTTP app and the Lambda handlers.

Console rendering is used on a terminal (or with FORCE_COLOR), JSON lines
everywhere else so CloudWatch and container collectors can parse events.
Delegated credential material is scrubbed from every event before rendering.
"""

import logging
import os
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE_NAME = "tenant-infra-provisioner"

REDACTED = "***"
SECRET_KEYS = frozenset(
    {
        "secret_access_key",
        "session_token",
        "SecretAccessKey",
        "SessionToken",
        "password",
    }
)


def redact_secrets(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace credential values in an event with a placeholder."""
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def add_service_name(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _wants_colors() -> bool:
    # FORCE_COLOR=1 keeps colors in non-TTY shells such as docker compose
    if os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes"):
        return True
    return sys.stdout.isatty()


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for the current process.

    Args:
        level: Minimum level name. Defaults to PROVISIONER_LOG_LEVEL, then INFO.
    """
    level_name = (level or os.environ.get("PROVISIONER_LOG_LEVEL", "INFO")).upper()
    min_level = logging.getLevelNamesMapping().get(level_name, logging.INFO)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_service_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_secrets,
    ]

    if _wants_colors():
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.extend(
            [
                structlog.processors.dict_tracebacks,
                structlog.processors.JSONRenderer(),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
