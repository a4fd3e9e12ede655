"""Structured logging configuration with structlog.

Every pipeline invocation runs inside `job_context`, so all events it emits
carry the job name and a short run id:

    with job_context("work"):
        await worker.run()
"""

import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from narrative.config import Settings

_SECRET_FIELDS = frozenset({"apikey", "api_key", "authorization", "token", "secret"})


def _redact_secrets(
    logger: object, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    for key in event_dict.keys() & _SECRET_FIELDS:
        event_dict[key] = "***"
    return event_dict


def setup_logging(settings: "Settings") -> None:
    """Configure structlog and stdlib logging for the process."""
    level = getattr(logging, settings.log_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.env == "development":
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # uvicorn, apscheduler and asyncpg log through the stdlib
    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # httpx logs request URLs at INFO, and Twelve Data takes its key as a query param
    for name in ("httpx", "httpcore", "apscheduler"):
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def job_context(job: str) -> Iterator[str]:
    """Bind `job` and a fresh `run_id` to every log event in the block."""
    run_id = uuid.uuid4().hex[:8]
    with structlog.contextvars.bound_contextvars(job=job, run_id=run_id):
        yield run_id


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
