"""Structured logging.

``configure_logging`` is called once by the application factory. Components never
touch handlers themselves: they receive a bound logger from ``get_logger`` and
emit ``logger.info("event_name", key=value)``.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, Optional

import sentry_sdk
import structlog
from pythonjsonlogger.json import JsonFormatter
from sentry_sdk.integrations.logging import LoggingIntegration

_NOISY_LOGGERS = ("urllib3", "botocore", "boto3", "s3transfer", "werkzeug")


class _JsonFormatter(JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def configure_logging(
    level: str = "INFO",
    fmt: str = "json",
    *,
    sentry_dsn: Optional[str] = None,
    environment: str = "development",
) -> None:
    log_level = getattr(logging, str(level).upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(_JsonFormatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s %(extra_kv)s"))
        handler.addFilter(_ExtraKeyValueFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if sentry_dsn:
        sentry_sdk.init(
            dsn=sentry_dsn,
            environment=environment,
            integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        )


class _ExtraKeyValueFilter(logging.Filter):
    """Render structlog's extra keys as ``k=v`` pairs for the console format."""

    _STANDARD = set(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime", "extra_kv"}

    def filter(self, record: logging.LogRecord) -> bool:
        extras = {k: v for k, v in vars(record).items() if k not in self._STANDARD}
        record.extra_kv = " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
        return True


def get_logger(name: Optional[str] = None) -> Any:
    return structlog.get_logger(name or "connect_hub")


def bind_request_context(**values: Any) -> None:
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
