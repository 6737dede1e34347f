"""Structured logging utilities."""

import logging
import sys
from typing import Any

# Context fields that may carry registry credentials
SECRET_FIELDS = frozenset({"password", "secret", "auth", "identitytoken", "registrytoken"})

MASK = "***"


class StructuredFormatter(logging.Formatter):
    """Formatter that appends context fields as key=value pairs.

    Values of credential fields are masked.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        fields = getattr(record, "extra_fields", None)
        if not fields:
            return message
        pairs = " ".join(
            f"{k}={MASK if k.lower() in SECRET_FIELDS else v}" for k, v in fields.items()
        )
        return f"{message} {pairs}"


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    structured: bool = False,
) -> None:
    """Configure logging for crtkit.

    Replaces any handler installed by a previous call.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        structured: Include timestamp, logger name and context fields
    """
    if format_string is None:
        if structured:
            format_string = "%(asctime)s %(levelname)s %(name)s %(message)s"
        else:
            format_string = "%(levelname)s: %(message)s"

    handler = logging.StreamHandler(sys.stderr)
    formatter_class = StructuredFormatter if structured else logging.Formatter
    handler.setFormatter(formatter_class(format_string))

    logger = logging.getLogger("crtkit")
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers = [handler]
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the crtkit namespace.

    Args:
        name: Module name (prefixed with crtkit if needed)
    """
    if not name.startswith("crtkit"):
        name = f"crtkit.{name}"
    return logging.getLogger(name)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that attaches fixed context fields to every record.

    Fields passed per call through ``extra={"extra_fields": {...}}`` are
    merged over the fixed ones.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["extra_fields"] = {**self.extra, **extra.get("extra_fields", {})}
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger_with_context(name: str, **context: Any) -> ContextLogger:
    """Get a logger that tags records with context fields.

    Example:
        log = get_logger_with_context(__name__, runtime="podman")
        log.debug("inspect_image %s", ref)
    """
    return ContextLogger(get_logger(name), context)
