"""Structured logging for recordcast

The library only emits events; applications decide where they go.
configure_logging() wires the ``recordcast`` logger hierarchy to a
stream with either colored console output or one JSON object per line.

Field values can carry credentials or large payloads, so every event
passes through key redaction and value truncation before rendering.
"""
import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor

from recordcast import __version__

LIBRARY_LOGGER = "recordcast"

SENSITIVE_KEYS = frozenset({"password", "token", "secret", "authorization", "cookie", "api_key"})
MAX_VALUE_LENGTH = 512

# Silent until the application (or configure_logging) attaches a handler.
logging.getLogger(LIBRARY_LOGGER).addHandler(logging.NullHandler())


def _redact(obj: Any, depth: int = 0) -> Any:
    if depth > 5:
        return obj
    if isinstance(obj, dict):
        return {
            k: "[REDACTED]" if isinstance(k, str) and k.lower() in SENSITIVE_KEYS else _redact(v, depth + 1)
            for k, v in obj.items()
        }
    if isinstance(obj, (list, tuple)):
        return [_redact(item, depth + 1) for item in obj]
    return obj


def _censor_sensitive_keys(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that redacts values stored under sensitive keys, at any depth."""
    return _redact(event_dict)


def _truncate_long_values(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Processor that shortens oversized string values."""
    for key, value in event_dict.items():
        if isinstance(value, str) and len(value) > MAX_VALUE_LENGTH:
            event_dict[key] = f"{value[:MAX_VALUE_LENGTH]}... ({len(value)} chars)"
    return event_dict


def _add_library_info(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict.setdefault("library", LIBRARY_LOGGER)
    event_dict.setdefault("version", __version__)
    return event_dict


def get_shared_processors() -> list[Processor]:
    """Processors applied to structlog and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_library_info,
        _truncate_long_values,
        _censor_sensitive_keys,
    ]


def _make_renderer(json_logs: bool) -> Processor:
    if json_logs:
        return structlog.processors.JSONRenderer(default=repr)
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.plain_traceback,
    )


def configure_logging(
    level: str | None = None,
    json_logs: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route recordcast events to ``stream`` (stdout by default).

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL. Defaults to Settings.LOG_LEVEL.
        json_logs: JSON lines if True, colored console output if False.
            Defaults to Settings.LOG_JSON.
        stream: Destination for rendered events.

    Only the ``recordcast`` logger is touched; the root logger and other
    libraries keep whatever the application configured.
    """
    from recordcast.core.config import get_settings

    settings = get_settings()
    level = level if level is not None else settings.LOG_LEVEL
    json_logs = json_logs if json_logs is not None else settings.LOG_JSON

    shared_processors = get_shared_processors()
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _make_renderer(json_logs),
        ],
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(formatter)

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    library_logger.handlers = [handler]
    library_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    library_logger.propagate = False


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structured logger backed by the stdlib logger ``name``.

    Events go through stdlib levels and handlers, so an unconfigured
    library stays quiet and an application's logging setup applies.

    Args:
        name: Logger name, normally inside the ``recordcast`` hierarchy
    """
    return structlog.wrap_logger(logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger)


def bind_context(**kwargs) -> None:
    """Bind key-value pairs to every event logged from the current context.

    Useful to tag all events of one validate call, e.g. with a record id.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


class LoggerRegistry:
    """One logger per library component, created on first use."""

    _loggers: dict[str, structlog.stdlib.BoundLogger] = {}

    @classmethod
    def get(cls, component: str) -> structlog.stdlib.BoundLogger:
        if component not in cls._loggers:
            cls._loggers[component] = get_logger(f"{LIBRARY_LOGGER}.{component}")
        return cls._loggers[component]


def engine_logger() -> structlog.stdlib.BoundLogger:
    """Logger for validation runs and schema configuration errors."""
    return LoggerRegistry.get("engine")


def registry_logger() -> structlog.stdlib.BoundLogger:
    """Logger for type and parameter registrations."""
    return LoggerRegistry.get("registry")
