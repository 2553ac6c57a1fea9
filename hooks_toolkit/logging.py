from __future__ import annotations

"""
Structured logging setup for hooks-toolkit.

This module configures **structlog** + the stdlib ``logging`` package so that:
- Toolchain output, fee estimates and submission attempts are emitted as
  structured events (console renderer by default, JSON on request).
- Signing secrets never reach a log line (see ``_redact_secrets``).
- Log level & format are configurable via arguments or environment variables.

Quick start
-----------
    from hooks_toolkit.logging import setup_logging, get_logger

    setup_logging()  # call once on process start (the CLI does this)
    log = get_logger(__name__)
    log.info("stage_finished", stage="compile", returncode=0)

Environment
-----------
- HOOKS_LOG_LEVEL: one of DEBUG, INFO, WARNING, ERROR (default: INFO)
- HOOKS_LOG_FORMAT: "console" (default) or "json"
"""

import logging
import os
from typing import Any, Dict, Iterable, Optional

import structlog
from structlog.contextvars import merge_contextvars
from structlog.processors import JSONRenderer


# ------------------------------ Redaction ------------------------------------


REDACT_KEYS = {"secret", "seed", "signing_secret", "password", "api_key"}


def _redact_secrets(_: logging.Logger, __: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Processor that redacts sensitive values for well-known keys.
    """
    for k in list(event_dict.keys()):
        if k.lower() in REDACT_KEYS and event_dict[k] is not None:
            event_dict[k] = "***"
    return event_dict


# ------------------------------ Setup ----------------------------------------


def _base_processors() -> Iterable:
    yield structlog.stdlib.add_log_level
    yield structlog.processors.TimeStamper(fmt="iso", utc=True)
    yield merge_contextvars
    yield structlog.processors.StackInfoRenderer()
    yield structlog.processors.format_exc_info
    yield _redact_secrets
    yield structlog.processors.UnicodeDecoder()


def setup_logging(
    *,
    level: Optional[str | int] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Configure structlog + stdlib logging. Safe to call more than once; the
    root handler is replaced each time.
    """
    env_level = os.getenv("HOOKS_LOG_LEVEL", "").upper() or None
    env_format = os.getenv("HOOKS_LOG_FORMAT", "").lower() or None

    level = level or env_level or "INFO"
    if isinstance(level, str):
        level = level.upper()
    log_format = (log_format or env_format or "console").lower()

    processors = list(_base_processors())

    if log_format == "json":
        renderer = JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False, sort_keys=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            *processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                *processors,
            ],
        )
    )

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    root.addHandler(handler)

    # httpx logs every request at INFO
    logging.getLogger("httpcore").setLevel(os.getenv("HOOKS_LOG_LEVEL_HTTPCORE", "WARNING"))
    logging.getLogger("httpx").setLevel(os.getenv("HOOKS_LOG_LEVEL_HTTPX", "WARNING"))


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Return a lazy structlog logger named after `name`.

    The proxy resolves configuration on first use, so module-level loggers
    pick up whatever `setup_logging` installs later.
    """
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


__all__ = [
    "setup_logging",
    "get_logger",
]
