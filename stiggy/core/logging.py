"""Logging for the bot.

Everything goes through the ``stiggy`` logger. The helpers write one line per
event with a leading tag (REQUEST, COMMAND, DB, ...) followed by ``key=value``
context such as the command, guild and user; context left as None is dropped
so lines for DMs carry no ``guild=None`` noise.
"""

import logging
import sys
from typing import Any

LOGGER_NAME = "stiggy"

# Chatty per-request INFO lines from the HTTP stack the Supabase client uses
_QUIET_LOGGERS = ("httpx", "httpcore", "hpack")


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the ``stiggy`` logger. Safe to call more than once."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger


logger = setup_logging()


def format_context(**context: Any) -> str:
    """``key=value`` pairs in call order, skipping None values."""
    return " ".join(f"{k}={v}" for k, v in context.items() if v is not None)


def _emit(level: int, tag: str, text: str, context: dict[str, Any], **kwargs: Any) -> None:
    line = " ".join(part for part in (tag, text, format_context(**context)) if part)
    logger.log(level, line, **kwargs)


def log_request(method: str, path: str, **context: Any) -> None:
    _emit(logging.INFO, "REQUEST", f"{method} {path}", context)


def log_response(method: str, path: str, status: int, duration_ms: float) -> None:
    _emit(
        logging.INFO,
        "RESPONSE",
        f"{method} {path}",
        {"status": status, "duration_ms": f"{duration_ms:.2f}"},
    )


def log_command(
    name: str,
    user_id: str | None,
    guild_id: str | None = None,
    **context: Any,
) -> None:
    """Log a slash command invocation (``guild`` is omitted for DMs)."""
    _emit(logging.INFO, "COMMAND", f"/{name}", {"user": user_id, "guild": guild_id, **context})


def log_error(message: str, exc: Exception | None = None, **context: Any) -> None:
    """Log an error; the traceback is attached when ``exc`` is given."""
    _emit(logging.ERROR, "ERROR", message, context, exc_info=exc)


def log_db_query(
    operation: str,
    table: str,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    timing = f"{duration_ms:.2f}" if duration_ms else None
    _emit(logging.DEBUG, "DB", operation, {"table": table, **context, "duration_ms": timing})


def log_external_call(
    service: str,
    operation: str,
    success: bool,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    timing = f"{duration_ms:.2f}" if duration_ms else None
    _emit(
        logging.INFO if success else logging.WARNING,
        "EXTERNAL",
        f"{service} {operation}",
        {"status": "success" if success else "failed", **context, "duration_ms": timing},
    )
