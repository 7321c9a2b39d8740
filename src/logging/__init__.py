"""Structured logging configuration using structlog."""

import logging
import re
import sys

import structlog

# Telegram bot tokens look like <bot_id>:<35 char secret>
_BOT_TOKEN_PATTERN = re.compile(r"(\d{8,12}:[A-Za-z0-9_-]{35})")

# Event keys carrying user coordinates; logged at roughly 100 m precision
_COORDINATE_KEYS = frozenset({"lat", "lng", "user_lat", "user_lng"})
_COORDINATE_DECIMALS = 3


class TokenRedactingFilter(logging.Filter):
    """Filter that redacts bot tokens from stdlib log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg and isinstance(record.msg, str):
            record.msg = _BOT_TOKEN_PATTERN.sub("<BOT_TOKEN_REDACTED>", record.msg)
        if record.args:
            record.args = tuple(
                _BOT_TOKEN_PATTERN.sub("<BOT_TOKEN_REDACTED>", arg)
                if isinstance(arg, str)
                else arg
                for arg in record.args
            )
        return True


def _redact_tokens(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Structlog processor to redact bot tokens from event dictionaries."""
    for key, value in list(event_dict.items()):
        if isinstance(value, str):
            event_dict[key] = _BOT_TOKEN_PATTERN.sub("<BOT_TOKEN_REDACTED>", value)
    return event_dict


def _coarsen_coordinates(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Structlog processor that rounds user coordinates before they are written."""
    for key in _COORDINATE_KEYS.intersection(event_dict):
        value = event_dict[key]
        if isinstance(value, float):
            event_dict[key] = round(value, _COORDINATE_DECIMALS)
    return event_dict


def setup_logging(log_level: str = "INFO") -> None:
    """Configure structured logging for the application."""
    level = getattr(logging, log_level.upper())
    token_filter = TokenRedactingFilter()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(token_filter)
    root_logger.addHandler(handler)

    # Library loggers that may print request URLs containing the token
    for logger_name in ("httpx", "httpcore", "telegram"):
        logging.getLogger(logger_name).addFilter(token_filter)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _redact_tokens,
            _coarsen_coordinates,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
