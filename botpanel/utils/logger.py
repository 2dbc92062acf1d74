"""Structured logging setup using structlog"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from botpanel.config import settings

# Loggers that stay at ERROR whatever LOG_LEVEL says; requests are logged by our own middleware
QUIET_LOGGERS = (
    "uvicorn.access",
    "uvicorn.error",
    "apscheduler",
    "aiohttp",
    "httpx",
    "httpcore",
    "asyncio",
    "multipart",
)

# Loggers that follow LOG_LEVEL but never go below WARNING
CHATTY_LOGGERS = ("aiogram", "aiogram.event", "aiogram.dispatcher")


def resolve_log_level(name: Optional[str]) -> int:
    """Map a LOG_LEVEL name to a logging level, ERROR when unknown"""
    level = logging.getLevelName((name or "").upper())
    return level if isinstance(level, int) else logging.ERROR


def configure_third_party_loggers(log_level: int) -> Dict[str, int]:
    """Quiet library loggers; returns the level applied to each"""
    levels = {name: logging.ERROR for name in QUIET_LOGGERS}
    levels.update({name: max(log_level, logging.WARNING) for name in CHATTY_LOGGERS})

    for name, level in levels.items():
        logging.getLogger(name).setLevel(level)
    return levels


def configure_logging(log_level: Optional[str] = None):
    """JSON logs on stdout; level from settings unless given"""
    level = resolve_log_level(log_level or settings.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)
    configure_third_party_loggers(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def truncate_for_log(text: str, max_length: int = 80) -> str:
    """
    Shorten free-form text (command input, log details) before logging it.

    Args:
        text: Text to shorten
        max_length: Maximum length including the ellipsis

    Returns:
        The text unchanged if short enough, otherwise cut with a trailing ellipsis
    """
    if text is None:
        return ""
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


configure_logging()
