"""
Settings Module

Environment-driven configuration for the bill splitter service.

Values are read from environment variables once, after an optional .env
file next to the project has been loaded. Malformed numeric values fall
back to their defaults.

Environment variables:
    BILL_SPLITTER_TITLE: Service title (default: "Bill Splitter")
    BILL_SPLITTER_LOG_LEVEL: Logging level name (default: "INFO")
    BILL_SPLITTER_CURRENCY_SYMBOL: Symbol used in warnings (default: "$")
    BILL_SPLITTER_HOST: Bind address when run as a script (default: 127.0.0.1)
    BILL_SPLITTER_PORT: Bind port when run as a script (default: 8000)

Functions:
    get_settings: Build (once) and return the Settings.
    configure_logging: Install the service log handler.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[2]

# .env is optional; real environment variables take precedence
load_dotenv(dotenv_path=PROJECT_ROOT / ".env", override=False)

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def _get_str_env(key: str, default: str) -> str:
    val = os.environ.get(key, "").strip()
    return val or default


def _get_int_env(key: str, default: int) -> int:
    val = os.environ.get(key, "").strip()
    if not val:
        return default
    try:
        return int(val)
    except (ValueError, TypeError):
        return default


@dataclass(frozen=True)
class Settings:
    """Service settings."""
    title: str = "Bill Splitter"
    log_level: str = "INFO"
    currency_symbol: str = "$"
    host: str = "127.0.0.1"
    port: int = 8000


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Read settings from the environment. Cached; call get_settings.cache_clear() to reload."""
    return Settings(
        title=_get_str_env("BILL_SPLITTER_TITLE", Settings.title),
        log_level=_get_str_env("BILL_SPLITTER_LOG_LEVEL", Settings.log_level).upper(),
        currency_symbol=_get_str_env("BILL_SPLITTER_CURRENCY_SYMBOL", Settings.currency_symbol),
        host=_get_str_env("BILL_SPLITTER_HOST", Settings.host),
        port=_get_int_env("BILL_SPLITTER_PORT", Settings.port),
    )


def configure_logging(settings: Settings, name: str = "bill_splitter") -> logging.Logger:
    """
    Attach a stream handler to the named logger.

    Safe to call more than once: a handler is only added the first time.
    Unknown level names fall back to INFO.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    level = logging.getLevelName(settings.log_level)
    logger.setLevel(level if isinstance(level, int) else logging.INFO)
    return logger
