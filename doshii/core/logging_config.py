"""
Logging configuration for the Doshii client.

This module sets up logging with:
- Console handler with coloured output in debug mode
- Optional rotating file handler
- Structured JSON logs for production file output
- Quieter third-party loggers
"""

import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from doshii.core.config import Settings, get_settings

# LogRecord attributes that are not user supplied extras
_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
    "asctime",
}


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colours the level name on terminals.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        formatted = super().format(record)

        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{reset}", 1)

        return formatted


class StructuredFormatter(logging.Formatter):
    """
    Formatter for structured JSON logging.
    Useful for log shippers such as the ELK stack.

    Args:
        settings: Settings whose app name, version and environment are
            stamped on every record. Defaults to the cached settings
    """

    def __init__(self, settings: Optional[Settings] = None, **kwargs):
        super().__init__(**kwargs)
        self.settings = settings

    def format(self, record):
        """
        Render the record as one JSON document.

        Args:
            record: LogRecord to format

        Returns:
            str: JSON encoded message
        """
        settings = self.settings if self.settings is not None else get_settings()
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "app_name": settings.APP_NAME,
            "app_version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS}
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, default=str)


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure logging for applications embedding the client.
    """
    settings = settings or get_settings()

    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_configuration(settings))
    configure_specific_loggers()

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured - Level: {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.info(f"Writing logs to: {settings.LOG_FILE_PATH}")


def get_logging_configuration(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Build the dictConfig mapping.

    Returns:
        Dict: Logging configuration
    """
    settings = settings or get_settings()

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": ("%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "colored": {
                "()": ColoredFormatter,
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": StructuredFormatter, "settings": settings},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.LOG_LEVEL,
                "formatter": "colored" if settings.DEBUG else "standard",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "doshii": {
                "level": "DEBUG" if settings.DEBUG else settings.LOG_LEVEL,
                "propagate": True,
            },
        },
        "root": {"level": settings.LOG_LEVEL, "handlers": ["console"]},
    }

    file_config = settings.get_logging_config()
    if file_config["file_path"]:
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": file_config["level"],
            # JSON lines in production, human readable elsewhere
            "formatter": "json" if settings.is_production else "detailed",
            "filename": file_config["file_path"],
            "maxBytes": file_config["max_size_mb"] * 1024 * 1024,
            "backupCount": file_config["backup_count"],
            "encoding": "utf-8",
        }
        config["root"]["handlers"].append("file")

    return config


def configure_specific_loggers() -> None:
    """
    Turn down noisy third-party loggers.
    """
    for logger_name in ["aiohttp.access", "aiohttp.client", "aiohttp.internal", "asyncio"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def log_api_call(method: str, url: str, status_code: int, duration: float, **kwargs):
    """
    Log one call to the Doshii API.

    Args:
        method: HTTP method
        url: Request path or URL
        status_code: Response status
        duration: Duration in seconds
        **kwargs: Extra structured fields
    """
    logger = logging.getLogger("doshii.api.call")

    extra_data = {
        "method": method,
        "url": url,
        "status_code": status_code,
        "duration_ms": round(duration * 1000, 2),
        **kwargs,
    }

    if 200 <= status_code < 300:
        level = logging.INFO
    elif 400 <= status_code < 500:
        level = logging.WARNING
    else:
        level = logging.ERROR

    logger.log(
        level,
        f"API call: {method} {url} -> {status_code} ({duration * 1000:.1f}ms)",
        extra=extra_data,
    )
