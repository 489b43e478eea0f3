# app/core/logging_config.py
"""
Logging configuration for the payroll service.

Structured JSON logs with file rotation in production, colored console
output plus a plain rotating file in development.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone

from app.core.config import get_log_dir, is_production


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs logs as JSON for easier parsing by log aggregation tools
    (Elasticsearch, Loki, CloudWatch, etc.)
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Structured context passed as extra={"extra_fields": {...}}
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """
    Colored formatter for console output in development.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Other handlers share the record, so the plain name is restored
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging() -> None:
    """
    Configure logging for the application.

    In production:
    - JSON format
    - app.log (INFO) and error.log (ERROR), both rotating
    - WARNING and above on stdout

    In development:
    - Colored console output at DEBUG
    - Plain rotating app.log
    """
    production = is_production()
    log_dir = get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    app_log_file = log_dir / "app.log"
    error_log_file = log_dir / "error.log"

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO if production else logging.DEBUG)

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    if production:
        app_handler = logging.handlers.RotatingFileHandler(
            app_log_file,
            maxBytes=10_000_000,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        app_handler.setLevel(logging.INFO)
        app_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(app_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            error_log_file,
            maxBytes=10_000_000,  # 10MB
            backupCount=10,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(error_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(console_handler)

    else:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(ColoredFormatter(
            fmt='%(levelname)-8s %(asctime)s [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        root_logger.addHandler(console_handler)

        file_handler = logging.handlers.RotatingFileHandler(
            app_log_file,
            maxBytes=5_000_000,  # 5MB
            backupCount=2,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(levelname)s %(asctime)s [%(name)s:%(lineno)d] %(message)s'
        ))
        root_logger.addHandler(file_handler)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)

    # Noisy
    logging.getLogger("watchfiles").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(
        f"Logging configured (production={production})",
        extra={
            "extra_fields": {
                "log_dir": str(log_dir.absolute()),
                "production": production
            }
        }
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)

