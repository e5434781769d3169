"""
Centralized logging configuration for the web search service.

This module provides structured JSON logging with:
- Rotating file handlers (app / error / debug)
- Optional human-readable console output
- Environment-based configuration (LOG_LEVEL, LOG_DIR, LOG_TO_CONSOLE, LOG_TO_FILE)
- Per-record structured fields passed as extra={"extra_fields": {...}}
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class JsonFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Outputs one JSON object per line for log aggregation systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
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

        # Structured fields supplied by callers
        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


class LoggerConfig:
    """
    Centralized logger configuration and management.
    """

    MAX_BYTES = 10 * 1024 * 1024  # 10MB per file
    BACKUP_COUNT = 5

    _initialized = False

    @staticmethod
    def _env_flag(name: str, default: str) -> bool:
        return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")

    @classmethod
    def _file_handler(
        cls, path: Path, level: int, formatter: logging.Formatter
    ) -> logging.handlers.RotatingFileHandler:
        handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=cls.MAX_BYTES, backupCount=cls.BACKUP_COUNT, encoding="utf-8"
        )
        handler.setLevel(level)
        handler.setFormatter(formatter)
        return handler

    @classmethod
    def setup_logging(cls) -> None:
        """
        Configure the root logger for the whole process.
        Safe to call more than once; only the first call has an effect.
        """
        if cls._initialized:
            return

        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        to_console = cls._env_flag("LOG_TO_CONSOLE", "false")
        to_file = cls._env_flag("LOG_TO_FILE", "true")

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level, logging.INFO))
        root_logger.handlers.clear()

        json_formatter = JsonFormatter()

        if to_file:
            log_dir.mkdir(parents=True, exist_ok=True)
            files = [("websearch.log", logging.INFO), ("error.log", logging.ERROR)]
            # Provider payloads and visit results are only logged at DEBUG
            if log_level == "DEBUG":
                files.append(("debug.log", logging.DEBUG))

            for file_name, level in files:
                root_logger.addHandler(cls._file_handler(log_dir / file_name, level, json_formatter))

        if to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, log_level, logging.INFO))
            console_handler.setFormatter(
                logging.Formatter(
                    fmt="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            root_logger.addHandler(console_handler)

        cls._initialized = True

        logging.getLogger(__name__).info(
            "Logging system initialized",
            extra={
                "extra_fields": {
                    "log_level": log_level,
                    "log_dir": str(log_dir) if to_file else None,
                    "console_logging": to_console,
                }
            },
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._initialized:
            cls.setup_logging()

        return logging.getLogger(name)


def get_logger(name: str) -> logging.Logger:
    """
    Get a configured logger instance.

    Args:
        name: The name of the logger (typically __name__)

    Returns:
        Configured logger instance

    Example:
        >>> from utils.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Search finished", extra={"extra_fields": {"query": "who is"}})
    """
    return LoggerConfig.get_logger(name)
