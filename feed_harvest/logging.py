"""Structured logging configuration for the feed harvester."""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

import structlog
from structlog import processors, stdlib

from .config import get_settings


def setup_logging(
    log_level: str | None = None,
    json_logging: bool | None = None,
    log_file: Path | None = None
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_logging: Enable JSON formatting
        log_file: Optional log file path
    """
    settings = get_settings()

    log_level = log_level or settings.log_level
    json_logging = json_logging if json_logging is not None else settings.json_logging

    level = getattr(logging, log_level.upper())
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)

    processors_list = [
        stdlib.filter_by_level,
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        processors.TimeStamper(fmt="iso"),
        processors.StackInfoRenderer(),
        processors.format_exc_info,
    ]

    if json_logging:
        processors_list.append(
            processors.JSONRenderer(serializer=json.dumps, indent=None, ensure_ascii=False)
        )
    else:
        processors_list.extend([
            processors.CallsiteParameterAdder(
                parameters=[processors.CallsiteParameter.FILENAME,
                            processors.CallsiteParameter.LINENO]
            ),
            structlog.dev.ConsoleRenderer(colors=False),
        ])

    structlog.configure(
        processors=processors_list,
        wrapper_class=stdlib.BoundLogger,
        logger_factory=stdlib.LoggerFactory(),
        # Module-level loggers must pick up a reconfiguration from the CLI
        cache_logger_on_first_use=False,
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


def log_processing_stage(
    stage: str,
    input_count: int,
    output_count: int,
    duration: float | None = None,
    **kwargs: Any
) -> dict[str, Any]:
    """Create a standardized log entry for processing stages.

    Args:
        stage: Processing stage name
        input_count: Number of input items
        output_count: Number of output items
        duration: Processing duration in seconds
        **kwargs: Additional processing data

    Returns:
        Structured log data
    """
    log_data = {
        "event": "processing_stage",
        "stage": stage,
        "input_count": input_count,
        "output_count": output_count,
        **kwargs
    }

    if duration is not None:
        log_data["duration"] = duration

    return log_data


def log_error(
    error: Exception,
    context: str | None = None,
    **kwargs: Any
) -> dict[str, Any]:
    """Create a standardized log entry for errors.

    Args:
        error: Exception that occurred
        context: Additional context about the error
        **kwargs: Additional error data

    Returns:
        Structured log data
    """
    log_data = {
        "event": "error",
        "error_type": error.__class__.__name__,
        "error_message": str(error),
        **kwargs
    }

    if context:
        log_data["context"] = context

    return log_data


class PerformanceLogger:
    """Context manager for logging operation duration."""

    def __init__(self, operation: str, logger: structlog.stdlib.BoundLogger):
        self.operation = operation
        self.logger = logger
        self.start_time: float | None = None
        self.duration: float | None = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = time.time()
        self.logger.info("operation_started", operation=self.operation)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return
        self.duration = time.time() - self.start_time
        if exc_type is None:
            self.logger.info(
                "operation_completed",
                operation=self.operation,
                duration=self.duration
            )
        else:
            self.logger.error(
                "operation_failed",
                operation=self.operation,
                duration=self.duration,
                error_type=exc_type.__name__,
                error_message=str(exc_val) if exc_val else None
            )


# Initialize logging on module import
setup_logging()
