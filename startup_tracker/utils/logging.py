"""
Centralized logging configuration and utilities.

Provides structured logging with JSON format support and configurable output destinations.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory

from ..config import LoggingConfig, get_config


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    config: Optional[LoggingConfig] = None
) -> structlog.stdlib.BoundLogger:
    """
    Set up structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file. If None, logs to console only.
        log_format: Log format ('json' or 'text')
        config: Logging settings; defaults to the global configuration
    """
    config = config or get_config().logging

    # Use provided values or fall back to config
    log_level = level or config.level
    log_file = log_file or config.file
    log_format = log_format or config.format

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=True)
        )

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setLevel(getattr(logging, log_level.upper()))
        logging.getLogger().addHandler(file_handler)

    return structlog.get_logger("root")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)


def log_scraping_activity(
    source: str,
    url: str,
    status_code: Optional[int],
    response_time: float,
    success: bool,
    error_message: Optional[str] = None
) -> None:
    """
    Log an outbound fetch for audit and monitoring.

    Args:
        source: Name of the service or source being fetched
        url: URL that was fetched
        status_code: HTTP status code, if a response arrived
        response_time: Response time in milliseconds
        success: Whether the fetch was successful
        error_message: Error message if the fetch failed
    """
    logger = get_logger(__name__)

    log_data = {
        "source": source,
        "url": url,
        "status_code": status_code,
        "response_time_ms": round(response_time, 1),
        "success": success,
    }

    if error_message:
        log_data["error_message"] = error_message

    if success:
        logger.info("Fetch successful", **log_data)
    else:
        logger.warning("Fetch failed", **log_data)


def log_database_operation(
    operation: str,
    table: str,
    count: Optional[int] = None,
    success: bool = True,
    error_message: Optional[str] = None
) -> None:
    """
    Log database operations.

    Args:
        operation: Type of operation (UPSERT, SELECT, COUNT)
        table: Database table name
        count: Number of rows involved
        success: Whether the operation was successful
        error_message: Error message if operation failed
    """
    logger = get_logger(__name__)

    log_data = {
        "operation": operation,
        "table": table,
        "success": success,
    }

    if count is not None:
        log_data["count"] = count

    if error_message:
        log_data["error_message"] = error_message

    if success:
        logger.debug("Database operation completed", **log_data)
    else:
        logger.error("Database operation failed", **log_data)
