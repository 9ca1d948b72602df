"""
Structured logging built on structlog.
Provides JSON or console output and a context-binding logger for catalog changes.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

import structlog
from structlog.stdlib import LoggerFactory


def _build_processors(log_format: str) -> List:
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[Union[str, Path]] = None,
    debug: bool = False
) -> None:
    """
    Set up structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_file: Optional log file path
        debug: Add call-site information to every event
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    processors = _build_processors(log_format)
    if debug:
        processors.insert(-1, structlog.processors.CallsiteParameterAdder())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(file_handler)

    structlog.get_logger(__name__).info(
        "Logging system initialized",
        level=log_level,
        format=log_format,
        file=str(log_file) if log_file else None,
        debug=debug
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class CatalogLogger:
    """
    Logger for catalog changes with bound context.
    """

    def __init__(self, name: str = "catalog"):
        self.logger = structlog.get_logger(name)
        self.context = {}

    def bind_context(self, **kwargs) -> 'CatalogLogger':
        """
        Bind context variables to the logger.

        Args:
            **kwargs: Context variables to bind

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    def log_book_created(self, book_id: int, title: str) -> None:
        self.logger.info("Book created", book_id=book_id, title=title, **self.context)

    def log_book_updated(self, book_id: int, fields: List[str]) -> None:
        self.logger.info("Book updated", book_id=book_id, fields=fields, **self.context)

    def log_book_deleted(self, book_id: int) -> None:
        self.logger.info("Book deleted", book_id=book_id, **self.context)

    def log_rejected(self, reason: str, book_id: Optional[int] = None) -> None:
        """Log a request the catalog refused (bad data or unknown book)."""
        self.logger.warning("Request rejected", reason=reason, book_id=book_id, **self.context)

    def log_storage_failure(self, operation: str, error: str, path: Optional[str] = None) -> None:
        self.logger.error(
            "Storage operation failed",
            operation=operation,
            error=error,
            path=path,
            **self.context
        )
