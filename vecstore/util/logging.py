"""
Structured logging for collection, vector and search operations.
"""

import logging
from typing import Any, Dict

from ..core import config


class StructuredLogger:
    """Structured logger for collection operations."""

    def __init__(self, name: str = "vecstore"):
        self.logger = logging.getLogger(name)
        if config.debug_enabled():
            self.logger.setLevel(logging.DEBUG)
        else:
            self.logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None, level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_collection_operation(self, operation: str, collection: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a collection-level operation (create, drop, upsert, delete...)."""
        log_details = {"collection": collection}
        if details:
            log_details.update(details)

        self.log_operation(f"collection.{operation}", status, log_details)

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a vector operation. Emitted at DEBUG since it fires once per record."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details, level=logging.DEBUG)

    def log_search(self, collection: str, top: int, skip: int, fetch_count: int, matched: int, returned: int, filtered: bool = False):
        """Log a similarity search and how many candidates survived."""
        log_details = {
            "collection": collection,
            "top": top,
            "skip": skip,
            "fetch_count": fetch_count,
            "matched": matched,
            "returned": returned,
            "filtered": filtered
        }
        self.log_operation("search", "success", log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
