"""
Structured operation logging for the vector store and RAG service.
Every line reads "Operation: <name>, Status: <status>, Details: {...}".
"""

import logging
from typing import Any, Dict, Optional

from trialrag.core.config import debug_enabled

TRUNCATE_AT = 50


def truncate(text: str, limit: int = TRUNCATE_AT) -> str:
    """Shorten free text before it goes into a log line."""
    return text[:limit] + "..." if len(text) > limit else text


class StructuredLogger:
    """Structured logger for vector, collection and RAG operations."""

    def __init__(self, name: str = "trialrag"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG if debug_enabled() else logging.INFO)

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

    def log_vector_operation(self, operation: str, record_id: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a document-level vector operation."""
        log_details = {"record_id": record_id}
        if details:
            log_details.update(details)

        self.log_operation(f"vector.{operation}", status, log_details, level=logging.DEBUG)

    def log_collection_operation(self, operation: str, collection: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a collection lifecycle or batch operation."""
        log_details = {"collection": collection}
        if details:
            log_details.update(details)

        self.log_operation(f"collection.{operation}", status, log_details)

    def log_rag_query(self, collection: str, query: str, result_count: int, strategy: str, status: str = "success"):
        """Log a completed RAG query."""
        log_details = {
            "collection": collection,
            "query": truncate(query),
            "result_count": result_count,
            "strategy": strategy,
        }
        self.log_operation("rag.query", status, log_details)

    def log_generation_fallback(self, generator: str, reason: str):
        """Log a switch from the external generator to the local summarizer."""
        log_details = {"generator": generator, "reason": truncate(reason, 100)}
        self.log_operation("rag.generation_fallback", "degraded", log_details, level=logging.WARNING)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str, exc_info: Optional[bool] = None) -> None:
        """Log an error message."""
        self.logger.error(message, exc_info=exc_info)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
