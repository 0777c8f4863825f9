"""
Log filters for adding context to records.

Correlation ID хранится в ContextVar, поэтому id задачи виден и в потоке
блокирующего Networker, и внутри asyncio задачи AsyncNetworker.
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

_correlation_id: ContextVar[Optional[str]] = ContextVar("networker_correlation_id", default=None)


def set_correlation_id(correlation_id: Optional[str]) -> None:
    """
    Set correlation ID for the current context.

    Example:
        >>> set_correlation_id("task-12345")
        >>> logger.info("Processing request")  # Will include correlation_id
    """
    _correlation_id.set(correlation_id)


def get_correlation_id() -> Optional[str]:
    """Get correlation ID for the current context."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear correlation ID for the current context."""
    _correlation_id.set(None)


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """
    Установить correlation ID на время блока и восстановить прежний.

    Example:
        >>> with correlation_scope(task.id):
        ...     logger.info("Request")  # correlation_id=task.id
    """
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


class CorrelationIdFilter(logging.Filter):
    """Adds correlation_id to records when one is set."""

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service, environment, ...) to all records.

    Example:
        >>> handler.addFilter(ExtraFieldsFilter({"service": "api"}))
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = dict(extra_fields)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
