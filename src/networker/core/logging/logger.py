"""
Main logger for Networker.

NetworkLogger оборачивает stdlib logging и добавляет методы трассировки
запросов: log_request, log_response, log_event, log_error, log_retry.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional

from .config import LoggingConfig
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .handlers import handlers_for
from ...utils.sanitizer import mask_headers, mask_sensitive_data, mask_url

if TYPE_CHECKING:
    from ..errors import NetworkError
    from ..models import NetworkResponse, URLRequest


class NetworkLogger:
    """
    Logger with request/response tracing.

    Каждый метод fire-and-forget: ничего не возвращает и не выбрасывает.
    При silent=True все вызовы no-op.

    Example:
        >>> logger = NetworkLogger(LoggingConfig.create(level="DEBUG", format="colored"))
        >>> logger.log_event("Time Report", "Request completed in 0.120 seconds.")
        >>> logger.info("Cache cleared", entries=10)
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = "networker"):
        """
        Args:
            config: Logging configuration (uses defaults if None)
            name: Logger name
        """
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        self._logger = logging.getLogger(name)
        self._logger.setLevel(self.config.level.numeric)

        # Повторная инициализация того же имени заменяет обработчики
        for handler in self._own_handlers():
            self._logger.removeHandler(handler)
        self._logger.filters.clear()

        if self.config.enable_correlation_id:
            self._logger.addFilter(CorrelationIdFilter())
        if self.config.extra_fields:
            self._logger.addFilter(ExtraFieldsFilter(self.config.extra_fields))

        for handler in handlers_for(self.config):
            self._logger.addHandler(handler)

        # With own handlers, don't duplicate records in root logger
        self._logger.propagate = not self._own_handlers()

    def _own_handlers(self):
        return [h for h in self._logger.handlers if not isinstance(h, logging.NullHandler)]

    @property
    def silent(self) -> bool:
        return self.config.silent

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        if self.config.silent or not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, extra=mask_sensitive_data(kwargs))

    def _body_snippet(self, body: Optional[bytes]) -> Optional[str]:
        if not body:
            return None
        text = body[: self.config.body_limit].decode("utf-8", errors="replace")
        if len(body) > self.config.body_limit:
            text += "..."
        return text

    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    # REQUEST TRACING
    # ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

    def log_request(self, request: "URLRequest", attempt: int = 1) -> None:
        """Method, URL, заголовки и тело отправляемого запроса."""
        self._log(
            logging.INFO,
            "Request",
            method=request.method,
            url=mask_url(request.url),
            headers=mask_headers(request.headers),
            body=self._body_snippet(request.body),
            attempt=attempt,
        )

    def log_response(self, response: "NetworkResponse") -> None:
        """URL, статус, заголовки и тело полученного ответа."""
        self._log(
            logging.INFO,
            "Response",
            url=mask_url(response.url),
            status_code=response.status_code,
            headers=mask_headers(response.headers),
            body=self._body_snippet(response.data),
        )

    def log_event(self, title: str, message: str, **kwargs: Any) -> None:
        """
        Произвольное событие с заголовком.

        Example:
            >>> logger.log_event("Success", "Cached Response")
        """
        self._log(logging.INFO, f"{title}: {message}", title=title, **kwargs)

    def log_error(self, error: "NetworkError", **kwargs: Any) -> None:
        """Финальная ошибка вызова."""
        self._log(
            logging.ERROR,
            f"Description: {error.detailed_description}",
            kind=error.kind.value,
            status_code=error.status_code,
            **kwargs,
        )

    def log_retry(self, error: "NetworkError", attempt: int, max_retries: int, delay: float) -> None:
        """Повтор после ошибки (не финальный)."""
        self._log(
            logging.INFO,
            f"Retrying request ({attempt}/{max_retries}) after {delay}s: {error.description}",
            kind=error.kind.value,
            attempt=attempt,
            max_retries=max_retries,
            delay=delay,
        )

    # Proxy methods for convenient logging

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def close(self) -> None:
        """
        Close all handlers and release resources.

        Idempotent.
        """
        if self._closed:
            return

        for handler in self._own_handlers():
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)

        self._logger.propagate = True
        self._closed = True

    def __enter__(self):
        """Context manager support."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Close logger on context exit."""
        self.close()
        return False
