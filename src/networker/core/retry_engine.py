"""
Retry engine с фиксированной задержкой.

Одна попытка за раз: движок считает повторы, решает нужен ли ещё один и
ждёт перед ним. Ожидание прерывается отменой задачи.
"""

import asyncio
import logging
import threading
import time
from typing import Optional

from .config import RetryConfig
from .error_handler import ErrorHandler
from .errors import NetworkError

logger = logging.getLogger(__name__)


class RetryEngine:
    """
    Счётчик повторов для одного вызова.

    Examples:
        >>> engine = RetryEngine(RetryConfig(max_retries=3, delay=2.0))
        >>> if engine.should_retry(error):
        ...     if not engine.wait(cancel_event):
        ...         return cancelled
        ...     engine.increment()
    """

    def __init__(self, config: RetryConfig):
        """
        Args:
            config: Конфигурация retry
        """
        self.config = config
        self._attempt = 0

    def should_retry(self, error: NetworkError) -> bool:
        """
        Решить нужен ли retry.

        Args:
            error: Классифицированная ошибка последней попытки

        Returns:
            True если повторы включены, лимит не исчерпан и ошибка повторяемая
        """
        if not self.config.enabled:
            return False

        if self._attempt >= self.config.max_retries:
            return False

        return ErrorHandler.is_retryable(error, self.config.retry_client_errors)

    def get_wait_time(self) -> float:
        """Секунды до следующей попытки."""
        return self.config.delay

    def wait(self, cancel_event: Optional[threading.Event] = None) -> bool:
        """
        Блокирующее ожидание перед retry.

        Args:
            cancel_event: Событие отмены задачи

        Returns:
            False если ожидание прервано отменой
        """
        if cancel_event is None:
            time.sleep(self.get_wait_time())
            return True
        return not cancel_event.wait(self.get_wait_time())

    async def async_wait(self) -> None:
        """
        Асинхронное ожидание перед retry.

        CancelledError пробрасывается вызывающему.
        """
        await asyncio.sleep(self.get_wait_time())

    def increment(self) -> None:
        """Увеличить счётчик повторов."""
        self._attempt += 1
        logger.debug(f"Retry attempt {self._attempt}/{self.config.max_retries}")

    def reset(self) -> None:
        """Сбросить счётчик."""
        self._attempt = 0

    @property
    def attempt(self) -> int:
        """Сколько повторов уже сделано."""
        return self._attempt
