"""
Учёт выполняющихся вызовов.

Каждый вызов получает id и регистрируется в TaskRegistry до отправки.
Реестр позволяет отменить один вызов или все сразу.
"""

import asyncio
import logging
import threading
import uuid
from enum import Enum
from typing import Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    """
    Состояния вызова.

    PENDING -> DISPATCHED -> (SUCCEEDED | RETRYING -> DISPATCHED | FAILED | CANCELLED)

    Попадание в кэш завершает вызов до создания handle, поэтому
    отдельного состояния у него нет.
    """
    PENDING = "pending"
    DISPATCHED = "dispatched"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.SUCCEEDED, TaskState.FAILED, TaskState.CANCELLED)


def new_task_id() -> str:
    return str(uuid.uuid4())


class _TaskHandle:
    """Общая часть handle: id, состояние, история переходов."""

    def __init__(self, task_id: Optional[str] = None):
        self.id = task_id or new_task_id()
        self._state = TaskState.PENDING
        self.attempts = 0

    @property
    def state(self) -> TaskState:
        return self._state

    def transition(self, state: TaskState) -> None:
        if state == TaskState.DISPATCHED:
            self.attempts += 1
        logger.debug(f"Task {self.id}: {self._state.value} -> {state.value}")
        self._state = state

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, state={self._state.value!r})"


class NetworkTask(_TaskHandle):
    """
    Handle блокирующего вызова.

    Отмена выставляет threading.Event, который транспорт проверяет между
    чанками тела, а RetryEngine во время паузы перед повтором.
    """

    def __init__(self, task_id: Optional[str] = None):
        super().__init__(task_id)
        self.cancel_event = threading.Event()

    def cancel(self) -> None:
        self.cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()


class AsyncNetworkTask(_TaskHandle):
    """
    Handle asyncio вызова.

    Отмена вызывает asyncio.Task.cancel(): CancelledError прерывает
    ожидание транспорта или asyncio.sleep перед повтором.
    """

    def __init__(self, task_id: Optional[str] = None, task: Optional["asyncio.Task"] = None):
        super().__init__(task_id)
        self.task = task
        self.cancel_requested = False

    def cancel(self) -> None:
        self.cancel_requested = True
        if self.task is not None:
            self.task.cancel()

    @property
    def cancelled(self) -> bool:
        return self.cancel_requested


TaskHandle = Union[NetworkTask, AsyncNetworkTask]


class TaskRegistry:
    """
    Потокобезопасный реестр выполняющихся вызовов.

    Examples:
        >>> registry = TaskRegistry()
        >>> registry.register(task)
        >>> registry.cancel(task.id)
        True
        >>> len(registry)
        0
    """

    def __init__(self):
        self._tasks: Dict[str, TaskHandle] = {}
        self._lock = threading.Lock()

    def register(self, handle: TaskHandle) -> None:
        """
        Raises:
            ValueError: Если id уже занят
        """
        with self._lock:
            if handle.id in self._tasks:
                raise ValueError(f"Task id already in use: {handle.id}")
            self._tasks[handle.id] = handle

    def remove(self, task_id: str) -> Optional[TaskHandle]:
        """Удалить запись. Повторное удаление возвращает None."""
        with self._lock:
            return self._tasks.pop(task_id, None)

    def discard(self, handle: TaskHandle) -> bool:
        """
        Снять с учёта именно этот handle.

        После cancel() id может занять новый вызов; его запись не трогаем.

        Returns:
            False если под этим id зарегистрирован другой handle или ничего
        """
        with self._lock:
            if self._tasks.get(handle.id) is not handle:
                return False
            del self._tasks[handle.id]
            return True

    def get(self, task_id: str) -> Optional[TaskHandle]:
        with self._lock:
            return self._tasks.get(task_id)

    def cancel(self, task_id: str) -> bool:
        """
        Отменить вызов и удалить его из реестра.

        Returns:
            False если такого id нет
        """
        handle = self.remove(task_id)
        if handle is None:
            return False
        handle.cancel()
        return True

    def cancel_all(self) -> int:
        """
        Отменить все вызовы и очистить реестр.

        Returns:
            Количество отменённых вызовов
        """
        with self._lock:
            handles = list(self._tasks.values())
            self._tasks.clear()

        for handle in handles:
            handle.cancel()
        return len(handles)

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._tasks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def __contains__(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._tasks
