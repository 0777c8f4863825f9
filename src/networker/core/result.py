"""
Result тип для публичных операций Networker.

Каждая операция возвращает Success(value) или Failure(error) вместо
выбрасывания исключений.

Example:
    >>> result = networker.perform(request)
    >>> if result.is_success:
    ...     print(result.value.data)
    ... else:
    ...     print(result.error.detailed_description)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .errors import NetworkError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Успешный результат."""
    value: T

    @property
    def is_success(self) -> bool:
        return True

    @property
    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: U) -> Union[T, U]:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Неуспешный результат с классифицированной ошибкой."""
    error: NetworkError

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return True

    def unwrap(self):
        """
        Raises:
            NetworkError: всегда
        """
        raise self.error

    def unwrap_or(self, default: U) -> U:
        return default


Result = Union[Success[T], Failure]
