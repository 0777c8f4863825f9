"""
Сессии requests по одной на поток.

Блокирующий Networker вызывается из произвольных потоков, а
requests.Session не потокобезопасна.
"""

import threading
from typing import Callable, List

import requests


class ThreadSafeSessionManager:
    """
    Thread-local requests.Session для RequestsTransport.

    Сессия создаётся фабрикой при первом обращении из потока. close_all()
    закрывает сессии всех потоков; следующее обращение создаст новую.

    Example:
        >>> sessions = ThreadSafeSessionManager(transport._create_session)
        >>> sessions.get_session().get("https://api.example.com")
        >>> sessions.close_all()
    """

    def __init__(self, session_factory: Callable[[], requests.Session]):
        self._factory = session_factory
        self._local = threading.local()
        self._opened: List[requests.Session] = []
        self._opened_lock = threading.Lock()

    def get_session(self) -> requests.Session:
        session = getattr(self._local, 'session', None)
        if session is None:
            session = self._factory()
            self._local.session = session
            with self._opened_lock:
                self._opened.append(session)
        return session

    def close_all(self) -> None:
        """Закрыть все открытые сессии. Повторный вызов безопасен."""
        with self._opened_lock:
            opened, self._opened = self._opened, []

        for session in opened:
            session.close()
        self._local = threading.local()

    @property
    def active_sessions(self) -> int:
        with self._opened_lock:
            return len(self._opened)
