# src/networker/interceptors/auth_interceptor.py

import base64
from typing import Optional

from ..core.models import URLRequest
from .interceptor import InterceptorPriority, RequestInterceptor


class AuthInterceptor(RequestInterceptor):
    """Интерцептор для различных типов аутентификации"""

    priority = InterceptorPriority.FIRST

    def __init__(self, auth_type: str = "bearer", token: Optional[str] = None,
                 username: Optional[str] = None, password: Optional[str] = None,
                 api_key_header: str = "X-API-Key"):
        """
        Args:
            auth_type: Тип аутентификации ('bearer', 'basic', 'api_key')
            token: Токен для Bearer или API Key аутентификации
            username: Имя пользователя для Basic аутентификации
            password: Пароль для Basic аутентификации
            api_key_header: Заголовок для API Key
        """
        self.auth_type = auth_type.lower()
        if self.auth_type not in ("bearer", "basic", "api_key"):
            raise ValueError(f"Unsupported auth_type: {auth_type}")
        self.token = token
        self.username = username
        self.password = password
        self.api_key_header = api_key_header

    def intercept(self, request: URLRequest) -> URLRequest:
        """Добавляет заголовки аутентификации"""
        if self.auth_type == 'bearer' and self.token:
            request.set_header('Authorization', f"Bearer {self.token}")

        elif self.auth_type == 'api_key' and self.token:
            request.set_header(self.api_key_header, self.token)

        elif self.auth_type == 'basic' and self.username is not None and self.password is not None:
            credentials = f"{self.username}:{self.password}".encode("utf-8")
            request.set_header('Authorization', f"Basic {base64.b64encode(credentials).decode('ascii')}")

        return request

    def update_token(self, token: str):
        """Обновляет токен аутентификации"""
        self.token = token
