# mailshield/external.py
from typing import Any

import httpx


def error_detail(exc: Exception) -> Any:
    """Что отдать клиенту при сбое внешнего сервиса.

    Если сервис ответил (не-2xx), возвращаем тело ответа: JSON, если он
    разбирается, иначе текст. Без ответа отдаем сообщение исключения.
    """
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        try:
            return response.json()
        except ValueError:
            return response.text
    return str(exc) or exc.__class__.__name__
