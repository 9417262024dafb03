"""
Иерархия исключений FitTrack.

Каждое исключение несет HTTP-статус и сообщение для клиента;
обработчик в main.py превращает их в ответ вида
{"success": false, "message": ..., "error": ...}.
"""

from typing import Optional


class FitTrackError(Exception):
    """Базовое исключение приложения."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(FitTrackError):
    """Отсутствует или вне диапазона обязательное поле. Ничего не записано."""

    status_code = 400
    default_message = "Validation error"


class NotFoundError(FitTrackError):
    """Запись не найдена у текущего владельца.

    Один и тот же ответ для отсутствующего и чужого id.
    """

    status_code = 404
    default_message = "Not found"


class DependencyError(FitTrackError):
    """Внешний AI-сервис упал, не ответил вовремя или вернул ошибку."""

    status_code = 502
    default_message = "Error communicating with AI"


class StorageError(FitTrackError):
    status_code = 500
    default_message = "Server error"
