# errors.py
from __future__ import annotations


class ContractDeskError(Exception):
    """Базовая ошибка приложения."""


class SessionRequired(ContractDeskError):
    """Нет активной сессии — каталог недоступен."""

    def __init__(self, message: str = "Требуется вход в систему.") -> None:
        super().__init__(message)


class AuthFailure(ContractDeskError):
    """Сервис идентификации отказал во входе/выходе."""


class FetchFailure(ContractDeskError):
    """
    Хранилище не смогло вернуть список договоров.
    Каталог при этом остаётся в прежнем состоянии.
    """

    def __init__(self, reason: str, *, user_id: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.user_id = user_id


class UploadFailure(ContractDeskError):
    """
    Хранилище отклонило загрузку. reason — текст ошибки бэкенда как есть
    (показываем пользователю без переформулировки).
    """

    def __init__(self, reason: str, *, file_name: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.file_name = file_name
