import re
from datetime import date, datetime

CONTRACT_STATUSES = ("Active", "Draft", "Expired")


class Validator:
    """Общий класс валидации для полей Договора."""

    @staticmethod
    def require_non_empty(name: str, value: object) -> str:
        """Требуем, чтобы не было пустых полей."""
        v = "" if value is None else str(value).strip()
        if not v:
            raise ValueError(f"Поле '{name}' обязательно и не может быть пустым.")
        return v

    @staticmethod
    def contract_id(value: object) -> str:
        """id выдаёт хранилище; для нас это непрозрачная строка."""
        if isinstance(value, bool):
            raise ValueError("Поле 'id' должно быть строкой или числом.")
        return Validator.require_non_empty("id", value)

    @staticmethod
    def iso_date(name: str, value: object) -> date:
        """
        Дата в формате ГГГГ-ММ-ДД (допускаем и полную ISO-метку времени,
        тогда берём только дату). Несуществующие даты вроде 2026-02-30 — ошибка.
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        v = Validator.require_non_empty(name, value)
        if not re.match(r"^\d{4}-\d{2}-\d{2}", v):
            raise ValueError(
                f"Поле '{name}' должно быть в формате 'ГГГГ-ММ-ДД', например '2026-03-01'."
            )
        try:
            if len(v) == 10:
                return date.fromisoformat(v)
            # "2026-03-01T00:00:00Z" и т.п.
            return datetime.fromisoformat(v.replace("Z", "+00:00")).date()
        except ValueError:
            raise ValueError(f"Поле '{name}' содержит несуществующую дату: {v}.") from None

    @staticmethod
    def status(value: object) -> str:
        v = Validator.require_non_empty("status", value)
        if v not in CONTRACT_STATUSES:
            raise ValueError(
                "Поле 'status' должно быть одним из: " + ", ".join(CONTRACT_STATUSES) + "."
            )
        return v

    @staticmethod
    def file_name(value: object) -> str:
        """Имя загружаемого файла: без путей и управляющих символов."""
        v = Validator.require_non_empty("file_name", value)
        v = v.replace("\\", "/").rsplit("/", 1)[-1]
        if not v or v in (".", ".."):
            raise ValueError("Поле 'file_name' не содержит имени файла.")
        if re.search(r"[\x00-\x1f]", v):
            raise ValueError("Поле 'file_name' содержит управляющие символы.")
        return v
