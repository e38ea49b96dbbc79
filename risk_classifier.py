# risk_classifier.py
from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum

HIGH_RISK_DAYS = 30
MEDIUM_RISK_DAYS = 60

_ONE_DAY = timedelta(days=1)


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def _as_datetime(value: date | datetime) -> datetime:
    # date -> полночь; aware -> naive UTC, чтобы можно было вычитать
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def days_until(reference: date | datetime, expiration: date | datetime) -> int:
    """
    Сколько дней осталось до окончания договора (округление вверх).
    Отрицательное значение — договор уже истёк.
    """
    diff = _as_datetime(expiration) - _as_datetime(reference)
    return math.ceil(diff / _ONE_DAY)


def classify(reference: date | datetime, expiration: date | datetime) -> RiskLevel:
    """
    Уровень риска по числу дней до окончания:
      < 30  -> High (в т.ч. уже истёкшие)
      < 60  -> Medium
      иначе -> Low
    "Сейчас" передаётся явно — функция чистая и часы сама не читает.
    """
    diff_days = days_until(reference, expiration)
    if diff_days < HIGH_RISK_DAYS:
        return RiskLevel.HIGH
    if diff_days < MEDIUM_RISK_DAYS:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW
