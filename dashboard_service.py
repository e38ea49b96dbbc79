from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from contracts_domain import Contract
from risk_classifier import HIGH_RISK_DAYS, RiskLevel, days_until
from validators import CONTRACT_STATUSES


@dataclass(frozen=True)
class ExpiringContract:
    contract: Contract
    days_left: int


@dataclass(frozen=True)
class DashboardSummary:
    total: int
    by_risk: dict[str, int]
    by_status: dict[str, int]
    expiring_soon: list[ExpiringContract] = field(default_factory=list)
    expired: int = 0


def build_summary(
    contracts: Iterable[Contract],
    reference: date,
    *,
    horizon_days: int = HIGH_RISK_DAYS,
    limit: int = 5,
) -> DashboardSummary:
    """
    Сводка для главной: сколько договоров в каждом уровне риска и статусе,
    какие истекают в ближайшие horizon_days дней (сначала самые срочные),
    сколько уже истекло.
    """
    items = list(contracts)
    by_risk = {lvl.value: 0 for lvl in (RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW)}
    by_status = {st: 0 for st in CONTRACT_STATUSES}
    soon: list[ExpiringContract] = []
    expired = 0

    for c in items:
        by_risk[c.risk_level.value] += 1
        by_status[c.status] = by_status.get(c.status, 0) + 1
        left = days_until(reference, c.expiration_date)
        if left < 0:
            expired += 1
        elif left < horizon_days:
            soon.append(ExpiringContract(c, left))

    soon.sort(key=lambda e: (e.days_left, e.contract.name))
    return DashboardSummary(
        total=len(items),
        by_risk=by_risk,
        by_status=by_status,
        expiring_soon=soon[:limit],
        expired=expired,
    )
