# contract_catalog.py
from __future__ import annotations
import logging
from collections.abc import Iterable, Iterator
from typing import Optional

from clock import Clock
from contracts_domain import Contract
from mvc_observer import Subject

logger = logging.getLogger(__name__)


class ContractCatalog(Subject):
    """
    Упорядоченный набор договоров одной пользовательской сессии.
    Свежезагруженные — в начале списка. id уникальны.

    Риск каждого договора пересчитывается по clock.today() при попадании
    в каталог, поэтому отображаемый risk_level не расходится с датой окончания.

    События:
      - "catalog_loaded"  payload: list[Contract]
      - "contract_added"  payload: Contract
      - "catalog_cleared" payload: None
    """

    def __init__(self, clock: Clock) -> None:
        super().__init__()
        self._clock = clock
        self._items: list[Contract] = []

    # ===== чтение =====
    def items(self) -> list[Contract]:
        return list(self._items)

    def get(self, cid: str) -> Optional[Contract]:
        for c in self._items:
            if c.id == cid:
                return c
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Contract]:
        return iter(list(self._items))

    # ===== мутации =====
    def load(self, records: Iterable[Contract]) -> None:
        """Полностью заменяет содержимое (после успешной выборки из хранилища)."""
        ref = self._clock.today()
        fresh = [c.reclassified(ref) for c in records]
        seen: set[str] = set()
        for c in fresh:
            if c.id in seen:
                raise ValueError(f"Дублирующийся id договора: {c.id}")
            seen.add(c.id)
        self._items = fresh
        logger.info("Каталог загружен: %d договоров (на %s)", len(fresh), ref)
        self.notify("catalog_loaded", self.items())

    def add(self, record: Contract) -> None:
        """Вставляет договор в начало списка (после успешной загрузки файла)."""
        if self.get(record.id) is not None:
            raise ValueError(f"Договор id={record.id} уже есть в каталоге")
        fresh = record.reclassified(self._clock.today())
        self._items.insert(0, fresh)
        logger.info("В каталог добавлен договор id=%s (%s)", fresh.id, fresh.name)
        self.notify("contract_added", fresh)

    def clear(self) -> None:
        if not self._items:
            return
        self._items = []
        logger.info("Каталог очищен")
        self.notify("catalog_cleared", None)

    def reclassify(self) -> None:
        """Пересчитать риск всех договоров на текущую дату часов (например, наступил новый день)."""
        ref = self._clock.today()
        self._items = [c.reclassified(ref) for c in self._items]
