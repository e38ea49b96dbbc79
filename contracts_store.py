# contracts_store.py
from __future__ import annotations

from typing import Protocol

from contracts_domain import Contract, UploadedFile


class ContractStore(Protocol):
    """
    Внешнее хранилище договоров. Обе операции могут упасть:
      - fetch_all -> FetchFailure
      - upload    -> UploadFailure
    Других исключений наружу не выпускаем.
    """

    def fetch_all(self, user_id: str) -> list[Contract]: ...

    def upload(self, file: UploadedFile, user_id: str) -> Contract: ...
