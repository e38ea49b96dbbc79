# contracts_workspace.py
from __future__ import annotations

import logging
from typing import Any

from auth_session import AuthSession, Session
from clock import Clock
from contract_catalog import ContractCatalog
from contracts_domain import Contract, UploadedFile
from contracts_store import ContractStore
from dashboard_service import DashboardSummary, build_summary
from errors import FetchFailure, SessionRequired, UploadFailure
from mvc_observer import Observer

logger = logging.getLogger(__name__)


class ContractsWorkspace(Observer):
    """
    Состояние одной пользовательской сессии: сессия + каталог + хранилище.

    Подписан на ленту AuthSession:
      - "signed_in"  -> refresh() (ошибку выборки запоминаем в last_error)
      - "signed_out" -> каталог очищается
    Каталог меняется только после успешного завершения вызова хранилища.
    """

    def __init__(self, auth: AuthSession, store: ContractStore, clock: Clock) -> None:
        self.auth = auth
        self.store = store
        self.clock = clock
        self.catalog = ContractCatalog(clock)
        self.last_error: str | None = None
        self.auth.attach(self)

    # ===== Observer =====
    def update(self, event: str, payload: Any) -> None:
        if event == "signed_in":
            try:
                self.refresh()
            except FetchFailure:
                # уже залогировано; страница покажет last_error
                pass
        elif event == "signed_out":
            self.catalog.clear()
            self.last_error = None

    # ===== helpers =====
    def _require_session(self) -> Session:
        session = self.auth.current()
        if session is None:
            raise SessionRequired()
        return session

    # ===== операции =====
    def refresh(self) -> list[Contract]:
        """
        Перечитывает договоры пользователя. При FetchFailure каталог не трогаем,
        ошибку пробрасываем вызывающему (без повторов).
        Дубли id в ответе хранилища — тоже FetchFailure.
        """
        session = self._require_session()
        try:
            records = self.store.fetch_all(session.user_id)
            self.catalog.load(records)
        except FetchFailure as e:
            self.last_error = e.reason
            logger.error("Не удалось получить договоры пользователя %s: %s", session.email, e.reason)
            raise
        except ValueError as e:
            self.last_error = str(e)
            logger.error("Хранилище вернуло некорректный список для %s: %s", session.email, e)
            raise FetchFailure(str(e), user_id=session.user_id) from e
        self.last_error = None
        return self.catalog.items()

    def upload(self, file: UploadedFile) -> Contract:
        session = self._require_session()
        try:
            created = self.store.upload(file, session.user_id)
            self.catalog.add(created)
        except UploadFailure as e:
            logger.error("Загрузка %s не удалась: %s", file.name, e.reason)
            raise
        except ValueError as e:
            logger.error("Хранилище вернуло договор, который уже есть в каталоге: %s", e)
            raise UploadFailure(str(e), file_name=file.name) from e
        return self.catalog.items()[0]

    def sign_out(self) -> None:
        self.auth.sign_out()

    def summary(self) -> DashboardSummary:
        self._require_session()
        return build_summary(self.catalog.items(), self.clock.today())

    def close(self) -> None:
        """Отписаться от ленты сессии и закрыть соединения хранилища (если они есть)."""
        self.auth.detach(self)
        close_store = getattr(self.store, "close", None)
        if callable(close_store):
            close_store()
