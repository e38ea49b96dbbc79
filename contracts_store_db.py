# contracts_store_db.py
from __future__ import annotations

import logging
import uuid
from typing import Any

import psycopg2

from clock import Clock
from contracts_domain import Contract, UploadedFile, contract_from_record, new_contract_payload
from db_singleton import PgDB
from errors import FetchFailure, UploadFailure

logger = logging.getLogger(__name__)

_COLUMNS = "id, name, type, counterparty, expiration_date, status, file_name, created_at"


class DbContractStore:
    """
    Договоры в PostgreSQL (SQL делегируется в PgDB).
    Документ хранится в той же строке (BYTEA) — отдельного файлового хранилища нет.
    """

    def __init__(
        self,
        clock: Clock,
        *,
        host: str = "127.0.0.1",
        port: int = 5432,
        dbname: str = "contracts_db",
        user: str = "postgres",
        password: str = "",
        auto_migrate: bool = True,
    ) -> None:
        self.clock = clock
        PgDB.init(host=host, port=port, dbname=dbname, user=user, password=password)
        if auto_migrate:
            self.ensure_schema()

    def ensure_schema(self) -> None:
        """Создаёт таблицу и индекс, если их ещё нет."""
        ddl_table = """
        CREATE TABLE IF NOT EXISTS contracts (
            id               TEXT PRIMARY KEY,
            user_id          TEXT        NOT NULL,
            name             TEXT        NOT NULL,
            type             TEXT        NOT NULL,
            counterparty     TEXT        NOT NULL,
            expiration_date  DATE        NOT NULL,
            status           TEXT        NOT NULL
                CHECK (status IN ('Active', 'Draft', 'Expired')),
            file_name        TEXT,
            content_type     TEXT,
            file_data        BYTEA,
            created_at       TIMESTAMPTZ NOT NULL DEFAULT now()
        );
        """
        ddl_index_user = (
            "CREATE INDEX IF NOT EXISTS idx_contracts_user_created "
            "ON contracts(user_id, created_at DESC);"
        )
        db = PgDB.get()
        db.execute(ddl_table)
        db.execute(ddl_index_user)

    def _row_to_contract(self, r: dict[str, Any]) -> Contract:
        rec = dict(r)
        rec["file_path"] = f"db:{r['id']}" if r.get("file_name") else None
        return contract_from_record(rec, reference=self.clock.today())

    # ===== API =====
    def fetch_all(self, user_id: str) -> list[Contract]:
        try:
            rows = PgDB.get().fetch_all(
                f"SELECT {_COLUMNS} FROM contracts WHERE user_id = %s "
                "ORDER BY created_at DESC, id",
                [user_id],
            )
        except psycopg2.Error as e:
            logger.error("Выборка договоров из БД не удалась: %s", e)
            raise FetchFailure(str(e).strip() or type(e).__name__, user_id=user_id) from e

        result: list[Contract] = []
        for r in rows:
            try:
                result.append(self._row_to_contract(r))
            except ValueError as exc:
                logger.warning("Пропущена некорректная строка id=%s: %s", r.get("id"), exc)
        return result

    def upload(self, file: UploadedFile, user_id: str) -> Contract:
        try:
            payload = new_contract_payload(file, reference=self.clock.today())
        except ValueError as e:
            raise UploadFailure(str(e), file_name=file.name) from e

        try:
            row = PgDB.get().execute_returning(
                f"""
                INSERT INTO contracts(id, user_id, name, type, counterparty,
                                      expiration_date, status, file_name, content_type, file_data)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                RETURNING {_COLUMNS}""",
                [str(uuid.uuid4()), user_id, payload["name"], payload["type"],
                 payload["counterparty"], payload["expiration_date"], payload["status"],
                 payload["name"], file.guessed_content_type(), psycopg2.Binary(file.content)],
            )
        except psycopg2.Error as e:
            logger.error("Загрузка %s в БД не удалась: %s", file.name, e)
            raise UploadFailure(str(e).strip() or type(e).__name__, file_name=file.name) from e
        if not row:
            raise UploadFailure("БД не вернула созданную запись", file_name=file.name)

        logger.info("Загружен %s (%d байт) -> id=%s", payload["name"], file.size, row["id"])
        return self._row_to_contract(row)
