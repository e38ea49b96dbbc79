# db_singleton.py
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import psycopg2
from psycopg2.extensions import connection as pg_connection
from psycopg2.extras import RealDictCursor


class PgDB:
    """
    Singleton для работы с PostgreSQL (без ORM).
    Открывает соединение на каждый вызов метода и сразу закрывает.
    """

    _instance: PgDB | None = None

    def __init__(self, **conn_params: Any) -> None:
        self._conn_params = dict(conn_params)

    @classmethod
    def init(cls, **conn_params: Any) -> PgDB:
        """
        Однократная инициализация параметров подключения (создаёт/обновляет Singleton).
        """
        if cls._instance is None:
            cls._instance = PgDB(**conn_params)
        else:
            cls._instance._conn_params = dict(conn_params)
        return cls._instance

    @classmethod
    def get(cls) -> PgDB:
        if cls._instance is None:
            raise RuntimeError("PgDB не инициализирован. Сначала вызовите PgDB.init(...).")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    def connect(self) -> pg_connection:
        """Новое подключение с autocommit=True."""
        conn: pg_connection = psycopg2.connect(**self._conn_params)  # type: ignore[call-arg]
        conn.autocommit = True
        return conn

    def _run(self, sql: str, params: Iterable[Any] | None, fetch: str) -> Any:
        conn = self.connect()
        try:
            cur = conn.cursor(cursor_factory=RealDictCursor)
            try:
                cur.execute(sql, params)
                if fetch == "one":
                    row = cur.fetchone()
                    return dict(row) if row is not None else None
                if fetch == "all":
                    return [dict(r) for r in cur.fetchall()]
                return cur.rowcount
            finally:
                cur.close()
        finally:
            conn.close()

    def fetch_all(self, sql: str, params: Iterable[Any] | None = None) -> list[dict[str, Any]]:
        return self._run(sql, params, "all")

    def execute(self, sql: str, params: Iterable[Any] | None = None) -> int:
        return self._run(sql, params, "count")

    def execute_returning(
        self, sql: str, params: Iterable[Any] | None = None
    ) -> dict[str, Any] | None:
        """Запрос с RETURNING: первая строка результата (dict) либо None."""
        return self._run(sql, params, "one")
