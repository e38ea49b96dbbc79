"""
Хранилище договоров в облачном бэкенде (REST-таблица + объектное хранилище).

- GET  /rest/v1/contracts?user_id=eq.<id>   — список договоров пользователя
- POST /storage/v1/object/<bucket>/<path>   — сам документ
- POST /rest/v1/contracts                   — запись о договоре

Все HTTP-вызовы к хранилищу договоров — только здесь.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Optional
from urllib.parse import quote

import httpx

from clock import Clock
from contracts_domain import Contract, UploadedFile, contract_from_record, new_contract_payload
from errors import FetchFailure, UploadFailure

logger = logging.getLogger(__name__)


def _error_text(resp: httpx.Response) -> str:
    """Текст ошибки бэкенда как есть (message/error/msg), иначе HTTP-код."""
    try:
        data: Any = resp.json()
    except ValueError:
        return resp.text.strip() or f"HTTP {resp.status_code}"
    if isinstance(data, dict):
        for key in ("message", "error_description", "error", "msg"):
            if data.get(key):
                return str(data[key])
    return f"HTTP {resp.status_code}"


class RestContractStore:
    def __init__(
        self,
        base_url: str,
        anon_key: str,
        clock: Clock,
        *,
        token_provider: Optional[Callable[[], Optional[str]]] = None,
        bucket: str = "contracts",
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        if not base_url:
            raise ValueError("BACKEND_URL не задан — REST-хранилище недоступно.")
        self.clock = clock
        self.bucket = bucket
        self._anon_key = anon_key
        self._token_provider = token_provider
        self._client = httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    def _headers(self, **extra: str) -> dict[str, str]:
        token = (self._token_provider() if self._token_provider else None) or self._anon_key
        headers = {"apikey": self._anon_key, "Authorization": f"Bearer {token}"}
        headers.update(extra)
        return headers

    def close(self) -> None:
        self._client.close()

    # ===== API =====
    def fetch_all(self, user_id: str) -> list[Contract]:
        try:
            resp = self._client.get(
                "/rest/v1/contracts",
                params={"select": "*", "user_id": f"eq.{user_id}", "order": "created_at.desc"},
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.error("Запрос списка договоров не удался: %s", e)
            raise FetchFailure(f"Бэкенд недоступен: {e}", user_id=user_id) from e

        if resp.status_code >= 400:
            reason = _error_text(resp)
            logger.error("Бэкенд вернул %s на выборку договоров: %s", resp.status_code, reason)
            raise FetchFailure(reason, user_id=user_id)

        try:
            rows = resp.json()
        except ValueError as e:
            raise FetchFailure("Бэкенд вернул не-JSON ответ", user_id=user_id) from e
        if not isinstance(rows, list):
            raise FetchFailure("Бэкенд вернул не список записей", user_id=user_id)

        ref = self.clock.today()
        result: list[Contract] = []
        for r in rows:
            try:
                result.append(contract_from_record(r, reference=ref))
            except ValueError as exc:
                rid = r.get("id") if isinstance(r, dict) else None
                logger.warning("Пропущена некорректная запись id=%s: %s", rid, exc)
        return result

    def upload(self, file: UploadedFile, user_id: str) -> Contract:
        try:
            payload = new_contract_payload(file, reference=self.clock.today())
        except ValueError as e:
            raise UploadFailure(str(e), file_name=file.name) from e

        object_path = f"{user_id}/{uuid.uuid4().hex}_{payload['name']}"
        object_url = f"/storage/v1/object/{self.bucket}/{quote(object_path)}"

        # 1) сам файл
        try:
            resp = self._client.post(
                object_url,
                content=file.content,
                headers=self._headers(**{"Content-Type": file.guessed_content_type(),
                                         "x-upsert": "false"}),
            )
        except httpx.HTTPError as e:
            logger.error("Загрузка файла %s не удалась: %s", file.name, e)
            raise UploadFailure(f"Бэкенд недоступен: {e}", file_name=file.name) from e
        if resp.status_code >= 400:
            raise UploadFailure(_error_text(resp), file_name=file.name)

        # 2) запись о договоре
        row = {**payload, "user_id": user_id, "file_path": object_path}
        try:
            resp = self._client.post(
                "/rest/v1/contracts",
                json=row,
                headers=self._headers(Prefer="return=representation"),
            )
        except httpx.HTTPError as e:
            self._remove_object(object_url)
            raise UploadFailure(f"Бэкенд недоступен: {e}", file_name=file.name) from e
        if resp.status_code >= 400:
            reason = _error_text(resp)
            self._remove_object(object_url)
            raise UploadFailure(reason, file_name=file.name)

        try:
            data = resp.json()
            created = data[0] if isinstance(data, list) and data else data
            contract = contract_from_record(created, reference=self.clock.today())
        except ValueError as e:
            # JSONDecodeError — тоже ValueError
            self._remove_object(object_url)
            raise UploadFailure(f"Бэкенд вернул некорректную запись: {e}", file_name=file.name) from e
        logger.info("Загружен %s (%d байт) -> id=%s", payload["name"], file.size, contract.id)
        return contract

    def _remove_object(self, object_url: str) -> None:
        # файл без записи о договоре никому не нужен
        try:
            self._client.delete(object_url, headers=self._headers())
        except httpx.HTTPError as e:
            logger.warning("Не удалось удалить осиротевший файл %s: %s", object_url, e)
