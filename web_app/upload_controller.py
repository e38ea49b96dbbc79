# upload_controller.py
from __future__ import annotations

import json
from typing import Any, Dict
from urllib.parse import parse_qs

from contracts_domain import UploadedFile, contract_to_record
from errors import UploadFailure
from validators import Validator as V
from web_app.web_session import SessionRegistry

MAX_UPLOAD_BYTES = 20 * 1024 * 1024


def _json(start_response, status: str, payload: Dict[str, Any]) -> list[bytes]:
    start_response(status, [("Content-Type", "application/json; charset=utf-8")])
    return [json.dumps(payload, ensure_ascii=False).encode("utf-8")]


class UploadController:
    """
    POST /contract/upload?name=<имя файла>[&type=..&counterparty=..&exp=ГГГГ-ММ-ДД]
    Тело запроса — сам файл. Ответ — JSON:
      200 {"ok": true, "contract": {...}}
      400 — некорректный запрос, 401 — нет сессии,
      502 {"ok": false, "error": "<текст ошибки хранилища как есть>"}
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    @staticmethod
    def _query(environ) -> Dict[str, list[str]]:
        return parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)

    @staticmethod
    def _first(q: Dict[str, list[str]], key: str, default: str = "") -> str:
        return (q.get(key, [default]) or [default])[0]

    def upload(self, environ, start_response):
        ws = self.registry.get(environ)
        if ws is None or ws.auth.current() is None:
            return _json(start_response, "401 Unauthorized", {"ok": False, "error": "Требуется вход"})

        try:
            size = int(environ.get("CONTENT_LENGTH", "0") or 0)
        except ValueError:
            size = 0
        if size <= 0:
            return _json(start_response, "400 Bad Request", {"ok": False, "error": "Пустой файл"})
        if size > MAX_UPLOAD_BYTES:
            return _json(start_response, "413 Payload Too Large",
                         {"ok": False, "error": "Файл больше 20 МБ"})

        q = self._query(environ)
        try:
            name = V.file_name(self._first(q, "name"))
            exp_raw = self._first(q, "exp")
            expiration = V.iso_date("exp", exp_raw) if exp_raw else None
        except ValueError as e:
            return _json(start_response, "400 Bad Request", {"ok": False, "error": str(e)})

        content = environ["wsgi.input"].read(size)
        f = UploadedFile(
            name=name,
            content=content,
            content_type=environ.get("CONTENT_TYPE") or None,
            contract_type=self._first(q, "type") or None,
            counterparty=self._first(q, "counterparty") or None,
            expiration_date=expiration,
        )
        try:
            created = ws.upload(f)
        except UploadFailure as e:
            return _json(start_response, "502 Bad Gateway", {"ok": False, "error": e.reason})

        return _json(start_response, "200 OK", {
            "ok": True,
            "contract": {**contract_to_record(created), "risk_level": created.risk_level.value},
        })
