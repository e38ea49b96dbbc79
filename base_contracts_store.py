# base_contracts_store.py
from __future__ import annotations

import logging
import os
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from clock import Clock
from contracts_domain import Contract, UploadedFile, contract_from_record, new_contract_payload
from errors import FetchFailure, UploadFailure

logger = logging.getLogger(__name__)


class BaseFileContractStore(ABC):
    """
    Базовое файловое хранилище договоров (общая логика для JSON/YAML).
    Конкретные реализации переопределяют _read_array/_write_array.

    Все договоры всех пользователей лежат одним массивом в self.path,
    у каждой записи есть user_id. Сами документы — рядом, в каталоге
    <path без расширения>_files/<user_id>/.
    """

    def __init__(self, path: str, clock: Clock) -> None:
        self.path = path
        self.clock = clock

    # ---------- НИЗКИЙ УРОВЕНЬ: абстракции формата ----------

    @abstractmethod
    def _read_array(self, path: str) -> list[dict[str, Any]]:
        """
        Прочитать массив записей (list[dict]) из файла `path`.

        Должен:
          - вернуть list[dict]
          - кидать FileNotFoundError если файла нет
          - кидать ValueError при некорректном формате/структуре
        """
        raise NotImplementedError

    @abstractmethod
    def _write_array(self, path: str, records: list[dict[str, Any]]) -> None:
        """Записать массив записей (list[dict]) в файл `path`."""
        raise NotImplementedError

    # ---------------------- Утилиты ----------------------

    def files_dir(self, user_id: str) -> str:
        root, _ = os.path.splitext(self.path)
        return os.path.join(f"{root}_files", user_id)

    def _records(self) -> list[dict[str, Any]]:
        try:
            return self._read_array(self.path)
        except FileNotFoundError:
            return []

    def read_all(self, user_id: str) -> tuple[list[Contract], list[dict[str, Any]]]:
        """
        Читает записи пользователя, валидирует в Contract.
        Возвращает (ok_contracts, errors): некорректные записи не прерывают чтение.
        """
        ref = self.clock.today()
        ok: list[Contract] = []
        errors: list[dict[str, Any]] = []
        for idx, rec in enumerate(self._records()):
            if rec.get("user_id") != user_id:
                continue
            try:
                ok.append(contract_from_record(rec, reference=ref))
            except ValueError as exc:
                errors.append({
                    "index": idx,
                    "id": rec.get("id"),
                    "error_type": type(exc).__name__,
                    "message": str(exc),
                })
        return ok, errors

    # ---------------------- API хранилища ----------------------

    def fetch_all(self, user_id: str) -> list[Contract]:
        try:
            ok, errors = self.read_all(user_id)
        except (OSError, ValueError) as e:
            logger.error("Не удалось прочитать %s: %s", self.path, e)
            raise FetchFailure(f"Не удалось прочитать {self.path}: {e}", user_id=user_id) from e
        for err in errors:
            logger.warning("Пропущена некорректная запись id=%s: %s", err["id"], err["message"])
        return ok

    def upload(self, file: UploadedFile, user_id: str) -> Contract:
        file_path: str | None = None
        try:
            payload = new_contract_payload(file, reference=self.clock.today())
            records = self._records()
            cid = str(uuid.uuid4())

            target_dir = self.files_dir(user_id)
            os.makedirs(target_dir, exist_ok=True)
            file_path = os.path.join(target_dir, f"{cid}_{payload['name']}")
            with open(file_path, "wb") as f:
                f.write(file.content)

            rec = {
                "id": cid,
                "user_id": user_id,
                **payload,
                "file_path": file_path,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            # новые — в начало, как и в каталоге
            self._write_array(self.path, [rec, *records])
        except (OSError, ValueError) as e:
            logger.error("Загрузка %s не удалась: %s", file.name, e)
            if file_path is not None:
                self._discard(file_path)
            raise UploadFailure(str(e), file_name=file.name) from e

        logger.info("Загружен %s (%d байт) -> id=%s", payload["name"], file.size, cid)
        return contract_from_record(rec, reference=self.clock.today())

    @staticmethod
    def _discard(file_path: str) -> None:
        # документ без записи о договоре не нужен
        try:
            os.remove(file_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Не удалось удалить %s: %s", file_path, e)
