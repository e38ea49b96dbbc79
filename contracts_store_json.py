# contracts_store_json.py
from __future__ import annotations

import json
from typing import Any

from base_contracts_store import BaseFileContractStore


class JsonContractStore(BaseFileContractStore):
    def _read_array(self, path: str) -> list[dict[str, Any]]:
        with open(path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Некорректный JSON: {e}") from e
        if not isinstance(data, list):
            raise ValueError("JSON должен быть массивом объектов (списком).")
        # негладкие элементы оставляем — валидация дальше пометит ошибку
        return [item if isinstance(item, dict) else {"__raw__": item} for item in data]

    def _write_array(self, path: str, records: list[dict[str, Any]]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(records, f, ensure_ascii=False, indent=2)
