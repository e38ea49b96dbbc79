# contracts_store_yaml.py
from __future__ import annotations

from typing import Any

import yaml  # type: ignore[import-untyped]

from base_contracts_store import BaseFileContractStore


class YamlContractStore(BaseFileContractStore):
    def _read_array(self, path: str) -> list[dict[str, Any]]:
        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Некорректный YAML: {e}") from e
        if data is None:
            return []
        if not isinstance(data, list):
            raise ValueError("YAML должен быть массивом объектов (списком).")
        result: list[dict[str, Any]] = []
        for item in data:
            if isinstance(item, dict):
                result.append(item)
            else:
                result.append({"__raw__": item})
        return result

    def _write_array(self, path: str, records: list[dict[str, Any]]) -> None:
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                records,
                f,
                allow_unicode=True,
                sort_keys=False,
                indent=2,
                default_flow_style=False,
            )
