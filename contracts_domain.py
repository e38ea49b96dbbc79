from __future__ import annotations
import mimetypes
import os
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from typing import Any, Literal, Optional

from risk_classifier import RiskLevel, classify
from validators import Validator as V

ContractStatus = Literal["Active", "Draft", "Expired"]

# Значения по умолчанию для только что загруженного документа
DEFAULT_UPLOAD_STATUS: ContractStatus = "Draft"
DEFAULT_UPLOAD_TERM_DAYS = 365
UNKNOWN_COUNTERPARTY = "—"


@dataclass(frozen=True, slots=True)
class Contract:
    id: str
    name: str
    type: str
    counterparty: str
    expiration_date: date
    status: ContractStatus
    # Производное поле: всегда classify(reference, expiration_date).
    # Из хранилища не читается и туда не пишется.
    risk_level: RiskLevel
    file_path: Optional[str] = None
    created_at: Optional[datetime] = None

    def reclassified(self, reference: date | datetime) -> Contract:
        return replace(self, risk_level=classify(reference, self.expiration_date))


@dataclass(frozen=True, slots=True)
class UploadedFile:
    name: str
    content: bytes
    content_type: Optional[str] = None
    # необязательные атрибуты договора, если пользователь их указал
    contract_type: Optional[str] = None
    counterparty: Optional[str] = None
    expiration_date: Optional[date] = None

    @property
    def size(self) -> int:
        return len(self.content)

    def guessed_content_type(self) -> str:
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or "application/octet-stream"


def _pick(r: dict[str, Any], snake: str, camel: str) -> Any:
    # записи из хранилища бывают и в snake_case, и в camelCase
    return r[snake] if snake in r else r.get(camel)


def contract_from_record(r: dict[str, Any], *, reference: date | datetime) -> Contract:
    """
    Запись хранилища (dict) -> Contract.
    Сохранённый риск (riskLevel / risk_level) игнорируется и считается заново.
    """
    if not isinstance(r, dict):
        raise ValueError("Запись договора должна быть объектом (dict).")
    expiration = V.iso_date("expiration_date", _pick(r, "expiration_date", "expirationDate"))
    created_raw = _pick(r, "created_at", "createdAt")
    created_at: Optional[datetime] = None
    if isinstance(created_raw, datetime):
        created_at = created_raw
    elif isinstance(created_raw, str) and created_raw:
        try:
            created_at = datetime.fromisoformat(created_raw.replace("Z", "+00:00"))
        except ValueError:
            created_at = None
    return Contract(
        id=V.contract_id(r.get("id")),
        name=V.require_non_empty("name", r.get("name")),
        type=V.require_non_empty("type", r.get("type")),
        counterparty=V.require_non_empty("counterparty", r.get("counterparty")),
        expiration_date=expiration,
        status=V.status(r.get("status")),  # type: ignore[arg-type]
        risk_level=classify(reference, expiration),
        file_path=_pick(r, "file_path", "filePath") or None,
        created_at=created_at,
    )


def contract_to_record(c: Contract) -> dict[str, Any]:
    """Contract -> запись для хранилища. risk_level сознательно не сохраняем."""
    rec: dict[str, Any] = {
        "id": c.id,
        "name": c.name,
        "type": c.type,
        "counterparty": c.counterparty,
        "expiration_date": c.expiration_date.isoformat(),
        "status": c.status,
    }
    if c.file_path:
        rec["file_path"] = c.file_path
    if c.created_at:
        rec["created_at"] = c.created_at.isoformat()
    return rec


def type_from_file_name(file_name: str) -> str:
    """contract.pdf -> PDF; без расширения -> Document."""
    _, ext = os.path.splitext(file_name)
    return ext.lstrip(".").upper() or "Document"


def new_contract_payload(f: UploadedFile, *, reference: date) -> dict[str, Any]:
    """
    Поля нового договора по загруженному файлу (без id — его выдаёт хранилище).
    """
    name = V.file_name(f.name)
    expiration = f.expiration_date or (reference + timedelta(days=DEFAULT_UPLOAD_TERM_DAYS))
    return {
        "name": name,
        "type": (f.contract_type or "").strip() or type_from_file_name(name),
        "counterparty": (f.counterparty or "").strip() or UNKNOWN_COUNTERPARTY,
        "expiration_date": expiration.isoformat(),
        "status": DEFAULT_UPLOAD_STATUS,
    }
