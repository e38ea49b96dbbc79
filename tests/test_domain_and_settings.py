from datetime import date

import pytest

from contracts_domain import (
    UploadedFile,
    contract_from_record,
    contract_to_record,
    new_contract_payload,
    type_from_file_name,
)
from risk_classifier import RiskLevel
from settings import load_settings
from validators import Validator

REF = date(2026, 1, 2)


def test_record_accepts_camel_case_and_ignores_stored_risk():
    c = contract_from_record({
        "id": 5, "name": "NDA", "type": "NDA", "counterparty": "Acme",
        "expirationDate": "2026-01-05T00:00:00Z", "status": "Active", "riskLevel": "Low",
    }, reference=REF)
    assert c.id == "5"
    assert c.expiration_date == date(2026, 1, 5)
    assert c.risk_level is RiskLevel.HIGH


def test_risk_is_not_persisted():
    c = contract_from_record({
        "id": "x", "name": "NDA", "type": "NDA", "counterparty": "Acme",
        "expiration_date": "2026-06-01", "status": "Draft",
    }, reference=REF)
    rec = contract_to_record(c)
    assert "risk_level" not in rec
    assert rec["expiration_date"] == "2026-06-01"


@pytest.mark.parametrize("field, value", [
    ("status", "Closed"),
    ("expiration_date", "01-02-2026"),
    ("name", "  "),
])
def test_invalid_records(field, value):
    rec = {"id": "x", "name": "NDA", "type": "NDA", "counterparty": "Acme",
           "expiration_date": "2026-06-01", "status": "Draft", field: value}
    with pytest.raises(ValueError):
        contract_from_record(rec, reference=REF)


def test_new_upload_defaults():
    p = new_contract_payload(UploadedFile("C:\\docs\\Lease.docx", b"x"), reference=REF)
    assert p == {
        "name": "Lease.docx",
        "type": "DOCX",
        "counterparty": "—",
        "expiration_date": "2027-01-02",
        "status": "Draft",
    }


def test_type_from_file_name():
    assert type_from_file_name("a.pdf") == "PDF"
    assert type_from_file_name("README") == "Document"


def test_iso_date_accepts_date_objects():
    assert Validator.iso_date("d", date(2026, 3, 1)) == date(2026, 3, 1)


def test_settings_defaults_and_users():
    s = load_settings({"LOCAL_USERS": "Anna@Example.com:secret, boris@example.com:q:w"})
    assert s.backend == "json"
    assert s.local_users == {"anna@example.com": "secret", "boris@example.com": "q:w"}
    assert s.http_port == 8000


def test_settings_rejects_unknown_backend():
    with pytest.raises(ValueError):
        load_settings({"CONTRACTS_BACKEND": "mongo"})


def test_settings_db():
    s = load_settings({"CONTRACTS_BACKEND": "DB", "DB_PORT": "6543", "DB_NAME": "desk"})
    assert s.backend == "db"
    assert s.db_config["port"] == 6543
    assert s.db_config["dbname"] == "desk"
