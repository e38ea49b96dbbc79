from datetime import date, datetime, timezone

import psycopg2
import pytest

from contracts_domain import UploadedFile
from contracts_store_db import DbContractStore
from db_singleton import PgDB
from errors import FetchFailure, UploadFailure
from risk_classifier import RiskLevel


class FakeRun:
    """Stands in for PgDB._run: records SQL and returns queued results."""

    def __init__(self):
        self.calls = []
        self.results = []
        self.error = None

    def __call__(self, db, sql, params, fetch):
        self.calls.append((" ".join(sql.split()), params, fetch))
        if self.error is not None and fetch != "count":
            raise self.error
        if fetch == "count":
            return 0
        return self.results.pop(0) if self.results else None


@pytest.fixture
def fake_run(monkeypatch):
    run = FakeRun()
    monkeypatch.setattr(PgDB, "_run", lambda self, sql, params, fetch: run(self, sql, params, fetch))
    yield run
    PgDB.reset()


def _row(cid, exp, **extra):
    return {
        "id": cid, "name": f"Contract {cid}", "type": "NDA", "counterparty": "Acme",
        "expiration_date": exp, "status": "Active", "file_name": None,
        "created_at": datetime(2025, 12, 1, tzinfo=timezone.utc), **extra,
    }


def test_schema_is_created(fake_run, clock):
    DbContractStore(clock)
    ddl = [sql for sql, _, _ in fake_run.calls]
    assert any("CREATE TABLE IF NOT EXISTS contracts" in s for s in ddl)
    assert any("CREATE INDEX IF NOT EXISTS idx_contracts_user_created" in s for s in ddl)


def test_fetch_all_for_user(fake_run, clock):
    store = DbContractStore(clock, auto_migrate=False)
    fake_run.results.append([_row("a", date(2026, 1, 15)), _row("b", date(2026, 12, 1))])

    got = store.fetch_all("u1")

    sql, params, _ = fake_run.calls[-1]
    assert "WHERE user_id = %s" in sql
    assert "ORDER BY created_at DESC" in sql
    assert params == ["u1"]
    assert [c.id for c in got] == ["a", "b"]
    assert got[0].risk_level is RiskLevel.HIGH
    assert got[1].risk_level is RiskLevel.LOW


def test_fetch_db_error(fake_run, clock):
    store = DbContractStore(clock, auto_migrate=False)
    fake_run.error = psycopg2.OperationalError("could not connect to server")

    with pytest.raises(FetchFailure, match="could not connect"):
        store.fetch_all("u1")


def test_upload_inserts_row(fake_run, clock):
    store = DbContractStore(clock, auto_migrate=False)
    fake_run.results.append(_row("new", date(2027, 1, 2), name="Deal.pdf", type="PDF",
                                 status="Draft", file_name="Deal.pdf"))

    c = store.upload(UploadedFile("Deal.pdf", b"%PDF"), "u1")

    sql, params, _ = fake_run.calls[-1]
    assert sql.startswith("INSERT INTO contracts")
    assert params[1:8] == ["u1", "Deal.pdf", "PDF", "—", "2027-01-02", "Draft", "Deal.pdf"]
    assert c.id == "new"
    assert c.file_path == "db:new"


def test_upload_db_error(fake_run, clock):
    store = DbContractStore(clock, auto_migrate=False)
    fake_run.error = psycopg2.IntegrityError("duplicate key value violates unique constraint")

    with pytest.raises(UploadFailure, match="duplicate key"):
        store.upload(UploadedFile("Deal.pdf", b"%PDF"), "u1")
