"""Pytest fixtures for the contract desk tests."""

from datetime import date, timedelta

import pytest

from auth_session import AuthSession, StaticAuthBackend
from clock import FixedClock
from contracts_domain import Contract, UploadedFile, contract_from_record, new_contract_payload
from contracts_workspace import ContractsWorkspace
from errors import FetchFailure, UploadFailure
from risk_classifier import RiskLevel

TODAY = date(2026, 1, 2)
USER_EMAIL = "anna@example.com"
USER_PASSWORD = "secret"


class InMemoryStore:
    """ContractStore double: records per user, switchable failures."""

    def __init__(self, clock):
        self.clock = clock
        self.records = {}
        self.fail_fetch = None
        self.fail_upload = None
        self.fetch_calls = 0
        self._next_id = 100
        self.closed = False

    def fetch_all(self, user_id):
        self.fetch_calls += 1
        if self.fail_fetch:
            raise FetchFailure(self.fail_fetch, user_id=user_id)
        return list(self.records.get(user_id, []))

    def upload(self, file: UploadedFile, user_id):
        if self.fail_upload:
            raise UploadFailure(self.fail_upload, file_name=file.name)
        payload = new_contract_payload(file, reference=self.clock.today())
        self._next_id += 1
        c = contract_from_record({"id": str(self._next_id), **payload}, reference=self.clock.today())
        self.records.setdefault(user_id, []).insert(0, c)
        return c

    def close(self):
        self.closed = True


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def clock():
    return FixedClock(TODAY)


@pytest.fixture
def make_contract():
    def _make(cid, days=90, *, status="Active", name=None, risk=RiskLevel.LOW):
        return Contract(
            id=str(cid),
            name=name or f"Contract {cid}",
            type="NDA",
            counterparty="Acme",
            expiration_date=TODAY + timedelta(days=days),
            status=status,
            # deliberately stale risk: catalog must recompute it
            risk_level=risk,
        )

    return _make


@pytest.fixture
def store(clock):
    return InMemoryStore(clock)


@pytest.fixture
def auth_backend():
    return StaticAuthBackend({USER_EMAIL: USER_PASSWORD})


@pytest.fixture
def workspace(auth_backend, store, clock):
    return ContractsWorkspace(AuthSession(auth_backend), store, clock)


@pytest.fixture
def user_id():
    return StaticAuthBackend.user_id_for(USER_EMAIL)
