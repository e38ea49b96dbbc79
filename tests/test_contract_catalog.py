from datetime import date

import pytest

from contract_catalog import ContractCatalog
from risk_classifier import RiskLevel, classify


class Recorder:
    def __init__(self):
        self.events = []

    def update(self, event, payload):
        self.events.append(event)


def test_load_preserves_order_and_recomputes_risk(clock, make_contract, today):
    a = make_contract("a", days=10, risk=RiskLevel.LOW)
    b = make_contract("b", days=45, risk=RiskLevel.LOW)
    c = make_contract("c", days=120, risk=RiskLevel.HIGH)
    catalog = ContractCatalog(clock)

    catalog.load([a, b, c])

    assert [x.id for x in catalog] == ["a", "b", "c"]
    for x in catalog.items():
        assert x.risk_level is classify(today, x.expiration_date)
    assert [x.risk_level for x in catalog.items()] == [RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW]


def test_load_replaces_previous_content(clock, make_contract):
    catalog = ContractCatalog(clock)
    catalog.load([make_contract(1), make_contract(2)])
    catalog.load([make_contract(3)])
    assert [x.id for x in catalog] == ["3"]


def test_add_prepends(clock, make_contract):
    catalog = ContractCatalog(clock)
    a, b, c = make_contract("a"), make_contract("b"), make_contract("c", days=5)
    catalog.load([a, b])

    catalog.add(c)

    assert [x.id for x in catalog] == ["c", "a", "b"]
    assert catalog.get("c").risk_level is RiskLevel.HIGH


def test_duplicate_ids_rejected_without_mutation(clock, make_contract):
    catalog = ContractCatalog(clock)
    catalog.load([make_contract("a")])

    with pytest.raises(ValueError):
        catalog.load([make_contract("x"), make_contract("x")])
    assert [x.id for x in catalog] == ["a"]

    with pytest.raises(ValueError):
        catalog.add(make_contract("a"))
    assert len(catalog) == 1


def test_clear(clock, make_contract):
    catalog = ContractCatalog(clock)
    catalog.load([make_contract(1), make_contract(2)])
    catalog.clear()
    assert catalog.items() == []
    catalog.clear()
    assert catalog.items() == []


def test_events(clock, make_contract):
    catalog = ContractCatalog(clock)
    rec = Recorder()
    catalog.attach(rec)

    catalog.clear()  # empty -> no-op, no event
    catalog.load([make_contract(1)])
    catalog.add(make_contract(2))
    catalog.clear()

    assert rec.events == ["catalog_loaded", "contract_added", "catalog_cleared"]


def test_reclassify_follows_clock(clock, make_contract):
    catalog = ContractCatalog(clock)
    catalog.load([make_contract("a", days=70)])
    assert catalog.get("a").risk_level is RiskLevel.LOW

    clock.set(date(2026, 2, 1))  # 40 days left
    catalog.reclassify()
    assert catalog.get("a").risk_level is RiskLevel.MEDIUM
