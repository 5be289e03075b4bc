"""
Reporting-specific test fixtures.

Provides:
- ReportingConfig and ReportingService instances
- A small in-memory record set: two contractors, three contracts,
  four bills across two months, and a handful of audit entries
"""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from billing_kernel.domain.records import Deductions
from billing_kernel.store import InMemoryRecordStore
from billing_modules.reporting.config import ReportingConfig
from billing_modules.reporting.service import ReportingService

from tests.factories import (
    make_audit_entry,
    make_bill,
    make_contract,
    make_contractor,
    make_item,
)


@pytest.fixture
def reporting_config() -> ReportingConfig:
    """Standard reporting configuration for tests."""
    return ReportingConfig.with_defaults()


@pytest.fixture
def contractors():
    return (
        make_contractor(1, "Acme"),
        make_contractor(2, "Bolt Transport"),
    )


@pytest.fixture
def contracts():
    return (
        make_contract(1, 1, "Acme", "Rawalpindi", "Muzaffarabad"),
        make_contract(2, 1, "Acme", "Muzaffarabad", "Bagh"),
        make_contract(3, 2, "Bolt Transport", "Rawalpindi", "Kotli"),
    )


@pytest.fixture
def bills():
    """
    Four bills:

    B-001 Acme  2024-01-10  RWP->MZD (c1)             gross 1000  ded 100
    B-002 Acme  2024-02-05  RWP->MZD (c1), MZD->Bagh (c2)  gross 1500  ded 150
    B-003 Bolt  2024-02-20  RWP->Kotli (c3)           gross 800   ded 0
    B-004 Bolt  2024-01-25  RWP->Kotli (c3)           gross 400   ded 40
    """
    return (
        make_bill(
            "B-001",
            date(2024, 1, 10),
            1,
            "Acme",
            items=(make_item("Rawalpindi", "Muzaffarabad", "500", "2.0", contract_id=1),),
            deductions=Deductions(income_tax=Decimal("80"), klc=Decimal("20")),
        ),
        make_bill(
            "B-002",
            date(2024, 2, 5),
            1,
            "Acme",
            items=(
                make_item("Rawalpindi", "Muzaffarabad", "250", "2.0", contract_id=1),
                make_item("Muzaffarabad", "Bagh", "400", "2.5", contract_id=2),
            ),
            deductions=Deductions(
                income_tax=Decimal("100"),
                others=Decimal("50"),
                others_description="Late delivery",
            ),
        ),
        make_bill(
            "B-003",
            date(2024, 2, 20),
            2,
            "Bolt Transport",
            items=(make_item("Rawalpindi", "Kotli", "400", "2.0", contract_id=3),),
        ),
        make_bill(
            "B-004",
            date(2024, 1, 25),
            2,
            "Bolt Transport",
            items=(make_item("Rawalpindi", "Kotli", "200", "2.0", contract_id=3),),
            deductions=Deductions(gst_current=Decimal("40")),
        ),
    )


@pytest.fixture
def audit_entries():
    return (
        make_audit_entry(datetime(2024, 3, 9, 8, 0, tzinfo=UTC), "LOGIN", "admin"),
        make_audit_entry(
            datetime(2024, 3, 10, 23, 59, tzinfo=UTC),
            "CREATE_BILL",
            "clerk",
            details={"bill_number": "B-003"},
        ),
        make_audit_entry(datetime(2024, 3, 11, 0, 0, 1, tzinfo=UTC), "DELETE_BILL", "admin"),
    )


@pytest.fixture
def record_store(bills, contracts, contractors, audit_entries) -> InMemoryRecordStore:
    return InMemoryRecordStore(
        bills=bills,
        contracts=contracts,
        contractors=contractors,
        audit_log=audit_entries,
    )


@pytest.fixture
def reporting_service(
    record_store,
    deterministic_clock,
    reporting_config,
) -> ReportingService:
    """ReportingService wired to the in-memory record store."""
    return ReportingService(
        store=record_store,
        clock=deterministic_clock,
        config=reporting_config,
    )
