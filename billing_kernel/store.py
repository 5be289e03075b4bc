"""
Record store boundary (``billing_kernel.store``).

Responsibility
--------------
The reporting engine never owns records: it borrows a read-only snapshot
from an injected store for the duration of one report computation.  This
module defines that boundary and two implementations:

* ``InMemoryRecordStore`` -- tuples of frozen DTOs; used by tests and by
  hosts that already hold the records in memory.
* ``SqlRecordStore`` -- SQLAlchemy-backed; reads go through
  ``BillingSelector``, appends go through the ORM ``from_dto`` mappers.

Invariants enforced
-------------------
* Reads return immutable tuples; mutating the store after a read never
  changes a snapshot already handed out.
* Records are append-only through this interface.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sqlalchemy.orm import Session

from billing_kernel.domain.records import (
    AuditLogEntry,
    BillRecord,
    Contract,
    Contractor,
    as_utc,
)
from billing_kernel.logging_config import get_logger
from billing_kernel.models.audit_log import AuditLogModel
from billing_kernel.models.bill import BillModel
from billing_kernel.models.contract import ContractModel, ContractorModel
from billing_kernel.selectors.billing_selector import BillingSelector

logger = get_logger("store")


@runtime_checkable
class RecordStore(Protocol):
    """Read-all / append access to billing records."""

    def read_bills(self) -> tuple[BillRecord, ...]: ...

    def read_contracts(self) -> tuple[Contract, ...]: ...

    def read_contractors(self) -> tuple[Contractor, ...]: ...

    def read_audit_log(self) -> tuple[AuditLogEntry, ...]: ...

    def append_bill(self, bill: BillRecord) -> None: ...

    def append_audit_entry(self, entry: AuditLogEntry) -> None: ...


class InMemoryRecordStore:
    """Record store over plain in-memory tuples."""

    def __init__(
        self,
        bills: tuple[BillRecord, ...] | list[BillRecord] = (),
        contracts: tuple[Contract, ...] | list[Contract] = (),
        contractors: tuple[Contractor, ...] | list[Contractor] = (),
        audit_log: tuple[AuditLogEntry, ...] | list[AuditLogEntry] = (),
    ):
        self._bills = tuple(bills)
        self._contracts = tuple(contracts)
        self._contractors = tuple(contractors)
        self._audit_log = tuple(audit_log)

    def read_bills(self) -> tuple[BillRecord, ...]:
        return self._bills

    def read_contracts(self) -> tuple[Contract, ...]:
        return self._contracts

    def read_contractors(self) -> tuple[Contractor, ...]:
        return self._contractors

    def read_audit_log(self) -> tuple[AuditLogEntry, ...]:
        """Audit entries, newest first."""
        return tuple(
            sorted(self._audit_log, key=lambda e: as_utc(e.timestamp), reverse=True)
        )

    def append_bill(self, bill: BillRecord) -> None:
        self._bills = self._bills + (bill,)

    def append_contract(self, contract: Contract) -> None:
        self._contracts = self._contracts + (contract,)

    def append_contractor(self, contractor: Contractor) -> None:
        self._contractors = self._contractors + (contractor,)

    def append_audit_entry(self, entry: AuditLogEntry) -> None:
        self._audit_log = self._audit_log + (entry,)


class SqlRecordStore:
    """
    Record store backed by a SQLAlchemy session.

    The caller owns the session and its transaction scope; appends are
    flushed but not committed.
    """

    def __init__(self, session: Session):
        self._session = session
        self._selector = BillingSelector(session)

    def read_bills(self) -> tuple[BillRecord, ...]:
        return self._selector.bills()

    def read_contracts(self) -> tuple[Contract, ...]:
        return self._selector.contracts()

    def read_contractors(self) -> tuple[Contractor, ...]:
        return self._selector.contractors()

    def read_audit_log(self) -> tuple[AuditLogEntry, ...]:
        return self._selector.audit_log()

    def append_bill(self, bill: BillRecord) -> None:
        self._session.add(BillModel.from_dto(bill))
        self._session.flush()
        logger.info(
            "bill_appended",
            extra={"bill_id": bill.bill_id, "bill_number": bill.bill_number},
        )

    def append_contract(self, contract: Contract) -> None:
        self._session.add(ContractModel.from_dto(contract))
        self._session.flush()

    def append_contractor(self, contractor: Contractor) -> None:
        self._session.add(ContractorModel.from_dto(contractor))
        self._session.flush()

    def append_audit_entry(self, entry: AuditLogEntry) -> None:
        self._session.add(AuditLogModel.from_dto(entry))
        self._session.flush()
