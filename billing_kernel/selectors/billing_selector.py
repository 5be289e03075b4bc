"""
Module: billing_kernel.selectors.billing_selector
Responsibility: Load the complete record set the reporting engine works on
    (bills with items, contracts, contractors, audit entries) as frozen DTOs.
Architecture position: Kernel > Selectors.

Failure modes:
    - SQLAlchemy errors propagate to the caller (read-only, nothing to roll back).
"""

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from billing_kernel.domain.records import (
    AuditLogEntry,
    BillRecord,
    Contract,
    Contractor,
)
from billing_kernel.logging_config import get_logger
from billing_kernel.models.audit_log import AuditLogModel
from billing_kernel.models.bill import BillModel
from billing_kernel.models.contract import ContractModel, ContractorModel
from billing_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.billing")


class BillingSelector(BaseSelector):
    """Read-only loader of billing records."""

    def bills(self) -> tuple[BillRecord, ...]:
        """All bills with their items, in bill-number order."""
        stmt = (
            select(BillModel)
            .options(selectinload(BillModel.items))
            .order_by(BillModel.bill_number)
        )
        rows = self.session.scalars(stmt).all()
        logger.debug("bills_loaded", extra={"bill_count": len(rows)})
        return tuple(row.to_dto() for row in rows)

    def contracts(self) -> tuple[Contract, ...]:
        stmt = select(ContractModel).order_by(ContractModel.id)
        return tuple(row.to_dto() for row in self.session.scalars(stmt).all())

    def contractors(self) -> tuple[Contractor, ...]:
        stmt = select(ContractorModel).order_by(ContractorModel.name)
        return tuple(row.to_dto() for row in self.session.scalars(stmt).all())

    def audit_log(self) -> tuple[AuditLogEntry, ...]:
        """All audit entries, newest first."""
        stmt = select(AuditLogModel).order_by(AuditLogModel.timestamp.desc())
        rows = self.session.scalars(stmt).all()
        logger.debug("audit_log_loaded", extra={"entry_count": len(rows)})
        return tuple(row.to_dto() for row in rows)
