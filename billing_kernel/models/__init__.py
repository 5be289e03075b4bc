"""ORM models for the SQL record store."""

from billing_kernel.models.audit_log import AuditLogModel
from billing_kernel.models.bill import BillItemModel, BillModel
from billing_kernel.models.contract import ContractModel, ContractorModel

__all__ = [
    "AuditLogModel",
    "BillItemModel",
    "BillModel",
    "ContractModel",
    "ContractorModel",
]
