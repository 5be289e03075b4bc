"""
Pure domain layer.

Immutable record DTOs and the clock abstraction, with NO dependencies on
the ORM, the database, or any I/O.
"""

from billing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from billing_kernel.domain.records import (
    DEDUCTION_CATEGORIES,
    ZERO,
    Attachment,
    AuditLogEntry,
    BillItem,
    BillRecord,
    Contract,
    Contractor,
    Deductions,
    as_utc,
    format_route,
    quantize_money,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "DEDUCTION_CATEGORIES",
    "ZERO",
    "Attachment",
    "AuditLogEntry",
    "BillItem",
    "BillRecord",
    "Contract",
    "Contractor",
    "Deductions",
    "as_utc",
    "format_route",
    "quantize_money",
]
