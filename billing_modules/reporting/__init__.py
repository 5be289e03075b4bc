"""
Bill Reporting Module (``billing_modules.reporting``).

Responsibility
--------------
Read-only module that reports on transport bills: composable filters,
per-contractor / per-contract / per-station / per-month / per-deduction
summaries, the per-bill tax ledger, frozen contractor statements, audit
log queries, CSV export, sectioned print documents and the per-bill
print and audit summary.

Architecture position
---------------------
**Modules layer** -- pure functions plus one thin service.  Records are
read from an injected ``RecordStore``; nothing is ever written back.

Invariants enforced
-------------------
* No record is mutated by this module (read-only guarantee).
* Summaries are derived on every call; only the statement snapshot is
  frozen, and only on explicit request.

Failure modes
-------------
* Statement without a contractor -> ``NoContractorSelectedError``.
* Export / print with nothing to show -> ``EmptyReportError``.
* Unresolvable contract reference -> item skipped and counted.
"""

from billing_modules.reporting.config import ReportingConfig
from billing_modules.reporting.models import (
    AuditLogReport,
    BillDetailsReport,
    BillDocumentKind,
    BillTotals,
    ContractBillLine,
    ContractSummary,
    ContractSummaryRow,
    ContractorSummary,
    ContractorSummaryRow,
    DailyActivity,
    DashboardOverview,
    DeductionCategorySummary,
    FilterState,
    MonthlySummary,
    MonthlySummaryRow,
    ReportDocument,
    ReportInputs,
    ReportKind,
    ReportSection,
    StationBillLine,
    StationSummary,
    StationSummaryRow,
    StatementPeriod,
    StatementSnapshot,
    StatementSummary,
    TaxLedger,
    TaxLedgerRow,
)
from billing_modules.reporting.service import ReportingService

__all__ = [
    # Service
    "ReportingService",
    # Config
    "ReportingConfig",
    # Filters
    "FilterState",
    "ReportKind",
    # Results
    "BillTotals",
    "BillDetailsReport",
    "ContractorSummaryRow",
    "ContractorSummary",
    "ContractSummaryRow",
    "ContractSummary",
    "StationSummaryRow",
    "StationSummary",
    "MonthlySummaryRow",
    "MonthlySummary",
    "DeductionCategorySummary",
    "TaxLedgerRow",
    "TaxLedger",
    "AuditLogReport",
    "StatementPeriod",
    "StatementSummary",
    "StatementSnapshot",
    # Drill-downs
    "ContractBillLine",
    "StationBillLine",
    # Documents
    "BillDocumentKind",
    "ReportInputs",
    "ReportSection",
    "ReportDocument",
    # Dashboard
    "DailyActivity",
    "DashboardOverview",
]
