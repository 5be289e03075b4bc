"""
Bill Reporting Domain Models (``billing_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for everything the reporting engine takes
in or hands back: the filter state, one result type per report kind, the
contractor statement snapshot, drill-down lines, the sectioned report
document and the dashboard overview.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary and weight fields use ``Decimal`` -- NEVER ``float``.
* Each report result carries its ``ReportKind`` as a class-level tag so
  consumers can dispatch exhaustively.
* Per-group bill id collections are owned tuples, never references into
  the source records.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Self

from billing_kernel.domain.records import (
    AuditLogEntry,
    BillRecord,
    Contract,
    Contractor,
    Deductions,
    ZERO,
)

ALL = "all"


# =========================================================================
# Enums
# =========================================================================


class ReportKind(str, Enum):
    """Views the reporting engine can produce."""

    DETAILS = "details"
    CONTRACTOR = "contractor"
    CONTRACT = "contract"
    STATION = "station"
    MONTHLY = "monthly"
    DEDUCTIONS = "deductions"
    TAX_SUMMARY = "taxSummary"
    AUDIT = "audit"
    STATEMENT = "statement"


class BillDocumentKind(str, Enum):
    """Print documents for a single bill."""

    BILL = "bill"
    AUDIT_SUMMARY = "auditSummary"


# =========================================================================
# Filter state
# =========================================================================


@dataclass(frozen=True)
class FilterState:
    """
    User-chosen filter criteria.

    ``None`` (or an empty search) means the criterion is unset and is
    vacuously true.
    """

    contractor_id: int | None = None
    route: str | None = None
    search: str = ""
    start_date: date | None = None
    end_date: date | None = None
    audit_action: str | None = None

    @classmethod
    def from_selectors(
        cls,
        contractor: str | int = ALL,
        route: str = ALL,
        search: str = "",
        start_date: str = "",
        end_date: str = "",
        audit_action: str = ALL,
    ) -> Self:
        """Build from UI-style selector values ("all", "" for unset, ISO dates)."""
        return cls(
            contractor_id=None if contractor in (ALL, "", None) else int(contractor),
            route=None if route in (ALL, "", None) else route,
            search=search or "",
            start_date=date.fromisoformat(start_date) if start_date else None,
            end_date=date.fromisoformat(end_date) if end_date else None,
            audit_action=None if audit_action in (ALL, "", None) else audit_action,
        )

    @property
    def has_contractor(self) -> bool:
        return self.contractor_id is not None

    @property
    def period(self) -> StatementPeriod:
        return StatementPeriod(start=self.start_date, end=self.end_date)

    def with_valid_route(self, routes: tuple[str, ...]) -> FilterState:
        """Reset the route selector to "all" when it is not among ``routes``."""
        if self.route is not None and self.route not in routes:
            return replace(self, route=None)
        return self


# =========================================================================
# Shared totals
# =========================================================================


@dataclass(frozen=True)
class BillTotals:
    """Bill count and money totals over a set of bills."""

    bill_count: int
    grand_total: Decimal
    total_deductions: Decimal
    net_amount: Decimal


# =========================================================================
# Report results (tagged variants)
# =========================================================================


@dataclass(frozen=True)
class BillDetailsReport:
    """The filtered bills themselves plus overall totals."""

    kind: ClassVar[ReportKind] = ReportKind.DETAILS

    bills: tuple[BillRecord, ...]
    totals: BillTotals


@dataclass(frozen=True)
class ContractorSummaryRow:
    contractor_id: int
    name: str
    total_bills: int
    grand_total: Decimal
    total_deductions: Decimal
    net_amount: Decimal


@dataclass(frozen=True)
class ContractorSummary:
    """Per-contractor totals, highest net amount first."""

    kind: ClassVar[ReportKind] = ReportKind.CONTRACTOR

    rows: tuple[ContractorSummaryRow, ...]


@dataclass(frozen=True)
class ContractSummaryRow:
    contract: Contract
    total_trips: int
    total_net_kgs: Decimal
    total_amount: Decimal
    bill_ids: tuple[str, ...]  # distinct, first-seen order


@dataclass(frozen=True)
class ContractSummary:
    """
    Per-contract item totals, highest amount first.

    ``skipped_items`` counts items with no contract id or a contract id
    that is not in the contract list.
    """

    kind: ClassVar[ReportKind] = ReportKind.CONTRACT

    rows: tuple[ContractSummaryRow, ...]
    skipped_items: int = 0


@dataclass(frozen=True)
class StationSummaryRow:
    name: str
    dispatched_trips: int
    dispatched_kgs: Decimal
    dispatched_value: Decimal
    received_trips: int
    received_kgs: Decimal
    bill_ids: tuple[str, ...]


@dataclass(frozen=True)
class StationSummary:
    """Dispatch/receive totals per station, highest dispatched value first."""

    kind: ClassVar[ReportKind] = ReportKind.STATION

    rows: tuple[StationSummaryRow, ...]


@dataclass(frozen=True)
class MonthlySummaryRow:
    month: str  # YYYY-MM
    total_bills: int
    grand_total: Decimal
    total_deductions: Decimal
    net_amount: Decimal


@dataclass(frozen=True)
class MonthlySummary:
    """Per-month totals, most recent month first."""

    kind: ClassVar[ReportKind] = ReportKind.MONTHLY

    rows: tuple[MonthlySummaryRow, ...]


@dataclass(frozen=True)
class DeductionCategorySummary:
    """Per-category deduction sums and the overall deduction total."""

    kind: ClassVar[ReportKind] = ReportKind.DEDUCTIONS

    amounts: tuple[tuple[str, Decimal], ...]
    total: Decimal

    def amount(self, category: str) -> Decimal:
        for key, value in self.amounts:
            if key == category:
                return value
        return ZERO


@dataclass(frozen=True)
class TaxLedgerRow:
    bill_id: str | None
    bill_number: str
    bill_date: date | None
    net_kgs: Decimal
    grand_total: Decimal
    deductions: tuple[tuple[str, Decimal], ...]
    total_deductions: Decimal
    net_amount: Decimal

    def deduction(self, category: str) -> Decimal:
        for key, value in self.deductions:
            if key == category:
                return value
        return ZERO


@dataclass(frozen=True)
class TaxLedger:
    """One row per bill of a single contractor plus a column-wise totals row."""

    kind: ClassVar[ReportKind] = ReportKind.TAX_SUMMARY

    contractor_id: int
    contractor_name: str
    rows: tuple[TaxLedgerRow, ...]
    totals: TaxLedgerRow


@dataclass(frozen=True)
class AuditLogReport:
    """Filtered audit entries (tabular, not reduced)."""

    kind: ClassVar[ReportKind] = ReportKind.AUDIT

    entries: tuple[AuditLogEntry, ...]


# =========================================================================
# Contractor statement
# =========================================================================


@dataclass(frozen=True)
class StatementPeriod:
    """Requested date range; either bound may be open."""

    start: date | None = None
    end: date | None = None


@dataclass(frozen=True)
class StatementSummary:
    grand_total: Decimal
    net_amount: Decimal
    total_deductions: Decimal
    deductions: Deductions  # per-category roll-up; first non-empty "others" description


@dataclass(frozen=True)
class StatementSnapshot:
    """
    Frozen contractor statement.

    Produced once by ``generate_statement``; never re-derived when filters
    change afterwards.
    """

    kind: ClassVar[ReportKind] = ReportKind.STATEMENT

    contractor_id: int
    contractor_name: str
    period: StatementPeriod
    bills: tuple[BillRecord, ...]
    summary: StatementSummary


ReportResult = (
    BillDetailsReport
    | ContractorSummary
    | ContractSummary
    | StationSummary
    | MonthlySummary
    | DeductionCategorySummary
    | TaxLedger
    | AuditLogReport
    | StatementSnapshot
)


# =========================================================================
# Drill-down lines
# =========================================================================


@dataclass(frozen=True)
class ContractBillLine:
    """One bill's share of a contract: only items priced by that contract."""

    bill_id: str
    bill_number: str
    bill_date: date
    net_kgs: Decimal
    amount: Decimal


@dataclass(frozen=True)
class StationBillLine:
    """One bill's weight through a station."""

    bill_id: str
    bill_number: str
    bill_date: date
    contractor_name: str
    kgs_dispatched: Decimal
    kgs_received: Decimal


# =========================================================================
# Report document
# =========================================================================


@dataclass(frozen=True)
class ReportInputs:
    """Everything a report document may draw on, already filtered."""

    bills: tuple[BillRecord, ...] = ()
    contracts: tuple[Contract, ...] = ()
    contractors: tuple[Contractor, ...] = ()
    audit_entries: tuple[AuditLogEntry, ...] = ()
    statement: StatementSnapshot | None = None


@dataclass(frozen=True)
class ReportSection:
    """
    One block of a report body.

    Tabular sections use ``columns``/``rows``/``total_row``; key-value
    sections (statement summary) use ``lines``; ``notes`` are free-text
    paragraphs printed after the body.
    """

    heading: str | None = None
    columns: tuple[str, ...] = ()
    rows: tuple[tuple[str, ...], ...] = ()
    total_row: tuple[str, ...] | None = None
    lines: tuple[tuple[str, str], ...] = ()
    notes: tuple[str, ...] = ()
    page_break_before: bool = False


@dataclass(frozen=True)
class ReportDocument:
    """
    Structured, renderer-agnostic print/export document.

    ``signatures`` are (title, subtitle) pairs for the signature blocks
    printed above the footer.
    """

    kind: ReportKind | BillDocumentKind
    title: str
    header_lines: tuple[str, ...]
    filter_summary: tuple[tuple[str, str], ...]
    sections: tuple[ReportSection, ...]
    footer: str
    signatures: tuple[tuple[str, str], ...] = ()


# =========================================================================
# Dashboard
# =========================================================================


@dataclass(frozen=True)
class DailyActivityBill:
    bill_number: str
    net_amount: Decimal
    contractor_name: str


@dataclass(frozen=True)
class DailyActivity:
    day: date
    label: str  # "Today" or short weekday name
    amount: Decimal
    bills: tuple[DailyActivityBill, ...]
    height_percent: Decimal  # relative to the busiest day in the window


@dataclass(frozen=True)
class DashboardOverview:
    total_bills: int
    total_net_amount: Decimal
    total_contractors: int
    total_contracts: int
    sanctioned_budget: Decimal
    consumed_budget: Decimal
    balance: Decimal
    consumed_percentage: Decimal
    daily_activity: tuple[DailyActivity, ...]
