"""
Export formatting: flat CSV rows and the sectioned report document.

``to_csv_rows``, ``build_report_document`` and the per-bill builders are
pure.  ``write_csv`` is the single file-writing edge and is called only
by the service.

CSV column order and numeric precision are a compatibility surface:
downstream spreadsheets key on the exact headers below.
"""

from __future__ import annotations

import csv
import dataclasses
import io
import json
from collections.abc import Iterable, Sequence
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from pathlib import Path
from uuid import UUID

from billing_kernel.domain.records import DEDUCTION_CATEGORIES, BillRecord, as_utc
from billing_kernel.exceptions import EmptyReportError, NoContractorSelectedError
from billing_modules.reporting.config import ReportingConfig
from billing_modules.reporting.models import (
    BillDocumentKind,
    FilterState,
    ReportDocument,
    ReportInputs,
    ReportKind,
    ReportSection,
    StatementSnapshot,
)
from billing_modules.reporting.summaries import (
    build_contract_summary,
    build_contractor_summary,
    build_deduction_summary,
    build_monthly_summary,
    build_station_summary,
    build_tax_ledger,
    compute_totals,
    contract_bill_lines,
    contractor_name_for,
    station_bill_lines,
)

CSV_COLUMNS: tuple[str, ...] = (
    "Bill #",
    "Bill Date",
    "Contractor",
    "Sanctioned No",
    "From",
    "To",
    "Mode",
    "Total Bags",
    "PP Bags",
    "Jute Bags",
    "Net KGs",
    "Bardana KGs",
    "Gross KGs",
    "Rate/Kg",
    "Amount (Rs)",
    "Bill Grand Total",
    "Bill Total Deductions",
    "Bill Net Amount",
)

REPORT_TITLES: dict[ReportKind, str] = {
    ReportKind.DETAILS: "Bill Details Report",
    ReportKind.CONTRACTOR: "Contractor Summary Report",
    ReportKind.CONTRACT: "Contract-wise Summary Report",
    ReportKind.STATION: "Station Summary Report",
    ReportKind.MONTHLY: "Monthly Summary Report",
    ReportKind.DEDUCTIONS: "Deductions Summary Report",
    ReportKind.TAX_SUMMARY: "Tax Deduction Summary for {contractor}",
    ReportKind.AUDIT: "Audit Log Report",
    ReportKind.STATEMENT: "Contractor Statement for {contractor}",
}

NOT_SET = "N/A"


# =========================================================================
# Number formatting
# =========================================================================


def fixed(value: Decimal, places: int) -> str:
    """Fixed-point string, rounded half up: ``fixed(Decimal("2"), 4) == "2.0000"``."""
    quantum = Decimal(1).scaleb(-places)
    return f"{Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP):f}"


def money(value: Decimal) -> str:
    """Grouped two-place amount: ``1,234.50``."""
    return f"{Decimal(value).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):,.2f}"


def weight(value: Decimal) -> str:
    """Grouped whole-kilogram weight for drill-down tables."""
    return f"{Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP):,.0f}"


# =========================================================================
# CSV
# =========================================================================


def to_csv_rows(bills: Iterable[BillRecord]) -> list[dict[str, str]]:
    """One row per bill item, denormalized with its bill's fields."""
    rows: list[dict[str, str]] = []
    for bill in bills:
        for item in bill.items:
            rows.append(
                {
                    "Bill #": bill.bill_number,
                    "Bill Date": bill.bill_date.isoformat(),
                    "Contractor": bill.contractor_name,
                    "Sanctioned No": bill.sanctioned_no,
                    "From": item.origin,
                    "To": item.destination,
                    "Mode": item.mode,
                    "Total Bags": str(item.bags),
                    "PP Bags": str(item.pp_bags),
                    "Jute Bags": str(item.jute_bags),
                    "Net KGs": fixed(item.net_kgs, 2),
                    "Bardana KGs": fixed(item.bardana_kgs, 3),
                    "Gross KGs": fixed(item.gross_kgs, 2),
                    "Rate/Kg": fixed(item.rate_per_kg, 4),
                    "Amount (Rs)": fixed(item.amount, 2),
                    "Bill Grand Total": fixed(bill.grand_total, 2),
                    "Bill Total Deductions": fixed(bill.total_deductions, 2),
                    "Bill Net Amount": fixed(bill.net_amount, 2),
                }
            )
    return rows


def export_filename(prefix: str, export_date: date) -> str:
    return f"{prefix}-{export_date.isoformat()}.csv"


def render_csv(rows: Sequence[dict[str, str]]) -> str:
    """CSV text (header plus rows) for ``rows``."""
    if not rows:
        raise EmptyReportError(ReportKind.DETAILS.value)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=list(CSV_COLUMNS))
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def write_csv(rows: Sequence[dict[str, str]], path: Path, encoding: str = "utf-8") -> Path:
    """Write ``rows`` to ``path``; raises ``EmptyReportError`` when there are none."""
    content = render_csv(rows)
    path = Path(path)
    with path.open("w", encoding=encoding, newline="") as f:
        f.write(content)
    return path


# =========================================================================
# Report document
# =========================================================================


def _period_label(start: date | None, end: date | None, open_start: str, open_end: str) -> str:
    return (
        f"{start.isoformat() if start else open_start} to "
        f"{end.isoformat() if end else open_end}"
    )


def _filter_summary(
    kind: ReportKind,
    state: FilterState,
    contractor_name: str | None,
) -> tuple[tuple[str, str], ...]:
    lines = [
        ("Contractor", contractor_name or "All"),
        ("Route", state.route or "All"),
        ("Date Range", _period_label(state.start_date, state.end_date, NOT_SET, NOT_SET)),
    ]
    if kind is ReportKind.AUDIT:
        lines.append(("Action", state.audit_action or "All"))
        lines.append(("Search", state.search or NOT_SET))
    return tuple(lines)


def _details_sections(inputs: ReportInputs) -> tuple[ReportSection, ...]:
    totals = compute_totals(inputs.bills)
    return (
        ReportSection(
            columns=("Bill #", "Date", "Contractor", "Gross", "Deductions", "Net Amount"),
            rows=tuple(
                (
                    b.bill_number,
                    b.bill_date.isoformat(),
                    b.contractor_name,
                    money(b.grand_total),
                    money(b.total_deductions),
                    money(b.net_amount),
                )
                for b in inputs.bills
            ),
            total_row=(
                "Total",
                "",
                f"{totals.bill_count} bills",
                money(totals.grand_total),
                money(totals.total_deductions),
                money(totals.net_amount),
            ),
        ),
    )


def _contractor_sections(inputs: ReportInputs) -> tuple[ReportSection, ...]:
    summary = build_contractor_summary(inputs.bills)
    return (
        ReportSection(
            columns=("Contractor", "Bills", "Net Amount"),
            rows=tuple(
                (r.name, str(r.total_bills), money(r.net_amount)) for r in summary.rows
            ),
        ),
    )


def _contract_sections(inputs: ReportInputs) -> tuple[ReportSection, ...]:
    summary = build_contract_summary(inputs.bills, inputs.contracts)
    sections = []
    for position, row in enumerate(summary.rows):
        contract = row.contract
        bills = tuple(b for b in inputs.bills if b.bill_id in row.bill_ids)
        lines = contract_bill_lines(bills, contract.contract_id)
        sections.append(
            ReportSection(
                heading=(
                    f"{contract.contractor_name} "
                    f"({contract.origin} → {contract.destination})"
                ),
                columns=("Bill #", "Date", "Net KGs", "Amount"),
                rows=tuple(
                    (
                        line.bill_number,
                        line.bill_date.isoformat(),
                        weight(line.net_kgs),
                        money(line.amount),
                    )
                    for line in lines
                ),
                total_row=(
                    "Contract Total:",
                    "",
                    weight(row.total_net_kgs),
                    money(row.total_amount),
                ),
                page_break_before=position > 0,
            )
        )
    return tuple(sections)


def _station_sections(inputs: ReportInputs) -> tuple[ReportSection, ...]:
    summary = build_station_summary(inputs.bills)
    sections = []
    for position, row in enumerate(summary.rows):
        lines = station_bill_lines(inputs.bills, row.name)
        sections.append(
            ReportSection(
                heading=f"Station: {row.name}",
                columns=("Bill #", "Date", "Contractor", "Kgs Dispatched", "Kgs Received"),
                rows=tuple(
                    (
                        line.bill_number,
                        line.bill_date.isoformat(),
                        line.contractor_name,
                        weight(line.kgs_dispatched) if line.kgs_dispatched else "-",
                        weight(line.kgs_received) if line.kgs_received else "-",
                    )
                    for line in lines
                ),
                total_row=(
                    "Station Total:",
                    "",
                    "",
                    weight(row.dispatched_kgs),
                    weight(row.received_kgs),
                ),
                page_break_before=position > 0,
            )
        )
    return tuple(sections)


def _monthly_sections(inputs: ReportInputs) -> tuple[ReportSection, ...]:
    summary = build_monthly_summary(inputs.bills)
    return (
        ReportSection(
            columns=("Month", "Bills", "Net Amount"),
            rows=tuple(
                (r.month, str(r.total_bills), money(r.net_amount)) for r in summary.rows
            ),
        ),
    )


def _deduction_sections(
    inputs: ReportInputs,
    config: ReportingConfig,
) -> tuple[ReportSection, ...]:
    summary = build_deduction_summary(inputs.bills)
    return (
        ReportSection(
            columns=("Deduction", "Amount"),
            rows=tuple(
                (config.deduction_label(c), money(amount)) for c, amount in summary.amounts
            ),
            total_row=("Total Deductions", money(summary.total)),
        ),
    )


def _tax_summary_sections(
    inputs: ReportInputs,
    state: FilterState,
    contractor_name: str | None,
    config: ReportingConfig,
) -> tuple[ReportSection, ...]:
    ledger = build_tax_ledger(inputs.bills, state.contractor_id, contractor_name)
    if ledger is None:
        raise NoContractorSelectedError("tax summary")

    def cells(row) -> tuple[str, ...]:
        return (
            row.bill_number,
            row.bill_date.isoformat() if row.bill_date else "",
            fixed(row.net_kgs, 2),
            money(row.grand_total),
            *(money(row.deduction(c)) for c in DEDUCTION_CATEGORIES),
            money(row.total_deductions),
            money(row.net_amount),
        )

    return (
        ReportSection(
            columns=(
                "Bill #",
                "Date",
                "Net KGs",
                "Gross Amount",
                *(config.deduction_label(c) for c in DEDUCTION_CATEGORIES),
                "Total Deductions",
                "Net Amount",
            ),
            rows=tuple(cells(r) for r in ledger.rows),
            total_row=cells(ledger.totals),
        ),
    )


def format_details(details: dict) -> str:
    """Audit detail payload as an indented, key-sorted JSON dump."""
    return json.dumps(details, indent=2, sort_keys=True, default=str)


def _audit_sections(inputs: ReportInputs) -> tuple[ReportSection, ...]:
    return (
        ReportSection(
            columns=("Timestamp", "User", "Action", "Details"),
            rows=tuple(
                (
                    as_utc(e.timestamp).strftime("%Y-%m-%d %H:%M:%S"),
                    e.username,
                    e.action,
                    format_details(e.details),
                )
                for e in inputs.audit_entries
            ),
        ),
    )


def _statement_sections(
    statement: StatementSnapshot,
    config: ReportingConfig,
) -> tuple[ReportSection, ...]:
    summary = statement.summary
    currency = config.currency_label

    deduction_lines = []
    for category, amount in summary.deductions.amounts():
        label = config.deduction_label(category)
        if category == "others":
            label = summary.deductions.others_description or label
        deduction_lines.append((label, f"{currency} {money(amount)}"))

    return (
        ReportSection(
            heading="Contractor Payment Summary",
            lines=(
                ("Contractor", statement.contractor_name),
                (
                    "Period",
                    _period_label(statement.period.start, statement.period.end, "Start", "End"),
                ),
                ("Total Gross Amount", f"{currency} {money(summary.grand_total)}"),
                *deduction_lines,
                ("Total Deductions", f"{currency} {money(summary.total_deductions)}"),
                ("Net Amount Payable", f"{currency} {money(summary.net_amount)}"),
            ),
        ),
        ReportSection(
            heading="Bills",
            columns=("Bill #", "Date", "Gross", "Deductions", "Net Amount"),
            rows=tuple(
                (
                    b.bill_number,
                    b.bill_date.isoformat(),
                    money(b.grand_total),
                    money(b.total_deductions),
                    money(b.net_amount),
                )
                for b in statement.bills
            ),
        ),
    )


def build_report_document(
    kind: ReportKind,
    inputs: ReportInputs,
    state: FilterState,
    config: ReportingConfig | None = None,
    generated_at: datetime | None = None,
) -> ReportDocument:
    """
    Build the print/export document for one report kind.

    ``inputs`` must already be filtered with ``state``; the state is used
    here only for the filter summary block and the selected contractor.

    Raises:
        EmptyReportError: No bills (no audit entries for ``AUDIT``; no
            statement for ``STATEMENT``).
        NoContractorSelectedError: ``TAX_SUMMARY`` without a contractor.
    """
    config = config or ReportingConfig()

    if kind is ReportKind.AUDIT:
        if not inputs.audit_entries:
            raise EmptyReportError(kind.value)
    elif kind is ReportKind.STATEMENT:
        if inputs.statement is None:
            raise EmptyReportError(kind.value)
    elif not inputs.bills:
        raise EmptyReportError(kind.value)

    contractor_name = contractor_name_for(state.contractor_id, inputs.contractors, inputs.bills)

    match kind:
        case ReportKind.DETAILS:
            sections = _details_sections(inputs)
        case ReportKind.CONTRACTOR:
            sections = _contractor_sections(inputs)
        case ReportKind.CONTRACT:
            sections = _contract_sections(inputs)
        case ReportKind.STATION:
            sections = _station_sections(inputs)
        case ReportKind.MONTHLY:
            sections = _monthly_sections(inputs)
        case ReportKind.DEDUCTIONS:
            sections = _deduction_sections(inputs, config)
        case ReportKind.TAX_SUMMARY:
            sections = _tax_summary_sections(inputs, state, contractor_name, config)
        case ReportKind.AUDIT:
            sections = _audit_sections(inputs)
        case ReportKind.STATEMENT:
            sections = _statement_sections(inputs.statement, config)
            contractor_name = inputs.statement.contractor_name
        case _:
            raise ValueError(f"Unknown report kind: {kind}")

    title = REPORT_TITLES[kind].format(contractor=contractor_name or "All")
    footer = f"Report generated by {config.system_name}"
    if generated_at is not None:
        footer += f" on {generated_at.strftime('%Y-%m-%d %H:%M:%S')}"

    return ReportDocument(
        kind=kind,
        title=title,
        header_lines=tuple(config.header_lines),
        filter_summary=_filter_summary(kind, state, contractor_name),
        sections=sections,
        footer=footer,
    )


# =========================================================================
# Per-bill print documents
# =========================================================================


def _bill_footer(config: ReportingConfig, generated_at: datetime | None) -> str:
    footer = f"Generated by {config.system_name}"
    if generated_at is not None:
        footer += f" on {generated_at.strftime('%Y-%m-%d %H:%M:%S')}"
    return footer


def _deduction_label(bill: BillRecord, category: str, config: ReportingConfig) -> str:
    if category == "others":
        return bill.deductions.others_description or config.deduction_label(category)
    return config.deduction_label(category)


def build_bill_document(
    bill: BillRecord,
    config: ReportingConfig | None = None,
    generated_at: datetime | None = None,
) -> ReportDocument:
    """
    Build the printable transportation bill for one bill.

    Only deduction categories with a positive amount are listed.  A bill
    without its own certification points gets the configured defaults.
    """
    config = config or ReportingConfig()
    currency = config.currency_label

    deduction_lines = tuple(
        (_deduction_label(bill, category, config), f"{currency} {money(amount)}")
        for category, amount in bill.deductions.amounts()
        if amount > 0
    )
    points = bill.certification_points or config.certification_points

    sections = [
        ReportSection(
            heading="Bill To",
            lines=(
                ("Contractor", bill.contractor_name),
                ("Sanctioned No", bill.sanctioned_no or "N/A"),
                ("Bill #", bill.bill_number),
                ("Bill Date", bill.bill_date.isoformat()),
            ),
        ),
        ReportSection(
            heading="Items",
            columns=("S#", "From", "To", "Bags", "Net KGs", "Rate/Kg", "Amount"),
            rows=tuple(
                (
                    str(n),
                    item.origin,
                    item.destination,
                    str(item.bags),
                    money(item.net_kgs),
                    fixed(item.rate_per_kg, 4),
                    f"{currency} {money(item.amount)}",
                )
                for n, item in enumerate(bill.items, start=1)
            ),
        ),
    ]
    if deduction_lines:
        sections.append(ReportSection(heading="Deductions", lines=deduction_lines))
    sections += [
        ReportSection(
            heading="Summary",
            lines=(
                ("Grand Total", f"{currency} {money(bill.grand_total)}"),
                ("Total Deductions", f"(-) {currency} {money(bill.total_deductions)}"),
                ("Net Amount Payable", f"{currency} {money(bill.net_amount)}"),
            ),
        ),
        ReportSection(
            heading="Certification",
            lines=tuple((f"{n}.", point) for n, point in enumerate(points, start=1)),
            notes=(config.certification_note,),
        ),
    ]

    return ReportDocument(
        kind=BillDocumentKind.BILL,
        title=config.bill_document_title,
        header_lines=tuple(config.header_lines),
        filter_summary=(),
        sections=tuple(sections),
        footer=_bill_footer(config, generated_at),
        signatures=config.bill_signatories,
    )


def build_bill_audit_summary(
    bill: BillRecord,
    config: ReportingConfig | None = None,
    generated_at: datetime | None = None,
) -> ReportDocument:
    """
    Build the one-page audit summary for a bill.

    Unlike the bill print, every deduction category is listed, zero or not,
    so a reviewer can confirm each withholding was considered.
    """
    config = config or ReportingConfig()
    currency = config.currency_label

    return ReportDocument(
        kind=BillDocumentKind.AUDIT_SUMMARY,
        title="Audit Summary",
        header_lines=(
            *config.header_lines,
            f"Bill #{bill.bill_number} for {bill.contractor_name}",
        ),
        filter_summary=(),
        sections=(
            ReportSection(
                heading="Grand Total Amount",
                lines=(("Grand Total Amount", f"{currency} {money(bill.grand_total)}"),),
            ),
            ReportSection(
                heading="Deductions Breakdown",
                lines=tuple(
                    (_deduction_label(bill, category, config), f"(-) {currency} {money(amount)}")
                    for category, amount in bill.deductions.amounts()
                ),
            ),
            ReportSection(
                heading="Totals",
                lines=(
                    ("Total Deductions", f"(-) {currency} {money(bill.total_deductions)}"),
                    ("Net Amount Payable", f"{currency} {money(bill.net_amount)}"),
                ),
            ),
        ),
        footer=_bill_footer(config, generated_at),
        signatures=config.audit_signatories,
    )


# =========================================================================
# JSON rendering
# =========================================================================


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to plain data for JSON serialization.

    Handles:
    - Decimal -> str (preserving precision)
    - date / datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts; a class-level ``kind``
      tag is emitted as a ``"kind"`` key
    - Tuples -> lists
    """
    if obj is None:
        return None
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        data = {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
        kind = getattr(type(obj), "kind", None)
        if isinstance(kind, ReportKind) and "kind" not in data:
            data = {"kind": kind.value, **data}
        return data
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)
