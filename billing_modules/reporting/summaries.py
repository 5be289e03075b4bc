"""
Pure summary builders.

Each builder turns an already-filtered bill sequence into one typed
report result.  Builders are independent of each other, deterministic and
side-effect free; all of them fold through ``group_reduce``.

Unresolvable references follow the skip policy: an item whose contract
cannot be found is left out of the contract summary and counted in
``ContractSummary.skipped_items``; a bill with no contractor id is left
out of the contractor summary.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from decimal import Decimal
from typing import NamedTuple

from billing_kernel.domain.records import (
    DEDUCTION_CATEGORIES,
    ZERO,
    BillItem,
    BillRecord,
    Contract,
    Contractor,
)
from billing_modules.reporting.aggregation import add_distinct, group_reduce, iter_items
from billing_modules.reporting.filters import index_contracts
from billing_modules.reporting.models import (
    AuditLogReport,
    BillDetailsReport,
    BillTotals,
    ContractBillLine,
    ContractSummary,
    ContractSummaryRow,
    ContractorSummary,
    ContractorSummaryRow,
    DeductionCategorySummary,
    FilterState,
    MonthlySummary,
    MonthlySummaryRow,
    ReportInputs,
    ReportKind,
    ReportResult,
    StationBillLine,
    StationSummary,
    StationSummaryRow,
    TaxLedger,
    TaxLedgerRow,
)
from billing_modules.reporting.statement import generate_statement


# =========================================================================
# Bill details / overall totals
# =========================================================================


def compute_totals(bills: Iterable[BillRecord]) -> BillTotals:
    count = 0
    gross = deductions = net = ZERO
    for bill in bills:
        count += 1
        gross += bill.grand_total
        deductions += bill.total_deductions
        net += bill.net_amount
    return BillTotals(
        bill_count=count,
        grand_total=gross,
        total_deductions=deductions,
        net_amount=net,
    )


def build_bill_details(bills: Sequence[BillRecord]) -> BillDetailsReport:
    return BillDetailsReport(bills=tuple(bills), totals=compute_totals(bills))


# =========================================================================
# Contractor summary
# =========================================================================


def build_contractor_summary(bills: Iterable[BillRecord]) -> ContractorSummary:
    """Per-contractor bill count, gross, deductions and net; net descending."""
    groups = group_reduce(
        bills,
        key=lambda b: b.contractor_id,
        initial=lambda cid, b: ContractorSummaryRow(
            contractor_id=cid,
            name=b.contractor_name,
            total_bills=0,
            grand_total=ZERO,
            total_deductions=ZERO,
            net_amount=ZERO,
        ),
        update=lambda row, b: replace(
            row,
            total_bills=row.total_bills + 1,
            grand_total=row.grand_total + b.grand_total,
            total_deductions=row.total_deductions + b.total_deductions,
            net_amount=row.net_amount + b.net_amount,
        ),
    )
    rows = sorted(groups.values(), key=lambda r: r.net_amount, reverse=True)
    return ContractorSummary(rows=tuple(rows))


# =========================================================================
# Contract summary
# =========================================================================


def build_contract_summary(
    bills: Iterable[BillRecord],
    contracts: Iterable[Contract] | Mapping[int, Contract],
) -> ContractSummary:
    """Per-contract trips, net kgs, amount and distinct bills; amount descending."""
    index = contracts if isinstance(contracts, Mapping) else index_contracts(contracts)
    pairs = list(iter_items(bills))

    def resolve(pair: tuple[BillRecord, BillItem]) -> int | None:
        contract_id = pair[1].contract_id
        return contract_id if contract_id in index else None

    groups = group_reduce(
        pairs,
        key=resolve,
        initial=lambda cid, _: ContractSummaryRow(
            contract=index[cid],
            total_trips=0,
            total_net_kgs=ZERO,
            total_amount=ZERO,
            bill_ids=(),
        ),
        update=lambda row, pair: replace(
            row,
            total_trips=row.total_trips + 1,
            total_net_kgs=row.total_net_kgs + pair[1].net_kgs,
            total_amount=row.total_amount + pair[1].amount,
            bill_ids=add_distinct(row.bill_ids, pair[0].bill_id),
        ),
    )
    skipped = sum(1 for pair in pairs if resolve(pair) is None)
    rows = sorted(groups.values(), key=lambda r: r.total_amount, reverse=True)
    return ContractSummary(rows=tuple(rows), skipped_items=skipped)


def contract_bill_lines(
    bills: Iterable[BillRecord],
    contract_id: int,
) -> tuple[ContractBillLine, ...]:
    """Each bill's net kgs and amount over only the items of one contract."""
    lines = []
    for bill in bills:
        items = [i for i in bill.items if i.contract_id == contract_id]
        if not items:
            continue
        lines.append(
            ContractBillLine(
                bill_id=bill.bill_id,
                bill_number=bill.bill_number,
                bill_date=bill.bill_date,
                net_kgs=sum((i.net_kgs for i in items), ZERO),
                amount=sum((i.amount for i in items), ZERO),
            )
        )
    return tuple(lines)


# =========================================================================
# Station summary
# =========================================================================


class _StationEvent(NamedTuple):
    station: str
    dispatched: bool
    bill_id: str
    net_kgs: Decimal
    amount: Decimal


def _station_events(bills: Iterable[BillRecord]):
    # Each item is one dispatch at its origin and one receipt at its destination.
    for bill, item in iter_items(bills):
        yield _StationEvent(item.origin, True, bill.bill_id, item.net_kgs, item.amount)
        yield _StationEvent(item.destination, False, bill.bill_id, item.net_kgs, item.amount)


def _apply_station_event(row: StationSummaryRow, event: _StationEvent) -> StationSummaryRow:
    bill_ids = add_distinct(row.bill_ids, event.bill_id)
    if event.dispatched:
        return replace(
            row,
            dispatched_trips=row.dispatched_trips + 1,
            dispatched_kgs=row.dispatched_kgs + event.net_kgs,
            dispatched_value=row.dispatched_value + event.amount,
            bill_ids=bill_ids,
        )
    return replace(
        row,
        received_trips=row.received_trips + 1,
        received_kgs=row.received_kgs + event.net_kgs,
        bill_ids=bill_ids,
    )


def build_station_summary(bills: Iterable[BillRecord]) -> StationSummary:
    """Dispatch/receive totals per station; dispatched value descending."""
    groups = group_reduce(
        _station_events(bills),
        key=lambda e: e.station,
        initial=lambda name, _: StationSummaryRow(
            name=name,
            dispatched_trips=0,
            dispatched_kgs=ZERO,
            dispatched_value=ZERO,
            received_trips=0,
            received_kgs=ZERO,
            bill_ids=(),
        ),
        update=_apply_station_event,
    )
    rows = sorted(groups.values(), key=lambda r: r.dispatched_value, reverse=True)
    return StationSummary(rows=tuple(rows))


def station_bill_lines(
    bills: Iterable[BillRecord],
    station: str,
) -> tuple[StationBillLine, ...]:
    """Per-bill kgs dispatched from and received at one station."""
    lines = []
    for bill in bills:
        touching = [i for i in bill.items if station in (i.origin, i.destination)]
        if not touching:
            continue
        lines.append(
            StationBillLine(
                bill_id=bill.bill_id,
                bill_number=bill.bill_number,
                bill_date=bill.bill_date,
                contractor_name=bill.contractor_name,
                kgs_dispatched=sum(
                    (i.net_kgs for i in touching if i.origin == station), ZERO
                ),
                kgs_received=sum(
                    (i.net_kgs for i in touching if i.destination == station), ZERO
                ),
            )
        )
    return tuple(lines)


# =========================================================================
# Monthly summary
# =========================================================================


def build_monthly_summary(bills: Iterable[BillRecord]) -> MonthlySummary:
    """Per-month (YYYY-MM) totals; most recent month first."""
    groups = group_reduce(
        bills,
        key=lambda b: b.bill_date.strftime("%Y-%m"),
        initial=lambda month, _: MonthlySummaryRow(
            month=month,
            total_bills=0,
            grand_total=ZERO,
            total_deductions=ZERO,
            net_amount=ZERO,
        ),
        update=lambda row, b: replace(
            row,
            total_bills=row.total_bills + 1,
            grand_total=row.grand_total + b.grand_total,
            total_deductions=row.total_deductions + b.total_deductions,
            net_amount=row.net_amount + b.net_amount,
        ),
    )
    rows = sorted(groups.values(), key=lambda r: r.month, reverse=True)
    return MonthlySummary(rows=tuple(rows))


# =========================================================================
# Deduction category summary
# =========================================================================


def build_deduction_summary(bills: Sequence[BillRecord]) -> DeductionCategorySummary:
    """
    Per-category deduction sums.

    ``total`` is the sum of each bill's recorded ``total_deductions``, not
    the sum of the category columns.
    """
    sums = group_reduce(
        ((category, amount) for b in bills for category, amount in b.deductions.amounts()),
        key=lambda pair: pair[0],
        initial=lambda _, __: ZERO,
        update=lambda acc, pair: acc + pair[1],
    )
    return DeductionCategorySummary(
        amounts=tuple((c, sums.get(c, ZERO)) for c in DEDUCTION_CATEGORIES),
        total=sum((b.total_deductions for b in bills), ZERO),
    )


# =========================================================================
# Tax ledger
# =========================================================================


def _ledger_row(bill: BillRecord) -> TaxLedgerRow:
    return TaxLedgerRow(
        bill_id=bill.bill_id,
        bill_number=bill.bill_number,
        bill_date=bill.bill_date,
        net_kgs=bill.net_kgs,
        grand_total=bill.grand_total,
        deductions=bill.deductions.amounts(),
        total_deductions=bill.total_deductions,
        net_amount=bill.net_amount,
    )


def build_tax_ledger(
    bills: Sequence[BillRecord],
    contractor_id: int | None,
    contractor_name: str | None = None,
) -> TaxLedger | None:
    """
    Per-bill tax ledger for one contractor with a column-wise totals row.

    Returns ``None`` when no specific contractor is selected.
    """
    if contractor_id is None:
        return None
    rows = tuple(_ledger_row(b) for b in bills if b.contractor_id == contractor_id)
    name = contractor_name or _first_name(bills, contractor_id)
    totals = TaxLedgerRow(
        bill_id=None,
        bill_number="Total",
        bill_date=None,
        net_kgs=sum((r.net_kgs for r in rows), ZERO),
        grand_total=sum((r.grand_total for r in rows), ZERO),
        deductions=tuple(
            (c, sum((r.deduction(c) for r in rows), ZERO)) for c in DEDUCTION_CATEGORIES
        ),
        total_deductions=sum((r.total_deductions for r in rows), ZERO),
        net_amount=sum((r.net_amount for r in rows), ZERO),
    )
    return TaxLedger(
        contractor_id=contractor_id,
        contractor_name=name,
        rows=rows,
        totals=totals,
    )


def _first_name(bills: Iterable[BillRecord], contractor_id: int) -> str:
    for bill in bills:
        if bill.contractor_id == contractor_id:
            return bill.contractor_name
    return ""


def contractor_name_for(
    contractor_id: int | None,
    contractors: Iterable[Contractor],
    bills: Iterable[BillRecord] = (),
) -> str | None:
    """Directory name for ``contractor_id``, else the name on its first bill."""
    if contractor_id is None:
        return None
    for contractor in contractors:
        if contractor.contractor_id == contractor_id:
            return contractor.name
    return _first_name(bills, contractor_id) or None


# =========================================================================
# Dispatcher
# =========================================================================


def build_summary(
    kind: ReportKind,
    inputs: ReportInputs,
    state: FilterState,
) -> ReportResult | None:
    """
    Build the result for ``kind`` from already-filtered inputs.

    Only ``TAX_SUMMARY`` may return ``None`` (no contractor selected).
    ``STATEMENT`` returns ``inputs.statement`` when present, otherwise
    generates one from the inputs.
    """
    match kind:
        case ReportKind.DETAILS:
            return build_bill_details(inputs.bills)
        case ReportKind.CONTRACTOR:
            return build_contractor_summary(inputs.bills)
        case ReportKind.CONTRACT:
            return build_contract_summary(inputs.bills, inputs.contracts)
        case ReportKind.STATION:
            return build_station_summary(inputs.bills)
        case ReportKind.MONTHLY:
            return build_monthly_summary(inputs.bills)
        case ReportKind.DEDUCTIONS:
            return build_deduction_summary(inputs.bills)
        case ReportKind.TAX_SUMMARY:
            return build_tax_ledger(
                inputs.bills,
                state.contractor_id,
                contractor_name_for(state.contractor_id, inputs.contractors, inputs.bills),
            )
        case ReportKind.AUDIT:
            return AuditLogReport(entries=tuple(inputs.audit_entries))
        case ReportKind.STATEMENT:
            if inputs.statement is not None:
                return inputs.statement
            return generate_statement(
                inputs.bills,
                state.contractor_id,
                state.period,
                contractor_name_for(state.contractor_id, inputs.contractors, inputs.bills),
            )
    raise ValueError(f"Unknown report kind: {kind}")
