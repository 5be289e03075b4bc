"""
Contractor statement generation.

``generate_statement`` freezes one contractor's bills for a period into a
``StatementSnapshot``.  The snapshot is never recomputed behind the
caller's back; a changed filter needs an explicit new call.  ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Iterable

from billing_kernel.domain.records import (
    DEDUCTION_CATEGORIES,
    ZERO,
    BillRecord,
    Deductions,
)
from billing_kernel.exceptions import ContractorNotFoundError, NoContractorSelectedError
from billing_modules.reporting.filters import matches_date_range
from billing_modules.reporting.models import (
    ALL,
    FilterState,
    StatementPeriod,
    StatementSnapshot,
    StatementSummary,
)


def rollup_deductions(bills: Iterable[BillRecord]) -> Deductions:
    """
    Sum every deduction category across ``bills``.

    The "others" amount is summed like any category; only the first
    non-empty "others" description is kept.
    """
    totals = dict.fromkeys(DEDUCTION_CATEGORIES, ZERO)
    description = ""
    for bill in bills:
        for category, amount in bill.deductions.amounts():
            totals[category] += amount
        if not description and bill.deductions.others_description:
            description = bill.deductions.others_description
    return Deductions(**totals, others_description=description)


def generate_statement(
    bills: Iterable[BillRecord],
    contractor_id: int | str | None,
    period: StatementPeriod,
    contractor_name: str | None = None,
) -> StatementSnapshot:
    """
    Build the frozen statement for one contractor.

    Args:
        bills: Candidate bills (normally the currently filtered set).
        contractor_id: The selected contractor.  ``None`` or ``"all"`` is
            rejected.
        period: Inclusive date bounds; either end may be open.
        contractor_name: Directory name.  Falls back to the name carried on
            the first matching bill.

    Raises:
        NoContractorSelectedError: No specific contractor selected.
        ContractorNotFoundError: No name given and no bill to take it from.
    """
    if contractor_id is None or contractor_id == ALL:
        raise NoContractorSelectedError("statement")
    contractor_id = int(contractor_id)

    in_period = FilterState(start_date=period.start, end_date=period.end)
    selected = tuple(
        b
        for b in bills
        if b.contractor_id == contractor_id and matches_date_range(b, in_period)
    )

    name = contractor_name or (selected[0].contractor_name if selected else None)
    if not name:
        raise ContractorNotFoundError(contractor_id)

    summary = StatementSummary(
        grand_total=sum((b.grand_total for b in selected), ZERO),
        net_amount=sum((b.net_amount for b in selected), ZERO),
        total_deductions=sum((b.total_deductions for b in selected), ZERO),
        deductions=rollup_deductions(selected),
    )
    return StatementSnapshot(
        contractor_id=contractor_id,
        contractor_name=name,
        period=period,
        bills=selected,
        summary=summary,
    )
