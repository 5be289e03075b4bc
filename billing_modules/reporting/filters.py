"""
Pure filter predicates over bills and audit entries.

Every active criterion of a ``FilterState`` is ANDed; an unset criterion
is vacuously true, so predicates compose in any order.  ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime, time

from billing_kernel.domain.records import AuditLogEntry, BillRecord, Contract, as_utc
from billing_modules.reporting.models import FilterState

# Audit end bound covers the whole end day (UTC), to the millisecond.
_END_OF_DAY = time(23, 59, 59, 999000)


def index_contracts(contracts: Iterable[Contract]) -> dict[int, Contract]:
    """Contract lookup by id; a later duplicate id wins."""
    return {c.contract_id: c for c in contracts}


def _as_index(
    contracts: Iterable[Contract] | Mapping[int, Contract],
) -> Mapping[int, Contract]:
    if isinstance(contracts, Mapping):
        return contracts
    return index_contracts(contracts)


# =========================================================================
# Bill predicates
# =========================================================================


def matches_contractor(bill: BillRecord, state: FilterState) -> bool:
    return state.contractor_id is None or bill.contractor_id == state.contractor_id


def matches_search(bill: BillRecord, state: FilterState) -> bool:
    return not state.search or state.search.lower() in bill.bill_number.lower()


def matches_date_range(bill: BillRecord, state: FilterState) -> bool:
    if state.start_date is not None and bill.bill_date < state.start_date:
        return False
    if state.end_date is not None and bill.bill_date > state.end_date:
        return False
    return True


def matches_route(
    bill: BillRecord,
    state: FilterState,
    contracts: Mapping[int, Contract],
) -> bool:
    """True when ANY item's contract formats to the selected route."""
    if state.route is None:
        return True
    for item in bill.items:
        if item.contract_id is None:
            continue
        contract = contracts.get(item.contract_id)
        if contract is not None and contract.route == state.route:
            return True
    return False


def bill_matches(
    bill: BillRecord,
    state: FilterState,
    contracts: Iterable[Contract] | Mapping[int, Contract] = (),
) -> bool:
    """AND of the contractor, search, date and route predicates."""
    return (
        matches_contractor(bill, state)
        and matches_search(bill, state)
        and matches_date_range(bill, state)
        and matches_route(bill, state, _as_index(contracts))
    )


def filter_bills(
    bills: Iterable[BillRecord],
    state: FilterState,
    contracts: Iterable[Contract] | Mapping[int, Contract] = (),
) -> tuple[BillRecord, ...]:
    """
    Bills matching every active criterion, newest bill date first.

    Bills sharing a date keep their input order.
    """
    index = _as_index(contracts)
    matched = [b for b in bills if bill_matches(b, state, index)]
    matched.sort(key=lambda b: b.bill_date, reverse=True)
    return tuple(matched)


# =========================================================================
# Audit predicates
# =========================================================================


def audit_window(state: FilterState) -> tuple[datetime | None, datetime | None]:
    """Inclusive UTC bounds: start-of-day of start, 23:59:59.999 of end."""
    start = (
        datetime.combine(state.start_date, time.min, tzinfo=UTC)
        if state.start_date is not None
        else None
    )
    end = (
        datetime.combine(state.end_date, _END_OF_DAY, tzinfo=UTC)
        if state.end_date is not None
        else None
    )
    return start, end


def audit_entry_matches(entry: AuditLogEntry, state: FilterState) -> bool:
    if state.audit_action is not None and entry.action != state.audit_action:
        return False
    if state.search:
        query = state.search.lower()
        if query not in entry.username.lower() and query not in entry.action.lower():
            return False
    start, end = audit_window(state)
    ts = as_utc(entry.timestamp)
    if start is not None and ts < start:
        return False
    if end is not None and ts > end:
        return False
    return True


def filter_audit_log(
    entries: Iterable[AuditLogEntry],
    state: FilterState,
) -> tuple[AuditLogEntry, ...]:
    """Audit entries matching every active criterion, in input order."""
    return tuple(e for e in entries if audit_entry_matches(e, state))


# =========================================================================
# Selector options
# =========================================================================


def route_options(
    contracts: Sequence[Contract],
    contractor_id: int | None = None,
) -> tuple[str, ...]:
    """Sorted distinct routes, narrowed to one contractor's contracts if given."""
    return tuple(
        sorted(
            {
                c.route
                for c in contracts
                if contractor_id is None or c.contractor_id == contractor_id
            }
        )
    )


def audit_action_options(entries: Iterable[AuditLogEntry]) -> tuple[str, ...]:
    return tuple(sorted({e.action for e in entries}))
