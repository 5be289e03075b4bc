"""
Dashboard overview figures: headline totals, budget consumption and the
recent daily activity series.  ``today`` is passed in; nothing here reads
the clock.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from decimal import Decimal

from billing_kernel.domain.records import ZERO, BillRecord, Contract, quantize_money
from billing_modules.reporting.aggregation import group_reduce
from billing_modules.reporting.models import (
    DailyActivity,
    DailyActivityBill,
    DashboardOverview,
)

HUNDRED = Decimal("100")


def _percent(part: Decimal, whole: Decimal) -> Decimal:
    if whole == 0:
        return ZERO
    return quantize_money(part / whole * HUNDRED)


def build_daily_activity(
    bills: Sequence[BillRecord],
    today: date,
    window_days: int = 7,
) -> tuple[DailyActivity, ...]:
    """
    Net amount billed per day for the ``window_days`` days ending today,
    oldest first.  Bar heights are relative to the busiest day.
    """
    days = [today - timedelta(days=offset) for offset in range(window_days - 1, -1, -1)]
    window = set(days)
    by_day = group_reduce(
        (b for b in bills if b.bill_date in window),
        key=lambda b: b.bill_date,
        initial=lambda _, __: (),
        update=lambda acc, b: acc + (b,),
    )
    amounts = {
        day: sum((b.net_amount for b in by_day.get(day, ())), ZERO) for day in days
    }
    busiest = max(amounts.values(), default=ZERO)

    return tuple(
        DailyActivity(
            day=day,
            label="Today" if day == today else day.strftime("%a"),
            amount=amounts[day],
            bills=tuple(
                DailyActivityBill(
                    bill_number=b.bill_number,
                    net_amount=b.net_amount,
                    contractor_name=b.contractor_name,
                )
                for b in by_day.get(day, ())
            ),
            height_percent=_percent(amounts[day], busiest),
        )
        for day in days
    )


def build_dashboard_overview(
    bills: Sequence[BillRecord],
    contracts: Sequence[Contract],
    today: date,
    sanctioned_budget: Decimal = ZERO,
    window_days: int = 7,
) -> DashboardOverview:
    consumed = sum((b.net_amount for b in bills), ZERO)
    return DashboardOverview(
        total_bills=len(bills),
        total_net_amount=consumed,
        total_contractors=len({c.contractor_name for c in contracts}),
        total_contracts=len(contracts),
        sanctioned_budget=sanctioned_budget,
        consumed_budget=consumed,
        balance=sanctioned_budget - consumed,
        consumed_percentage=_percent(consumed, sanctioned_budget),
        daily_activity=build_daily_activity(bills, today, window_days),
    )
