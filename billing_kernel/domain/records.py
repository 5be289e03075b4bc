"""
Billing record DTOs (``billing_kernel.domain.records``).

Responsibility
--------------
Frozen value objects for the records the reporting engine reads: bills and
their items, the per-bill deduction breakdown, contracts, contractors and
audit log entries.  These are the bridge between the record store (in-memory
or SQL) and the pure reporting functions.

Invariants (maintained upstream by the billing workflow, never by the engine)
-----------------------------------------------------------------------------
* ``BillRecord.net_amount == grand_total - total_deductions``
* ``Deductions.total == BillRecord.total_deductions``
* ``BillItem.net_kgs <= gross_kgs``
* ``BillItem.amount == round(net_kgs * rate_per_kg, 2)``

All monetary and weight fields are ``Decimal`` -- NEVER ``float``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Numeric deduction categories in presentation order.  The free-form
# "others" category also carries a description on Deductions.
DEDUCTION_CATEGORIES: tuple[str, ...] = (
    "penalty",
    "income_tax",
    "tajveed_ul_quran",
    "education_cess",
    "klc",
    "sd_current",
    "gst_current",
    "others",
)


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary amount to 2 decimal places (half up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def as_utc(ts: datetime) -> datetime:
    """Naive timestamps are UTC; aware ones are converted to UTC."""
    return ts.replace(tzinfo=UTC) if ts.tzinfo is None else ts.astimezone(UTC)


def format_route(origin: str, destination: str) -> str:
    """Canonical route string used by the route filter: ``"{from} -> {to}"``."""
    return f"{origin} -> {destination}"


@dataclass(frozen=True)
class Deductions:
    """Withholdings applied against a bill's gross amount."""

    penalty: Decimal = ZERO
    income_tax: Decimal = ZERO
    tajveed_ul_quran: Decimal = ZERO
    education_cess: Decimal = ZERO
    klc: Decimal = ZERO
    sd_current: Decimal = ZERO
    gst_current: Decimal = ZERO
    others: Decimal = ZERO
    others_description: str = ""

    def amount(self, category: str) -> Decimal:
        """Amount for one named category."""
        if category not in DEDUCTION_CATEGORIES:
            raise KeyError(f"Unknown deduction category: {category}")
        return getattr(self, category)

    def amounts(self) -> tuple[tuple[str, Decimal], ...]:
        """(category, amount) pairs in presentation order."""
        return tuple((c, getattr(self, c)) for c in DEDUCTION_CATEGORIES)

    @property
    def total(self) -> Decimal:
        return sum((getattr(self, c) for c in DEDUCTION_CATEGORIES), ZERO)


@dataclass(frozen=True)
class BillItem:
    """One priced leg of a bill."""

    item_id: str
    bill_id: str
    origin: str
    destination: str
    mode: str
    bags: int
    pp_bags: int
    jute_bags: int
    gross_kgs: Decimal
    bardana_kgs: Decimal
    net_kgs: Decimal
    rate_per_kg: Decimal
    amount: Decimal
    contract_id: int | None = None


@dataclass(frozen=True)
class Attachment:
    """A file attached to a bill; content is fetched by reference."""

    name: str
    content_ref: str


@dataclass(frozen=True)
class BillRecord:
    """A contractor invoice for a set of transport trips."""

    bill_id: str
    bill_number: str
    bill_date: date
    contractor_id: int | None
    contractor_name: str
    sanctioned_no: str
    items: tuple[BillItem, ...]
    deductions: Deductions
    grand_total: Decimal
    total_deductions: Decimal
    net_amount: Decimal
    certification_points: tuple[str, ...] = ()
    attachments: tuple[Attachment, ...] = ()

    @property
    def net_kgs(self) -> Decimal:
        """Sum of net weight over all items."""
        return sum((item.net_kgs for item in self.items), ZERO)

    @property
    def is_balanced(self) -> bool:
        """True when net == gross - deductions and deductions add up."""
        return (
            self.net_amount == self.grand_total - self.total_deductions
            and self.deductions.total == self.total_deductions
        )


@dataclass(frozen=True)
class Contract:
    """A priced route agreement with one contractor."""

    contract_id: int
    contractor_id: int
    contractor_name: str
    origin: str
    destination: str

    @property
    def route(self) -> str:
        return format_route(self.origin, self.destination)


@dataclass(frozen=True)
class Contractor:
    """Directory entry for a transport contractor."""

    contractor_id: int
    name: str


@dataclass(frozen=True)
class AuditLogEntry:
    """One append-only record of a user action."""

    entry_id: str
    timestamp: datetime
    user_id: str
    username: str
    action: str
    details: dict[str, Any] = field(default_factory=dict, hash=False)
