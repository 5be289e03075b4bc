"""
Module: billing_kernel.models.bill
Responsibility: ORM persistence for transport bills and their items.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/records.py only.

Invariants enforced:
    - bill_number is UNIQUE.
    - Items keep their entry order through ``position``.
    - ``contract_id`` on an item is NOT a foreign key: the record store
      accepts items whose contract was later removed, and reports skip them.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import Base
from billing_kernel.domain.records import (
    Attachment,
    BillItem,
    BillRecord,
    Deductions,
)


class BillModel(Base):
    """Persistent bill header with its deduction breakdown."""

    __tablename__ = "bills"

    __table_args__ = (
        Index("ix_bills_bill_date", "bill_date"),
        Index("ix_bills_contractor_id", "contractor_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    bill_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    bill_date: Mapped[date] = mapped_column(nullable=False)
    contractor_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    contractor_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    sanctioned_no: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    penalty: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    income_tax: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    tajveed_ul_quran: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    education_cess: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    klc: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    sd_current: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    gst_current: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    others: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))
    others_description: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    grand_total: Mapped[Decimal] = mapped_column(nullable=False)
    total_deductions: Mapped[Decimal] = mapped_column(nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(nullable=False)

    certification_points: Mapped[list | None] = mapped_column(JSON, nullable=True)
    attachments: Mapped[list | None] = mapped_column(JSON, nullable=True)

    items: Mapped[list[BillItemModel]] = relationship(
        "BillItemModel",
        back_populates="bill",
        order_by="BillItemModel.position",
        cascade="all, delete-orphan",
    )

    def to_dto(self) -> BillRecord:
        return BillRecord(
            bill_id=self.id,
            bill_number=self.bill_number,
            bill_date=self.bill_date,
            contractor_id=self.contractor_id,
            contractor_name=self.contractor_name,
            sanctioned_no=self.sanctioned_no,
            items=tuple(item.to_dto() for item in self.items),
            deductions=Deductions(
                penalty=self.penalty,
                income_tax=self.income_tax,
                tajveed_ul_quran=self.tajveed_ul_quran,
                education_cess=self.education_cess,
                klc=self.klc,
                sd_current=self.sd_current,
                gst_current=self.gst_current,
                others=self.others,
                others_description=self.others_description,
            ),
            grand_total=self.grand_total,
            total_deductions=self.total_deductions,
            net_amount=self.net_amount,
            certification_points=tuple(self.certification_points or ()),
            attachments=tuple(
                Attachment(name=a["name"], content_ref=a["content_ref"])
                for a in (self.attachments or ())
            ),
        )

    @classmethod
    def from_dto(cls, dto: BillRecord) -> BillModel:
        d = dto.deductions
        return cls(
            id=dto.bill_id,
            bill_number=dto.bill_number,
            bill_date=dto.bill_date,
            contractor_id=dto.contractor_id,
            contractor_name=dto.contractor_name,
            sanctioned_no=dto.sanctioned_no,
            penalty=d.penalty,
            income_tax=d.income_tax,
            tajveed_ul_quran=d.tajveed_ul_quran,
            education_cess=d.education_cess,
            klc=d.klc,
            sd_current=d.sd_current,
            gst_current=d.gst_current,
            others=d.others,
            others_description=d.others_description,
            grand_total=dto.grand_total,
            total_deductions=dto.total_deductions,
            net_amount=dto.net_amount,
            certification_points=list(dto.certification_points) or None,
            attachments=[
                {"name": a.name, "content_ref": a.content_ref}
                for a in dto.attachments
            ] or None,
            items=[
                BillItemModel.from_dto(item, position)
                for position, item in enumerate(dto.items)
            ],
        )


class BillItemModel(Base):
    """One priced leg of a bill."""

    __tablename__ = "bill_items"

    __table_args__ = (
        Index("ix_bill_items_bill_id", "bill_id"),
        Index("ix_bill_items_contract_id", "contract_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    bill_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("bills.id", ondelete="CASCADE"), nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    from_location: Mapped[str] = mapped_column(String(200), nullable=False)
    to_location: Mapped[str] = mapped_column(String(200), nullable=False)
    mode: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    bags: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    pp_bags: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    jute_bags: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gross_kgs: Mapped[Decimal] = mapped_column(nullable=False)
    bardana_kgs: Mapped[Decimal] = mapped_column(nullable=False)
    net_kgs: Mapped[Decimal] = mapped_column(nullable=False)
    rate_per_kg: Mapped[Decimal] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    contract_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    bill: Mapped[BillModel] = relationship("BillModel", back_populates="items")

    def to_dto(self) -> BillItem:
        return BillItem(
            item_id=self.id,
            bill_id=self.bill_id,
            origin=self.from_location,
            destination=self.to_location,
            mode=self.mode,
            bags=self.bags,
            pp_bags=self.pp_bags,
            jute_bags=self.jute_bags,
            gross_kgs=self.gross_kgs,
            bardana_kgs=self.bardana_kgs,
            net_kgs=self.net_kgs,
            rate_per_kg=self.rate_per_kg,
            amount=self.amount,
            contract_id=self.contract_id,
        )

    @classmethod
    def from_dto(cls, dto: BillItem, position: int) -> BillItemModel:
        return cls(
            id=dto.item_id,
            bill_id=dto.bill_id,
            position=position,
            from_location=dto.origin,
            to_location=dto.destination,
            mode=dto.mode,
            bags=dto.bags,
            pp_bags=dto.pp_bags,
            jute_bags=dto.jute_bags,
            gross_kgs=dto.gross_kgs,
            bardana_kgs=dto.bardana_kgs,
            net_kgs=dto.net_kgs,
            rate_per_kg=dto.rate_per_kg,
            amount=dto.amount,
            contract_id=dto.contract_id,
        )
