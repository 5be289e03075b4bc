"""
Module: billing_kernel.models.contract
Responsibility: ORM persistence for contractors and their route contracts.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/records.py only.

Invariants enforced:
    Contract route (from/to) and contractor reference are stored
    denormalized so that a contract row alone can render a route label.
"""

from __future__ import annotations

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import Base
from billing_kernel.domain.records import Contract, Contractor


class ContractorModel(Base):
    """Contractor directory row."""

    __tablename__ = "contractors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    def to_dto(self) -> Contractor:
        return Contractor(contractor_id=self.id, name=self.name)

    @classmethod
    def from_dto(cls, dto: Contractor) -> ContractorModel:
        return cls(id=dto.contractor_id, name=dto.name)


class ContractModel(Base):
    """Route contract between the office and one contractor."""

    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contractor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contractors.id"), nullable=False,
    )
    contractor_name: Mapped[str] = mapped_column(String(200), nullable=False)
    from_location: Mapped[str] = mapped_column(String(200), nullable=False)
    to_location: Mapped[str] = mapped_column(String(200), nullable=False)

    def to_dto(self) -> Contract:
        return Contract(
            contract_id=self.id,
            contractor_id=self.contractor_id,
            contractor_name=self.contractor_name,
            origin=self.from_location,
            destination=self.to_location,
        )

    @classmethod
    def from_dto(cls, dto: Contract) -> ContractModel:
        return cls(
            id=dto.contract_id,
            contractor_id=dto.contractor_id,
            contractor_name=dto.contractor_name,
            from_location=dto.origin,
            to_location=dto.destination,
        )
