"""
Module: billing_kernel.models.audit_log
Responsibility: ORM persistence for the append-only audit log.
Architecture position: Kernel > Models.

Invariants enforced:
    Rows are only ever INSERTed; the reporting engine reads them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from billing_kernel.db.base import Base
from billing_kernel.domain.records import AuditLogEntry, as_utc


class AuditLogModel(Base):
    """One recorded user action."""

    __tablename__ = "audit_log"

    __table_args__ = (
        Index("ix_audit_log_timestamp", "timestamp"),
        Index("ix_audit_log_action", "action"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    timestamp: Mapped[datetime] = mapped_column(nullable=False)
    user_id: Mapped[str] = mapped_column(String(100), nullable=False)
    username: Mapped[str] = mapped_column(String(200), nullable=False)
    action: Mapped[str] = mapped_column(String(200), nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(nullable=False, default=dict)

    def to_dto(self) -> AuditLogEntry:
        return AuditLogEntry(
            entry_id=self.id,
            # SQLite drops tzinfo on DateTime(timezone=True); stored values are UTC.
            timestamp=as_utc(self.timestamp),
            user_id=self.user_id,
            username=self.username,
            action=self.action,
            details=dict(self.details or {}),
        )

    @classmethod
    def from_dto(cls, dto: AuditLogEntry) -> AuditLogModel:
        return cls(
            id=dto.entry_id,
            timestamp=as_utc(dto.timestamp),
            user_id=dto.user_id,
            username=dto.username,
            action=dto.action,
            details=dict(dto.details),
        )
