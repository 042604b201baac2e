"""
Contract Tracker — Audit Log model.
Append-only history of create / update / process / delete on contracts.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_tracker.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditLog(Base):
    """Immutable audit trail entry. Never updated or deleted once written."""
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    action: Mapped[str] = mapped_column(String(20), nullable=False)  # create, update, process, delete

    # Plain reference, not a foreign key: entries outlive the contract's hard delete
    contract_id: Mapped[int | None] = mapped_column(Integer, nullable=True, index=True)

    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    # JSON-encoded text; older rows may hold a plain string
    details: Mapped[str] = mapped_column(Text, default="")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    user = relationship("User", lazy="selectin")

    __table_args__ = (
        Index("ix_audit_logs_action_created", "action", "created_at"),
    )

    def __repr__(self):
        return f"<AuditLog {self.action} contract={self.contract_id}>"
