"""
Contract Tracker — Contract, ContractField & Attachment models.
"""

from datetime import date, datetime, timezone

from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Integer, JSON, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from contract_tracker.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Contract(Base):
    """A tracked agreement with a partner and an expiry date."""
    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(300), nullable=False)
    partner: Mapped[str] = mapped_column(String(300), nullable=False)

    # Timeline
    sign_date: Mapped[date] = mapped_column(Date, nullable=False)
    expire_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    # Status: active, archived, void
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    is_processed: Mapped[bool] = mapped_column(Boolean, default=False)

    # User-defined fields: {field_key: scalar}
    custom_data: Mapped[dict] = mapped_column(JSON, default=dict)

    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    # Relationships
    created_by = relationship("User", lazy="selectin")
    attachments = relationship(
        "Attachment",
        back_populates="contract",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="Attachment.id",
    )

    def __repr__(self):
        return f"<Contract {self.id} – {self.name}>"


class ContractField(Base):
    """A column of the contract schema, built-in or user-defined."""
    __tablename__ = "contract_fields"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(20), default="text")  # text, number, date
    is_system: Mapped[bool] = mapped_column(Boolean, default=False)
    is_visible: Mapped[bool] = mapped_column(Boolean, default=True)
    order: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    def __repr__(self):
        return f"<ContractField {self.key}{' (system)' if self.is_system else ''}>"


class Attachment(Base):
    """File metadata; the bytes live under settings.upload_dir."""
    __tablename__ = "attachments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    contract_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True
    )

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)  # original name
    file_path: Mapped[str] = mapped_column(Text, nullable=False)  # stored name, relative
    mime_type: Mapped[str] = mapped_column(String(100), default="application/octet-stream")
    size: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )

    contract = relationship("Contract", back_populates="attachments")

    def __repr__(self):
        return f"<Attachment {self.file_name} → contract {self.contract_id}>"
