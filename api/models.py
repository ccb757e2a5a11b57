"""SQLAlchemy models for the IOU ledger."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base


def utcnow() -> datetime:
    """Return current UTC time (timezone-aware)."""
    return datetime.now(UTC)


class IOU(Base):
    """A debt owed by a borrower to a lender.

    id and created_at are assigned once at insert and never rewritten.
    """

    __tablename__ = "ious"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    borrower: Mapped[str] = mapped_column(String(255), nullable=False)
    lender: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        Numeric(38, 2, asdecimal=True), nullable=False, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    def __repr__(self) -> str:
        return (
            f"IOU(id={self.id!s}, borrower={self.borrower!r}, "
            f"lender={self.lender!r}, amount={self.amount})"
        )
