from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cointrace.core.database import Base
from cointrace.core.timewindows import utcnow


class BillEntry(Base):
    __tablename__ = "bill_entries"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_bill_entries_amount_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    bill_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("bills.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Unconstrained NUMERIC: amounts are kept exactly as typed.
    amount: Mapped[Decimal] = mapped_column(Numeric(), nullable=False)
    # Same instant as the owning bill; windowing filters on this column.
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)

    bill = relationship("Bill", back_populates="entries")
