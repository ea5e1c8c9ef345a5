import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cointrace.core.database import Base
from cointrace.core.timewindows import utcnow


class Bill(Base):
    """One submission of amounts. Immutable once committed."""
    __tablename__ = "bills"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    shop_id: Mapped[str] = mapped_column(ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True)
    staff_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False)  # owner or staff who recorded it
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False, index=True)

    shop = relationship("Shop", back_populates="bills")
    staff = relationship("User")
    entries = relationship("BillEntry", back_populates="bill", cascade="all, delete-orphan")
