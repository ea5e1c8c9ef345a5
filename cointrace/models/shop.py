import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cointrace.core.database import Base
from cointrace.core.timewindows import utcnow


class Shop(Base):
    __tablename__ = "shops"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Set at creation, never reassigned.
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    owner = relationship("User", back_populates="owned_shops")
    staff_memberships = relationship(
        "StaffMembership", back_populates="shop", cascade="all, delete-orphan"
    )
    bills = relationship("Bill", back_populates="shop", cascade="all, delete-orphan")
