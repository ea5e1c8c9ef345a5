import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cointrace.core.database import Base
from cointrace.core.timewindows import utcnow


class UserRole(str, enum.Enum):
    OWNER = "OWNER"
    STAFF = "STAFF"


class User(Base):
    """Mirror of an identity-provider user; written only by the user sync."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # opaque provider id
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), default=UserRole.STAFF, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    owned_shops = relationship("Shop", back_populates="owner")
    memberships = relationship("StaffMembership", back_populates="user")
