from cointrace.core.database import Base
from cointrace.models.user import User, UserRole
from cointrace.models.shop import Shop
from cointrace.models.staff_membership import StaffMembership
from cointrace.models.bill import Bill
from cointrace.models.bill_entry import BillEntry

__all__ = [
    "Base",
    "Bill",
    "BillEntry",
    "Shop",
    "StaffMembership",
    "User",
    "UserRole",
]
