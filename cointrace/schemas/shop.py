from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ShopCreate(BaseModel):
    name: str = Field(..., max_length=255)


class ShopResponse(BaseModel):
    id: str
    name: str
    owner_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class UserShopsResponse(BaseModel):
    owned: List[ShopResponse]
    staff: List[ShopResponse]


class StaffMember(BaseModel):
    id: str
    email: str
    name: Optional[str] = None

    class Config:
        from_attributes = True


class ShopDetailResponse(BaseModel):
    shop: ShopResponse
    owner_email: str
    role: str
    is_owner: bool
    staff: List[StaffMember]
    """Empty unless the caller owns the shop."""


class StaffAdd(BaseModel):
    email: str = Field(..., max_length=255)


class StaffMembershipResponse(BaseModel):
    id: int
    shop_id: str
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True


class StaffRemoveResponse(BaseModel):
    removed: int
