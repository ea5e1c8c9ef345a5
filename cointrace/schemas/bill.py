from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class BillCreate(BaseModel):
    expression: str
    """Amounts like "70+69+56" or "70,69,56"."""


class BillCreated(BaseModel):
    id: str
    shop_id: str
    count: int
    created_at: datetime


class ExpressionPreview(BaseModel):
    valid: bool
    amounts: List[Decimal] = []
    count: int = 0
    error: Optional[str] = None
    token: Optional[str] = None
