from uuid import UUID
from typing import Optional, List
from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel


class TransactionCreate(CamelModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    cost: float
    added_on: Optional[datetime] = None
    is_income: bool = False
    note: Optional[str] = None


class TransactionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    cost: Optional[float] = None
    added_on: Optional[datetime] = None
    is_income: Optional[bool] = None
    note: Optional[str] = None


class TransactionRead(CamelModel):
    id: int
    user_id: UUID
    name: str
    category: str
    cost: float
    added_on: datetime
    is_income: bool
    note: Optional[str] = None
    is_deleted: bool


class TransactionPage(CamelModel):
    transactions: List[TransactionRead]
    total: int
    total_pages: int
    current_page: int


class BulkDeleteRequest(CamelModel):
    transaction_ids: List[int] = Field(default_factory=list)


class CategoryDeleteRequest(CamelModel):
    category_to_delete: Optional[str] = None
