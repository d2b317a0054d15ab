from typing import Optional
from uuid import UUID
from datetime import datetime

from pydantic import Field

from app.models.enums import Frequency
from app.schemas.common import CamelModel


class RecurringTransactionCreate(CamelModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    amount: float = Field(gt=0)
    is_income: bool = False
    frequency: Frequency
    start_date: datetime


class RecurringTransactionUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    is_income: Optional[bool] = None
    frequency: Optional[Frequency] = None
    start_date: Optional[datetime] = None


class RecurringTransactionRead(CamelModel):
    id: int
    user_id: UUID
    name: str
    category: str
    amount: float
    is_income: bool
    frequency: Frequency
    start_date: datetime
    next_due_date: Optional[datetime] = None
