from pydantic import Field
from typing import List
from datetime import datetime

from app.models.enums import Frequency
from app.schemas.common import CamelModel
from app.schemas.transaction import TransactionRead


class SummaryResponse(CamelModel):
    total_income: float
    total_expenses: float
    balance: float
    recent_transactions: List[TransactionRead]


class CategoryTotal(CamelModel):
    name: str
    total: float


class DailyTotal(CamelModel):
    date: str
    total: float


class UpcomingRecurring(CamelModel):
    id: int
    name: str
    category: str
    amount: float
    is_income: bool
    next_due_date: datetime
    frequency: Frequency


class ChartDataResponse(CamelModel):
    expenses_by_category: List[CategoryTotal] = Field(default_factory=list)
    expenses_over_time: List[DailyTotal] = Field(default_factory=list)
    income_over_time: List[DailyTotal] = Field(default_factory=list)
    upcoming_recurring: List[UpcomingRecurring] = Field(default_factory=list)
