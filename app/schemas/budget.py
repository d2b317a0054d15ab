from typing import Optional
from uuid import UUID

from pydantic import Field

from app.schemas.common import CamelModel


class BudgetCreate(CamelModel):
    category: str
    amount: float = Field(ge=0)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1)


class BudgetUpdate(CamelModel):
    category: Optional[str] = None
    amount: Optional[float] = Field(default=None, ge=0)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1)


class BudgetRead(BudgetCreate):
    id: int
    user_id: UUID


class BudgetWithSpendingRead(BudgetRead):
    spent: float
    remaining: float
    spent_percentage: float
