from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.models.enums import Frequency


class RecurringTransaction(SQLModel, table=True):
    __tablename__ = "recurring_transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    name: str
    category: str
    amount: float
    is_income: bool = Field(default=False)
    frequency: Frequency
    start_date: datetime = Field(sa_type=DateTime)

    # Derivado de start_date + frequency, se guarda para poder consultar el pronóstico
    next_due_date: Optional[datetime] = Field(default=None, sa_type=DateTime, index=True)
