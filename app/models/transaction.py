from uuid import UUID
from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from app.utils.clock import utcnow


class Transaction(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    name: str
    category: str = Field(index=True)
    cost: float
    added_on: datetime = Field(default_factory=utcnow, sa_type=DateTime, index=True)
    is_income: bool = Field(default=False)
    note: Optional[str] = None

    # Soft delete: nunca se borra físicamente
    is_deleted: bool = Field(default=False, index=True)
