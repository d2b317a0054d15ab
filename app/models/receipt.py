from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID
from datetime import datetime

from app.utils.clock import utcnow


class Receipt(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    file_url: str

    # Datos extraídos por el modelo
    merchant: str = "Unknown Merchant"
    amount: float = 0.0
    category: str = "Miscellaneous"
    date: datetime = Field(default_factory=utcnow, sa_type=DateTime)

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime)
