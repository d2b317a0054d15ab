from sqlmodel import SQLModel, Field
from typing import Optional
from uuid import UUID


class Budget(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)
    category: str
    amount: float = Field(ge=0)
    month: int  # 1-12
    year: int
