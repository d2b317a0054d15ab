from pydantic import BaseModel, ConfigDict, EmailStr
from uuid import UUID


class UserCreate(BaseModel):
    email: EmailStr
    password: str


class UserRead(BaseModel):
    id: UUID
    email: EmailStr

    model_config = ConfigDict(from_attributes=True)
