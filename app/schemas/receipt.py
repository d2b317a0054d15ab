from uuid import UUID
from datetime import datetime

from app.models.receipt import Receipt
from app.schemas.common import CamelModel


class ExtractedReceiptData(CamelModel):
    merchant: str
    amount: float
    category: str
    date: datetime


class ReceiptRead(CamelModel):
    id: int
    user_id: UUID
    file_url: str
    extracted_data: ExtractedReceiptData
    created_at: datetime

    @classmethod
    def from_receipt(cls, receipt: Receipt) -> "ReceiptRead":
        return cls(
            id=receipt.id,
            user_id=receipt.user_id,
            file_url=receipt.file_url,
            extracted_data=ExtractedReceiptData(
                merchant=receipt.merchant,
                amount=receipt.amount,
                category=receipt.category,
                date=receipt.date,
            ),
            created_at=receipt.created_at,
        )
