import logging
import os
from typing import List, Optional
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core import config
from app.core.errors import InvalidInput, MissingField
from app.core.security import get_current_user
from app.database import get_session
from app.models.receipt import Receipt
from app.models.transaction import Transaction
from app.schemas.receipt import ReceiptRead
from app.services.receipt_extractor import ReceiptExtractor, get_receipt_extractor
from app.utils.category_helpers import FALLBACK_CATEGORY
from app.utils.clock import utcnow
from app.utils.dates import to_datetime

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/receipts", tags=["receipts"])


# Tipos aceptados y la extensión con la que se guardan; /uploads los sirve sin auth
ALLOWED_UPLOAD_TYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "application/pdf": ".pdf",
}


def _upload_suffix(upload: UploadFile) -> str:
    content_type = (upload.content_type or "").split(";")[0].strip().lower()
    suffix = ALLOWED_UPLOAD_TYPES.get(content_type)
    if suffix is None:
        raise InvalidInput("Unsupported file type", f"Unsupported file type: {content_type or 'unknown'}")
    return suffix


def _store_upload(content: bytes, suffix: str) -> str:
    """Guarda el archivo en UPLOAD_DIR y devuelve la URL pública (/uploads/...)."""
    filename = f"{uuid4().hex}{suffix}"
    os.makedirs(config.UPLOAD_DIR, exist_ok=True)
    with open(os.path.join(config.UPLOAD_DIR, filename), "wb") as fh:
        fh.write(content)
    return f"/uploads/{filename}"


def _safe_amount(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _safe_date(value):
    if not value:
        return utcnow()
    try:
        return to_datetime(str(value))
    except InvalidInput:
        logger.warning("Unparseable receipt date %r, using now", value)
        return utcnow()


def _create_receipt_transaction(session: Session, receipt: Receipt) -> None:
    """Crea la transacción de gasto del recibo. Si falla se registra y el recibo se conserva."""
    transaction = Transaction(
        user_id=receipt.user_id,
        name=receipt.merchant or "Receipt Transaction",
        category=receipt.category or FALLBACK_CATEGORY,
        cost=receipt.amount,
        added_on=receipt.date,
        is_income=False,
        note=f"Added from receipt: {receipt.file_url}",
    )
    try:
        session.add(transaction)
        session.commit()
        session.refresh(transaction)
        logger.info(
            "Transaction %s created from receipt %s (cost=%s, category=%s)",
            transaction.id, receipt.id, transaction.cost, transaction.category,
        )
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Error saving transaction from receipt %s", receipt.id)


@router.post("/upload", response_model=ReceiptRead, status_code=status.HTTP_201_CREATED)
def upload_receipt(
    receipt: Optional[UploadFile] = File(None),
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    extractor: ReceiptExtractor = Depends(get_receipt_extractor),
):
    if receipt is None:
        raise MissingField("Please upload a file")

    suffix = _upload_suffix(receipt)
    content = receipt.file.read()
    extracted = extractor.extract(content, receipt.content_type)
    file_url = _store_upload(content, suffix)

    saved = Receipt(
        user_id=user_id,
        file_url=file_url,
        merchant=extracted.get("merchant") or "Unknown Merchant",
        amount=_safe_amount(extracted.get("amount")),
        category=extracted.get("category") or FALLBACK_CATEGORY,
        date=_safe_date(extracted.get("date")),
    )
    session.add(saved)
    session.commit()
    session.refresh(saved)

    _create_receipt_transaction(session, saved)

    session.refresh(saved)
    return ReceiptRead.from_receipt(saved)


@router.get("", response_model=List[ReceiptRead])
@router.get("/", response_model=List[ReceiptRead])
def list_receipts(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    receipts = session.exec(
        select(Receipt).where(Receipt.user_id == user_id).order_by(Receipt.created_at.desc())
    ).all()
    return [ReceiptRead.from_receipt(r) for r in receipts]
