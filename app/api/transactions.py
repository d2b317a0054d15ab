import csv
import datetime as dt
import io
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import Session, select, func

from app.core.errors import MissingField, NotFound, Unauthorized
from app.core.security import get_current_user
from app.database import get_session
from app.models.transaction import Transaction
from app.schemas.summary import (
    CategoryTotal,
    ChartDataResponse,
    DailyTotal,
    SummaryResponse,
    UpcomingRecurring,
)
from app.schemas.transaction import (
    BulkDeleteRequest,
    CategoryDeleteRequest,
    TransactionCreate,
    TransactionPage,
    TransactionRead,
    TransactionUpdate,
)
from app.utils import ledger
from app.utils.category_helpers import FALLBACK_CATEGORY, list_categories, reassign_category
from app.utils.clock import utcnow
from app.utils.dates import to_datetime
from app.utils.recurring_helpers import upcoming_recurring

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/transactions", tags=["transactions"])

EXPORT_COLUMNS = ["id", "user", "name", "category", "cost", "addedOn", "isIncome"]


def _get_owned_transaction(session: Session, transaction_id: int, user_id: UUID) -> Transaction:
    transaction = session.get(Transaction, transaction_id)
    if not transaction or transaction.is_deleted:
        raise NotFound("Transaction not found")
    if transaction.user_id != user_id:
        raise Unauthorized("User not authorized")
    return transaction


@router.post("", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=TransactionRead, status_code=status.HTTP_201_CREATED)
def add_transaction(
    transaction_data: TransactionCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    data = transaction_data.model_dump()
    data["added_on"] = to_datetime(data["added_on"]) if data.get("added_on") else utcnow()

    transaction = Transaction(**data, user_id=user_id)
    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    return transaction


@router.get("", response_model=TransactionPage)
@router.get("/", response_model=TransactionPage)
def get_transactions(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
    search: Optional[str] = Query(None),
    is_income: Optional[bool] = Query(None, alias="isIncome"),
    category: Optional[str] = Query(None),
    start_date: Optional[dt.datetime] = Query(None, alias="startDate"),
    end_date: Optional[dt.datetime] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    query = ledger.active_transactions(user_id)

    if search:
        query = query.where(Transaction.name.ilike(f"%{search}%"))
    if is_income is not None:
        query = query.where(Transaction.is_income == is_income)
    if category:
        query = query.where(Transaction.category == category)
    if start_date:
        query = query.where(Transaction.added_on >= to_datetime(start_date))
    if end_date:
        query = query.where(Transaction.added_on <= to_datetime(end_date))

    total = session.exec(select(func.count()).select_from(query.subquery())).one()

    transactions = session.exec(
        query.order_by(Transaction.added_on.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {
        "transactions": transactions,
        "total": total,
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
    }


@router.get("/summary", response_model=SummaryResponse)
def get_transaction_summary(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return ledger.build_summary(session, user_id)


@router.get("/charts", response_model=ChartDataResponse)
def get_chart_data(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    now = utcnow()
    expenses_by_category = ledger.category_totals(session, user_id, is_income=False)

    return ChartDataResponse(
        expenses_by_category=[
            CategoryTotal(name=name, total=total) for name, total in expenses_by_category.items()
        ],
        expenses_over_time=[
            DailyTotal(**row) for row in ledger.daily_totals(session, user_id, is_income=False, now=now)
        ],
        income_over_time=[
            DailyTotal(**row) for row in ledger.daily_totals(session, user_id, is_income=True, now=now)
        ],
        upcoming_recurring=[
            UpcomingRecurring.model_validate(rt) for rt in upcoming_recurring(session, user_id, now=now)
        ],
    )


@router.get("/categories", response_model=list[str])
@router.get("/categories/expense", response_model=list[str])
def get_expense_categories(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return list_categories(session, user_id, is_income=False)


@router.get("/categories/income", response_model=list[str])
def get_income_categories(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return list_categories(session, user_id, is_income=True)


@router.delete("/category")
def delete_category(
    data: Optional[CategoryDeleteRequest] = None,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Elimina una categoría definida por el usuario: sus transacciones pasan a Miscellaneous.
    """
    if data is None or not data.category_to_delete:
        raise MissingField("Category name is required")

    moved = reassign_category(session, user_id, data.category_to_delete)
    logger.info("Category %r removed for user %s, %d transactions moved", data.category_to_delete, user_id, moved)
    return {
        "message": (
            f"Category '{data.category_to_delete}' deleted successfully. "
            f"Associated transactions moved to '{FALLBACK_CATEGORY}'."
        )
    }


@router.get("/export")
def export_transactions(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    transactions = session.exec(
        ledger.active_transactions(user_id).order_by(Transaction.added_on.desc())
    ).all()

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for tx in transactions:
        writer.writerow([
            tx.id,
            tx.user_id,
            tx.name,
            tx.category,
            tx.cost,
            tx.added_on.isoformat(),
            "true" if tx.is_income else "false",
        ])

    return Response(
        content=buffer.getvalue(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="paisable_transactions.csv"'},
    )


@router.delete("/bulk")
def bulk_delete_transactions(
    data: Optional[BulkDeleteRequest] = None,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if data is None or not data.transaction_ids:
        raise MissingField("Transaction IDs array is required")

    ids = set(data.transaction_ids)

    # Se verifica todo antes de marcar nada: o se borran todas o ninguna
    transactions = session.exec(
        ledger.active_transactions(user_id).where(Transaction.id.in_(ids))
    ).all()
    if len(transactions) != len(ids):
        raise NotFound("Some transactions not found or not authorized")

    for tx in transactions:
        tx.is_deleted = True
        session.add(tx)
    session.commit()

    return {
        "message": f"{len(transactions)} transactions deleted successfully",
        "deletedCount": len(transactions),
    }


@router.put("/{transaction_id}", response_model=TransactionRead)
def update_transaction(
    transaction_id: int,
    data: TransactionUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    transaction = _get_owned_transaction(session, transaction_id, user_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        if field == "added_on":
            value = to_datetime(value)
        setattr(transaction, field, value)

    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    return transaction


@router.delete("/{transaction_id}")
def delete_transaction(
    transaction_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    transaction = _get_owned_transaction(session, transaction_id, user_id)

    # Soft delete
    transaction.is_deleted = True
    session.add(transaction)
    session.commit()

    return {"message": "Transaction removed successfully"}
