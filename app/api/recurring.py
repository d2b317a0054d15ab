from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from app.core.errors import NotFound
from app.core.security import get_current_user
from app.database import get_session
from app.models.recurring_transaction import RecurringTransaction
from app.schemas.recurring_transaction import (
    RecurringTransactionCreate,
    RecurringTransactionRead,
    RecurringTransactionUpdate,
)
from app.utils.dates import calculate_next_due_date, to_datetime
from app.utils.recurring_helpers import recompute_next_due_date

router = APIRouter(prefix="/recurring", tags=["recurring"])


def _get_recurring(session: Session, recurring_id: int, user_id: UUID) -> RecurringTransaction:
    recurring = session.exec(
        select(RecurringTransaction).where(
            RecurringTransaction.id == recurring_id,
            RecurringTransaction.user_id == user_id,
        )
    ).first()
    if not recurring:
        raise NotFound("Recurring transaction not found")
    return recurring


@router.post("/create", response_model=RecurringTransactionRead, status_code=status.HTTP_201_CREATED)
@router.post("", response_model=RecurringTransactionRead, status_code=status.HTTP_201_CREATED)
def create_recurring_transaction(
    data: RecurringTransactionCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    start_date = to_datetime(data.start_date)
    recurring = RecurringTransaction(
        **data.model_dump(exclude={"start_date"}),
        start_date=start_date,
        next_due_date=calculate_next_due_date(start_date, data.frequency),
        user_id=user_id,
    )
    session.add(recurring)
    session.commit()
    session.refresh(recurring)
    return recurring


@router.get("", response_model=List[RecurringTransactionRead])
@router.get("/", response_model=List[RecurringTransactionRead])
def get_recurring_transactions(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return session.exec(
        select(RecurringTransaction).where(RecurringTransaction.user_id == user_id)
    ).all()


@router.put("/{recurring_id}", response_model=RecurringTransactionRead)
def update_recurring_transaction(
    recurring_id: int,
    data: RecurringTransactionUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    recurring = _get_recurring(session, recurring_id, user_id)
    changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

    if "start_date" in changes:
        changes["start_date"] = to_datetime(changes["start_date"])

    # next_due_date se recalcula antes de aplicar los cambios: necesita el start_date anterior
    if "start_date" in changes or "frequency" in changes:
        recurring.next_due_date = recompute_next_due_date(
            recurring,
            start_date=changes.get("start_date"),
            frequency=changes.get("frequency"),
        )

    for field, value in changes.items():
        setattr(recurring, field, value)

    session.add(recurring)
    session.commit()
    session.refresh(recurring)
    return recurring


@router.delete("/{recurring_id}")
def delete_recurring_transaction(
    recurring_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    recurring = _get_recurring(session, recurring_id, user_id)
    session.delete(recurring)
    session.commit()
    return {"message": "Deleted successfully"}
