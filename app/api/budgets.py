from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, select

from app.core.errors import NotFound
from app.core.security import get_current_user
from app.database import get_session
from app.models.budget import Budget
from app.schemas.budget import BudgetCreate, BudgetRead, BudgetUpdate, BudgetWithSpendingRead
from app.utils.budget_helpers import with_spending

router = APIRouter(prefix="/budgets", tags=["budgets"])


def _get_budget(session: Session, budget_id: int, user_id: UUID) -> Budget:
    budget = session.exec(
        select(Budget).where(Budget.id == budget_id, Budget.user_id == user_id)
    ).first()
    if not budget:
        raise NotFound("Budget not found")
    return budget


@router.post("", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=BudgetRead, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget_data: BudgetCreate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    budget = Budget(**budget_data.model_dump(), user_id=user_id)
    session.add(budget)
    session.commit()
    session.refresh(budget)
    return budget


@router.get("", response_model=List[BudgetWithSpendingRead])
@router.get("/", response_model=List[BudgetWithSpendingRead])
def get_budgets(
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Lista los presupuestos con spent/remaining/spentPercentage calculados
    a partir de los gastos del mes de cada presupuesto.
    """
    budgets = session.exec(select(Budget).where(Budget.user_id == user_id)).all()
    return [with_spending(session, user_id, b) for b in budgets]


@router.put("/{budget_id}", response_model=BudgetRead)
def update_budget(
    budget_id: int,
    budget_data: BudgetUpdate,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    budget = _get_budget(session, budget_id, user_id)

    for field, value in budget_data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(budget, field, value)

    session.add(budget)
    session.commit()
    session.refresh(budget)
    return budget


@router.delete("/{budget_id}")
def delete_budget(
    budget_id: int,
    user_id: UUID = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    budget = _get_budget(session, budget_id, user_id)
    session.delete(budget)
    session.commit()
    return {"message": "Budget deleted successfully"}
