from uuid import UUID

from sqlmodel import Session

from app.models.budget import Budget
from app.utils.dates import month_bounds
from app.utils.ledger import category_totals


def budget_figures(amount: float, spent: float) -> tuple[float, float]:
    """(remaining, spent_percentage); el porcentaje se limita a 100 y es 0 si amount <= 0."""
    remaining = amount - spent
    percentage = min(spent * 100 / amount, 100) if amount > 0 else 0
    return remaining, percentage


def spent_for_budget(session: Session, user_id: UUID, budget: Budget) -> float:
    start, end = month_bounds(budget.month, budget.year)
    totals = category_totals(
        session,
        user_id,
        is_income=False,
        start=start,
        end=end,
        category=budget.category,
    )
    return totals.get(budget.category, 0.0)


def with_spending(session: Session, user_id: UUID, budget: Budget) -> dict:
    """Budget + campos derivados. Se calculan en cada lectura, nunca se guardan."""
    spent = spent_for_budget(session, user_id, budget)
    remaining, percentage = budget_figures(budget.amount, spent)
    return {
        **budget.model_dump(),
        "spent": spent,
        "remaining": remaining,
        "spent_percentage": percentage,
    }
